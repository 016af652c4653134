"""
Module: tooling_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines: PR
    costing, quotation evaluation and stock status.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import tooling_kernel (logging only).
    MUST NOT import tooling_modules or tooling_config.

Invariants enforced:
    - Purity: engines never read the clock; dates are parameters.
    - Decimal-only arithmetic for money.
    - Quantity-inclusive totals: base quantity plus critical-spare quantity.
"""

from tooling_engines.costing import (
    DEFAULT_TAX_RATE,
    CostLine,
    PRCostBreakdown,
    compute_pr_cost,
)
from tooling_engines.quotation_evaluation import (
    AWARD_ELIGIBLE_STATES,
    DeliveryAlignment,
    DeliveryTiming,
    ItemComparison,
    QuotationComparison,
    QuotationEvaluation,
    QuotationEvaluator,
    SupplierSummary,
)
from tooling_engines.stock import (
    StockStatus,
    apply_removal,
    derive_status,
    initial_min_stock_level,
    shortage,
)

__all__ = [
    "AWARD_ELIGIBLE_STATES",
    "DEFAULT_TAX_RATE",
    "CostLine",
    "DeliveryAlignment",
    "DeliveryTiming",
    "ItemComparison",
    "PRCostBreakdown",
    "QuotationComparison",
    "QuotationEvaluation",
    "QuotationEvaluator",
    "StockStatus",
    "SupplierSummary",
    "apply_removal",
    "compute_pr_cost",
    "derive_status",
    "initial_min_stock_level",
    "shortage",
]
