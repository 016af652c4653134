"""
PR Costing Engine - price a purchase requisition before submission.

Pure functions with no I/O.  The tax rate is a parameter; the default
matches the shipped configuration (18% GST).

New Set requisitions are priced as the BOM subtotal plus the critical
spares subtotal, where spare quantities are additive to the BOM quantity.
Modification and Refurbished requisitions are priced over their selected
lines only.  Manual lines carry no unit price and cost nothing here.

Usage:
    from tooling_engines.costing import compute_pr_cost

    breakdown = compute_pr_cost(
        items=pr.items,
        spare_quantities={"BOM-001": 2},
        is_new_set=True,
    )
    print(breakdown.grand_total_display)  # Decimal("4153.60") for TN-9001
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

from tooling_engines.tracer import traced_engine
from tooling_kernel.logging_config import get_logger

logger = get_logger("engines.costing")

DEFAULT_TAX_RATE = Decimal("0.18")
_CENT = Decimal("0.01")


class PricedLine(Protocol):
    """Anything shaped like a PR item."""

    id: str
    name: str
    quantity: int
    unit_price: Decimal | None


@dataclass(frozen=True)
class CostLine:
    """Priced view of one requisition line."""

    item_id: str
    name: str
    unit_price: Decimal
    base_quantity: int
    spare_quantity: int
    base_amount: Decimal
    spare_amount: Decimal

    @property
    def effective_quantity(self) -> int:
        return self.base_quantity + self.spare_quantity

    @property
    def line_total(self) -> Decimal:
        return self.base_amount + self.spare_amount


@dataclass(frozen=True)
class PRCostBreakdown:
    """
    Cost summary of a requisition.

    ``overall_subtotal`` is ``bom_subtotal + critical_spares_subtotal`` for
    New Set and ``mod_ref_subtotal`` otherwise.  Every figure is exact;
    ``tax_display`` and ``grand_total_display`` round half-up to cents for
    presentation only.
    """

    lines: tuple[CostLine, ...]
    bom_subtotal: Decimal
    critical_spares_subtotal: Decimal
    mod_ref_subtotal: Decimal
    overall_subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    grand_total: Decimal

    @property
    def tax_percent(self) -> Decimal:
        return self.tax_rate * Decimal("100")

    @property
    def tax_display(self) -> Decimal:
        return self.tax.quantize(_CENT, rounding=ROUND_HALF_UP)

    @property
    def grand_total_display(self) -> Decimal:
        return self.grand_total.quantize(_CENT, rounding=ROUND_HALF_UP)


def line_amount(unit_price: Decimal | None, quantity: int) -> Decimal:
    """unit_price x quantity; an unpriced line is worth zero."""
    if unit_price is None:
        return Decimal("0")
    return unit_price * quantity


@traced_engine("pr_costing", "1.0", fingerprint_fields=("is_new_set", "tax_rate"))
def compute_pr_cost(
    *,
    items: Iterable[PricedLine],
    spare_quantities: Mapping[str, int],
    is_new_set: bool,
    tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> PRCostBreakdown:
    """
    Price a requisition.

    Args:
        items: The requisition lines (BOM-derived and manual).
        spare_quantities: item_id -> critical spare quantity.  Ignored unless
            ``is_new_set``; spares on other PR types are rejected by
            requisition validation before pricing matters.
        is_new_set: True for New Set requisitions.
        tax_rate: Decimal fraction, e.g. ``Decimal("0.18")``.

    Returns:
        PRCostBreakdown with per-line detail.
    """
    if tax_rate < 0:
        raise ValueError("Tax rate cannot be negative")

    lines: list[CostLine] = []
    base_total = Decimal("0")
    spare_total = Decimal("0")
    for item in items:
        spare_qty = spare_quantities.get(item.id, 0) if is_new_set else 0
        base_amount = line_amount(item.unit_price, item.quantity)
        spare_amount = line_amount(item.unit_price, spare_qty)
        base_total += base_amount
        spare_total += spare_amount
        lines.append(
            CostLine(
                item_id=item.id,
                name=item.name,
                unit_price=item.unit_price if item.unit_price is not None else Decimal("0"),
                base_quantity=item.quantity,
                spare_quantity=spare_qty,
                base_amount=base_amount,
                spare_amount=spare_amount,
            )
        )

    if is_new_set:
        bom_subtotal = base_total
        critical_subtotal = spare_total
        mod_ref_subtotal = Decimal("0")
        overall = bom_subtotal + critical_subtotal
    else:
        bom_subtotal = Decimal("0")
        critical_subtotal = Decimal("0")
        mod_ref_subtotal = base_total
        overall = mod_ref_subtotal

    tax = overall * tax_rate
    breakdown = PRCostBreakdown(
        lines=tuple(lines),
        bom_subtotal=bom_subtotal,
        critical_spares_subtotal=critical_subtotal,
        mod_ref_subtotal=mod_ref_subtotal,
        overall_subtotal=overall,
        tax_rate=tax_rate,
        tax=tax,
        grand_total=overall + tax,
    )

    logger.info(
        "pr_cost_computed",
        extra={
            "line_count": len(lines),
            "is_new_set": is_new_set,
            "overall_subtotal": str(overall),
            "tax": str(tax),
            "grand_total": str(breakdown.grand_total),
        },
    )
    return breakdown
