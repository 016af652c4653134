"""
Quotations Module (``tooling_modules.quotations``).

Supplier quotations against purchase requisitions.  Import the service from
``tooling_modules.quotations.service``.
"""

from tooling_modules.quotations.models import Quotation, QuotationItem, QuotationStatus
from tooling_modules.quotations.workflows import QUOTATION_WORKFLOW

__all__ = [
    "QUOTATION_WORKFLOW",
    "Quotation",
    "QuotationItem",
    "QuotationStatus",
]
