"""
Quotation Domain Models.

One quotation per (requisition, supplier).  Line quantities already include
any critical-spare quantity, so ``QuotationItem.total_price`` is the full
line value and ``Quotation.price`` the quantity-inclusive grand total.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class QuotationStatus(Enum):
    PENDING = "Pending"
    EVALUATED = "Evaluated"
    SELECTED = "Selected"
    REJECTED = "Rejected"
    APPROVED = "Approved"


@dataclass(frozen=True)
class QuotationItem:
    """A supplier's price for one requisition line."""
    item_id: str
    item_name: str
    unit_price: Decimal
    quantity: int

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Quotation:
    """A supplier's quote against a purchase requisition."""
    id: UUID
    quotation_number: str
    pr_id: UUID
    supplier: str
    items: tuple[QuotationItem, ...] = field(default_factory=tuple)
    delivery_terms: str = ""
    delivery_date: date | None = None
    status: QuotationStatus = QuotationStatus.PENDING
    notes: str = ""
    created_by: str | None = None
    created_at: datetime | None = None
    evaluated_by: str | None = None
    evaluated_at: datetime | None = None

    @property
    def price(self) -> Decimal:
        """Grand total over every line."""
        return sum((item.total_price for item in self.items), Decimal("0"))

    def missing_fields(self) -> list[str]:
        """What keeps this quotation from being complete; empty when complete."""
        missing: list[str] = []
        if not self.items:
            missing.append("item prices")
        else:
            unpriced = [item.item_id for item in self.items if item.unit_price <= 0]
            if unpriced:
                missing.append(f"prices for {', '.join(unpriced)}")
        if self.delivery_date is None:
            missing.append("delivery date")
        if not (self.delivery_terms or "").strip():
            missing.append("delivery terms")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()
