"""
Supplier Domain Models.

Requisitions refer to suppliers by name; only Active suppliers may be
selected on a new or updated requisition.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from tooling_kernel.logging_config import get_logger

logger = get_logger("modules.suppliers.models")

MAX_RATING = Decimal("5")


class SupplierStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    BLACKLISTED = "Blacklisted"


@dataclass(frozen=True)
class Supplier:
    id: UUID
    supplier_code: str
    name: str
    status: SupplierStatus = SupplierStatus.ACTIVE
    rating: Decimal | None = None
    contact_email: str = ""

    def __post_init__(self):
        if self.rating is not None and not (Decimal("0") <= self.rating <= MAX_RATING):
            logger.warning(
                "supplier_rating_out_of_range",
                extra={"supplier_code": self.supplier_code, "rating": str(self.rating)},
            )
            raise ValueError(f"Supplier rating must be between 0 and 5, got {self.rating}")

    @property
    def is_selectable(self) -> bool:
        return self.status is SupplierStatus.ACTIVE


def supplier_ratings(suppliers: list[Supplier] | tuple[Supplier, ...]) -> dict[str, Decimal]:
    """Supplier name -> rating, for quotation comparison. Unrated suppliers are left out."""
    return {s.name: s.rating for s in suppliers if s.rating is not None}
