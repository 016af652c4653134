"""
Requisition Domain Models.

The nouns of tooling procurement: purchase requisitions, their lines and
critical-spare markers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from tooling_kernel.logging_config import get_logger
from tooling_modules.quotations.models import Quotation

logger = get_logger("modules.requisitions.models")


class PRType(Enum):
    NEW_SET = "New Set"
    MODIFICATION = "Modification"
    REFURBISHED = "Refurbished"


class PRStatus(Enum):
    """Requisition lifecycle states."""
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    SENT_TO_SUPPLIER = "Sent To Supplier"
    EVALUATION_PENDING = "Evaluation Pending"
    SUBMITTED_FOR_APPROVAL = "Submitted for Approval"
    AWARDED = "Awarded"
    ITEMS_RECEIVED = "Items Received"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class PRItem:
    """
    A requisition line.

    ``id`` is the BOM code for catalog lines or a generated id for manual
    lines.  ``unit_price`` is None for manual lines.
    """
    id: str
    name: str
    specification: str = ""
    quantity: int = 1
    requirements: str = ""
    unit_price: Decimal | None = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"PR item {self.id}: quantity must be >= 1, got {self.quantity}")
        if self.unit_price is not None and self.unit_price < 0:
            raise ValueError(f"PR item {self.id}: unit_price cannot be negative")

    @property
    def is_priced(self) -> bool:
        return self.unit_price is not None


@dataclass(frozen=True)
class CriticalSpare:
    """Extra stock of one line, ordered on top of its base quantity."""
    item_id: str
    quantity: int

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(
                f"Critical spare {self.item_id}: quantity must be >= 1, got {self.quantity}"
            )


@dataclass(frozen=True)
class PurchaseRequisition:
    """A purchase requisition for one tooling project."""
    id: UUID
    pr_number: str
    project_id: UUID
    pr_type: PRType
    created_by: str
    created_at: datetime
    items: tuple[PRItem, ...] = field(default_factory=tuple)
    suppliers: tuple[str, ...] = field(default_factory=tuple)
    status: PRStatus = PRStatus.SUBMITTED
    approver_comments: str = ""
    quotations: tuple[Quotation, ...] = field(default_factory=tuple)
    awarded_supplier: str | None = None
    mod_ref_reason: str = ""
    critical_spares: tuple[CriticalSpare, ...] = field(default_factory=tuple)
    items_received_date: datetime | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None

    @property
    def is_new_set(self) -> bool:
        return self.pr_type is PRType.NEW_SET

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.items)

    @property
    def spare_quantities(self) -> dict[str, int]:
        result: dict[str, int] = {}
        for spare in self.critical_spares:
            result[spare.item_id] = result.get(spare.item_id, 0) + spare.quantity
        return result

    def item(self, item_id: str) -> PRItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def effective_quantity(self, item_id: str) -> int:
        """Base quantity plus critical-spare quantity; 0 for unknown lines."""
        item = self.item(item_id)
        if item is None:
            return 0
        return item.quantity + self.spare_quantities.get(item_id, 0)

    def quotation_for(self, supplier: str) -> Quotation | None:
        for quotation in self.quotations:
            if quotation.supplier == supplier:
                return quotation
        return None
