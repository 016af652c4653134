"""
Spares Request Domain Models.

An indentor's request for spares from stock.  ``quantity_fulfilled`` only
grows: a request can be served in several steps before it is Fulfilled.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class SparesRequestStatus(Enum):
    PENDING = "Pending"
    FULFILLED = "Fulfilled"
    PARTIALLY_FULFILLED = "Partially Fulfilled"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class SparesRequest:
    id: UUID
    request_number: str
    requested_by: str
    item_name: str
    part_number: str
    tool_number: str
    quantity_requested: int
    request_date: datetime
    quantity_fulfilled: int = 0
    status: SparesRequestStatus = SparesRequestStatus.PENDING
    project_id: UUID | None = None
    purpose: str = ""
    rejection_reason: str = ""
    actioned_by: str | None = None
    actioned_at: datetime | None = None

    def __post_init__(self):
        if self.quantity_requested < 1:
            raise ValueError(
                f"Spares request {self.request_number}: quantity_requested must be >= 1"
            )
        if not (0 <= self.quantity_fulfilled <= self.quantity_requested):
            raise ValueError(
                f"Spares request {self.request_number}: quantity_fulfilled "
                f"{self.quantity_fulfilled} outside 0..{self.quantity_requested}"
            )

    @property
    def quantity_remaining(self) -> int:
        return self.quantity_requested - self.quantity_fulfilled
