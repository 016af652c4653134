"""
Tool Handover Domain Models.

A handover is raised once per requisition whose items were received, and
holds value copies of the requisition's lines and critical spares as they
were at that moment.  Later edits to the requisition never reach it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from tooling_modules.requisitions.models import PRItem


class HandoverStatus(Enum):
    PENDING_INSPECTION = "Pending Inspection"
    APPROVED = "Approved"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class SpareItem:
    """A critical spare delivered with the tool, ready for the inventory."""
    id: str
    part_number: str
    tool_number: str
    name: str
    quantity: int

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Spare {self.id}: quantity must be >= 1, got {self.quantity}")

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.part_number, self.tool_number, self.name)


@dataclass(frozen=True)
class ToolHandoverRecord:
    id: UUID
    handover_number: str
    project_id: UUID
    pr_id: UUID
    tool_number: str
    tool_set: str
    all_items: tuple[PRItem, ...] = field(default_factory=tuple)
    critical_spares: tuple[SpareItem, ...] = field(default_factory=tuple)
    status: HandoverStatus = HandoverStatus.PENDING_INSPECTION
    created_at: datetime | None = None
    inspected_by: str | None = None
    inspection_date: datetime | None = None
    remarks: str = ""

    @property
    def is_pending(self) -> bool:
        return self.status is HandoverStatus.PENDING_INSPECTION
