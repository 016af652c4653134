"""
Project Domain Models.

A tooling project: one customer PO for one tool, the parent of every
purchase requisition raised for that tool.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ProjectStatus(Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    ON_HOLD = "On Hold"


@dataclass(frozen=True)
class Project:
    """A customer tooling project. ``price`` is the planned budget."""
    id: UUID
    project_number: str
    customer_po: str
    part_number: str
    tool_number: str
    price: Decimal
    target_date: date
    created_by: str
    created_at: datetime
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: str = ""
    updated_by: str | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Project price cannot be negative: {self.price}")
