"""
Inventory Domain Models.

Spares stock, keyed by ``(part_number, tool_number, name)``.

``quantity`` is what the ledger has taken in (handover fold-ins and manual
corrections); ``stock_level`` is what is on the shelf after spares requests
were served.  ``status`` is derived from ``quantity`` and the minimum level
on every read and is never stored.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from tooling_engines.stock import StockStatus, derive_status, shortage


class MovementType(Enum):
    ADDITION = "Addition"
    REMOVAL = "Removal"
    ADJUSTMENT = "Adjustment"


class ReferenceType(Enum):
    """What caused a stock movement."""
    HANDOVER = "Handover"
    SPARES_REQUEST = "SparesRequest"
    MANUAL = "Manual"


@dataclass(frozen=True)
class StockMovement:
    """One entry of an item's addition or removal history."""
    id: UUID
    movement_type: MovementType
    quantity: int
    occurred_at: datetime
    reference_type: ReferenceType
    balance_after: int
    reference_id: str | None = None
    project_id: UUID | None = None
    performed_by: str | None = None
    notes: str = ""


@dataclass(frozen=True)
class InventoryItem:
    id: UUID
    part_number: str
    tool_number: str
    name: str
    quantity: int
    stock_level: int
    min_stock_level: int
    addition_history: tuple[StockMovement, ...] = field(default_factory=tuple)
    removal_history: tuple[StockMovement, ...] = field(default_factory=tuple)
    location: str = ""
    unit_of_measure: str = "PCS"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if self.quantity < 0 or self.stock_level < 0:
            raise ValueError(f"Inventory item {self.part_number}: stock cannot be negative")
        if self.min_stock_level < 0:
            raise ValueError(f"Inventory item {self.part_number}: min_stock_level cannot be negative")

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.part_number, self.tool_number, self.name)

    @property
    def status(self) -> StockStatus:
        return derive_status(self.quantity, self.min_stock_level)

    @property
    def shortage(self) -> int:
        return shortage(self.quantity, self.min_stock_level)


@dataclass(frozen=True)
class LowStockItem:
    """An item at or below its minimum level and how many units it is short."""
    item: InventoryItem
    shortage: int

    @property
    def status(self) -> StockStatus:
        return self.item.status
