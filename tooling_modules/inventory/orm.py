"""
SQLAlchemy ORM persistence models for the Inventory module.

Invariants enforced
-------------------
* ``(part_number, tool_number, name)`` is unique.
* There is no status column: status is derived from ``quantity`` and
  ``min_stock_level`` when the record is read.
* Stock movements are append-only; ``direction`` says which history an
  entry belongs to.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import InventoryItemNotFoundError

DIRECTION_IN = "in"
DIRECTION_OUT = "out"


class InventoryItemModel(TrackedBase):
    """Maps to the ``InventoryItem`` DTO in ``tooling_modules.inventory.models``."""

    __tablename__ = "tooling_inventory_items"

    __table_args__ = (
        UniqueConstraint("part_number", "tool_number", "name", name="uq_inventory_item_key"),
        Index("idx_inventory_tool_number", "tool_number"),
    )

    part_number: Mapped[str] = mapped_column(String(100), nullable=False)
    tool_number: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False, default=0)
    stock_level: Mapped[int] = mapped_column(nullable=False, default=0)
    min_stock_level: Mapped[int] = mapped_column(nullable=False, default=1)
    location: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    unit_of_measure: Mapped[str] = mapped_column(String(20), nullable=False, default="PCS")

    movements: Mapped[list["StockMovementModel"]] = relationship(
        "StockMovementModel",
        back_populates="item",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StockMovementModel.sequence",
    )

    def to_dto(self):
        from tooling_modules.inventory.models import InventoryItem

        additions = tuple(m.to_dto() for m in self.movements if m.direction == DIRECTION_IN)
        removals = tuple(m.to_dto() for m in self.movements if m.direction == DIRECTION_OUT)
        return InventoryItem(
            id=self.id,
            part_number=self.part_number,
            tool_number=self.tool_number,
            name=self.name,
            quantity=self.quantity,
            stock_level=self.stock_level,
            min_stock_level=self.min_stock_level,
            addition_history=additions,
            removal_history=removals,
            location=self.location,
            unit_of_measure=self.unit_of_measure,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "InventoryItemModel":
        entries = [(DIRECTION_IN, m) for m in dto.addition_history]
        entries += [(DIRECTION_OUT, m) for m in dto.removal_history]
        entries.sort(key=lambda entry: entry[1].occurred_at)
        model = cls(
            id=dto.id,
            part_number=dto.part_number,
            tool_number=dto.tool_number,
            name=dto.name,
            quantity=dto.quantity,
            stock_level=dto.stock_level,
            min_stock_level=dto.min_stock_level,
            location=dto.location,
            unit_of_measure=dto.unit_of_measure,
            created_by_id=created_by_id,
            movements=[
                StockMovementModel.from_dto(movement, direction, sequence, created_by_id)
                for sequence, (direction, movement) in enumerate(entries)
            ],
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def __repr__(self) -> str:
        return f"<InventoryItemModel {self.part_number}/{self.tool_number} {self.name} qty={self.quantity}>"


class StockMovementModel(TrackedBase):
    """One addition or removal history entry."""

    __tablename__ = "tooling_stock_movements"

    __table_args__ = (
        Index("idx_stock_movement_item", "inventory_item_id"),
        Index("idx_stock_movement_reference", "reference_type", "reference_id"),
    )

    inventory_item_id: Mapped[UUID] = mapped_column(
        ForeignKey("tooling_inventory_items.id"), nullable=False,
    )
    sequence: Mapped[int] = mapped_column(nullable=False, default=0)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)
    movement_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(nullable=False)
    reference_type: Mapped[str] = mapped_column(String(50), nullable=False)
    reference_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    project_id: Mapped[UUID | None] = mapped_column(nullable=True)
    performed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    balance_after: Mapped[int] = mapped_column(nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    item: Mapped["InventoryItemModel"] = relationship("InventoryItemModel", back_populates="movements")

    def to_dto(self):
        from tooling_modules.inventory.models import MovementType, ReferenceType, StockMovement

        return StockMovement(
            id=self.id,
            movement_type=MovementType(self.movement_type),
            quantity=self.quantity,
            occurred_at=self.occurred_at,
            reference_type=ReferenceType(self.reference_type),
            balance_after=self.balance_after,
            reference_id=self.reference_id,
            project_id=self.project_id,
            performed_by=self.performed_by,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto, direction: str, sequence: int, created_by_id: str) -> "StockMovementModel":
        return cls(
            id=dto.id,
            sequence=sequence,
            direction=direction,
            movement_type=dto.movement_type.value,
            quantity=dto.quantity,
            occurred_at=dto.occurred_at,
            reference_type=dto.reference_type.value,
            reference_id=dto.reference_id,
            project_id=dto.project_id,
            performed_by=dto.performed_by,
            balance_after=dto.balance_after,
            notes=dto.notes,
            created_by_id=dto.performed_by or created_by_id,
        )


class InventoryRepository(BaseRepository[InventoryItemModel]):
    model = InventoryItemModel
    not_found = InventoryItemNotFoundError

    def save_all(self, inventory, actor_id: str):
        """Persist every item of a ledger result."""
        return tuple(self.save(item, actor_id) for item in inventory)

    def for_tool(self, tool_number: str):
        return self.list(tool_number=tool_number)
