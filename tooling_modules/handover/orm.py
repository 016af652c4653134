"""
SQLAlchemy ORM persistence models for the Handover module.

Invariants enforced
-------------------
* ``handover_number`` is unique and so is ``pr_id``: one handover per
  requisition at the database level as well.
* Line and spare rows are snapshots, not references to requisition rows.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint, select
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import HandoverNotFoundError


class ToolHandoverModel(TrackedBase):
    """Maps to the ``ToolHandoverRecord`` DTO in ``tooling_modules.handover.models``."""

    __tablename__ = "tooling_handovers"

    __table_args__ = (
        UniqueConstraint("handover_number", name="uq_handover_number"),
        UniqueConstraint("pr_id", name="uq_handover_pr"),
        Index("idx_handover_status", "status"),
        Index("idx_handover_project", "project_id"),
    )

    handover_number: Mapped[str] = mapped_column(String(50), nullable=False)
    project_id: Mapped[UUID] = mapped_column(ForeignKey("tooling_projects.id"), nullable=False)
    pr_id: Mapped[UUID] = mapped_column(ForeignKey("tooling_requisitions.id"), nullable=False)
    tool_number: Mapped[str] = mapped_column(String(100), nullable=False)
    tool_set: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending Inspection")
    inspected_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    inspection_date: Mapped[datetime | None] = mapped_column(nullable=True)
    remarks: Mapped[str] = mapped_column(Text, nullable=False, default="")

    items: Mapped[list["HandoverItemModel"]] = relationship(
        "HandoverItemModel",
        back_populates="handover",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="HandoverItemModel.position",
    )
    spares: Mapped[list["HandoverSpareModel"]] = relationship(
        "HandoverSpareModel",
        back_populates="handover",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="HandoverSpareModel.position",
    )

    def to_dto(self):
        from tooling_modules.handover.models import HandoverStatus, ToolHandoverRecord

        return ToolHandoverRecord(
            id=self.id,
            handover_number=self.handover_number,
            project_id=self.project_id,
            pr_id=self.pr_id,
            tool_number=self.tool_number,
            tool_set=self.tool_set,
            all_items=tuple(item.to_dto() for item in self.items),
            critical_spares=tuple(spare.to_dto() for spare in self.spares),
            status=HandoverStatus(self.status),
            created_at=self.created_at,
            inspected_by=self.inspected_by,
            inspection_date=self.inspection_date,
            remarks=self.remarks,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "ToolHandoverModel":
        model = cls(
            id=dto.id,
            handover_number=dto.handover_number,
            project_id=dto.project_id,
            pr_id=dto.pr_id,
            tool_number=dto.tool_number,
            tool_set=dto.tool_set,
            status=dto.status.value,
            inspected_by=dto.inspected_by,
            inspection_date=dto.inspection_date,
            remarks=dto.remarks,
            created_by_id=created_by_id,
            items=[
                HandoverItemModel.from_dto(item, position, created_by_id)
                for position, item in enumerate(dto.all_items)
            ],
            spares=[
                HandoverSpareModel.from_dto(spare, position, created_by_id)
                for position, spare in enumerate(dto.critical_spares)
            ],
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def __repr__(self) -> str:
        return f"<ToolHandoverModel {self.handover_number} [{self.status}]>"


class HandoverItemModel(TrackedBase):
    """Snapshot of one requisition line at handover."""

    __tablename__ = "tooling_handover_items"

    __table_args__ = (
        Index("idx_handover_item_handover", "handover_id"),
    )

    handover_id: Mapped[UUID] = mapped_column(ForeignKey("tooling_handovers.id"), nullable=False)
    position: Mapped[int] = mapped_column(nullable=False, default=0)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    specification: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    quantity: Mapped[int] = mapped_column(nullable=False)
    requirements: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    handover: Mapped["ToolHandoverModel"] = relationship("ToolHandoverModel", back_populates="items")

    def to_dto(self):
        from tooling_modules.requisitions.models import PRItem

        return PRItem(
            id=self.item_id,
            name=self.name,
            specification=self.specification,
            quantity=self.quantity,
            requirements=self.requirements,
            unit_price=self.unit_price,
        )

    @classmethod
    def from_dto(cls, dto, position: int, created_by_id: str) -> "HandoverItemModel":
        return cls(
            position=position,
            item_id=dto.id,
            name=dto.name,
            specification=dto.specification,
            quantity=dto.quantity,
            requirements=dto.requirements,
            unit_price=dto.unit_price,
            created_by_id=created_by_id,
        )


class HandoverSpareModel(TrackedBase):
    __tablename__ = "tooling_handover_spares"

    __table_args__ = (
        Index("idx_handover_spare_handover", "handover_id"),
    )

    handover_id: Mapped[UUID] = mapped_column(ForeignKey("tooling_handovers.id"), nullable=False)
    position: Mapped[int] = mapped_column(nullable=False, default=0)
    spare_id: Mapped[str] = mapped_column(String(200), nullable=False)
    part_number: Mapped[str] = mapped_column(String(100), nullable=False)
    tool_number: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)

    handover: Mapped["ToolHandoverModel"] = relationship("ToolHandoverModel", back_populates="spares")

    def to_dto(self):
        from tooling_modules.handover.models import SpareItem

        return SpareItem(
            id=self.spare_id,
            part_number=self.part_number,
            tool_number=self.tool_number,
            name=self.name,
            quantity=self.quantity,
        )

    @classmethod
    def from_dto(cls, dto, position: int, created_by_id: str) -> "HandoverSpareModel":
        return cls(
            position=position,
            spare_id=dto.id,
            part_number=dto.part_number,
            tool_number=dto.tool_number,
            name=dto.name,
            quantity=dto.quantity,
            created_by_id=created_by_id,
        )


class HandoverRepository(BaseRepository[ToolHandoverModel]):
    model = ToolHandoverModel
    not_found = HandoverNotFoundError
    number_column = "handover_number"

    def for_requisition(self, pr_id: UUID):
        row = self.session.scalars(
            select(ToolHandoverModel).where(ToolHandoverModel.pr_id == pr_id)
        ).first()
        return row.to_dto() if row is not None else None

    def pending_inspection(self):
        return self.list(status="Pending Inspection")
