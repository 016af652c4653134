"""
SQLAlchemy ORM persistence models for the Requisitions module.

Responsibility
--------------
Store purchase requisitions as one aggregate: the requisition row, its
lines, its critical-spare markers and its supplier quotations.

Invariants enforced
-------------------
* ``pr_number`` is unique.
* Lines keep their order through ``position``.
* Supplier names are stored as JSON text since the dataclass uses
  ``tuple[str, ...]``.
* Quotations belong to exactly one requisition and are saved with it.
"""

import json
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import RequisitionNotFoundError
from tooling_modules.quotations.orm import QuotationModel


class PurchaseRequisitionModel(TrackedBase):
    """
    A tooling purchase requisition.

    Maps to the ``PurchaseRequisition`` DTO in
    ``tooling_modules.requisitions.models``.
    """

    __tablename__ = "tooling_requisitions"

    __table_args__ = (
        UniqueConstraint("pr_number", name="uq_pr_number"),
        Index("idx_pr_project", "project_id"),
        Index("idx_pr_status", "status"),
    )

    pr_number: Mapped[str] = mapped_column(String(50), nullable=False)
    project_id: Mapped[UUID] = mapped_column(ForeignKey("tooling_projects.id"), nullable=False)
    pr_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Submitted")
    suppliers_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    approver_comments: Mapped[str] = mapped_column(Text, nullable=False, default="")
    awarded_supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    mod_ref_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    items_received_date: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    items: Mapped[list["RequisitionItemModel"]] = relationship(
        "RequisitionItemModel",
        back_populates="requisition",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RequisitionItemModel.position",
    )
    critical_spares: Mapped[list["CriticalSpareModel"]] = relationship(
        "CriticalSpareModel",
        back_populates="requisition",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CriticalSpareModel.position",
    )
    quotations: Mapped[list[QuotationModel]] = relationship(
        QuotationModel,
        back_populates="requisition",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=QuotationModel.quotation_number,
    )

    def to_dto(self):
        from tooling_modules.requisitions.models import PRStatus, PRType, PurchaseRequisition

        return PurchaseRequisition(
            id=self.id,
            pr_number=self.pr_number,
            project_id=self.project_id,
            pr_type=PRType(self.pr_type),
            created_by=self.created_by_id,
            created_at=self.created_at,
            items=tuple(item.to_dto() for item in self.items),
            suppliers=tuple(json.loads(self.suppliers_json or "[]")),
            status=PRStatus(self.status),
            approver_comments=self.approver_comments,
            quotations=tuple(q.to_dto() for q in self.quotations),
            awarded_supplier=self.awarded_supplier,
            mod_ref_reason=self.mod_ref_reason,
            critical_spares=tuple(spare.to_dto() for spare in self.critical_spares),
            items_received_date=self.items_received_date,
            approved_by=self.approved_by,
            approved_at=self.approved_at,
            updated_by=self.updated_by_id,
            updated_at=self.updated_at if self.updated_by_id else None,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "PurchaseRequisitionModel":
        creator = dto.created_by or created_by_id
        model = cls(
            id=dto.id,
            pr_number=dto.pr_number,
            project_id=dto.project_id,
            pr_type=dto.pr_type.value,
            status=dto.status.value,
            suppliers_json=json.dumps(list(dto.suppliers)),
            approver_comments=dto.approver_comments,
            awarded_supplier=dto.awarded_supplier,
            mod_ref_reason=dto.mod_ref_reason,
            items_received_date=dto.items_received_date,
            approved_by=dto.approved_by,
            approved_at=dto.approved_at,
            created_by_id=creator,
            updated_by_id=dto.updated_by,
            items=[
                RequisitionItemModel.from_dto(item, position, creator)
                for position, item in enumerate(dto.items)
            ],
            critical_spares=[
                CriticalSpareModel.from_dto(spare, position, creator)
                for position, spare in enumerate(dto.critical_spares)
            ],
            quotations=[QuotationModel.from_dto(q, creator) for q in dto.quotations],
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def __repr__(self) -> str:
        return f"<PurchaseRequisitionModel {self.pr_number} [{self.status}]>"


class RequisitionItemModel(TrackedBase):
    """A requisition line.  ``item_id`` is the BOM code or the manual item id."""

    __tablename__ = "tooling_requisition_items"

    __table_args__ = (
        Index("idx_pr_item_requisition", "requisition_id"),
    )

    requisition_id: Mapped[UUID] = mapped_column(
        ForeignKey("tooling_requisitions.id"), nullable=False,
    )
    position: Mapped[int] = mapped_column(nullable=False, default=0)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    specification: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    quantity: Mapped[int] = mapped_column(nullable=False)
    requirements: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    requisition: Mapped["PurchaseRequisitionModel"] = relationship(
        "PurchaseRequisitionModel",
        back_populates="items",
    )

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
    def from_dto(cls, dto, position: int, created_by_id: str) -> "RequisitionItemModel":
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


class CriticalSpareModel(TrackedBase):
    __tablename__ = "tooling_requisition_critical_spares"

    __table_args__ = (
        Index("idx_pr_spare_requisition", "requisition_id"),
    )

    requisition_id: Mapped[UUID] = mapped_column(
        ForeignKey("tooling_requisitions.id"), nullable=False,
    )
    position: Mapped[int] = mapped_column(nullable=False, default=0)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)

    requisition: Mapped["PurchaseRequisitionModel"] = relationship(
        "PurchaseRequisitionModel",
        back_populates="critical_spares",
    )

    def to_dto(self):
        from tooling_modules.requisitions.models import CriticalSpare

        return CriticalSpare(item_id=self.item_id, quantity=self.quantity)

    @classmethod
    def from_dto(cls, dto, position: int, created_by_id: str) -> "CriticalSpareModel":
        return cls(
            position=position,
            item_id=dto.item_id,
            quantity=dto.quantity,
            created_by_id=created_by_id,
        )


class RequisitionRepository(BaseRepository[PurchaseRequisitionModel]):
    model = PurchaseRequisitionModel
    not_found = RequisitionNotFoundError
    number_column = "pr_number"

    def for_project(self, project_id: UUID):
        return self.list(project_id=project_id)

    def with_status(self, status):
        return self.list(status=status.value)
