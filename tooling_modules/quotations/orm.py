"""
SQLAlchemy ORM persistence models for the Quotations module.

Quotations are owned by their purchase requisition and are normally
written through ``RequisitionRepository``; ``QuotationRepository`` serves
lookups and quotation numbering.

Invariants enforced
-------------------
* ``quotation_number`` is unique.
* ``total_price`` is written from the quantity-inclusive total for
  reporting and never read back: ``Quotation.price`` is always computed.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Text, UniqueConstraint, select
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import QuotationNotFoundError


class QuotationModel(TrackedBase):
    """Maps to the ``Quotation`` DTO in ``tooling_modules.quotations.models``."""

    __tablename__ = "tooling_quotations"

    __table_args__ = (
        UniqueConstraint("quotation_number", name="uq_quotation_number"),
        Index("idx_quotation_pr", "pr_id"),
        Index("idx_quotation_status", "status"),
    )

    quotation_number: Mapped[str] = mapped_column(String(50), nullable=False)
    pr_id: Mapped[UUID] = mapped_column(ForeignKey("tooling_requisitions.id"), nullable=False)
    supplier: Mapped[str] = mapped_column(String(200), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    delivery_terms: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    evaluated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    evaluated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    requisition: Mapped["PurchaseRequisitionModel"] = relationship(  # noqa: F821
        "PurchaseRequisitionModel",
        back_populates="quotations",
    )
    items: Mapped[list["QuotationItemModel"]] = relationship(
        "QuotationItemModel",
        back_populates="quotation",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="QuotationItemModel.position",
    )

    def to_dto(self):
        from tooling_modules.quotations.models import Quotation, QuotationStatus

        return Quotation(
            id=self.id,
            quotation_number=self.quotation_number,
            pr_id=self.pr_id,
            supplier=self.supplier,
            items=tuple(item.to_dto() for item in self.items),
            delivery_terms=self.delivery_terms,
            delivery_date=self.delivery_date,
            status=QuotationStatus(self.status),
            notes=self.notes,
            created_by=self.created_by_id,
            created_at=self.created_at,
            evaluated_by=self.evaluated_by,
            evaluated_at=self.evaluated_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "QuotationModel":
        model = cls(
            id=dto.id,
            quotation_number=dto.quotation_number,
            pr_id=dto.pr_id,
            supplier=dto.supplier,
            total_price=dto.price,
            delivery_terms=dto.delivery_terms,
            delivery_date=dto.delivery_date,
            status=dto.status.value,
            notes=dto.notes,
            evaluated_by=dto.evaluated_by,
            evaluated_at=dto.evaluated_at,
            created_by_id=dto.created_by or created_by_id,
            items=[
                QuotationItemModel.from_dto(item, position, dto.created_by or created_by_id)
                for position, item in enumerate(dto.items)
            ],
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def __repr__(self) -> str:
        return f"<QuotationModel {self.quotation_number} {self.supplier} [{self.status}]>"


class QuotationItemModel(TrackedBase):
    """One priced line of a quotation."""

    __tablename__ = "tooling_quotation_items"

    __table_args__ = (
        Index("idx_quotation_item_quotation", "quotation_id"),
    )

    quotation_id: Mapped[UUID] = mapped_column(
        ForeignKey("tooling_quotations.id"), nullable=False,
    )
    position: Mapped[int] = mapped_column(nullable=False, default=0)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    item_name: Mapped[str] = mapped_column(String(300), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    quantity: Mapped[int] = mapped_column(nullable=False)

    quotation: Mapped["QuotationModel"] = relationship(
        "QuotationModel",
        back_populates="items",
    )

    def to_dto(self):
        from tooling_modules.quotations.models import QuotationItem

        return QuotationItem(
            item_id=self.item_id,
            item_name=self.item_name,
            unit_price=self.unit_price,
            quantity=self.quantity,
        )

    @classmethod
    def from_dto(cls, dto, position: int, created_by_id: str) -> "QuotationItemModel":
        return cls(
            position=position,
            item_id=dto.item_id,
            item_name=dto.item_name,
            unit_price=dto.unit_price,
            quantity=dto.quantity,
            created_by_id=created_by_id,
        )


class QuotationRepository(BaseRepository[QuotationModel]):
    model = QuotationModel
    not_found = QuotationNotFoundError
    number_column = "quotation_number"

    def for_requisition(self, pr_id: UUID):
        return self.list(pr_id=pr_id)

    def by_number(self, quotation_number: str):
        row = self.session.scalars(
            select(QuotationModel).where(QuotationModel.quotation_number == quotation_number)
        ).first()
        if row is None:
            raise QuotationNotFoundError(quotation_number)
        return row.to_dto()
