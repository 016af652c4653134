"""SQLAlchemy ORM persistence models for the supplier directory."""

from decimal import Decimal

from sqlalchemy import Index, Numeric, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, mapped_column

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import SupplierNotFoundError


class SupplierModel(TrackedBase):
    """Maps to the ``Supplier`` DTO in ``tooling_modules.suppliers.models``."""

    __tablename__ = "tooling_suppliers"

    __table_args__ = (
        UniqueConstraint("supplier_code", name="uq_supplier_code"),
        UniqueConstraint("name", name="uq_supplier_name"),
        Index("idx_supplier_status", "status"),
    )

    supplier_code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Active")
    rating: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)
    contact_email: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    def to_dto(self):
        from tooling_modules.suppliers.models import Supplier, SupplierStatus

        return Supplier(
            id=self.id,
            supplier_code=self.supplier_code,
            name=self.name,
            status=SupplierStatus(self.status),
            rating=self.rating,
            contact_email=self.contact_email,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "SupplierModel":
        return cls(
            id=dto.id,
            supplier_code=dto.supplier_code,
            name=dto.name,
            status=dto.status.value,
            rating=dto.rating,
            contact_email=dto.contact_email,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<SupplierModel {self.supplier_code} {self.name} [{self.status}]>"


class SupplierRepository(BaseRepository[SupplierModel]):
    model = SupplierModel
    not_found = SupplierNotFoundError
    number_column = "supplier_code"

    def by_name(self, name: str):
        row = self.session.scalars(
            select(SupplierModel).where(SupplierModel.name == name)
        ).first()
        if row is None:
            raise SupplierNotFoundError(name)
        return row.to_dto()

    def selectable(self):
        return self.list(status="Active")
