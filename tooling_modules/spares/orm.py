"""SQLAlchemy ORM persistence models for spares requests."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import SparesRequestNotFoundError


class SparesRequestModel(TrackedBase):
    """Maps to the ``SparesRequest`` DTO in ``tooling_modules.spares.models``."""

    __tablename__ = "tooling_spares_requests"

    __table_args__ = (
        UniqueConstraint("request_number", name="uq_spares_request_number"),
        Index("idx_spares_request_status", "status"),
        Index("idx_spares_request_requested_by", "requested_by"),
        Index("idx_spares_request_part", "part_number", "tool_number"),
    )

    request_number: Mapped[str] = mapped_column(String(50), nullable=False)
    requested_by: Mapped[str] = mapped_column(String(100), nullable=False)
    item_name: Mapped[str] = mapped_column(String(300), nullable=False)
    part_number: Mapped[str] = mapped_column(String(100), nullable=False)
    tool_number: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    quantity_requested: Mapped[int] = mapped_column(nullable=False)
    quantity_fulfilled: Mapped[int] = mapped_column(nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending")
    request_date: Mapped[datetime] = mapped_column(nullable=False)
    project_id: Mapped[UUID | None] = mapped_column(nullable=True)
    purpose: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rejection_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    actioned_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    actioned_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self):
        from tooling_modules.spares.models import SparesRequest, SparesRequestStatus

        return SparesRequest(
            id=self.id,
            request_number=self.request_number,
            requested_by=self.requested_by,
            item_name=self.item_name,
            part_number=self.part_number,
            tool_number=self.tool_number,
            quantity_requested=self.quantity_requested,
            request_date=self.request_date,
            quantity_fulfilled=self.quantity_fulfilled,
            status=SparesRequestStatus(self.status),
            project_id=self.project_id,
            purpose=self.purpose,
            rejection_reason=self.rejection_reason,
            actioned_by=self.actioned_by,
            actioned_at=self.actioned_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "SparesRequestModel":
        return cls(
            id=dto.id,
            request_number=dto.request_number,
            requested_by=dto.requested_by,
            item_name=dto.item_name,
            part_number=dto.part_number,
            tool_number=dto.tool_number,
            quantity_requested=dto.quantity_requested,
            quantity_fulfilled=dto.quantity_fulfilled,
            status=dto.status.value,
            request_date=dto.request_date,
            project_id=dto.project_id,
            purpose=dto.purpose,
            rejection_reason=dto.rejection_reason,
            actioned_by=dto.actioned_by,
            actioned_at=dto.actioned_at,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<SparesRequestModel {self.request_number} [{self.status}]>"


class SparesRequestRepository(BaseRepository[SparesRequestModel]):
    model = SparesRequestModel
    not_found = SparesRequestNotFoundError
    number_column = "request_number"

    def for_indentor(self, requested_by: str):
        return self.list(requested_by=requested_by)

    def open_requests(self):
        pending = self.list(status="Pending")
        partial = self.list(status="Partially Fulfilled")
        return tuple(sorted(pending + partial, key=lambda r: r.request_number))
