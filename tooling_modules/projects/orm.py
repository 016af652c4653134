"""
SQLAlchemy ORM persistence models for the Projects module.

Responsibility
--------------
Store ``Project`` records so a host can list projects and link
requisitions to them.

Invariants enforced
-------------------
* ``project_number`` is unique.
* ``price`` is Decimal (Numeric(18,4)), never float.
* Status stored as String(50) display values.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tooling_kernel.db.base import TrackedBase
from tooling_kernel.db.repository import BaseRepository
from tooling_kernel.exceptions import ProjectNotFoundError


class ProjectModel(TrackedBase):
    """
    A customer tooling project.

    Maps to the ``Project`` DTO in ``tooling_modules.projects.models``.
    """

    __tablename__ = "tooling_projects"

    __table_args__ = (
        UniqueConstraint("project_number", name="uq_project_number"),
        Index("idx_project_tool_number", "tool_number"),
        Index("idx_project_status", "status"),
    )

    project_number: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_po: Mapped[str] = mapped_column(String(100), nullable=False)
    part_number: Mapped[str] = mapped_column(String(100), nullable=False)
    tool_number: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    target_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Active")
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    def to_dto(self):
        from tooling_modules.projects.models import Project, ProjectStatus

        return Project(
            id=self.id,
            project_number=self.project_number,
            customer_po=self.customer_po,
            part_number=self.part_number,
            tool_number=self.tool_number,
            price=self.price,
            target_date=self.target_date,
            created_by=self.created_by_id,
            created_at=self.created_at,
            status=ProjectStatus(self.status),
            description=self.description,
            updated_by=self.updated_by_id,
            updated_at=self.updated_at if self.updated_by_id else None,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str) -> "ProjectModel":
        model = cls(
            id=dto.id,
            project_number=dto.project_number,
            customer_po=dto.customer_po,
            part_number=dto.part_number,
            tool_number=dto.tool_number,
            price=dto.price,
            target_date=dto.target_date,
            status=dto.status.value,
            description=dto.description,
            created_by_id=dto.created_by or created_by_id,
            updated_by_id=dto.updated_by,
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def __repr__(self) -> str:
        return f"<ProjectModel {self.project_number} [{self.status}]>"


class ProjectRepository(BaseRepository[ProjectModel]):
    model = ProjectModel
    not_found = ProjectNotFoundError
    number_column = "project_number"

    def by_tool_number(self, tool_number: str):
        return self.list(tool_number=tool_number)
