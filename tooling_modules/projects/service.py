"""
Project Service (``tooling_modules.projects.service``).

Creates projects with yearly ``PROJ-YYYY-NNN`` numbers and moves them
between statuses.  Pure: returns new frozen records, persists nothing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor
from tooling_kernel.exceptions import ValidationError
from tooling_kernel.logging_config import LogContext, get_logger
from tooling_kernel.utils.document_numbers import DocumentPrefix, next_document_number
from tooling_modules.projects.models import Project, ProjectStatus

logger = get_logger("modules.projects.service")


class ProjectService:
    """Project intake."""

    def __init__(self, clock: Clock | None = None, number_width: int = 3):
        self._clock = clock or SystemClock()
        self._number_width = number_width

    def create_project(
        self,
        *,
        actor: Actor,
        customer_po: str,
        part_number: str,
        tool_number: str,
        price: Decimal,
        target_date: date,
        description: str = "",
        existing_numbers: Iterable[str] = (),
    ) -> Project:
        missing = [
            name for name, value in (
                ("customer_po", customer_po),
                ("part_number", part_number),
                ("tool_number", tool_number),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationError(f"Project fields required: {', '.join(missing)}")

        now = self._clock.now()
        project = Project(
            id=uuid4(),
            project_number=next_document_number(
                DocumentPrefix.PROJECT, existing_numbers, now.year, self._number_width,
            ),
            customer_po=customer_po.strip(),
            part_number=part_number.strip(),
            tool_number=tool_number.strip(),
            price=price,
            target_date=target_date,
            created_by=actor.actor_id,
            created_at=now,
            description=description,
        )
        with LogContext.bind(actor_id=actor.actor_id, entity_id=project.id):
            logger.info(
                "project_created",
                extra={
                    "project_number": project.project_number,
                    "tool_number": project.tool_number,
                },
            )
        return project

    def change_status(
        self, project: Project, status: ProjectStatus, *, actor: Actor,
    ) -> Project:
        updated = replace(
            project,
            status=status,
            updated_by=actor.actor_id,
            updated_at=self._clock.now(),
        )
        logger.info(
            "project_status_changed",
            extra={
                "project_id": str(project.id),
                "from_status": project.status.value,
                "to_status": status.value,
            },
        )
        return updated
