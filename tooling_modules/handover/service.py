"""
Handover Service (``tooling_modules.handover.service``).

Responsibility
--------------
Raises one tool handover per received requisition and records the
maintenance inspection.  Approval folds the handover's lines and critical
spares into the spares inventory through ``InventoryLedger``.

Invariants enforced
-------------------
* At most one handover per requisition (``ensure_handovers`` is
  idempotent by ``pr_id``).
* Handovers hold value copies of the requisition's lines and spares.
* Inspection needs remarks and happens once: approving or rejecting a
  handover that is no longer Pending Inspection raises
  ``InvalidTransitionError``, so stock is never added twice.
* Rejection has no inventory effect.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from uuid import uuid4

from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor
from tooling_kernel.domain.workflow import WorkflowResult
from tooling_kernel.exceptions import (
    HandoverAlreadyExistsError,
    InvalidTransitionError,
    MissingRemarksError,
)
from tooling_kernel.logging_config import LogContext, get_logger
from tooling_kernel.services.workflow_executor import WorkflowExecutor
from tooling_kernel.utils.document_numbers import DocumentPrefix, next_document_number
from tooling_modules.handover.models import HandoverStatus, SpareItem, ToolHandoverRecord
from tooling_modules.handover.workflows import HANDOVER_WORKFLOW
from tooling_modules.inventory.models import InventoryItem
from tooling_modules.inventory.service import InventoryLedger
from tooling_modules.projects.models import Project
from tooling_modules.requisitions.models import PRStatus, PurchaseRequisition

logger = get_logger("modules.handover.service")


@dataclass(frozen=True)
class HandoverApprovalResult:
    """An approved handover and the inventory after its fold-in."""
    result: WorkflowResult
    inventory: tuple[InventoryItem, ...]

    @property
    def handover(self) -> ToolHandoverRecord:
        return self.result.record


class HandoverService:
    """
    Tool handover and inspection.

    Usage::

        service = HandoverService(clock=clock, ledger=ledger)
        created = service.ensure_handovers(prs, handovers, projects)
        approval = service.approve_handover(
            handover, inspector=maintenance, remarks="All dimensions OK",
            inventory=inventory,
        )
        inventory = approval.inventory
    """

    def __init__(
        self,
        clock: Clock | None = None,
        ledger: InventoryLedger | None = None,
        executor: WorkflowExecutor | None = None,
        number_width: int = 3,
        outcome_sink: Callable[[dict], None] | None = None,
    ):
        self._clock = clock or SystemClock()
        self._ledger = ledger or InventoryLedger(clock=self._clock)
        self._executor = executor or WorkflowExecutor(clock=self._clock, outcome_sink=outcome_sink)
        self._number_width = number_width

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def build_handover(
        self,
        pr: PurchaseRequisition,
        project: Project | None,
        handover_number: str,
    ) -> ToolHandoverRecord:
        """Snapshot ``pr`` into a new Pending Inspection handover."""
        tool_number = (
            project.tool_number if project is not None and project.tool_number
            else self._ledger.config.default_tool_number
        )
        spares = []
        for spare in pr.critical_spares:
            item = pr.item(spare.item_id)
            if item is None:
                continue
            spares.append(
                SpareItem(
                    id=f"SPARE-{pr.id}-{item.id}",
                    part_number=item.id,
                    tool_number=tool_number,
                    name=item.name,
                    quantity=spare.quantity,
                )
            )
        return ToolHandoverRecord(
            id=uuid4(),
            handover_number=handover_number,
            project_id=pr.project_id,
            pr_id=pr.id,
            tool_number=tool_number,
            tool_set=f"{pr.pr_type.value} - {len(pr.items)} items",
            all_items=tuple(replace(item) for item in pr.items),
            critical_spares=tuple(spares),
            status=HandoverStatus.PENDING_INSPECTION,
            created_at=self._clock.now(),
        )

    def create_handover(
        self,
        pr: PurchaseRequisition,
        *,
        project: Project | None = None,
        handovers: Iterable[ToolHandoverRecord] = (),
    ) -> ToolHandoverRecord:
        """One handover for a received requisition; raises if it already has one."""
        handovers = tuple(handovers)
        if pr.status is not PRStatus.ITEMS_RECEIVED:
            raise InvalidTransitionError("tool_handover", pr.status.value, "create")
        for existing in handovers:
            if existing.pr_id == pr.id:
                raise HandoverAlreadyExistsError(str(pr.id), existing.handover_number)

        number = next_document_number(
            DocumentPrefix.HANDOVER,
            (h.handover_number for h in handovers),
            self._clock.now().year,
            self._number_width,
        )
        handover = self.build_handover(pr, project, number)
        logger.info(
            "handover_created",
            extra={
                "handover_number": handover.handover_number,
                "pr_number": pr.pr_number,
                "tool_set": handover.tool_set,
                "spare_count": len(handover.critical_spares),
            },
        )
        return handover

    def ensure_handovers(
        self,
        prs: Iterable[PurchaseRequisition],
        handovers: Iterable[ToolHandoverRecord],
        projects: Iterable[Project],
    ) -> tuple[ToolHandoverRecord, ...]:
        """
        Create the missing handovers for every Items Received requisition.

        Returns only the newly created records; a second call with them
        included in ``handovers`` creates nothing.
        """
        known = list(handovers)
        project_index = {project.id: project for project in projects}
        created: list[ToolHandoverRecord] = []
        for pr in prs:
            if pr.status is not PRStatus.ITEMS_RECEIVED:
                continue
            if any(h.pr_id == pr.id for h in known):
                continue
            handover = self.create_handover(
                pr, project=project_index.get(pr.project_id), handovers=known,
            )
            known.append(handover)
            created.append(handover)
        logger.info(
            "handovers_ensured",
            extra={"created_count": len(created), "total_count": len(known)},
        )
        return tuple(created)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def _inspect(
        self,
        handover: ToolHandoverRecord,
        action: str,
        inspector: Actor,
        remarks: str,
    ) -> WorkflowResult:
        def guard() -> None:
            if not (remarks or "").strip():
                raise MissingRemarksError(f"{action} a handover")

        transition = self._executor.execute(
            HANDOVER_WORKFLOW,
            entity_type="ToolHandover",
            entity_id=handover.id,
            current_state=handover.status,
            action=action,
            actor=inspector,
            guard=guard,
        )
        inspected = replace(
            handover,
            status=HandoverStatus(transition.to_state),
            inspected_by=inspector.actor_id,
            inspection_date=self._clock.now(),
            remarks=remarks.strip(),
        )
        return WorkflowResult(
            record=inspected,
            action=transition.action,
            from_state=transition.from_state,
            to_state=transition.to_state,
        )

    def approve_handover(
        self,
        handover: ToolHandoverRecord,
        *,
        inspector: Actor,
        remarks: str,
        inventory: Sequence[InventoryItem] = (),
    ) -> HandoverApprovalResult:
        with LogContext.bind(
            actor_id=inspector.actor_id, actor_role=inspector.role.value, entity_id=handover.id,
        ):
            result = self._inspect(handover, "approve", inspector, remarks)
            updated_inventory = self._ledger.fold_in_handover(
                inventory, result.record, performed_by=inspector.actor_id,
            )
            logger.info(
                "handover_approved",
                extra={
                    "handover_number": handover.handover_number,
                    "line_count": len(handover.all_items),
                    "spare_count": len(handover.critical_spares),
                },
            )
        return HandoverApprovalResult(result=result, inventory=updated_inventory)

    def reject_handover(
        self,
        handover: ToolHandoverRecord,
        *,
        inspector: Actor,
        remarks: str,
    ) -> WorkflowResult:
        with LogContext.bind(
            actor_id=inspector.actor_id, actor_role=inspector.role.value, entity_id=handover.id,
        ):
            result = self._inspect(handover, "reject", inspector, remarks)
            logger.info(
                "handover_rejected",
                extra={"handover_number": handover.handover_number},
            )
        return result
