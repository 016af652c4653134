"""
Requisition Service (``tooling_modules.requisitions.service``).

Responsibility
--------------
Every state change of a purchase requisition: creation, edits, approval,
supplier dispatch, quotation approval routing, supplier award and receipt.
Quotation statuses move with the requisition (Evaluated on submission,
Approved or Rejected on the approver's decision, Selected/Rejected on award).

Architecture position
---------------------
**Modules layer**.  Pure: each method takes the current frozen record and
returns a ``WorkflowResult`` holding the new one.  Nothing is persisted;
hosts store the result through ``tooling_modules.requisitions.orm``.

Invariants enforced
-------------------
* Transitions come from ``PURCHASE_REQUISITION_WORKFLOW`` only; an illegal
  ``(status, action)`` raises ``InvalidTransitionError``.
* Roles are checked per transition (``UnauthorizedActorError``).
* A failed guard raises before any record is built, so nothing changes.
* After award exactly one quotation is Selected and all others Rejected.
* Document numbers are ``PR-YYYY-NNN``, restarting every year.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from uuid import UUID, uuid4

from tooling_engines.costing import PRCostBreakdown
from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor, Role
from tooling_kernel.domain.workflow import WorkflowResult
from tooling_kernel.exceptions import (
    AwardNotAllowedError,
    ConfirmationRequiredError,
    MissingCommentsError,
    QuotationIncompleteError,
    UnauthorizedActorError,
)
from tooling_kernel.logging_config import LogContext, get_logger
from tooling_kernel.services.workflow_executor import TransitionResult, WorkflowExecutor
from tooling_kernel.utils.document_numbers import DocumentPrefix, next_document_number
from tooling_modules.quotations.models import QuotationStatus
from tooling_modules.requisitions import builder
from tooling_modules.requisitions.config import RequisitionConfig
from tooling_modules.requisitions.models import (
    CriticalSpare,
    PRItem,
    PRStatus,
    PRType,
    PurchaseRequisition,
)
from tooling_modules.requisitions.workflows import PURCHASE_REQUISITION_WORKFLOW
from tooling_modules.suppliers.models import Supplier

logger = get_logger("modules.requisitions.service")

ENTITY_TYPE = "PurchaseRequisition"
DEFAULT_APPROVAL_COMMENTS = "Quotations approved for supplier award"


class RequisitionService:
    """
    State changes of purchase requisitions.

    Usage::

        service = RequisitionService(clock=clock, config=config.requisitions)
        pr = service.create(actor=npd, project_id=project.id,
                            pr_type=PRType.NEW_SET, items=items,
                            suppliers=("Acme Tools",))
        result = service.send_to_suppliers(pr, actor=npd)
        pr = result.record
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: RequisitionConfig | None = None,
        executor: WorkflowExecutor | None = None,
        outcome_sink: Callable[[dict], None] | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or RequisitionConfig()
        self._executor = executor or WorkflowExecutor(clock=self._clock, outcome_sink=outcome_sink)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _execute(
        self,
        pr: PurchaseRequisition,
        action: str,
        actor: Actor,
        guard: Callable[[], None] | None = None,
    ) -> TransitionResult:
        return self._executor.execute(
            PURCHASE_REQUISITION_WORKFLOW,
            entity_type=ENTITY_TYPE,
            entity_id=pr.id,
            current_state=pr.status,
            action=action,
            actor=actor,
            guard=guard,
        )

    def _apply(
        self,
        pr: PurchaseRequisition,
        transition: TransitionResult,
        actor: Actor,
        **changes,
    ) -> WorkflowResult:
        updated = replace(
            pr,
            status=PRStatus(transition.to_state),
            updated_by=actor.actor_id,
            updated_at=self._clock.now(),
            **changes,
        )
        logger.info(
            "requisition_status_changed",
            extra={
                "pr_number": pr.pr_number,
                "action": transition.action,
                "from_status": transition.from_state,
                "to_status": transition.to_state,
            },
        )
        return WorkflowResult(
            record=updated,
            action=transition.action,
            from_state=transition.from_state,
            to_state=transition.to_state,
        )

    def _bind(self, pr_id: UUID, actor: Actor):
        return LogContext.bind(
            actor_id=actor.actor_id,
            actor_role=actor.role.value,
            entity_id=pr_id,
        )

    @staticmethod
    def _require_comments(comments: str | None, action: str) -> Callable[[], None]:
        def guard() -> None:
            if not (comments or "").strip():
                raise MissingCommentsError(action)
        return guard

    # -------------------------------------------------------------------------
    # Creation and edits
    # -------------------------------------------------------------------------

    def create(
        self,
        *,
        actor: Actor,
        project_id: UUID,
        pr_type: PRType,
        items: Sequence[PRItem],
        suppliers: Sequence[str],
        mod_ref_reason: str = "",
        critical_spares: Sequence[CriticalSpare] = (),
        existing_numbers: Iterable[str] = (),
        known_suppliers: Iterable[Supplier] | None = None,
    ) -> PurchaseRequisition:
        """Validate and create a requisition in Submitted status."""
        if actor.role is not Role.NPD:
            logger.warning(
                "requisition_create_unauthorized",
                extra={"actor_id": actor.actor_id, "actor_role": actor.role.value},
            )
            raise UnauthorizedActorError(
                actor.actor_id, actor.role.value, "create", (Role.NPD.value,),
            )

        builder.validate_requisition(
            pr_type=pr_type,
            items=items,
            suppliers=suppliers,
            mod_ref_reason=mod_ref_reason,
            critical_spares=critical_spares,
            known_suppliers=known_suppliers,
        )

        now = self._clock.now()
        pr = PurchaseRequisition(
            id=uuid4(),
            pr_number=next_document_number(
                DocumentPrefix.PURCHASE_REQUISITION,
                existing_numbers,
                now.year,
                self._config.number_width,
            ),
            project_id=project_id,
            pr_type=pr_type,
            created_by=actor.actor_id,
            created_at=now,
            items=tuple(items),
            suppliers=tuple(suppliers),
            status=PRStatus(PURCHASE_REQUISITION_WORKFLOW.initial_state),
            mod_ref_reason=(mod_ref_reason or "").strip(),
            critical_spares=tuple(critical_spares),
        )
        with self._bind(pr.id, actor):
            logger.info(
                "requisition_created",
                extra={
                    "pr_number": pr.pr_number,
                    "pr_type": pr_type.value,
                    "item_count": len(pr.items),
                    "supplier_count": len(pr.suppliers),
                    "critical_spare_count": len(pr.critical_spares),
                },
            )
        return pr

    def update(
        self,
        pr: PurchaseRequisition,
        *,
        actor: Actor,
        items: Sequence[PRItem] | None = None,
        suppliers: Sequence[str] | None = None,
        mod_ref_reason: str | None = None,
        critical_spares: Sequence[CriticalSpare] | None = None,
        known_suppliers: Iterable[Supplier] | None = None,
    ) -> WorkflowResult:
        """Replace items, suppliers, reason or spares while still Submitted."""
        new_items = tuple(items) if items is not None else pr.items
        new_suppliers = tuple(suppliers) if suppliers is not None else pr.suppliers
        new_reason = (mod_ref_reason if mod_ref_reason is not None else pr.mod_ref_reason).strip()
        new_spares = tuple(critical_spares) if critical_spares is not None else pr.critical_spares

        def guard() -> None:
            builder.validate_requisition(
                pr_type=pr.pr_type,
                items=new_items,
                suppliers=new_suppliers,
                mod_ref_reason=new_reason,
                critical_spares=new_spares,
                known_suppliers=known_suppliers,
            )

        with self._bind(pr.id, actor):
            transition = self._execute(pr, "update", actor, guard)
            return self._apply(
                pr, transition, actor,
                items=new_items,
                suppliers=new_suppliers,
                mod_ref_reason=new_reason,
                critical_spares=new_spares,
            )

    def delete(self, pr: PurchaseRequisition, *, actor: Actor) -> WorkflowResult:
        """Check that ``pr`` may be deleted; the host removes the record."""
        with self._bind(pr.id, actor):
            transition = self._execute(pr, "delete", actor)
            logger.info("requisition_deletion_allowed", extra={"pr_number": pr.pr_number})
            return WorkflowResult(
                record=pr,
                action=transition.action,
                from_state=transition.from_state,
                to_state=transition.to_state,
            )

    # -------------------------------------------------------------------------
    # Approval of the requisition itself
    # -------------------------------------------------------------------------

    def approve(
        self, pr: PurchaseRequisition, *, actor: Actor, comments: str = "",
    ) -> WorkflowResult:
        with self._bind(pr.id, actor):
            transition = self._execute(pr, "approve", actor)
            return self._apply(
                pr, transition, actor,
                approver_comments=comments.strip(),
                approved_by=actor.actor_id,
                approved_at=self._clock.now(),
            )

    def reject(
        self, pr: PurchaseRequisition, *, actor: Actor, comments: str,
    ) -> WorkflowResult:
        with self._bind(pr.id, actor):
            transition = self._execute(
                pr, "reject", actor, self._require_comments(comments, "reject a requisition"),
            )
            return self._apply(pr, transition, actor, approver_comments=comments.strip())

    # -------------------------------------------------------------------------
    # Supplier round
    # -------------------------------------------------------------------------

    def send_to_suppliers(self, pr: PurchaseRequisition, *, actor: Actor) -> WorkflowResult:
        with self._bind(pr.id, actor):
            transition = self._execute(pr, "send_to_suppliers", actor)
            return self._apply(pr, transition, actor)

    def revise(self, pr: PurchaseRequisition, *, actor: Actor) -> WorkflowResult:
        """Send a rejected requisition back out to its suppliers."""
        with self._bind(pr.id, actor):
            transition = self._execute(pr, "revise", actor)
            return self._apply(pr, transition, actor)

    def submit_for_approval(self, pr: PurchaseRequisition, *, actor: Actor) -> WorkflowResult:
        """Route complete quotations to the approver; quotations become Evaluated."""

        def guard() -> None:
            for supplier in pr.suppliers:
                quotation = pr.quotation_for(supplier)
                if quotation is None:
                    raise QuotationIncompleteError(supplier, ["quotation"])
                missing = quotation.missing_fields()
                quoted_ids = {item.item_id for item in quotation.items}
                unquoted = [item_id for item_id in pr.item_ids if item_id not in quoted_ids]
                if unquoted:
                    missing.append(f"prices for {', '.join(unquoted)}")
                if missing:
                    raise QuotationIncompleteError(supplier, missing)

        with self._bind(pr.id, actor):
            transition = self._execute(pr, "submit_for_approval", actor, guard)
            now = self._clock.now()
            quotations = tuple(
                replace(q, status=QuotationStatus.EVALUATED, evaluated_by=actor.actor_id, evaluated_at=now)
                for q in pr.quotations
            )
            return self._apply(pr, transition, actor, quotations=quotations)

    def approve_quotations(
        self, pr: PurchaseRequisition, *, actor: Actor, comments: str | None = None,
    ) -> WorkflowResult:
        """Approver accepts the quotations; the requisition awaits award."""
        text = (comments or "").strip() or DEFAULT_APPROVAL_COMMENTS
        with self._bind(pr.id, actor):
            transition = self._execute(pr, "approve_quotations", actor)
            quotations = tuple(replace(q, status=QuotationStatus.APPROVED) for q in pr.quotations)
            return self._apply(
                pr, transition, actor,
                quotations=quotations,
                approver_comments=text,
                approved_by=actor.actor_id,
                approved_at=self._clock.now(),
            )

    def reject_quotations(
        self, pr: PurchaseRequisition, *, actor: Actor, comments: str,
    ) -> WorkflowResult:
        """Approver sends the requisition back to NPD for another supplier round."""
        with self._bind(pr.id, actor):
            transition = self._execute(
                pr, "reject_quotations", actor,
                self._require_comments(comments, "reject quotations"),
            )
            quotations = tuple(replace(q, status=QuotationStatus.REJECTED) for q in pr.quotations)
            return self._apply(
                pr, transition, actor,
                quotations=quotations,
                approver_comments=comments.strip(),
            )

    # -------------------------------------------------------------------------
    # Award and receipt
    # -------------------------------------------------------------------------

    def award_supplier(
        self, pr: PurchaseRequisition, supplier: str, *, actor: Actor,
    ) -> WorkflowResult:
        """Select ``supplier``'s quotation; every other quotation is Rejected."""

        def guard() -> None:
            if pr.quotation_for(supplier) is None:
                raise AwardNotAllowedError(
                    str(pr.id), pr.status.value, f"no quotation from {supplier}",
                )

        with self._bind(pr.id, actor):
            transition = self._execute(pr, "award", actor, guard)
            quotations = tuple(
                replace(
                    q,
                    status=QuotationStatus.SELECTED if q.supplier == supplier else QuotationStatus.REJECTED,
                )
                for q in pr.quotations
            )
            logger.info(
                "supplier_awarded",
                extra={
                    "pr_number": pr.pr_number,
                    "supplier": supplier,
                    "rejected_count": len(quotations) - 1,
                },
            )
            return self._apply(
                pr, transition, actor,
                quotations=quotations,
                awarded_supplier=supplier,
            )

    def mark_items_received(
        self, pr: PurchaseRequisition, *, actor: Actor, confirmed: bool = False,
    ) -> WorkflowResult:
        """Record receipt of the awarded tooling; requires ``confirmed=True``."""

        def guard() -> None:
            if not confirmed:
                raise ConfirmationRequiredError("mark items received")

        with self._bind(pr.id, actor):
            transition = self._execute(pr, "mark_items_received", actor, guard)
            return self._apply(
                pr, transition, actor,
                items_received_date=self._clock.now(),
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def cost_breakdown(self, pr: PurchaseRequisition) -> PRCostBreakdown:
        return builder.compute_cost(pr.pr_type, pr.items, pr.critical_spares, self._config)

    @staticmethod
    def available_actions(pr: PurchaseRequisition) -> tuple[str, ...]:
        return PURCHASE_REQUISITION_WORKFLOW.actions_from(pr.status.value)
