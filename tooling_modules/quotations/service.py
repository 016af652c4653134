"""
Quotation Service (``tooling_modules.quotations.service``).

Records supplier quotations on a requisition and answers comparison
questions about them through ``tooling_engines.quotation_evaluation``.

Every quotation line is priced at the PR line's effective quantity (base
plus critical spare), so ``Quotation.price`` is always the
quantity-inclusive total.  Recording a quotation for a supplier that
already quoted replaces the earlier one and resets it to Pending.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

from tooling_engines.quotation_evaluation import (
    DeliveryAlignment,
    QuotationComparison,
    QuotationEvaluation,
    QuotationEvaluator,
)
from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor
from tooling_kernel.domain.workflow import WorkflowResult
from tooling_kernel.exceptions import QuotationNotFoundError, ValidationError
from tooling_kernel.logging_config import LogContext, get_logger
from tooling_kernel.services.workflow_executor import WorkflowExecutor
from tooling_kernel.utils.document_numbers import DocumentPrefix, next_document_number
from tooling_modules.projects.models import Project
from tooling_modules.quotations.models import Quotation, QuotationItem, QuotationStatus
from tooling_modules.quotations.workflows import QUOTATION_WORKFLOW
from tooling_modules.requisitions.models import PurchaseRequisition
from tooling_modules.requisitions.workflows import PURCHASE_REQUISITION_WORKFLOW
from tooling_modules.suppliers.models import Supplier, supplier_ratings

logger = get_logger("modules.quotations.service")


class QuotationService:
    """
    Supplier quotations on a requisition.

    Usage::

        service = QuotationService(clock=clock)
        result = service.record_quotation(
            pr, actor=npd, supplier="Acme Tools",
            unit_prices={"BOM-001": Decimal("95")},
            delivery_date=date(2024, 3, 1), delivery_terms="FOB",
        )
        evaluation = service.evaluate(result.record)
    """

    def __init__(
        self,
        clock: Clock | None = None,
        executor: WorkflowExecutor | None = None,
        evaluator: QuotationEvaluator | None = None,
        number_width: int = 3,
        outcome_sink: Callable[[dict], None] | None = None,
    ):
        self._clock = clock or SystemClock()
        self._executor = executor or WorkflowExecutor(clock=self._clock, outcome_sink=outcome_sink)
        self._evaluator = evaluator or QuotationEvaluator()
        self._number_width = number_width

    def _execute_on_pr(self, pr: PurchaseRequisition, action: str, actor: Actor, guard=None):
        return self._executor.execute(
            PURCHASE_REQUISITION_WORKFLOW,
            entity_type="PurchaseRequisition",
            entity_id=pr.id,
            current_state=pr.status,
            action=action,
            actor=actor,
            guard=guard,
        )

    def record_quotation(
        self,
        pr: PurchaseRequisition,
        *,
        actor: Actor,
        supplier: str,
        unit_prices: Mapping[str, Decimal],
        delivery_date: date | None,
        delivery_terms: str,
        notes: str = "",
        existing_numbers: Iterable[str] = (),
    ) -> WorkflowResult:
        """
        Build or replace ``supplier``'s quotation on ``pr``.

        Lines without a price in ``unit_prices`` are recorded at zero and
        reported as missing when the requisition is submitted for approval.
        """

        def guard() -> None:
            if supplier not in pr.suppliers:
                raise ValidationError(
                    f"{supplier} is not a supplier on requisition {pr.pr_number}"
                )
            unknown = sorted(item_id for item_id in unit_prices if pr.item(item_id) is None)
            if unknown:
                raise ValidationError(f"Prices given for unknown items: {', '.join(unknown)}")
            negative = sorted(item_id for item_id, price in unit_prices.items() if price < 0)
            if negative:
                raise ValidationError(f"Negative prices for: {', '.join(negative)}")

        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=pr.id):
            transition = self._execute_on_pr(pr, "record_quotation", actor, guard)

            previous = pr.quotation_for(supplier)
            now = self._clock.now()
            if previous is not None:
                number = previous.quotation_number
                quotation_id = previous.id
            else:
                numbers = list(existing_numbers) + [q.quotation_number for q in pr.quotations]
                number = next_document_number(
                    DocumentPrefix.QUOTATION, numbers, now.year, self._number_width,
                )
                quotation_id = uuid4()

            items = tuple(
                QuotationItem(
                    item_id=item.id,
                    item_name=item.name,
                    unit_price=Decimal(unit_prices.get(item.id, Decimal("0"))),
                    quantity=pr.effective_quantity(item.id),
                )
                for item in pr.items
            )
            quotation = Quotation(
                id=quotation_id,
                quotation_number=number,
                pr_id=pr.id,
                supplier=supplier,
                items=items,
                delivery_terms=(delivery_terms or "").strip(),
                delivery_date=delivery_date,
                status=QuotationStatus.PENDING,
                notes=notes,
                created_by=actor.actor_id,
                created_at=now,
            )
            quotations = tuple(q for q in pr.quotations if q.supplier != supplier) + (quotation,)

            logger.info(
                "quotation_recorded",
                extra={
                    "pr_number": pr.pr_number,
                    "quotation_number": number,
                    "supplier": supplier,
                    "total": quotation.price,
                    "replaced": previous is not None,
                    "complete": quotation.is_complete,
                },
            )
            updated = replace(pr, quotations=quotations, updated_by=actor.actor_id, updated_at=now)
            return WorkflowResult(
                record=updated,
                action=transition.action,
                from_state=transition.from_state,
                to_state=transition.to_state,
            )

    def remove_quotation(
        self, pr: PurchaseRequisition, supplier: str, *, actor: Actor,
    ) -> WorkflowResult:
        existing = pr.quotation_for(supplier)

        def guard() -> None:
            if existing is None:
                raise QuotationNotFoundError(f"{pr.pr_number}/{supplier}")

        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=pr.id):
            transition = self._execute_on_pr(pr, "remove_quotation", actor, guard)
            logger.info(
                "quotation_removed",
                extra={"pr_number": pr.pr_number, "quotation_number": existing.quotation_number},
            )
            updated = replace(
                pr,
                quotations=tuple(q for q in pr.quotations if q.supplier != supplier),
                updated_by=actor.actor_id,
                updated_at=self._clock.now(),
            )
            return WorkflowResult(
                record=updated,
                action=transition.action,
                from_state=transition.from_state,
                to_state=transition.to_state,
            )

    def evaluate_quotation(
        self,
        pr: PurchaseRequisition,
        supplier: str,
        status: QuotationStatus,
        *,
        actor: Actor,
    ) -> WorkflowResult:
        """Mark one Pending quotation Evaluated or Rejected; the record is the updated PR."""
        quotation = pr.quotation_for(supplier)
        if quotation is None:
            raise QuotationNotFoundError(f"{pr.pr_number}/{supplier}")
        action = "reject" if status is QuotationStatus.REJECTED else "evaluate"
        if status not in (QuotationStatus.EVALUATED, QuotationStatus.REJECTED):
            raise ValidationError(
                f"A quotation can only be marked Evaluated or Rejected, not {status.value}"
            )

        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=quotation.id):
            transition = self._executor.execute(
                QUOTATION_WORKFLOW,
                entity_type="Quotation",
                entity_id=quotation.id,
                current_state=quotation.status,
                action=action,
                actor=actor,
            )
            now = self._clock.now()
            reviewed = replace(quotation, status=status, evaluated_by=actor.actor_id, evaluated_at=now)
            updated = replace(
                pr,
                quotations=tuple(reviewed if q.id == quotation.id else q for q in pr.quotations),
                updated_by=actor.actor_id,
                updated_at=now,
            )
            return WorkflowResult(
                record=updated,
                action=transition.action,
                from_state=transition.from_state,
                to_state=transition.to_state,
            )

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def evaluate(self, pr: PurchaseRequisition) -> QuotationEvaluation:
        return self._evaluator.evaluate(pr)

    def compare(
        self, pr: PurchaseRequisition, suppliers: Iterable[Supplier] = (),
    ) -> QuotationComparison:
        return self._evaluator.compare_quotations(
            pr.quotations, supplier_ratings(tuple(suppliers)),
        )

    def delivery_alignment(
        self, quotation: Quotation, project: Project,
    ) -> DeliveryAlignment | None:
        """None when either date is missing."""
        if quotation.delivery_date is None or project.target_date is None:
            return None
        return self._evaluator.delivery_alignment(quotation.delivery_date, project.target_date)
