"""
Spares Request Service (``tooling_modules.spares.service``).

Indentors raise requests for spares; the spares desk fulfils, partially
fulfils or rejects them.  Serving a request removes stock through
``InventoryLedger.apply_spares_fulfillment``: only the units served in
this step (the delta over the previous fulfilled quantity) leave the
shelf, so a request served 4 then 10 removes 4 and then 6.  A step that
needs more than the stock on hand is refused with
``InsufficientStockError``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor, Role
from tooling_kernel.domain.workflow import WorkflowResult
from tooling_kernel.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransitionError,
    RequestNotEditableError,
    UnauthorizedActorError,
    ValidationError,
)
from tooling_kernel.logging_config import LogContext, get_logger
from tooling_kernel.services.workflow_executor import TransitionResult, WorkflowExecutor
from tooling_kernel.utils.document_numbers import DocumentPrefix, next_document_number
from tooling_modules.inventory.models import InventoryItem
from tooling_modules.inventory.service import InventoryLedger
from tooling_modules.spares.models import SparesRequest, SparesRequestStatus
from tooling_modules.spares.workflows import SPARES_REQUEST_WORKFLOW

logger = get_logger("modules.spares.service")


@dataclass(frozen=True)
class SparesFulfillmentResult:
    """A served request and the inventory after the removal."""
    result: WorkflowResult
    inventory: tuple[InventoryItem, ...]

    @property
    def request(self) -> SparesRequest:
        return self.result.record


class SparesService:
    """Spares requests against the inventory."""

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

    def _execute(
        self,
        request: SparesRequest,
        action: str,
        actor: Actor,
        guard: Callable[[], None] | None = None,
    ) -> TransitionResult:
        return self._executor.execute(
            SPARES_REQUEST_WORKFLOW,
            entity_type="SparesRequest",
            entity_id=request.id,
            current_state=request.status,
            action=action,
            actor=actor,
            guard=guard,
        )

    @staticmethod
    def _result(record: SparesRequest, transition: TransitionResult) -> WorkflowResult:
        return WorkflowResult(
            record=record,
            action=transition.action,
            from_state=transition.from_state,
            to_state=transition.to_state,
        )

    @staticmethod
    def _owner_guard(request: SparesRequest, actor: Actor, action: str) -> Callable[[], None]:
        def guard() -> None:
            if request.requested_by != actor.actor_id:
                raise UnauthorizedActorError(
                    actor.actor_id, actor.role.value, f"{action} another indentor's request",
                    (request.requested_by,),
                )
        return guard

    def _execute_edit(self, request: SparesRequest, action: str, actor: Actor, guard) -> TransitionResult:
        try:
            return self._execute(request, action, actor, guard)
        except InvalidTransitionError as exc:
            raise RequestNotEditableError(request.request_number, request.status.value) from exc

    # -------------------------------------------------------------------------
    # Indentor side
    # -------------------------------------------------------------------------

    def create_request(
        self,
        *,
        actor: Actor,
        item_name: str,
        part_number: str,
        tool_number: str,
        quantity: int,
        project_id: UUID | None = None,
        purpose: str = "",
        existing_numbers: Iterable[str] = (),
    ) -> SparesRequest:
        if actor.role is not Role.INDENTOR:
            logger.warning(
                "spares_request_create_unauthorized",
                extra={"actor_id": actor.actor_id, "actor_role": actor.role.value},
            )
            raise UnauthorizedActorError(
                actor.actor_id, actor.role.value, "create", (Role.INDENTOR.value,),
            )
        if quantity < 1:
            raise InvalidQuantityError(quantity, "requested quantity must be greater than 0")
        if not (item_name or "").strip() or not (part_number or "").strip():
            raise ValidationError("Spares request needs an item name and a part number")

        now = self._clock.now()
        request = SparesRequest(
            id=uuid4(),
            request_number=next_document_number(
                DocumentPrefix.SPARES_REQUEST, existing_numbers, now.year, self._number_width,
            ),
            requested_by=actor.actor_id,
            item_name=item_name.strip(),
            part_number=part_number.strip(),
            tool_number=(tool_number or "").strip(),
            quantity_requested=quantity,
            request_date=now,
            project_id=project_id,
            purpose=purpose,
        )
        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=request.id):
            logger.info(
                "spares_request_created",
                extra={
                    "request_number": request.request_number,
                    "part_number": request.part_number,
                    "quantity_requested": quantity,
                },
            )
        return request

    def edit_request(
        self,
        request: SparesRequest,
        *,
        actor: Actor,
        item_name: str | None = None,
        part_number: str | None = None,
        tool_number: str | None = None,
        quantity: int | None = None,
        purpose: str | None = None,
    ) -> WorkflowResult:
        if quantity is not None and quantity < 1:
            raise InvalidQuantityError(quantity, "requested quantity must be greater than 0")
        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=request.id):
            transition = self._execute_edit(
                request, "edit", actor, self._owner_guard(request, actor, "edit"),
            )
            updated = replace(
                request,
                item_name=item_name.strip() if item_name is not None else request.item_name,
                part_number=part_number.strip() if part_number is not None else request.part_number,
                tool_number=tool_number.strip() if tool_number is not None else request.tool_number,
                quantity_requested=quantity if quantity is not None else request.quantity_requested,
                purpose=purpose if purpose is not None else request.purpose,
            )
            logger.info("spares_request_edited", extra={"request_number": request.request_number})
            return self._result(updated, transition)

    def delete_request(self, request: SparesRequest, *, actor: Actor) -> WorkflowResult:
        """Check that the indentor may withdraw ``request``; the host removes it."""
        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=request.id):
            transition = self._execute_edit(
                request, "delete", actor, self._owner_guard(request, actor, "delete"),
            )
            logger.info("spares_request_deletion_allowed", extra={"request_number": request.request_number})
            return self._result(request, transition)

    # -------------------------------------------------------------------------
    # Spares desk
    # -------------------------------------------------------------------------

    def _serve(
        self,
        request: SparesRequest,
        inventory: Sequence[InventoryItem],
        quantity_fulfilled: int,
        action: str,
        actor: Actor,
        guard: Callable[[], None],
    ) -> SparesFulfillmentResult:
        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=request.id):
            transition = self._execute(request, action, actor, guard)
            updated_inventory = self._ledger.apply_spares_fulfillment(
                inventory,
                part_number=request.part_number,
                tool_number=request.tool_number,
                previous_fulfilled=request.quantity_fulfilled,
                new_fulfilled=quantity_fulfilled,
                request_reference=request.request_number,
                project_id=request.project_id,
                requested_by=request.requested_by,
            )
            updated = replace(
                request,
                quantity_fulfilled=quantity_fulfilled,
                status=SparesRequestStatus(transition.to_state),
                actioned_by=actor.actor_id,
                actioned_at=self._clock.now(),
            )
            logger.info(
                "spares_request_served",
                extra={
                    "request_number": request.request_number,
                    "action": action,
                    "previous_fulfilled": request.quantity_fulfilled,
                    "quantity_fulfilled": quantity_fulfilled,
                    "quantity_requested": request.quantity_requested,
                },
            )
        return SparesFulfillmentResult(
            result=self._result(updated, transition),
            inventory=updated_inventory,
        )

    def _in_stock(self, request: SparesRequest, inventory: Sequence[InventoryItem], quantity: int) -> None:
        delta = quantity - request.quantity_fulfilled
        available = self._ledger.stock_on_hand(inventory, request.part_number, request.tool_number)
        if available is not None and delta > available:
            logger.warning(
                "spares_request_insufficient_stock",
                extra={
                    "request_number": request.request_number,
                    "available": available,
                    "requested": delta,
                },
            )
            raise InsufficientStockError(
                f"{request.part_number}/{request.tool_number}", available, delta,
            )

    @staticmethod
    def _not_decreasing(request: SparesRequest, quantity: int) -> None:
        if quantity < request.quantity_fulfilled:
            raise InvalidQuantityError(
                quantity,
                f"fulfilled quantity cannot drop below {request.quantity_fulfilled}",
            )

    def fulfill(
        self,
        request: SparesRequest,
        inventory: Sequence[InventoryItem],
        *,
        actor: Actor,
        quantity_fulfilled: int | None = None,
    ) -> SparesFulfillmentResult:
        """Serve the request completely; ``quantity_fulfilled`` defaults to the requested quantity."""
        quantity = request.quantity_requested if quantity_fulfilled is None else quantity_fulfilled

        def guard() -> None:
            self._not_decreasing(request, quantity)
            if quantity != request.quantity_requested:
                raise InvalidQuantityError(
                    quantity,
                    f"a fulfilled request must serve exactly {request.quantity_requested}",
                )
            self._in_stock(request, inventory, quantity)

        return self._serve(request, inventory, quantity, "fulfill", actor, guard)

    def partially_fulfill(
        self,
        request: SparesRequest,
        inventory: Sequence[InventoryItem],
        quantity_fulfilled: int,
        *,
        actor: Actor,
    ) -> SparesFulfillmentResult:
        def guard() -> None:
            self._not_decreasing(request, quantity_fulfilled)
            if not (0 < quantity_fulfilled < request.quantity_requested):
                raise InvalidQuantityError(
                    quantity_fulfilled,
                    f"a partial fulfilment must be between 1 and {request.quantity_requested - 1}",
                )
            self._in_stock(request, inventory, quantity_fulfilled)

        return self._serve(
            request, inventory, quantity_fulfilled, "partially_fulfill", actor, guard,
        )

    def reject(
        self, request: SparesRequest, *, actor: Actor, reason: str,
    ) -> WorkflowResult:
        def guard() -> None:
            if not (reason or "").strip():
                raise ValidationError("A reason is required to reject a spares request")

        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=request.id):
            transition = self._execute(request, "reject", actor, guard)
            updated = replace(
                request,
                status=SparesRequestStatus.REJECTED,
                quantity_fulfilled=0,
                rejection_reason=reason.strip(),
                actioned_by=actor.actor_id,
                actioned_at=self._clock.now(),
            )
            logger.info(
                "spares_request_rejected",
                extra={"request_number": request.request_number},
            )
            return self._result(updated, transition)
