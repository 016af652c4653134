"""
tooling_kernel.services.workflow_executor -- Workflow transition execution.

Responsibility:
    Looks up ``(current_state, action)`` in a module's ``Workflow`` table,
    checks the actor's role against the transition, runs the caller's guard
    and emits one structured ``workflow_transition`` trace per attempt,
    whatever the outcome.

    There is no event bus: the optional ``outcome_sink`` callback receives
    every trace record, so a host can drive notifications or an audit
    timeline from it.

Invariants enforced:
    * An unknown ``(state, action)`` pair raises ``InvalidTransitionError``.
    * A role not listed on the transition raises ``UnauthorizedActorError``.
    * A guard failure re-raises the guard's own ``ToolingError`` unchanged.
    * The executor never builds the new record; services do that after a
      successful ``execute`` so a failure mutates nothing.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor
from tooling_kernel.domain.workflow import Transition, Workflow
from tooling_kernel.exceptions import (
    InvalidTransitionError,
    ToolingError,
    UnauthorizedActorError,
)
from tooling_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.workflow_executor")

TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"
OUTCOME_SUCCESS = "success"
OUTCOME_NO_TRANSITION = "no_transition"
OUTCOME_UNAUTHORIZED = "unauthorized"
OUTCOME_GUARD_FAILED = "guard_failed"


def _state_value(state: Any) -> str:
    return state.value if isinstance(state, Enum) else str(state)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a successful transition lookup."""
    workflow: str
    action: str
    entity_id: str
    from_state: str
    to_state: str
    transition: Transition


class WorkflowExecutor:
    """Executes table-driven transitions for every document workflow."""

    def __init__(
        self,
        clock: Clock | None = None,
        outcome_sink: Callable[[dict], None] | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._outcome_sink = outcome_sink

    def execute(
        self,
        workflow: Workflow,
        *,
        entity_type: str,
        entity_id: Any,
        current_state: Any,
        action: str,
        actor: Actor,
        guard: Callable[[], None] | None = None,
    ) -> TransitionResult:
        """Validate one transition and return where it leads.

        ``guard`` is called after the table and role checks pass; it signals
        failure by raising a ``ToolingError``.
        """
        started = time.monotonic()
        from_state = _state_value(current_state)
        trace = dict(
            workflow_name=workflow.name,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            from_state=from_state,
            actor=actor,
            started=started,
        )

        transition = workflow.find_transition(from_state, action)
        if transition is None:
            self._emit(
                **trace,
                outcome=OUTCOME_NO_TRANSITION,
                reason=f"no '{action}' transition from '{from_state}'",
            )
            raise InvalidTransitionError(workflow.name, from_state, action)

        if transition.roles and actor.role.value not in transition.roles:
            self._emit(
                **trace,
                outcome=OUTCOME_UNAUTHORIZED,
                reason=f"role {actor.role.value} not in {list(transition.roles)}",
            )
            raise UnauthorizedActorError(
                actor.actor_id, actor.role.value, action, transition.roles,
            )

        if guard is not None:
            try:
                guard()
            except ToolingError as exc:
                self._emit(
                    **trace,
                    outcome=OUTCOME_GUARD_FAILED,
                    reason=str(exc),
                    guard_name=transition.guard.name if transition.guard else None,
                    error_code=exc.code,
                )
                raise

        self._emit(
            **trace,
            outcome=OUTCOME_SUCCESS,
            reason="transition allowed",
            to_state=transition.to_state,
        )
        return TransitionResult(
            workflow=workflow.name,
            action=action,
            entity_id=str(entity_id),
            from_state=from_state,
            to_state=transition.to_state,
            transition=transition,
        )

    def _emit(
        self,
        *,
        workflow_name: str,
        action: str,
        entity_type: str,
        entity_id: str,
        from_state: str,
        actor: Actor,
        started: float,
        outcome: str,
        reason: str,
        to_state: str | None = None,
        guard_name: str | None = None,
        error_code: str | None = None,
    ) -> None:
        """Emit a structured workflow transition record."""
        record: dict[str, Any] = {
            "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
            "ts": self._clock.now().isoformat(),
            "workflow": workflow_name,
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "from_state": from_state,
            "outcome": outcome,
            "reason": reason,
            "actor_id": actor.actor_id,
            "actor_role": actor.role.value,
            "duration_ms": round((time.monotonic() - started) * 1000, 3),
        }
        if to_state is not None:
            record["to_state"] = to_state
        if guard_name is not None:
            record["guard_name"] = guard_name
        if error_code is not None:
            record["error_code"] = error_code
        for key, val in LogContext.get_all().items():
            record.setdefault(key, val)

        if outcome == OUTCOME_SUCCESS:
            logger.info("workflow_transition", extra=record)
        else:
            logger.warning("workflow_transition", extra=record)

        record["message"] = "workflow_transition"
        if self._outcome_sink is not None:
            self._outcome_sink(record)
