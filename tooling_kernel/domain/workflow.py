"""
Canonical workflow types (``tooling_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for the document state machines (purchase requisition,
tool handover, spares request).  Each module declares its ``Workflow`` as a
module-level constant built from these types; the executor looks up
``(from_state, action)`` pairs in it.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* A ``(from_state, action)`` pair appears at most once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Descriptive only: the owning service evaluates the condition and raises
    a typed error when it does not hold.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``roles`` lists the actor roles (by value) allowed to fire the action.
    An empty tuple means any role may fire it.
    """
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self):
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state '{self.initial_state}' "
                f"is not a declared state"
            )
        seen: set[tuple[str, str]] = set()
        for t in self.transitions:
            for state in (t.from_state, t.to_state):
                if state not in self.states:
                    raise ValueError(
                        f"Workflow {self.name}: transition {t.action} references "
                        f"unknown state '{state}'"
                    )
            key = (t.from_state, t.action)
            if key in seen:
                raise ValueError(
                    f"Workflow {self.name}: duplicate transition {t.action} "
                    f"from '{t.from_state}'"
                )
            seen.add(key)

    def find_transition(self, from_state: str, action: str) -> Transition | None:
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        return None

    def actions_from(self, state: str) -> tuple[str, ...]:
        """Actions available from ``state``, in declaration order."""
        return tuple(t.action for t in self.transitions if t.from_state == state)


@dataclass(frozen=True)
class WorkflowResult:
    """Explicit command result: the new record and the edge that produced it."""
    record: Any
    action: str
    from_state: str
    to_state: str

    @property
    def changed(self) -> bool:
        return self.from_state != self.to_state
