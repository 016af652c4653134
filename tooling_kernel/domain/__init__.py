"""
Pure domain layer.

Value objects shared by every module: the injectable clock, actor roles
and workflow state-machine types.  No ORM, database or I/O dependencies.
"""

from tooling_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from tooling_kernel.domain.roles import Actor, Role
from tooling_kernel.domain.workflow import Guard, Transition, Workflow, WorkflowResult

__all__ = [
    "Actor",
    "Clock",
    "DeterministicClock",
    "Guard",
    "Role",
    "SystemClock",
    "Transition",
    "Workflow",
    "WorkflowResult",
]
