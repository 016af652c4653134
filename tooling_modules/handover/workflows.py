"""
Handover Workflow.

Inspection of a received tool set.  Both outcomes are final: an approved
handover has already been folded into inventory and must not be approved
again, and a rejected one stays rejected.
"""

from tooling_kernel.domain.roles import Role
from tooling_kernel.domain.workflow import Guard, Transition, Workflow
from tooling_kernel.logging_config import get_logger
from tooling_modules.handover.models import HandoverStatus

logger = get_logger("modules.handover.workflows")

_S = HandoverStatus
_MAINTENANCE = (Role.MAINTENANCE.value,)

REMARKS_PROVIDED = Guard(
    name="remarks_provided",
    description="Inspection remarks are non-empty",
)

HANDOVER_WORKFLOW = Workflow(
    name="tool_handover",
    description="Tool set handover inspection",
    initial_state=_S.PENDING_INSPECTION.value,
    states=tuple(s.value for s in HandoverStatus),
    transitions=(
        Transition(_S.PENDING_INSPECTION.value, _S.APPROVED.value, action="approve", guard=REMARKS_PROVIDED, roles=_MAINTENANCE),
        Transition(_S.PENDING_INSPECTION.value, _S.REJECTED.value, action="reject", guard=REMARKS_PROVIDED, roles=_MAINTENANCE),
    ),
    terminal_states=(_S.APPROVED.value, _S.REJECTED.value),
)

logger.info(
    "handover_workflow_registered",
    extra={
        "workflow_name": HANDOVER_WORKFLOW.name,
        "state_count": len(HANDOVER_WORKFLOW.states),
        "transition_count": len(HANDOVER_WORKFLOW.transitions),
        "initial_state": HANDOVER_WORKFLOW.initial_state,
    },
)
