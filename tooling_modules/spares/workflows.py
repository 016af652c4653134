"""
Spares Request Workflow.

Indentors edit or withdraw their own requests while Pending.  The spares
desk serves them, in one step or several; Fulfilled and Rejected are
final.
"""

from tooling_kernel.domain.roles import Role
from tooling_kernel.domain.workflow import Guard, Transition, Workflow
from tooling_kernel.logging_config import get_logger
from tooling_modules.spares.models import SparesRequestStatus

logger = get_logger("modules.spares.workflows")

_S = SparesRequestStatus
_INDENTOR = (Role.INDENTOR.value,)
_SPARES = (Role.SPARES.value,)

REQUEST_OWNER = Guard(
    name="request_owner",
    description="Only the indentor who raised the request may change it",
)

FULFILLED_QUANTITY_VALID = Guard(
    name="fulfilled_quantity_valid",
    description="Fulfilled quantity never decreases and never exceeds the request",
)

REASON_PROVIDED = Guard(
    name="reason_provided",
    description="A rejection reason is given",
)

SPARES_REQUEST_WORKFLOW = Workflow(
    name="spares_request",
    description="Spares request from stock",
    initial_state=_S.PENDING.value,
    states=tuple(s.value for s in SparesRequestStatus),
    transitions=(
        Transition(_S.PENDING.value, _S.PENDING.value, action="edit", guard=REQUEST_OWNER, roles=_INDENTOR),
        Transition(_S.PENDING.value, _S.PENDING.value, action="delete", guard=REQUEST_OWNER, roles=_INDENTOR),

        Transition(_S.PENDING.value, _S.FULFILLED.value, action="fulfill", guard=FULFILLED_QUANTITY_VALID, roles=_SPARES),
        Transition(_S.PENDING.value, _S.PARTIALLY_FULFILLED.value, action="partially_fulfill", guard=FULFILLED_QUANTITY_VALID, roles=_SPARES),
        Transition(_S.PENDING.value, _S.REJECTED.value, action="reject", guard=REASON_PROVIDED, roles=_SPARES),

        Transition(_S.PARTIALLY_FULFILLED.value, _S.FULFILLED.value, action="fulfill", guard=FULFILLED_QUANTITY_VALID, roles=_SPARES),
        Transition(_S.PARTIALLY_FULFILLED.value, _S.PARTIALLY_FULFILLED.value, action="partially_fulfill", guard=FULFILLED_QUANTITY_VALID, roles=_SPARES),
    ),
    terminal_states=(_S.FULFILLED.value, _S.REJECTED.value),
)

logger.info(
    "spares_request_workflow_registered",
    extra={
        "workflow_name": SPARES_REQUEST_WORKFLOW.name,
        "state_count": len(SPARES_REQUEST_WORKFLOW.states),
        "transition_count": len(SPARES_REQUEST_WORKFLOW.transitions),
        "initial_state": SPARES_REQUEST_WORKFLOW.initial_state,
    },
)
