"""
Quotation Workflow.

Individual review of a single quotation.  Only Pending quotations can be
marked Evaluated or Rejected here; the bulk moves (Evaluated on submission,
Approved, Selected) follow the requisition workflow.
"""

from tooling_kernel.domain.roles import Role
from tooling_kernel.domain.workflow import Transition, Workflow
from tooling_kernel.logging_config import get_logger
from tooling_modules.quotations.models import QuotationStatus

logger = get_logger("modules.quotations.workflows")

_S = QuotationStatus
_REVIEWERS = (Role.NPD.value, Role.APPROVER.value)


QUOTATION_WORKFLOW = Workflow(
    name="quotation",
    description="Single supplier quotation review",
    initial_state=_S.PENDING.value,
    states=tuple(s.value for s in QuotationStatus),
    transitions=(
        Transition(_S.PENDING.value, _S.EVALUATED.value, action="evaluate", roles=_REVIEWERS),
        Transition(_S.PENDING.value, _S.REJECTED.value, action="reject", roles=_REVIEWERS),
    ),
    terminal_states=(_S.SELECTED.value, _S.REJECTED.value),
)

logger.info(
    "quotation_workflow_registered",
    extra={
        "workflow_name": QUOTATION_WORKFLOW.name,
        "state_count": len(QUOTATION_WORKFLOW.states),
        "transition_count": len(QUOTATION_WORKFLOW.transitions),
        "initial_state": QUOTATION_WORKFLOW.initial_state,
    },
)
