"""
Requisition Workflow.

State machine for purchase requisitions, from submission through supplier
award to receipt of the tooling.  Quotation approval lands on Evaluation
Pending; award is possible from Evaluation Pending or Approved.
"""

from tooling_kernel.domain.roles import Role
from tooling_kernel.domain.workflow import Guard, Transition, Workflow
from tooling_kernel.logging_config import get_logger
from tooling_modules.requisitions.models import PRStatus

logger = get_logger("modules.requisitions.workflows")

_S = PRStatus
_NPD = (Role.NPD.value,)
_APPROVER = (Role.APPROVER.value,)


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

REQUISITION_VALID = Guard(
    name="requisition_valid",
    description="At least one supplier and item; reason given for Modification/Refurbished",
)

COMMENTS_PROVIDED = Guard(
    name="comments_provided",
    description="Approver comments are non-empty",
)

QUOTATIONS_COMPLETE = Guard(
    name="quotations_complete",
    description="Every supplier has quoted every item with price, delivery date and terms",
)

QUOTATION_SELECTED = Guard(
    name="quotation_selected",
    description="The awarded supplier has a quotation on this requisition",
)

RECEIPT_CONFIRMED = Guard(
    name="receipt_confirmed",
    description="The actor explicitly confirmed the items were received",
)

logger.info(
    "requisition_workflow_guards_defined",
    extra={
        "guards": [
            REQUISITION_VALID.name,
            COMMENTS_PROVIDED.name,
            QUOTATIONS_COMPLETE.name,
            QUOTATION_SELECTED.name,
            RECEIPT_CONFIRMED.name,
        ],
    },
)


# -----------------------------------------------------------------------------
# Purchase Requisition Workflow
# -----------------------------------------------------------------------------

PURCHASE_REQUISITION_WORKFLOW = Workflow(
    name="purchase_requisition",
    description="Tooling purchase requisition lifecycle",
    initial_state=_S.SUBMITTED.value,
    states=tuple(s.value for s in PRStatus),
    transitions=(
        # Edits and deletion are only possible before anyone acts on the PR
        Transition(_S.SUBMITTED.value, _S.SUBMITTED.value, action="update", guard=REQUISITION_VALID, roles=_NPD),
        Transition(_S.SUBMITTED.value, _S.SUBMITTED.value, action="delete", roles=_NPD),

        Transition(_S.SUBMITTED.value, _S.APPROVED.value, action="approve", roles=_APPROVER),
        Transition(_S.SUBMITTED.value, _S.REJECTED.value, action="reject", guard=COMMENTS_PROVIDED, roles=_APPROVER),

        Transition(_S.SUBMITTED.value, _S.SENT_TO_SUPPLIER.value, action="send_to_suppliers", roles=_NPD),
        Transition(_S.APPROVED.value, _S.SENT_TO_SUPPLIER.value, action="send_to_suppliers", roles=_NPD),
        Transition(_S.SENT_TO_SUPPLIER.value, _S.SENT_TO_SUPPLIER.value, action="send_to_suppliers", roles=_NPD),
        Transition(_S.REJECTED.value, _S.SENT_TO_SUPPLIER.value, action="revise", roles=_NPD),

        # Quotation intake window
        Transition(_S.APPROVED.value, _S.APPROVED.value, action="record_quotation", roles=_NPD),
        Transition(_S.SENT_TO_SUPPLIER.value, _S.SENT_TO_SUPPLIER.value, action="record_quotation", roles=_NPD),
        Transition(_S.APPROVED.value, _S.APPROVED.value, action="remove_quotation", roles=_NPD),
        Transition(_S.SENT_TO_SUPPLIER.value, _S.SENT_TO_SUPPLIER.value, action="remove_quotation", roles=_NPD),

        Transition(_S.APPROVED.value, _S.SUBMITTED_FOR_APPROVAL.value, action="submit_for_approval", guard=QUOTATIONS_COMPLETE, roles=_NPD),
        Transition(_S.SENT_TO_SUPPLIER.value, _S.SUBMITTED_FOR_APPROVAL.value, action="submit_for_approval", guard=QUOTATIONS_COMPLETE, roles=_NPD),

        Transition(_S.SUBMITTED_FOR_APPROVAL.value, _S.EVALUATION_PENDING.value, action="approve_quotations", roles=_APPROVER),
        Transition(_S.SUBMITTED_FOR_APPROVAL.value, _S.SENT_TO_SUPPLIER.value, action="reject_quotations", guard=COMMENTS_PROVIDED, roles=_APPROVER),

        Transition(_S.EVALUATION_PENDING.value, _S.AWARDED.value, action="award", guard=QUOTATION_SELECTED, roles=_NPD),
        Transition(_S.APPROVED.value, _S.AWARDED.value, action="award", guard=QUOTATION_SELECTED, roles=_NPD),

        Transition(_S.AWARDED.value, _S.ITEMS_RECEIVED.value, action="mark_items_received", guard=RECEIPT_CONFIRMED, roles=_NPD),
    ),
    terminal_states=(_S.ITEMS_RECEIVED.value,),
)

logger.info(
    "requisition_workflow_registered",
    extra={
        "workflow_name": PURCHASE_REQUISITION_WORKFLOW.name,
        "state_count": len(PURCHASE_REQUISITION_WORKFLOW.states),
        "transition_count": len(PURCHASE_REQUISITION_WORKFLOW.transitions),
        "initial_state": PURCHASE_REQUISITION_WORKFLOW.initial_state,
    },
)
