"""
Workflow Transition Tests.

All workflows must have:
1. An initial state that exists in states
2. All transition from/to states exist in states
3. No outgoing transitions from a terminal state
4. Every state reachable from the initial state (document workflows)
"""

import pytest

from tooling_kernel.domain.roles import Role
from tooling_modules.handover.workflows import HANDOVER_WORKFLOW
from tooling_modules.quotations.workflows import QUOTATION_WORKFLOW
from tooling_modules.requisitions.workflows import PURCHASE_REQUISITION_WORKFLOW
from tooling_modules.spares.workflows import SPARES_REQUEST_WORKFLOW

DOCUMENT_WORKFLOWS = [
    ("Purchase Requisition", PURCHASE_REQUISITION_WORKFLOW),
    ("Tool Handover", HANDOVER_WORKFLOW),
    ("Spares Request", SPARES_REQUEST_WORKFLOW),
]

ALL_WORKFLOWS = DOCUMENT_WORKFLOWS + [("Quotation", QUOTATION_WORKFLOW)]


def _reachable(workflow):
    seen = {workflow.initial_state}
    frontier = [workflow.initial_state]
    while frontier:
        state = frontier.pop()
        for transition in workflow.transitions:
            if transition.from_state == state and transition.to_state not in seen:
                seen.add(transition.to_state)
                frontier.append(transition.to_state)
    return seen


class TestWorkflowShape:

    @pytest.mark.parametrize("name,workflow", ALL_WORKFLOWS)
    def test_initial_state_exists(self, name, workflow):
        assert workflow.initial_state in workflow.states, (
            f"{name} workflow initial state '{workflow.initial_state}' "
            f"not in states: {workflow.states}"
        )

    @pytest.mark.parametrize("name,workflow", ALL_WORKFLOWS)
    def test_terminal_states_have_no_exits(self, name, workflow):
        for state in workflow.terminal_states:
            assert workflow.actions_from(state) == (), (
                f"{name} workflow terminal state '{state}' has outgoing transitions"
            )

    @pytest.mark.parametrize("name,workflow", DOCUMENT_WORKFLOWS)
    def test_no_orphan_states(self, name, workflow):
        orphans = set(workflow.states) - _reachable(workflow)
        assert not orphans, f"{name} workflow has unreachable states: {sorted(orphans)}"

    @pytest.mark.parametrize("name,workflow", ALL_WORKFLOWS)
    def test_every_transition_names_roles(self, name, workflow):
        for transition in workflow.transitions:
            assert transition.roles, f"{name} transition '{transition.action}' allows any role"


class TestRequisitionWorkflow:

    def test_states(self):
        assert PURCHASE_REQUISITION_WORKFLOW.states == (
            "Submitted",
            "Approved",
            "Sent To Supplier",
            "Evaluation Pending",
            "Submitted for Approval",
            "Awarded",
            "Items Received",
            "Rejected",
        )

    @pytest.mark.parametrize(
        "from_state,action,to_state",
        [
            ("Submitted", "approve", "Approved"),
            ("Submitted", "reject", "Rejected"),
            ("Submitted", "send_to_suppliers", "Sent To Supplier"),
            ("Rejected", "revise", "Sent To Supplier"),
            ("Sent To Supplier", "submit_for_approval", "Submitted for Approval"),
            ("Submitted for Approval", "approve_quotations", "Evaluation Pending"),
            ("Submitted for Approval", "reject_quotations", "Sent To Supplier"),
            ("Evaluation Pending", "award", "Awarded"),
            ("Approved", "award", "Awarded"),
            ("Awarded", "mark_items_received", "Items Received"),
        ],
    )
    def test_edges(self, from_state, action, to_state):
        transition = PURCHASE_REQUISITION_WORKFLOW.find_transition(from_state, action)
        assert transition is not None
        assert transition.to_state == to_state

    def test_no_award_while_submitted_for_approval(self):
        assert PURCHASE_REQUISITION_WORKFLOW.find_transition("Submitted for Approval", "award") is None

    @pytest.mark.parametrize(
        "action", ["approve", "reject", "approve_quotations", "reject_quotations"],
    )
    def test_approver_actions(self, action):
        for transition in PURCHASE_REQUISITION_WORKFLOW.transitions:
            if transition.action == action:
                assert transition.roles == (Role.APPROVER.value,)

    def test_edits_only_while_submitted(self):
        for action in ("update", "delete"):
            states = {
                t.from_state for t in PURCHASE_REQUISITION_WORKFLOW.transitions if t.action == action
            }
            assert states == {"Submitted"}


class TestOtherWorkflows:

    def test_handover_maintenance_only(self):
        assert {t.roles for t in HANDOVER_WORKFLOW.transitions} == {(Role.MAINTENANCE.value,)}

    def test_handover_terminal(self):
        assert HANDOVER_WORKFLOW.terminal_states == ("Approved", "Rejected")

    def test_spares_partial_can_complete(self):
        assert SPARES_REQUEST_WORKFLOW.actions_from("Partially Fulfilled") == (
            "fulfill",
            "partially_fulfill",
        )

    def test_spares_partial_cannot_be_rejected(self):
        assert SPARES_REQUEST_WORKFLOW.find_transition("Partially Fulfilled", "reject") is None
