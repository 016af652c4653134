"""
Tests for the table-driven WorkflowExecutor.

Covers:
- Successful transitions return the target state
- Unknown (state, action) pairs raise InvalidTransitionError
- Role checks raise UnauthorizedActorError
- Guard failures re-raise the guard's own error
- One workflow_transition trace per attempt, delivered to the outcome sink
"""

import pytest

from tooling_kernel.domain.roles import Actor, Role
from tooling_kernel.domain.workflow import Guard, Transition, Workflow
from tooling_kernel.exceptions import (
    InvalidTransitionError,
    MissingCommentsError,
    UnauthorizedActorError,
)
from tooling_kernel.logging_config import LogContext
from tooling_kernel.services.workflow_executor import (
    OUTCOME_GUARD_FAILED,
    OUTCOME_NO_TRANSITION,
    OUTCOME_SUCCESS,
    OUTCOME_UNAUTHORIZED,
    TRACE_TYPE_WORKFLOW_TRANSITION,
    WorkflowExecutor,
)

SIGNED = Guard("signed", "Document carries a signature")

DOC_WORKFLOW = Workflow(
    name="doc",
    description="Two-step test document",
    initial_state="Draft",
    states=("Draft", "Review", "Done"),
    transitions=(
        Transition("Draft", "Review", action="submit"),
        Transition("Review", "Done", action="sign", guard=SIGNED, roles=(Role.APPROVER.value,)),
    ),
    terminal_states=("Done",),
)


class TestWorkflowExecution:

    def setup_method(self):
        self.records = []
        self.executor = WorkflowExecutor(outcome_sink=self.records.append)
        self.npd = Actor("npd-1", Role.NPD)
        self.approver = Actor("appr-1", Role.APPROVER)

    def _run(self, state, action, actor, guard=None):
        return self.executor.execute(
            DOC_WORKFLOW,
            entity_type="Doc",
            entity_id="doc-1",
            current_state=state,
            action=action,
            actor=actor,
            guard=guard,
        )

    def test_transition_without_roles_open_to_anyone(self):
        result = self._run("Draft", "submit", self.npd)

        assert result.from_state == "Draft"
        assert result.to_state == "Review"
        assert result.workflow == "doc"
        assert result.entity_id == "doc-1"

    def test_unknown_pair_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            self._run("Done", "submit", self.npd)

        assert exc_info.value.workflow == "doc"
        assert exc_info.value.from_state == "Done"
        assert exc_info.value.action == "submit"
        assert self.records[-1]["outcome"] == OUTCOME_NO_TRANSITION

    def test_role_not_allowed_raises(self):
        with pytest.raises(UnauthorizedActorError) as exc_info:
            self._run("Review", "sign", self.npd)

        assert exc_info.value.role == "NPD"
        assert exc_info.value.allowed_roles == ("Approver",)
        assert self.records[-1]["outcome"] == OUTCOME_UNAUTHORIZED

    def test_guard_error_propagates_unchanged(self):
        def guard():
            raise MissingCommentsError("sign")

        with pytest.raises(MissingCommentsError):
            self._run("Review", "sign", self.approver, guard)

        record = self.records[-1]
        assert record["outcome"] == OUTCOME_GUARD_FAILED
        assert record["guard_name"] == "signed"
        assert record["error_code"] == "COMMENTS_REQUIRED"

    def test_role_checked_before_guard(self):
        calls = []

        with pytest.raises(UnauthorizedActorError):
            self._run("Review", "sign", self.npd, lambda: calls.append("guard"))

        assert calls == []

    def test_enum_state_accepted(self):
        from enum import Enum

        class DocState(Enum):
            DRAFT = "Draft"

        result = self._run(DocState.DRAFT, "submit", self.npd)
        assert result.from_state == "Draft"


class TestWorkflowTrace:

    def setup_method(self):
        self.records = []
        self.executor = WorkflowExecutor(outcome_sink=self.records.append)
        self.approver = Actor("appr-1", Role.APPROVER)

    def test_one_record_per_attempt(self):
        self.executor.execute(
            DOC_WORKFLOW, entity_type="Doc", entity_id="d", current_state="Draft",
            action="submit", actor=self.approver,
        )
        with pytest.raises(InvalidTransitionError):
            self.executor.execute(
                DOC_WORKFLOW, entity_type="Doc", entity_id="d", current_state="Draft",
                action="sign", actor=self.approver,
            )

        assert [r["outcome"] for r in self.records] == [OUTCOME_SUCCESS, OUTCOME_NO_TRANSITION]

    def test_success_record_fields(self):
        self.executor.execute(
            DOC_WORKFLOW, entity_type="Doc", entity_id="d", current_state="Draft",
            action="submit", actor=self.approver,
        )

        record = self.records[0]
        assert record["trace_type"] == TRACE_TYPE_WORKFLOW_TRANSITION
        assert record["message"] == "workflow_transition"
        assert record["workflow"] == "doc"
        assert record["to_state"] == "Review"
        assert record["actor_id"] == "appr-1"
        assert record["actor_role"] == "Approver"
        assert record["duration_ms"] >= 0

    def test_log_context_copied_into_record(self):
        with LogContext.bind(correlation_id="corr-42"):
            self.executor.execute(
                DOC_WORKFLOW, entity_type="Doc", entity_id="d", current_state="Draft",
                action="submit", actor=self.approver,
            )

        assert self.records[0]["correlation_id"] == "corr-42"

    def test_trace_logged(self, captured_logs):
        self.executor.execute(
            DOC_WORKFLOW, entity_type="Doc", entity_id="d", current_state="Draft",
            action="submit", actor=self.approver,
        )

        logs = [r for r in captured_logs() if r["message"] == "workflow_transition"]
        assert len(logs) == 1
        assert logs[0]["level"] == "INFO"
        assert logs[0]["outcome"] == OUTCOME_SUCCESS

    def test_failure_logged_as_warning(self, captured_logs):
        with pytest.raises(InvalidTransitionError):
            self.executor.execute(
                DOC_WORKFLOW, entity_type="Doc", entity_id="d", current_state="Done",
                action="sign", actor=self.approver,
            )

        logs = [r for r in captured_logs() if r["message"] == "workflow_transition"]
        assert logs[0]["level"] == "WARNING"


class TestWorkflowDefinition:

    def test_initial_state_must_be_declared(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow("bad", "", "Nowhere", ("A",), ())

    def test_transition_states_must_be_declared(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow("bad", "", "A", ("A",), (Transition("A", "B", action="go"),))

    def test_duplicate_pair_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            Workflow(
                "bad", "", "A", ("A", "B"),
                (Transition("A", "B", action="go"), Transition("A", "A", action="go")),
            )

    def test_actions_from_in_declaration_order(self):
        assert DOC_WORKFLOW.actions_from("Draft") == ("submit",)
        assert DOC_WORKFLOW.actions_from("Done") == ()
