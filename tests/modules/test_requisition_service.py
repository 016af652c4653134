"""
Tests for RequisitionService.

Covers:
- Creation: numbering, role check, validation
- Edits and deletion while Submitted
- Approval / rejection (comments required)
- Supplier round, quotation submission guard, quotation approval routing
- Award exclusivity and the illegal-state guard
- Receipt confirmation
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tests.conftest import FIXED_NOW, SUPPLIER_A, SUPPLIER_B
from tooling_kernel.exceptions import (
    AwardNotAllowedError,
    ConfirmationRequiredError,
    InvalidTransitionError,
    MissingCommentsError,
    QuotationIncompleteError,
    RequisitionValidationError,
    UnauthorizedActorError,
)
from tooling_modules.quotations.models import QuotationStatus
from tooling_modules.requisitions import builder
from tooling_modules.requisitions.models import CriticalSpare, PRStatus, PRType
from tooling_modules.requisitions.service import DEFAULT_APPROVAL_COMMENTS


class TestCreate:

    def test_new_set_created_submitted(self, new_set_pr, npd):
        assert new_set_pr.status is PRStatus.SUBMITTED
        assert new_set_pr.pr_number == "PR-2024-001"
        assert new_set_pr.created_by == npd.actor_id
        assert new_set_pr.created_at == FIXED_NOW
        assert new_set_pr.effective_quantity("BOM-001") == 3

    def test_numbering_continues(self, requisition_service, npd, project, tn9001_bom):
        pr = requisition_service.create(
            actor=npd,
            project_id=project.id,
            pr_type=PRType.NEW_SET,
            items=builder.build_new_set_items(tn9001_bom),
            suppliers=(SUPPLIER_A,),
            existing_numbers=("PR-2024-004", "PR-2023-010"),
        )
        assert pr.pr_number == "PR-2024-005"

    def test_only_npd_creates(self, requisition_service, approver, project, tn9001_bom):
        with pytest.raises(UnauthorizedActorError):
            requisition_service.create(
                actor=approver,
                project_id=project.id,
                pr_type=PRType.NEW_SET,
                items=builder.build_new_set_items(tn9001_bom),
                suppliers=(SUPPLIER_A,),
            )

    def test_modification_needs_reason(self, requisition_service, npd, project, tn9001_bom):
        with pytest.raises(RequisitionValidationError) as exc_info:
            requisition_service.create(
                actor=npd,
                project_id=project.id,
                pr_type=PRType.MODIFICATION,
                items=builder.build_modification_items(tn9001_bom, {"BOM-004": None}),
                suppliers=(SUPPLIER_A,),
            )
        assert exc_info.value.problems == ["a reason is required for Modification requisitions"]

    def test_inactive_supplier_rejected(self, requisition_service, npd, project, tn9001_bom, suppliers):
        with pytest.raises(RequisitionValidationError):
            requisition_service.create(
                actor=npd,
                project_id=project.id,
                pr_type=PRType.NEW_SET,
                items=builder.build_new_set_items(tn9001_bom),
                suppliers=("Old Castings",),
                known_suppliers=suppliers,
            )

    def test_created_logged(self, captured_logs, requisition_service, npd, project, tn9001_bom):
        requisition_service.create(
            actor=npd,
            project_id=project.id,
            pr_type=PRType.NEW_SET,
            items=builder.build_new_set_items(tn9001_bom),
            suppliers=(SUPPLIER_A,),
        )
        record = next(r for r in captured_logs() if r["message"] == "requisition_created")
        assert record["actor_id"] == "npd-1"
        assert record["item_count"] == 6

    def test_cost_breakdown(self, requisition_service, new_set_pr):
        breakdown = requisition_service.cost_breakdown(new_set_pr)

        assert breakdown.bom_subtotal == Decimal("3020")
        assert breakdown.critical_spares_subtotal == Decimal("500")
        assert breakdown.overall_subtotal == Decimal("3520")
        assert breakdown.tax == Decimal("633.60")
        assert breakdown.grand_total == Decimal("4153.60")


class TestEditAndDelete:

    def test_update_while_submitted(self, requisition_service, new_set_pr, npd):
        result = requisition_service.update(
            new_set_pr, actor=npd, suppliers=(SUPPLIER_B,), critical_spares=(),
        )

        assert result.record.suppliers == (SUPPLIER_B,)
        assert result.record.critical_spares == ()
        assert result.record.updated_by == npd.actor_id
        assert result.changed is False

    def test_update_validates(self, requisition_service, new_set_pr, npd):
        with pytest.raises(RequisitionValidationError):
            requisition_service.update(new_set_pr, actor=npd, suppliers=())

    def test_update_after_approval_rejected(self, requisition_service, new_set_pr, npd, approver):
        approved = requisition_service.approve(new_set_pr, actor=approver).record

        with pytest.raises(InvalidTransitionError):
            requisition_service.update(approved, actor=npd, suppliers=(SUPPLIER_A,))

    def test_update_keeps_unspecified_fields(self, requisition_service, new_set_pr, npd):
        result = requisition_service.update(new_set_pr, actor=npd, items=new_set_pr.items)
        assert result.record.critical_spares == (CriticalSpare("BOM-001", 2),)
        assert result.record.suppliers == new_set_pr.suppliers

    def test_delete_returns_unchanged(self, requisition_service, new_set_pr, npd):
        result = requisition_service.delete(new_set_pr, actor=npd)
        assert result.record is new_set_pr

    def test_delete_by_approver_rejected(self, requisition_service, new_set_pr, approver):
        with pytest.raises(UnauthorizedActorError):
            requisition_service.delete(new_set_pr, actor=approver)


class TestApproval:

    def test_approve(self, requisition_service, new_set_pr, approver):
        result = requisition_service.approve(new_set_pr, actor=approver, comments=" fine ")

        assert result.record.status is PRStatus.APPROVED
        assert result.record.approver_comments == "fine"
        assert result.record.approved_by == approver.actor_id
        assert result.record.approved_at == FIXED_NOW
        assert (result.from_state, result.to_state) == ("Submitted", "Approved")

    def test_reject_requires_comments(self, requisition_service, new_set_pr, approver):
        with pytest.raises(MissingCommentsError):
            requisition_service.reject(new_set_pr, actor=approver, comments="   ")

    def test_reject_and_revise(self, requisition_service, new_set_pr, approver, npd):
        rejected = requisition_service.reject(new_set_pr, actor=approver, comments="Too costly").record
        assert rejected.status is PRStatus.REJECTED
        assert rejected.approver_comments == "Too costly"

        revised = requisition_service.revise(rejected, actor=npd).record
        assert revised.status is PRStatus.SENT_TO_SUPPLIER

    def test_npd_cannot_approve(self, requisition_service, new_set_pr, npd):
        with pytest.raises(UnauthorizedActorError):
            requisition_service.approve(new_set_pr, actor=npd)

    def test_original_record_untouched(self, requisition_service, new_set_pr, approver):
        requisition_service.approve(new_set_pr, actor=approver)
        assert new_set_pr.status is PRStatus.SUBMITTED


class TestSupplierRound:

    def test_send_directly_from_submitted(self, requisition_service, new_set_pr, npd):
        sent = requisition_service.send_to_suppliers(new_set_pr, actor=npd).record
        assert sent.status is PRStatus.SENT_TO_SUPPLIER

    def test_resend_allowed(self, requisition_service, sent_pr, npd):
        assert requisition_service.send_to_suppliers(sent_pr, actor=npd).record.status is PRStatus.SENT_TO_SUPPLIER

    def test_submit_requires_every_supplier(self, requisition_service, quotation_service, sent_pr, npd):
        pr = quotation_service.record_quotation(
            sent_pr,
            actor=npd,
            supplier=SUPPLIER_A,
            unit_prices={item.id: Decimal("10") for item in sent_pr.items},
            delivery_date=FIXED_NOW.date(),
            delivery_terms="FOB",
        ).record

        with pytest.raises(QuotationIncompleteError) as exc_info:
            requisition_service.submit_for_approval(pr, actor=npd)

        assert exc_info.value.supplier == SUPPLIER_B
        assert exc_info.value.missing == ["quotation"]

    def test_submit_reports_missing_fields(self, requisition_service, quotation_service, sent_pr, npd):
        pr = sent_pr
        for supplier in sent_pr.suppliers:
            pr = quotation_service.record_quotation(
                pr,
                actor=npd,
                supplier=supplier,
                unit_prices={"BOM-001": Decimal("240")},
                delivery_date=None,
                delivery_terms="",
            ).record

        with pytest.raises(QuotationIncompleteError) as exc_info:
            requisition_service.submit_for_approval(pr, actor=npd)

        missing = exc_info.value.missing
        assert missing[0].startswith("prices for BOM-002")
        assert "delivery date" in missing
        assert "delivery terms" in missing

    def test_submit_marks_quotations_evaluated(self, requisition_service, quoted_pr, npd):
        submitted = requisition_service.submit_for_approval(quoted_pr, actor=npd).record

        assert submitted.status is PRStatus.SUBMITTED_FOR_APPROVAL
        assert {q.status for q in submitted.quotations} == {QuotationStatus.EVALUATED}
        assert all(q.evaluated_by == npd.actor_id for q in submitted.quotations)

    def test_approve_quotations_default_comment(self, requisition_service, quoted_pr, npd, approver):
        submitted = requisition_service.submit_for_approval(quoted_pr, actor=npd).record

        result = requisition_service.approve_quotations(submitted, actor=approver)

        assert result.record.status is PRStatus.EVALUATION_PENDING
        assert result.record.approver_comments == DEFAULT_APPROVAL_COMMENTS
        assert {q.status for q in result.record.quotations} == {QuotationStatus.APPROVED}

    def test_reject_quotations_back_to_suppliers(self, requisition_service, quoted_pr, npd, approver):
        submitted = requisition_service.submit_for_approval(quoted_pr, actor=npd).record

        with pytest.raises(MissingCommentsError):
            requisition_service.reject_quotations(submitted, actor=approver, comments="")

        result = requisition_service.reject_quotations(submitted, actor=approver, comments="Renegotiate")
        assert result.record.status is PRStatus.SENT_TO_SUPPLIER
        assert {q.status for q in result.record.quotations} == {QuotationStatus.REJECTED}


class TestAward:

    def test_award_exclusive(self, requisition_service, evaluation_pending_pr, npd):
        awarded = requisition_service.award_supplier(evaluation_pending_pr, SUPPLIER_B, actor=npd).record

        assert awarded.status is PRStatus.AWARDED
        assert awarded.awarded_supplier == SUPPLIER_B
        statuses = {q.supplier: q.status for q in awarded.quotations}
        assert statuses == {SUPPLIER_A: QuotationStatus.REJECTED, SUPPLIER_B: QuotationStatus.SELECTED}

    def test_award_blocked_while_submitted_for_approval(self, requisition_service, quoted_pr, npd):
        submitted = requisition_service.submit_for_approval(quoted_pr, actor=npd).record

        with pytest.raises(InvalidTransitionError):
            requisition_service.award_supplier(submitted, SUPPLIER_A, actor=npd)

    def test_award_from_approved(self, requisition_service, quotation_service, new_set_pr, approver, npd):
        approved = requisition_service.approve(new_set_pr, actor=approver).record
        quoted = quotation_service.record_quotation(
            approved,
            actor=npd,
            supplier=SUPPLIER_A,
            unit_prices={"BOM-001": Decimal("240")},
            delivery_date=None,
            delivery_terms="FOB",
        ).record

        awarded = requisition_service.award_supplier(quoted, SUPPLIER_A, actor=npd).record
        assert awarded.status is PRStatus.AWARDED

    def test_award_needs_quotation(self, requisition_service, evaluation_pending_pr, npd):
        with pytest.raises(AwardNotAllowedError) as exc_info:
            requisition_service.award_supplier(evaluation_pending_pr, "Nobody Ltd", actor=npd)
        assert "no quotation from Nobody Ltd" in str(exc_info.value)

    def test_award_logged(self, requisition_service, evaluation_pending_pr, npd, captured_logs):
        requisition_service.award_supplier(evaluation_pending_pr, SUPPLIER_A, actor=npd)

        record = next(r for r in captured_logs() if r["message"] == "supplier_awarded")
        assert record["supplier"] == SUPPLIER_A
        assert record["rejected_count"] == 1


class TestReceipt:

    def test_requires_confirmation(self, requisition_service, evaluation_pending_pr, npd):
        awarded = requisition_service.award_supplier(evaluation_pending_pr, SUPPLIER_A, actor=npd).record

        with pytest.raises(ConfirmationRequiredError):
            requisition_service.mark_items_received(awarded, actor=npd)

    def test_received_stamped(self, received_pr):
        assert received_pr.status is PRStatus.ITEMS_RECEIVED
        assert received_pr.items_received_date == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def test_terminal(self, requisition_service, received_pr):
        assert requisition_service.available_actions(received_pr) == ()

    def test_available_actions_submitted(self, requisition_service, new_set_pr):
        assert requisition_service.available_actions(new_set_pr) == (
            "update", "delete", "approve", "reject", "send_to_suppliers",
        )


class TestTransitionTrace:

    def test_every_attempt_recorded(self, requisition_service, new_set_pr, approver, npd, outcomes):
        requisition_service.approve(new_set_pr, actor=approver)
        with pytest.raises(UnauthorizedActorError):
            requisition_service.approve(new_set_pr, actor=npd)

        assert [r["outcome"] for r in outcomes] == ["success", "unauthorized"]
        assert outcomes[0]["entity_type"] == "PurchaseRequisition"
        assert outcomes[0]["entity_id"] == str(new_set_pr.id)
