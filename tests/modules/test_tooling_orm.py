"""ORM round-trip tests for the tooling modules.

Covers:
- ProjectRepository, SupplierRepository
- RequisitionRepository (lines, critical spares and quotations as one aggregate)
- QuotationRepository lookups
- HandoverRepository
- InventoryRepository (movement history split by direction)
- SparesRequestRepository

Each test saves domain records through a repository, flushes, and reads
them back as domain records.
"""

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from tests.conftest import FIXED_NOW, SUPPLIER_A, SUPPLIER_B
from tooling_kernel.db.engine import session_scope
from tooling_kernel.exceptions import (
    ProjectNotFoundError,
    QuotationNotFoundError,
    RequisitionNotFoundError,
    SupplierNotFoundError,
)
from tooling_modules.handover.models import HandoverStatus
from tooling_modules.handover.orm import HandoverRepository
from tooling_modules.inventory.models import MovementType, ReferenceType
from tooling_modules.inventory.orm import InventoryRepository
from tooling_modules.projects.orm import ProjectRepository
from tooling_modules.quotations.orm import QuotationRepository
from tooling_modules.requisitions.models import CriticalSpare, PRStatus
from tooling_modules.requisitions.orm import CriticalSpareModel, RequisitionRepository
from tooling_modules.spares.orm import SparesRequestRepository
from tooling_modules.suppliers.orm import SupplierRepository


class TestProjectRepository:

    def test_save_and_get(self, session, project, npd):
        repo = ProjectRepository(session)

        repo.save(project, npd.actor_id)
        loaded = repo.get(project.id)

        assert loaded.project_number == "PROJ-2024-001"
        assert loaded.price == Decimal("25000")
        assert loaded.target_date == project.target_date
        assert loaded.created_at == FIXED_NOW
        assert loaded.created_by == npd.actor_id

    def test_numbers_and_lookup(self, session, project, npd):
        repo = ProjectRepository(session)
        repo.save(project, npd.actor_id)

        assert repo.numbers() == ("PROJ-2024-001",)
        assert repo.by_tool_number("TN-9001")[0].id == project.id
        assert repo.by_tool_number("TN-0000") == ()

    def test_missing(self, session):
        repo = ProjectRepository(session)

        assert repo.find(uuid4()) is None
        with pytest.raises(ProjectNotFoundError):
            repo.get(uuid4())

    def test_unique_number(self, session, project, npd):
        repo = ProjectRepository(session)
        repo.save(project, npd.actor_id)

        with pytest.raises(IntegrityError):
            repo.save(replace(project, id=uuid4()), npd.actor_id)


class TestSupplierRepository:

    def test_directory(self, session, suppliers, npd):
        repo = SupplierRepository(session)
        for supplier in suppliers:
            repo.save(supplier, npd.actor_id)

        assert repo.by_name(SUPPLIER_A).rating == Decimal("4.5")
        assert [s.name for s in repo.selectable()] == [SUPPLIER_A, SUPPLIER_B]

    def test_unknown_name(self, session):
        with pytest.raises(SupplierNotFoundError):
            SupplierRepository(session).by_name("Nobody")


class TestRequisitionRepository:

    def test_round_trip(self, session, project, new_set_pr, npd):
        ProjectRepository(session).save(project, npd.actor_id)
        repo = RequisitionRepository(session)

        repo.save(new_set_pr, npd.actor_id)
        loaded = repo.get(new_set_pr.id)

        assert loaded.pr_number == new_set_pr.pr_number
        assert loaded.status is PRStatus.SUBMITTED
        assert loaded.suppliers == (SUPPLIER_A, SUPPLIER_B)
        assert loaded.items == new_set_pr.items
        assert loaded.critical_spares == (CriticalSpare("BOM-001", 2),)
        assert loaded.created_at == FIXED_NOW

    def test_transition_written_back(
        self, session, project, new_set_pr, requisition_service, approver, npd,
    ):
        ProjectRepository(session).save(project, npd.actor_id)
        repo = RequisitionRepository(session)
        repo.save(new_set_pr, npd.actor_id)

        pr = requisition_service.approve(new_set_pr, actor=approver, comments="Budget OK").record
        pr = requisition_service.send_to_suppliers(pr, actor=npd).record
        repo.save(pr, npd.actor_id)

        loaded = repo.get(pr.id)
        assert loaded.status is PRStatus.SENT_TO_SUPPLIER
        assert loaded.approved_by == approver.actor_id
        assert loaded.approver_comments == "Budget OK"
        assert loaded.updated_by == npd.actor_id
        assert loaded.items == new_set_pr.items
        assert len(repo.list()) == 1

    def test_removed_children_deleted(self, session, new_set_pr, requisition_service, npd):
        repo = RequisitionRepository(session)
        repo.save(new_set_pr, npd.actor_id)

        updated = requisition_service.update(
            new_set_pr, actor=npd, critical_spares=(CriticalSpare("BOM-002", 1),),
        ).record
        repo.save(updated, npd.actor_id)

        assert repo.get(new_set_pr.id).critical_spares == (CriticalSpare("BOM-002", 1),)
        assert session.scalar(select(func.count()).select_from(CriticalSpareModel)) == 1

    def test_update_replaces_children(self, session, project, sent_pr, quote_all, npd):
        ProjectRepository(session).save(project, npd.actor_id)
        repo = RequisitionRepository(session)
        repo.save(sent_pr, npd.actor_id)

        repo.save(quote_all(sent_pr), npd.actor_id)
        loaded = repo.get(sent_pr.id)

        assert loaded.status is PRStatus.SENT_TO_SUPPLIER
        assert [q.supplier for q in loaded.quotations] == [SUPPLIER_A, SUPPLIER_B]
        assert loaded.quotation_for(SUPPLIER_A).price == Decimal("3350")
        assert loaded.quotation_for(SUPPLIER_A).items[0].quantity == 3

    def test_replaced_quotation_saved_in_place(
        self, session, project, quoted_pr, quotation_service, npd,
    ):
        ProjectRepository(session).save(project, npd.actor_id)
        repo = RequisitionRepository(session)
        repo.save(quoted_pr, npd.actor_id)

        requoted = quotation_service.record_quotation(
            quoted_pr,
            actor=npd,
            supplier=SUPPLIER_A,
            unit_prices={"BOM-001": Decimal("100")},
            delivery_date=None,
            delivery_terms="FOB",
        ).record
        repo.save(requoted, npd.actor_id)

        loaded = repo.get(quoted_pr.id)
        quotation = loaded.quotation_for(SUPPLIER_A)
        assert len(loaded.quotations) == 2
        assert quotation.id == quoted_pr.quotation_for(SUPPLIER_A).id
        assert quotation.price == Decimal("300")
        assert quotation.delivery_terms == "FOB"

    def test_status_filter(self, session, project, new_set_pr, npd):
        repo = RequisitionRepository(session)
        repo.save(new_set_pr, npd.actor_id)

        assert len(repo.with_status(PRStatus.SUBMITTED)) == 1
        assert repo.with_status(PRStatus.AWARDED) == ()
        assert repo.for_project(project.id)[0].id == new_set_pr.id

    def test_delete(self, session, new_set_pr, npd):
        repo = RequisitionRepository(session)
        repo.save(new_set_pr, npd.actor_id)

        repo.delete(new_set_pr.id)

        assert repo.find(new_set_pr.id) is None
        with pytest.raises(RequisitionNotFoundError):
            repo.delete(new_set_pr.id)


class TestQuotationRepository:

    def test_lookups(self, session, quoted_pr, npd):
        RequisitionRepository(session).save(quoted_pr, npd.actor_id)
        repo = QuotationRepository(session)

        assert [q.quotation_number for q in repo.for_requisition(quoted_pr.id)] == [
            "QUOT-2024-001",
            "QUOT-2024-002",
        ]
        assert repo.by_number("QUOT-2024-002").supplier == SUPPLIER_B
        assert sorted(repo.numbers()) == ["QUOT-2024-001", "QUOT-2024-002"]

    def test_unknown_number(self, session):
        with pytest.raises(QuotationNotFoundError):
            QuotationRepository(session).by_number("QUOT-2024-999")


class TestHandoverRepository:

    def test_round_trip(self, session, project, received_pr, handover_service, npd):
        ProjectRepository(session).save(project, npd.actor_id)
        RequisitionRepository(session).save(received_pr, npd.actor_id)
        handover = handover_service.create_handover(received_pr, project=project)
        repo = HandoverRepository(session)

        repo.save(handover, npd.actor_id)
        loaded = repo.for_requisition(received_pr.id)

        assert loaded.handover_number == handover.handover_number
        assert loaded.all_items == handover.all_items
        assert loaded.critical_spares == handover.critical_spares
        assert loaded.status is HandoverStatus.PENDING_INSPECTION
        assert repo.pending_inspection()[0].id == handover.id

    def test_inspection_saved(self, session, project, received_pr, handover_service, maintenance):
        handover = handover_service.create_handover(received_pr, project=project)
        repo = HandoverRepository(session)
        repo.save(handover, maintenance.actor_id)

        approved = handover_service.approve_handover(
            handover, inspector=maintenance, remarks="OK",
        ).handover
        repo.save(approved, maintenance.actor_id)

        loaded = repo.get(handover.id)
        assert loaded.status is HandoverStatus.APPROVED
        assert loaded.remarks == "OK"
        assert loaded.inspection_date == FIXED_NOW
        assert repo.pending_inspection() == ()

    def test_none_for_unknown_pr(self, session):
        assert HandoverRepository(session).for_requisition(uuid4()) is None


class TestInventoryRepository:

    def test_history_split_by_direction(self, session, ledger, maintenance):
        inventory, item = ledger.add_item(
            (), part_number="BOM-002", tool_number="TN-9001", name="Guide Pin", quantity=10,
        )
        inventory = ledger.apply_spares_fulfillment(
            inventory,
            part_number="BOM-002",
            tool_number="TN-9001",
            previous_fulfilled=0,
            new_fulfilled=4,
            request_reference="REQ-2024-001",
        )
        repo = InventoryRepository(session)

        repo.save_all(inventory, maintenance.actor_id)
        loaded = repo.get(item.id)

        assert loaded.quantity == 10
        assert loaded.stock_level == 6
        assert [m.movement_type for m in loaded.addition_history] == [MovementType.ADDITION]
        assert [m.reference_type for m in loaded.removal_history] == [ReferenceType.SPARES_REQUEST]
        assert loaded.removal_history[0].balance_after == 6

    def test_history_appended_on_resave(self, session, ledger, maintenance):
        inventory, item = ledger.add_item(
            (), part_number="P-1", tool_number="T", name="Pin", quantity=5,
        )
        repo = InventoryRepository(session)
        repo.save_all(inventory, maintenance.actor_id)

        inventory = ledger.adjust_stock(inventory, item.id, MovementType.ADDITION, 3, actor=maintenance)
        repo.save_all(inventory, maintenance.actor_id)

        loaded = repo.get(item.id)
        assert loaded.quantity == 8
        assert [m.quantity for m in loaded.addition_history] == [5, 3]
        assert repo.for_tool("T")[0].id == item.id

    def test_status_derived_after_load(self, session, ledger, maintenance):
        inventory, item = ledger.add_item(
            (), part_number="P-1", tool_number="T", name="Pin", quantity=2, min_stock_level=2,
        )
        InventoryRepository(session).save_all(inventory, maintenance.actor_id)

        assert InventoryRepository(session).get(item.id).status is item.status


class TestSparesRequestRepository:

    def test_open_requests(self, session, spares_service, indentor, spares_clerk):
        repo = SparesRequestRepository(session)
        first = spares_service.create_request(
            actor=indentor, item_name="Pin", part_number="P-1", tool_number="T", quantity=2,
        )
        second = spares_service.create_request(
            actor=indentor, item_name="Cam", part_number="P-2", tool_number="T", quantity=2,
            existing_numbers=(first.request_number,),
        )
        repo.save(first, indentor.actor_id)
        repo.save(second, indentor.actor_id)

        rejected = spares_service.reject(second, actor=spares_clerk, reason="obsolete").record
        repo.save(rejected, spares_clerk.actor_id)

        assert [r.request_number for r in repo.open_requests()] == ["REQ-2024-001"]
        assert len(repo.for_indentor(indentor.actor_id)) == 2
        assert sorted(repo.numbers()) == ["REQ-2024-001", "REQ-2024-002"]
        assert repo.get(second.id).rejection_reason == "obsolete"


class TestSessionScope:

    def test_committed_updates_read_back(self, session, new_set_pr, requisition_service, approver, npd):
        with session_scope() as scoped:
            RequisitionRepository(scoped).save(new_set_pr, npd.actor_id)

        approved = requisition_service.approve(new_set_pr, actor=approver).record
        with session_scope() as scoped:
            RequisitionRepository(scoped).save(approved, approver.actor_id)

        repo = RequisitionRepository(session)
        assert repo.get(new_set_pr.id).status is PRStatus.APPROVED
        assert len(repo.list()) == 1
