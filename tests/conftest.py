"""
Pytest fixtures for the tooling procurement test suite.

Provides:
- Structured logging configured once per session, plus log capture
- A deterministic clock and one actor per role
- The shipped configuration (BOM catalog, tax rate, inventory thresholds)
- Services wired to the shared clock and an outcome sink
- A TN-9001 project and requisitions driven to the common lifecycle points
- An in-memory SQLite session with every module table created
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from tooling_config import get_active_config
from tooling_kernel.db.engine import (
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from tooling_kernel.domain.clock import DeterministicClock
from tooling_kernel.domain.roles import Actor, Role
from tooling_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tooling_kernel.services.workflow_executor import WorkflowExecutor
from tooling_modules._orm_registry import create_all_tables
from tooling_modules.handover.service import HandoverService
from tooling_modules.inventory.service import InventoryLedger
from tooling_modules.projects.models import Project
from tooling_modules.quotations.service import QuotationService
from tooling_modules.requisitions import builder
from tooling_modules.requisitions.models import CriticalSpare, PRType
from tooling_modules.requisitions.service import RequisitionService
from tooling_modules.spares.service import SparesService
from tooling_modules.suppliers.models import Supplier, SupplierStatus

SUPPLIER_A = "Acme Tools"
SUPPLIER_B = "Precision Dies"

FIXED_NOW = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture tooling_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, requisition_service):
            ...
            logs = captured_logs()
            assert any(r["message"] == "requisition_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("tooling_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock, actors, configuration
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def npd():
    return Actor("npd-1", Role.NPD, "Priya (NPD)")


@pytest.fixture
def approver():
    return Actor("appr-1", Role.APPROVER, "Ravi (Approver)")


@pytest.fixture
def maintenance():
    return Actor("maint-1", Role.MAINTENANCE)


@pytest.fixture
def spares_clerk():
    return Actor("spares-1", Role.SPARES)


@pytest.fixture
def indentor():
    return Actor("ind-1", Role.INDENTOR)


@pytest.fixture(scope="session")
def active_config():
    return get_active_config()


@pytest.fixture
def tn9001_bom(active_config):
    return active_config.bom_catalog.resolve("TN-9001")


@pytest.fixture
def suppliers():
    return (
        Supplier(uuid4(), "SUP-001", SUPPLIER_A, rating=Decimal("4.5")),
        Supplier(uuid4(), "SUP-002", SUPPLIER_B, rating=Decimal("3.8")),
        Supplier(uuid4(), "SUP-003", "Old Castings", status=SupplierStatus.INACTIVE),
    )


@pytest.fixture
def project(npd):
    return Project(
        id=uuid4(),
        project_number="PROJ-2024-001",
        customer_po="PO-77812",
        part_number="PN-4410",
        tool_number="TN-9001",
        price=Decimal("25000"),
        target_date=date(2024, 4, 15),
        created_by=npd.actor_id,
        created_at=FIXED_NOW,
    )


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def outcomes():
    """Every workflow_transition record emitted by the shared executor."""
    return []


@pytest.fixture
def executor(deterministic_clock, outcomes):
    return WorkflowExecutor(clock=deterministic_clock, outcome_sink=outcomes.append)


@pytest.fixture
def requisition_service(deterministic_clock, active_config, executor):
    return RequisitionService(
        clock=deterministic_clock,
        config=active_config.requisitions,
        executor=executor,
    )


@pytest.fixture
def quotation_service(deterministic_clock, executor):
    return QuotationService(clock=deterministic_clock, executor=executor)


@pytest.fixture
def ledger(deterministic_clock, active_config):
    return InventoryLedger(clock=deterministic_clock, config=active_config.inventory)


@pytest.fixture
def handover_service(deterministic_clock, ledger, executor):
    return HandoverService(clock=deterministic_clock, ledger=ledger, executor=executor)


@pytest.fixture
def spares_service(deterministic_clock, ledger, executor):
    return SparesService(clock=deterministic_clock, ledger=ledger, executor=executor)


# =============================================================================
# Requisitions at common lifecycle points
# =============================================================================


QUOTED_PRICES = {
    SUPPLIER_A: {
        "BOM-001": Decimal("240"),
        "BOM-002": Decimal("40"),
        "BOM-003": Decimal("80"),
        "BOM-004": Decimal("1150"),
        "BOM-005": Decimal("300"),
        "BOM-006": Decimal("430"),
    },
    SUPPLIER_B: {
        "BOM-001": Decimal("260"),
        "BOM-002": Decimal("38"),
        "BOM-003": Decimal("90"),
        "BOM-004": Decimal("1250"),
        "BOM-005": Decimal("310"),
        "BOM-006": Decimal("460"),
    },
}

DELIVERY_DATES = {
    SUPPLIER_A: date(2024, 4, 10),
    SUPPLIER_B: date(2024, 4, 20),
}


@pytest.fixture
def new_set_pr(requisition_service, npd, project, tn9001_bom):
    """TN-9001 New Set requisition with Base Plate marked as a critical spare (qty 2)."""
    return requisition_service.create(
        actor=npd,
        project_id=project.id,
        pr_type=PRType.NEW_SET,
        items=builder.build_new_set_items(tn9001_bom),
        suppliers=(SUPPLIER_A, SUPPLIER_B),
        critical_spares=(CriticalSpare("BOM-001", 2),),
    )


@pytest.fixture
def quote_all(quotation_service, npd):
    """Record a complete quotation from every supplier on the requisition."""

    def _quote(pr):
        for supplier in pr.suppliers:
            pr = quotation_service.record_quotation(
                pr,
                actor=npd,
                supplier=supplier,
                unit_prices=QUOTED_PRICES[supplier],
                delivery_date=DELIVERY_DATES[supplier],
                delivery_terms="Ex-works, 30 days credit",
            ).record
        return pr

    return _quote


@pytest.fixture
def sent_pr(requisition_service, new_set_pr, approver, npd):
    pr = requisition_service.approve(new_set_pr, actor=approver, comments="Budget OK").record
    return requisition_service.send_to_suppliers(pr, actor=npd).record


@pytest.fixture
def quoted_pr(sent_pr, quote_all):
    return quote_all(sent_pr)


@pytest.fixture
def evaluation_pending_pr(requisition_service, quoted_pr, npd, approver):
    pr = requisition_service.submit_for_approval(quoted_pr, actor=npd).record
    return requisition_service.approve_quotations(pr, actor=approver).record


@pytest.fixture
def received_pr(requisition_service, evaluation_pending_pr, npd):
    pr = requisition_service.award_supplier(evaluation_pending_pr, SUPPLIER_A, actor=npd).record
    return requisition_service.mark_items_received(pr, actor=npd, confirmed=True).record


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session():
    """In-memory SQLite session with every module table; rolled back afterwards."""
    init_engine_from_url("sqlite://")
    create_all_tables()
    db = get_session()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
        drop_tables()
        reset_engine()
