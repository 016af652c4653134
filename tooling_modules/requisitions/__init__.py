"""
Requisitions Module (``tooling_modules.requisitions``).

Purchase requisitions for tooling: the PR builder (items, critical spares,
costing, validation), the requisition state machine and the service that
drives it.
"""

from tooling_modules.requisitions.config import RequisitionConfig
from tooling_modules.requisitions.models import (
    CriticalSpare,
    PRItem,
    PRStatus,
    PRType,
    PurchaseRequisition,
)
from tooling_modules.requisitions.service import RequisitionService
from tooling_modules.requisitions.workflows import PURCHASE_REQUISITION_WORKFLOW

__all__ = [
    "CriticalSpare",
    "PRItem",
    "PRStatus",
    "PRType",
    "PURCHASE_REQUISITION_WORKFLOW",
    "PurchaseRequisition",
    "RequisitionConfig",
    "RequisitionService",
]
