"""Handover Module (``tooling_modules.handover``): tool handover and inspection."""

from tooling_modules.handover.models import HandoverStatus, SpareItem, ToolHandoverRecord
from tooling_modules.handover.service import HandoverApprovalResult, HandoverService
from tooling_modules.handover.workflows import HANDOVER_WORKFLOW

__all__ = [
    "HANDOVER_WORKFLOW",
    "HandoverApprovalResult",
    "HandoverService",
    "HandoverStatus",
    "SpareItem",
    "ToolHandoverRecord",
]
