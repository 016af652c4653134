"""Spares Module (``tooling_modules.spares``): spares requests served from stock."""

from tooling_modules.spares.models import SparesRequest, SparesRequestStatus
from tooling_modules.spares.service import SparesFulfillmentResult, SparesService
from tooling_modules.spares.workflows import SPARES_REQUEST_WORKFLOW

__all__ = [
    "SPARES_REQUEST_WORKFLOW",
    "SparesFulfillmentResult",
    "SparesRequest",
    "SparesRequestStatus",
    "SparesService",
]
