"""
BOM Module (``tooling_modules.bom``).

Bill-of-materials catalog and resolver used by the requisition builder.
"""

from tooling_modules.bom.catalog import BOMCatalog, default_catalog, resolve_bom
from tooling_modules.bom.models import BOMLine

__all__ = ["BOMCatalog", "BOMLine", "default_catalog", "resolve_bom"]
