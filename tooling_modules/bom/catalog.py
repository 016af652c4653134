"""
BOM Resolver.

Static catalog lookup keyed by tool number.  An unknown tool number is a
legitimate "no BOM yet" state: it resolves to an empty tuple and the
caller falls back to manual item entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache

from tooling_kernel.logging_config import get_logger
from tooling_modules.bom.models import BOMLine

logger = get_logger("modules.bom.catalog")


class BOMCatalog:
    """Immutable tool number -> BOM lines mapping."""

    def __init__(self, lines_by_tool: Mapping[str, tuple[BOMLine, ...]] | None = None):
        self._lines = {
            tool: tuple(lines) for tool, lines in (lines_by_tool or {}).items()
        }

    def resolve(self, tool_number: str) -> tuple[BOMLine, ...]:
        lines = self._lines.get((tool_number or "").strip(), ())
        if not lines:
            logger.info("bom_not_found", extra={"tool_number": tool_number})
        return lines

    def tool_numbers(self) -> tuple[str, ...]:
        return tuple(sorted(self._lines))

    def __contains__(self, tool_number: object) -> bool:
        return tool_number in self._lines

    def __len__(self) -> int:
        return len(self._lines)


@lru_cache(maxsize=1)
def default_catalog() -> BOMCatalog:
    """Catalog shipped with the default configuration set."""
    from tooling_config import get_active_config

    return get_active_config().bom_catalog


def resolve_bom(tool_number: str, catalog: BOMCatalog | None = None) -> tuple[BOMLine, ...]:
    """BOM lines for ``tool_number``; empty when the tool is unknown."""
    if catalog is None:
        catalog = default_catalog()
    return catalog.resolve(tool_number)
