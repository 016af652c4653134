"""
Config bridges (``tooling_config.bridges``).

Translate a loaded ``ToolingConfigurationSet`` into the objects the module
services consume: ``RequisitionConfig``, ``InventoryConfig`` and the
``BOMCatalog``.  The modules never import ``tooling_config`` at import time;
only this bridge knows both sides.
"""

from __future__ import annotations

from dataclasses import dataclass

from tooling_config.schema import ToolingConfigurationSet
from tooling_modules.bom.catalog import BOMCatalog
from tooling_modules.bom.models import BOMLine
from tooling_modules.inventory.config import InventoryConfig
from tooling_modules.requisitions.config import RequisitionConfig


@dataclass(frozen=True)
class ToolingConfiguration:
    """The runtime configuration artifact."""

    config_id: str
    version: int
    requisitions: RequisitionConfig
    inventory: InventoryConfig
    bom_catalog: BOMCatalog
    checksum: str


def build_bom_catalog(config_set: ToolingConfigurationSet) -> BOMCatalog:
    return BOMCatalog({
        tool_number: tuple(
            BOMLine(
                id=line.code,
                name=line.name,
                specification=line.specification,
                unit_price=line.unit_price,
                quantity=line.quantity,
            )
            for line in lines
        )
        for tool_number, lines in config_set.bom_catalog.items()
    })


def build_configuration(config_set: ToolingConfigurationSet) -> ToolingConfiguration:
    req = config_set.requisitions
    inv = config_set.inventory
    return ToolingConfiguration(
        config_id=config_set.config_id,
        version=config_set.version,
        requisitions=RequisitionConfig(
            tax_rate=req.tax_rate,
            currency=req.currency,
            number_width=req.number_width,
        ),
        inventory=InventoryConfig(
            min_stock_ratio=inv.min_stock_ratio,
            min_stock_floor=inv.min_stock_floor,
            default_tool_number=inv.default_tool_number,
            unit_of_measure=inv.unit_of_measure,
        ),
        bom_catalog=build_bom_catalog(config_set),
        checksum=config_set.checksum,
    )
