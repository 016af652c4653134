"""
Configuration schema (``tooling_config.schema``).

Frozen dataclasses mirroring the YAML files in ``tooling_config/sets``.
They carry raw, validated values only; ``tooling_config.bridges`` turns
them into the module-level config objects the services consume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class BOMLineDef:
    """One catalog line as written in bom_catalog.yaml."""

    code: str
    name: str
    specification: str
    unit_price: Decimal
    quantity: int

    def __post_init__(self):
        if not self.code:
            raise ValueError("BOM line code must be non-empty")
        if self.unit_price < 0:
            raise ValueError(f"BOM line {self.code}: unit_price cannot be negative")
        if self.quantity < 1:
            raise ValueError(f"BOM line {self.code}: quantity must be >= 1")


@dataclass(frozen=True)
class RequisitionSettingsDef:
    tax_rate: Decimal = Decimal("0.18")
    currency: str = "INR"
    number_width: int = 3


@dataclass(frozen=True)
class InventorySettingsDef:
    min_stock_ratio: Decimal = Decimal("0.3")
    min_stock_floor: int = 1
    default_tool_number: str = "TBD"
    unit_of_measure: str = "PCS"


@dataclass(frozen=True)
class ToolingConfigurationSet:
    """Everything read from one configuration directory."""

    config_id: str
    version: int
    requisitions: RequisitionSettingsDef
    inventory: InventorySettingsDef
    bom_catalog: dict[str, tuple[BOMLineDef, ...]] = field(default_factory=dict)
    checksum: str = ""
