"""
Configuration Loader (``tooling_config.loader``).

Responsibility
--------------
Loads the YAML files of a configuration directory and parses them into
``tooling_config.schema`` dataclasses.  Runtime callers go through
``tooling_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` (including ``decimal.InvalidOperation``).
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from tooling_config.schema import (
    BOMLineDef,
    InventorySettingsDef,
    RequisitionSettingsDef,
    ToolingConfigurationSet,
)

SETTINGS_FILE = "settings.yaml"
BOM_CATALOG_FILE = "bom_catalog.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Decimal from YAML; floats go through str() so 0.3 stays 0.3."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse decimal from {value!r}")
    return Decimal(str(value))


def parse_requisition_settings(data: dict[str, Any]) -> RequisitionSettingsDef:
    defaults = RequisitionSettingsDef()
    tax_rate = parse_decimal(data.get("tax_rate", defaults.tax_rate))
    if tax_rate < 0:
        raise ValueError(f"requisitions.tax_rate cannot be negative: {tax_rate}")
    return RequisitionSettingsDef(
        tax_rate=tax_rate,
        currency=str(data.get("currency", defaults.currency)),
        number_width=int(data.get("number_width", defaults.number_width)),
    )


def parse_inventory_settings(data: dict[str, Any]) -> InventorySettingsDef:
    defaults = InventorySettingsDef()
    return InventorySettingsDef(
        min_stock_ratio=parse_decimal(data.get("min_stock_ratio", defaults.min_stock_ratio)),
        min_stock_floor=int(data.get("min_stock_floor", defaults.min_stock_floor)),
        default_tool_number=str(data.get("default_tool_number", defaults.default_tool_number)),
        unit_of_measure=str(data.get("unit_of_measure", defaults.unit_of_measure)),
    )


def parse_bom_line(data: dict[str, Any]) -> BOMLineDef:
    return BOMLineDef(
        code=str(data["code"]),
        name=str(data["name"]),
        specification=str(data.get("specification", "")),
        unit_price=parse_decimal(data["unit_price"]),
        quantity=int(data["quantity"]),
    )


def parse_bom_catalog(data: dict[str, Any]) -> dict[str, tuple[BOMLineDef, ...]]:
    """``tools:`` mapping of tool number -> list of lines."""
    catalog: dict[str, tuple[BOMLineDef, ...]] = {}
    for tool_number, lines in (data.get("tools") or {}).items():
        catalog[str(tool_number)] = tuple(parse_bom_line(line) for line in lines or ())
    return catalog


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_configuration_set(config_dir: Path) -> ToolingConfigurationSet:
    """
    Load ``settings.yaml`` and ``bom_catalog.yaml`` from ``config_dir``.

    The BOM catalog file is optional; without it the catalog is empty.
    """
    settings = load_yaml_file(config_dir / SETTINGS_FILE)
    catalog_path = config_dir / BOM_CATALOG_FILE
    catalog_data = load_yaml_file(catalog_path) if catalog_path.exists() else {}

    return ToolingConfigurationSet(
        config_id=str(settings.get("config_id", config_dir.name)),
        version=int(settings.get("version", 1)),
        requisitions=parse_requisition_settings(settings.get("requisitions") or {}),
        inventory=parse_inventory_settings(settings.get("inventory") or {}),
        bom_catalog=parse_bom_catalog(catalog_data),
        checksum=compute_checksum({"settings": settings, "bom_catalog": catalog_data}),
    )
