"""Inventory Module (``tooling_modules.inventory``): the spares stock ledger."""

from tooling_modules.inventory.config import InventoryConfig
from tooling_modules.inventory.models import (
    InventoryItem,
    LowStockItem,
    MovementType,
    ReferenceType,
    StockMovement,
)
from tooling_modules.inventory.service import InventoryLedger

__all__ = [
    "InventoryConfig",
    "InventoryItem",
    "InventoryLedger",
    "LowStockItem",
    "MovementType",
    "ReferenceType",
    "StockMovement",
]
