"""
Stock status rules for spares inventory.

Status is always derived from quantity and minimum level, never stored:

    quantity == 0              -> Out of Stock
    0 < quantity <= minimum    -> Low Stock
    quantity > minimum         -> In Stock
"""

from __future__ import annotations

import math
from decimal import Decimal
from enum import Enum

DEFAULT_MIN_STOCK_RATIO = Decimal("0.3")
DEFAULT_MIN_STOCK_FLOOR = 1


class StockStatus(Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


def derive_status(quantity: int, min_stock_level: int) -> StockStatus:
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= min_stock_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def initial_min_stock_level(
    quantity: int,
    ratio: Decimal = DEFAULT_MIN_STOCK_RATIO,
    floor: int = DEFAULT_MIN_STOCK_FLOOR,
) -> int:
    """Minimum level for a newly created item: max(floor, ceil(quantity x ratio))."""
    return max(floor, math.ceil(Decimal(quantity) * ratio))


def apply_removal(stock_level: int, delta: int) -> int:
    """Stock after removing ``delta`` units, floored at zero."""
    return max(0, stock_level - delta)


def shortage(quantity: int, min_stock_level: int) -> int:
    return max(0, min_stock_level - quantity)
