"""
Inventory Configuration Schema.

Thresholds used when handover approval folds new spares into stock.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from tooling_kernel.logging_config import get_logger

logger = get_logger("modules.inventory.config")


@dataclass(frozen=True)
class InventoryConfig:
    """
    Configuration schema for the inventory ledger.

    A new item's minimum level is ``max(min_stock_floor,
    ceil(quantity x min_stock_ratio))``.
    """

    min_stock_ratio: Decimal = Decimal("0.3")
    min_stock_floor: int = 1

    # Tool number stamped on spares whose project has none
    default_tool_number: str = "TBD"
    unit_of_measure: str = "PCS"

    def __post_init__(self):
        if self.min_stock_ratio < 0:
            raise ValueError(f"min_stock_ratio cannot be negative: {self.min_stock_ratio}")
        if self.min_stock_floor < 0:
            raise ValueError(f"min_stock_floor cannot be negative: {self.min_stock_floor}")
        logger.info(
            "inventory_config_initialized",
            extra={
                "min_stock_ratio": str(self.min_stock_ratio),
                "min_stock_floor": self.min_stock_floor,
                "default_tool_number": self.default_tool_number,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("inventory_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "inventory_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        values = dict(data)
        if "min_stock_ratio" in values:
            values["min_stock_ratio"] = Decimal(str(values["min_stock_ratio"]))
        return cls(**values)
