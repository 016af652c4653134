"""
Requisition Configuration Schema.

Defines the structure and defaults for requisition settings.  Actual values
are loaded from ``tooling_config`` at runtime.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from tooling_kernel.logging_config import get_logger

logger = get_logger("modules.requisitions.config")


@dataclass(frozen=True)
class RequisitionConfig:
    """
    Configuration schema for requisitions.

        config = RequisitionConfig(tax_rate=Decimal("0.12"))
    """

    # Flat GST applied on the overall subtotal
    tax_rate: Decimal = Decimal("0.18")
    currency: str = "INR"

    # Zero-padded width of document sequence numbers (PR-2024-001)
    number_width: int = 3

    def __post_init__(self):
        if self.tax_rate < 0:
            raise ValueError(f"tax_rate cannot be negative: {self.tax_rate}")
        if self.number_width < 1:
            raise ValueError(f"number_width must be >= 1: {self.number_width}")
        logger.info(
            "requisition_config_initialized",
            extra={
                "tax_rate": str(self.tax_rate),
                "currency": self.currency,
                "number_width": self.number_width,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("requisition_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dictionary (e.g. a parsed YAML section)."""
        logger.info(
            "requisition_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        values = dict(data)
        if "tax_rate" in values:
            values["tax_rate"] = Decimal(str(values["tax_rate"]))
        return cls(**values)
