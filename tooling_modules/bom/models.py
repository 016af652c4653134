"""
BOM Domain Models.

A bill-of-materials line as listed in the tool catalog.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class BOMLine:
    """One catalog line: the BOM code is the line id."""
    id: str
    name: str
    specification: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
