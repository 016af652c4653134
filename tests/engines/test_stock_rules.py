"""Tests for derived stock status and minimum-level rules."""

from decimal import Decimal

import pytest

from tooling_engines.stock import (
    StockStatus,
    apply_removal,
    derive_status,
    initial_min_stock_level,
    shortage,
)


class TestDeriveStatus:

    @pytest.mark.parametrize(
        "quantity,minimum,expected",
        [
            (0, 3, StockStatus.OUT_OF_STOCK),
            (1, 3, StockStatus.LOW_STOCK),
            (3, 3, StockStatus.LOW_STOCK),
            (4, 3, StockStatus.IN_STOCK),
            (0, 0, StockStatus.OUT_OF_STOCK),
            (1, 0, StockStatus.IN_STOCK),
        ],
    )
    def test_status_table(self, quantity, minimum, expected):
        assert derive_status(quantity, minimum) is expected

    def test_display_values(self):
        assert [s.value for s in StockStatus] == ["In Stock", "Low Stock", "Out of Stock"]


class TestMinimumLevel:

    def test_ratio_rounded_up(self):
        assert initial_min_stock_level(10) == 3
        assert initial_min_stock_level(11) == 4

    def test_floor_applies(self):
        assert initial_min_stock_level(1) == 1
        assert initial_min_stock_level(0) == 1

    def test_custom_ratio_and_floor(self):
        assert initial_min_stock_level(10, ratio=Decimal("0.5"), floor=2) == 5
        assert initial_min_stock_level(2, ratio=Decimal("0.5"), floor=2) == 2


class TestRemovalAndShortage:

    def test_removal_floored_at_zero(self):
        assert apply_removal(5, 3) == 2
        assert apply_removal(5, 8) == 0

    def test_shortage(self):
        assert shortage(1, 3) == 2
        assert shortage(5, 3) == 0
