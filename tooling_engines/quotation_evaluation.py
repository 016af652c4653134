"""
Quotation Evaluation Engine - compare supplier quotations for a requisition.

Pure functions with no I/O.  Every total is quantity-inclusive: a line
carrying a critical spare is priced at ``unit_price x (base + spare)``,
for supplier totals and the BOM budget alike.

Works on duck-typed records (see the Protocols below) so the engine never
imports the module layer.

Usage:
    from tooling_engines.quotation_evaluation import QuotationEvaluator

    evaluator = QuotationEvaluator()
    evaluation = evaluator.evaluate(pr)
    evaluation.lowest_total_supplier   # badge
    evaluation.lowest_unit_prices      # item_id -> Decimal | None ("N/A")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

from tooling_engines.tracer import traced_engine
from tooling_kernel.logging_config import get_logger

logger = get_logger("engines.quotation_evaluation")

AWARD_ELIGIBLE_STATES = frozenset({"Evaluation Pending", "Approved"})


class PricedItem(Protocol):
    id: str
    name: str
    quantity: int
    unit_price: Decimal | None


class QuotedItem(Protocol):
    item_id: str
    unit_price: Decimal


class QuotationLike(Protocol):
    supplier: str
    price: Decimal
    items: Sequence[QuotedItem]
    delivery_date: date | None


class SpareLike(Protocol):
    item_id: str
    quantity: int


class RequisitionLike(Protocol):
    status: Any
    items: Sequence[PricedItem]
    suppliers: Sequence[str]
    critical_spares: Sequence[SpareLike]
    quotations: Sequence[QuotationLike]


class DeliveryTiming(Enum):
    EARLY = "Early"
    ON_TIME = "On Time"
    LATE = "Late"


@dataclass(frozen=True)
class ItemComparison:
    """One PR line across all suppliers."""

    item_id: str
    name: str
    effective_quantity: int
    bom_unit_price: Decimal | None
    quoted_unit_prices: tuple[tuple[str, Decimal], ...]
    lowest_unit_price: Decimal | None
    lowest_supplier: str | None


@dataclass(frozen=True)
class SupplierSummary:
    supplier: str
    total: Decimal
    savings_vs_bom: Decimal
    is_lowest: bool


@dataclass(frozen=True)
class QuotationEvaluation:
    """Comparison grid of a requisition's quotations."""

    items: tuple[ItemComparison, ...]
    suppliers: tuple[SupplierSummary, ...]
    bom_total: Decimal
    lowest_total: Decimal | None
    lowest_total_supplier: str | None
    award_eligible: bool

    @property
    def lowest_unit_prices(self) -> dict[str, Decimal | None]:
        return {item.item_id: item.lowest_unit_price for item in self.items}

    def supplier_total(self, supplier: str) -> Decimal | None:
        for summary in self.suppliers:
            if summary.supplier == supplier:
                return summary.total
        return None


@dataclass(frozen=True)
class QuotationComparison:
    """Headline picks across a requisition's quotations."""

    lowest_price_supplier: str | None
    lowest_price: Decimal | None
    fastest_delivery_supplier: str | None
    fastest_delivery_date: date | None
    best_rated_supplier: str | None
    best_rating: Decimal | None


@dataclass(frozen=True)
class DeliveryAlignment:
    """Quoted delivery vs. the project target date."""

    delivery_date: date
    target_date: date
    days_difference: int
    timing: DeliveryTiming

    @property
    def days_early(self) -> int:
        return max(0, -self.days_difference)

    @property
    def days_late(self) -> int:
        return max(0, self.days_difference)


def _state_value(state: Any) -> str:
    return state.value if isinstance(state, Enum) else str(state)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


class QuotationEvaluator:
    """
    Quotation comparison rules.

    Pure functions - no I/O, no database access.
    """

    # -- quantities ---------------------------------------------------------

    @staticmethod
    def spare_quantities(spares: Iterable[SpareLike]) -> dict[str, int]:
        result: dict[str, int] = {}
        for spare in spares:
            result[spare.item_id] = result.get(spare.item_id, 0) + spare.quantity
        return result

    @staticmethod
    def effective_quantity(item: PricedItem, spare_quantities: Mapping[str, int]) -> int:
        """Base quantity plus any critical-spare quantity for the line."""
        return item.quantity + spare_quantities.get(item.id, 0)

    # -- per-item -----------------------------------------------------------

    @staticmethod
    def quoted_unit_price(quotation: QuotationLike, item_id: str) -> Decimal | None:
        for quoted in quotation.items:
            if quoted.item_id == item_id:
                return quoted.unit_price
        return None

    def lowest_price_for_item(
        self, item_id: str, quotations: Iterable[QuotationLike],
    ) -> Decimal | None:
        """Minimum positive unit price quoted for the item; None when no valid quote."""
        prices = [
            price for q in quotations
            if (price := self.quoted_unit_price(q, item_id)) is not None and price > 0
        ]
        return min(prices) if prices else None

    @staticmethod
    def item_savings(bom_unit_price: Decimal, quoted_unit_price: Decimal) -> Decimal:
        """Positive when the quote is under the BOM price."""
        return bom_unit_price - quoted_unit_price

    # -- totals ---------------------------------------------------------------

    def supplier_total(
        self,
        quotation: QuotationLike,
        items: Iterable[PricedItem],
        spare_quantities: Mapping[str, int],
    ) -> Decimal:
        total = Decimal("0")
        for item in items:
            price = self.quoted_unit_price(quotation, item.id)
            if price is None:
                continue
            total += price * self.effective_quantity(item, spare_quantities)
        return total

    def bom_total(
        self, items: Iterable[PricedItem], spare_quantities: Mapping[str, int],
    ) -> Decimal:
        total = Decimal("0")
        for item in items:
            if item.unit_price is None:
                continue
            total += item.unit_price * self.effective_quantity(item, spare_quantities)
        return total

    def savings_vs_bom(
        self,
        quotation: QuotationLike,
        items: Sequence[PricedItem],
        spare_quantities: Mapping[str, int],
    ) -> Decimal:
        return (
            self.bom_total(items, spare_quantities)
            - self.supplier_total(quotation, items, spare_quantities)
        )

    @staticmethod
    def lowest_total(totals: Mapping[str, Decimal]) -> tuple[str, Decimal] | None:
        """(supplier, total) with the smallest positive total; first wins ties."""
        best: tuple[str, Decimal] | None = None
        for supplier, total in totals.items():
            if total <= 0:
                continue
            if best is None or total < best[1]:
                best = (supplier, total)
        return best

    # -- whole requisition ----------------------------------------------------

    @staticmethod
    def is_award_eligible(status: Any) -> bool:
        return _state_value(status) in AWARD_ELIGIBLE_STATES

    @traced_engine("quotation_evaluation", "1.0")
    def evaluate(self, pr: RequisitionLike) -> QuotationEvaluation:
        """Full comparison grid: per-item lowest, per-supplier totals, badge, savings."""
        spares = self.spare_quantities(pr.critical_spares)
        quotations = list(pr.quotations)

        item_rows: list[ItemComparison] = []
        for item in pr.items:
            quoted = tuple(
                (q.supplier, price) for q in quotations
                if (price := self.quoted_unit_price(q, item.id)) is not None
            )
            lowest = self.lowest_price_for_item(item.id, quotations)
            lowest_supplier = None
            if lowest is not None:
                lowest_supplier = next(s for s, p in quoted if p == lowest)
            item_rows.append(
                ItemComparison(
                    item_id=item.id,
                    name=item.name,
                    effective_quantity=self.effective_quantity(item, spares),
                    bom_unit_price=item.unit_price,
                    quoted_unit_prices=quoted,
                    lowest_unit_price=lowest,
                    lowest_supplier=lowest_supplier,
                )
            )

        bom_total = self.bom_total(pr.items, spares)
        totals = {q.supplier: self.supplier_total(q, pr.items, spares) for q in quotations}
        best = self.lowest_total(totals)
        summaries = tuple(
            SupplierSummary(
                supplier=supplier,
                total=total,
                savings_vs_bom=bom_total - total,
                is_lowest=best is not None and supplier == best[0],
            )
            for supplier, total in totals.items()
        )

        evaluation = QuotationEvaluation(
            items=tuple(item_rows),
            suppliers=summaries,
            bom_total=bom_total,
            lowest_total=best[1] if best else None,
            lowest_total_supplier=best[0] if best else None,
            award_eligible=self.is_award_eligible(pr.status),
        )
        logger.info(
            "quotations_evaluated",
            extra={
                "quotation_count": len(quotations),
                "item_count": len(item_rows),
                "lowest_total_supplier": evaluation.lowest_total_supplier,
                "award_eligible": evaluation.award_eligible,
            },
        )
        return evaluation

    # -- headline comparison ----------------------------------------------------

    def compare_quotations(
        self,
        quotations: Sequence[QuotationLike],
        ratings: Mapping[str, Decimal] | None = None,
    ) -> QuotationComparison:
        """Lowest price, fastest delivery and best-rated supplier.

        ``ratings`` maps supplier name to rating; unrated suppliers are
        skipped for the rating pick.
        """
        ratings = ratings or {}

        priced = [q for q in quotations if q.price > 0]
        cheapest = min(priced, key=lambda q: q.price) if priced else None

        dated = [q for q in quotations if q.delivery_date is not None]
        fastest = min(dated, key=lambda q: _as_date(q.delivery_date)) if dated else None

        rated = [q for q in quotations if ratings.get(q.supplier) is not None]
        best_rated = max(rated, key=lambda q: ratings[q.supplier]) if rated else None

        return QuotationComparison(
            lowest_price_supplier=cheapest.supplier if cheapest else None,
            lowest_price=cheapest.price if cheapest else None,
            fastest_delivery_supplier=fastest.supplier if fastest else None,
            fastest_delivery_date=_as_date(fastest.delivery_date) if fastest else None,
            best_rated_supplier=best_rated.supplier if best_rated else None,
            best_rating=ratings[best_rated.supplier] if best_rated else None,
        )

    @staticmethod
    def delivery_alignment(
        delivery_date: date | datetime, target_date: date | datetime,
    ) -> DeliveryAlignment:
        delivery = _as_date(delivery_date)
        target = _as_date(target_date)
        diff = (delivery - target).days
        if diff < 0:
            timing = DeliveryTiming.EARLY
        elif diff == 0:
            timing = DeliveryTiming.ON_TIME
        else:
            timing = DeliveryTiming.LATE
        return DeliveryAlignment(
            delivery_date=delivery,
            target_date=target,
            days_difference=diff,
            timing=timing,
        )
