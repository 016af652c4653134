"""
PR Builder (``tooling_modules.requisitions.builder``).

Produces the ``items`` and ``critical_spares`` of a requisition from a BOM,
prices them through ``tooling_engines.costing`` and validates them before
submission.

* New Set: every BOM line becomes an item at its BOM quantity and price.
  Any subset of lines may be marked as critical spares, each with its own
  quantity, ordered on top of the base quantity.
* Modification / Refurbished: only the selected BOM lines, with optional
  quantity overrides.  Critical spares are not available.
* Manual lines (no BOM, or ad-hoc additions) carry no unit price.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from uuid import uuid4

from tooling_engines.costing import PRCostBreakdown, compute_pr_cost
from tooling_kernel.exceptions import (
    InvalidQuantityError,
    RequisitionValidationError,
    ValidationError,
)
from tooling_kernel.logging_config import get_logger
from tooling_modules.bom.models import BOMLine
from tooling_modules.requisitions.config import RequisitionConfig
from tooling_modules.requisitions.models import CriticalSpare, PRItem, PRType
from tooling_modules.suppliers.models import Supplier

logger = get_logger("modules.requisitions.builder")

CRITICAL_SPARES_NEW_SET_ONLY = "critical spares are only supported on New Set requisitions"


def _bom_item(line: BOMLine, quantity: int | None = None) -> PRItem:
    return PRItem(
        id=line.id,
        name=line.name,
        specification=line.specification,
        quantity=line.quantity if quantity is None else quantity,
        unit_price=line.unit_price,
    )


def build_new_set_items(bom_lines: Iterable[BOMLine]) -> tuple[PRItem, ...]:
    """One item per BOM line at BOM quantity and price."""
    return tuple(_bom_item(line) for line in bom_lines)


def build_modification_items(
    bom_lines: Sequence[BOMLine],
    selections: Mapping[str, int | None],
) -> tuple[PRItem, ...]:
    """
    Items for the selected BOM lines only, in BOM order.

    ``selections`` maps BOM code -> quantity override (None keeps the BOM
    quantity).
    """
    known = {line.id for line in bom_lines}
    unknown = sorted(code for code in selections if code not in known)
    if unknown:
        raise ValidationError(f"Selected lines not in BOM: {', '.join(unknown)}")

    items = []
    for line in bom_lines:
        if line.id not in selections:
            continue
        quantity = selections[line.id]
        if quantity is not None and quantity < 1:
            raise InvalidQuantityError(quantity, f"override for {line.id} must be >= 1")
        items.append(_bom_item(line, quantity))
    return tuple(items)


def manual_item(
    name: str,
    specification: str,
    quantity: int,
    requirements: str = "",
    item_id: str | None = None,
) -> PRItem:
    """An ad-hoc line with no unit price."""
    if not (name or "").strip():
        raise ValidationError("Manual item name is required")
    if quantity < 1:
        raise InvalidQuantityError(quantity, "item quantity must be >= 1")
    return PRItem(
        id=item_id or f"ITEM-{uuid4().hex[:8].upper()}",
        name=name.strip(),
        specification=specification,
        quantity=quantity,
        requirements=requirements,
    )


def update_item_quantity(
    items: Sequence[PRItem], item_id: str, quantity: int,
) -> tuple[PRItem, ...]:
    if quantity < 1:
        raise InvalidQuantityError(quantity, "item quantity must be >= 1")
    return tuple(
        replace(item, quantity=quantity) if item.id == item_id else item
        for item in items
    )


def remove_item(
    items: Sequence[PRItem],
    spares: Sequence[CriticalSpare],
    item_id: str,
) -> tuple[tuple[PRItem, ...], tuple[CriticalSpare, ...]]:
    """Drop a line and any critical spare marking it."""
    return (
        tuple(item for item in items if item.id != item_id),
        tuple(spare for spare in spares if spare.item_id != item_id),
    )


def toggle_critical_spare(
    spares: Sequence[CriticalSpare], item_id: str, quantity: int = 1,
) -> tuple[CriticalSpare, ...]:
    """Unmark ``item_id`` if marked, otherwise mark it with ``quantity``."""
    if any(spare.item_id == item_id for spare in spares):
        return tuple(spare for spare in spares if spare.item_id != item_id)
    if quantity < 1:
        raise InvalidQuantityError(quantity, "critical spare quantity must be >= 1")
    return (*spares, CriticalSpare(item_id=item_id, quantity=quantity))


def set_critical_spare_quantity(
    spares: Sequence[CriticalSpare], item_id: str, quantity: int,
) -> tuple[CriticalSpare, ...]:
    """Change the quantity of an already-marked spare; independent of the BOM quantity."""
    if quantity < 1:
        raise InvalidQuantityError(quantity, "critical spare quantity must be >= 1")
    if not any(spare.item_id == item_id for spare in spares):
        raise ValidationError(f"Item {item_id} is not marked as a critical spare")
    return tuple(
        replace(spare, quantity=quantity) if spare.item_id == item_id else spare
        for spare in spares
    )


def validation_problems(
    *,
    pr_type: PRType,
    items: Sequence[PRItem],
    suppliers: Sequence[str],
    mod_ref_reason: str = "",
    critical_spares: Sequence[CriticalSpare] = (),
    known_suppliers: Iterable[Supplier] | None = None,
) -> list[str]:
    """Every submission rule that fails, in a stable order."""
    problems: list[str] = []
    if not suppliers:
        problems.append("at least one supplier must be selected")
    if not items:
        problems.append("at least one item is required")
    if pr_type is not PRType.NEW_SET and not (mod_ref_reason or "").strip():
        problems.append(f"a reason is required for {pr_type.value} requisitions")

    if critical_spares:
        if pr_type is not PRType.NEW_SET:
            problems.append(CRITICAL_SPARES_NEW_SET_ONLY)
        item_ids = {item.id for item in items}
        dangling = [s.item_id for s in critical_spares if s.item_id not in item_ids]
        if dangling:
            problems.append(
                f"critical spares reference unknown items: {', '.join(dangling)}"
            )

    if known_suppliers is not None and suppliers:
        directory = {s.name: s for s in known_suppliers}
        for name in suppliers:
            supplier = directory.get(name)
            if supplier is None:
                problems.append(f"unknown supplier: {name}")
            elif not supplier.is_selectable:
                problems.append(f"supplier {name} is {supplier.status.value}")
    return problems


def validate_requisition(**kwargs) -> None:
    """Raise ``RequisitionValidationError`` listing every failed rule."""
    problems = validation_problems(**kwargs)
    if problems:
        logger.warning(
            "requisition_validation_failed",
            extra={"problems": problems},
        )
        raise RequisitionValidationError(problems)


def compute_cost(
    pr_type: PRType,
    items: Sequence[PRItem],
    critical_spares: Sequence[CriticalSpare] = (),
    config: RequisitionConfig | None = None,
) -> PRCostBreakdown:
    """Cost breakdown shown before submission."""
    config = config or RequisitionConfig()
    spare_quantities: dict[str, int] = {}
    for spare in critical_spares:
        spare_quantities[spare.item_id] = spare_quantities.get(spare.item_id, 0) + spare.quantity
    return compute_pr_cost(
        items=items,
        spare_quantities=spare_quantities,
        is_new_set=pr_type is PRType.NEW_SET,
        tax_rate=config.tax_rate,
    )
