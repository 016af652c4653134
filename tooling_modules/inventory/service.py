"""
Inventory Ledger (``tooling_modules.inventory.service``).

Responsibility
--------------
Every change to spares stock: folding an approved handover into inventory,
manual additions, removals and adjustments, and the removals caused by
spares requests being served.  Also answers the low-stock question.

Architecture position
---------------------
**Modules layer**.  Pure: methods take the current inventory (a sequence
of frozen ``InventoryItem`` records) and return a new tuple.  Items are
never deleted; history is append-only.

Invariants enforced
-------------------
* Items are matched on the exact ``(part_number, tool_number, name)`` key.
* Fold-in is additive: an existing item gains the line quantity on both
  ``quantity`` and ``stock_level``; a new item starts at the line quantity
  with ``min_stock_level = max(floor, ceil(quantity x ratio))``.
* Spares fulfilment removes only the delta between the new and previous
  fulfilled quantity, floors ``stock_level`` at zero and writes a removal
  entry only when the delta is positive.
* A manual removal larger than the stock on hand raises
  ``InsufficientStockError``.  Spares requests are checked against
  ``stock_on_hand`` before they are served.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from tooling_engines.stock import apply_removal, initial_min_stock_level
from tooling_kernel.domain.clock import Clock, SystemClock
from tooling_kernel.domain.roles import Actor
from tooling_kernel.exceptions import (
    DuplicateInventoryItemError,
    InsufficientStockError,
    InvalidQuantityError,
    InventoryItemNotFoundError,
    ValidationError,
)
from tooling_kernel.logging_config import LogContext, get_logger
from tooling_modules.inventory.config import InventoryConfig
from tooling_modules.inventory.models import (
    InventoryItem,
    LowStockItem,
    MovementType,
    ReferenceType,
    StockMovement,
)

if TYPE_CHECKING:
    from tooling_modules.handover.models import ToolHandoverRecord

logger = get_logger("modules.inventory.service")


def _find(inventory: Sequence[InventoryItem], key: tuple[str, str, str]) -> int | None:
    for index, item in enumerate(inventory):
        if item.key == key:
            return index
    return None


def _find_spare(inventory: Sequence[InventoryItem], part_number: str, tool_number: str) -> int | None:
    for position, item in enumerate(inventory):
        if item.part_number == part_number and item.tool_number == tool_number:
            return position
    return None


def _index_of(inventory: Sequence[InventoryItem], item_id: UUID) -> int:
    for index, item in enumerate(inventory):
        if item.id == item_id:
            return index
    raise InventoryItemNotFoundError(str(item_id))


class InventoryLedger:
    """
    Spares inventory ledger.

    Usage::

        ledger = InventoryLedger(clock=clock, config=config.inventory)
        inventory = ledger.fold_in_handover(inventory, handover, performed_by="maint-1")
        for row in ledger.low_stock_items(inventory):
            print(row.item.name, row.shortage)
    """

    def __init__(self, clock: Clock | None = None, config: InventoryConfig | None = None):
        self._clock = clock or SystemClock()
        self._config = config or InventoryConfig()

    @property
    def config(self) -> InventoryConfig:
        return self._config

    def _movement(
        self,
        movement_type: MovementType,
        quantity: int,
        balance_after: int,
        reference_type: ReferenceType,
        *,
        reference_id: str | None = None,
        project_id: UUID | None = None,
        performed_by: str | None = None,
        notes: str = "",
    ) -> StockMovement:
        return StockMovement(
            id=uuid4(),
            movement_type=movement_type,
            quantity=quantity,
            occurred_at=self._clock.now(),
            reference_type=reference_type,
            balance_after=balance_after,
            reference_id=reference_id,
            project_id=project_id,
            performed_by=performed_by,
            notes=notes,
        )

    def _receive(
        self,
        buffer: list[InventoryItem],
        key: tuple[str, str, str],
        quantity: int,
        movement_kwargs: dict,
    ) -> bool:
        """Add ``quantity`` of ``key`` to ``buffer``; True when a new item was created."""
        index = _find(buffer, key)
        now = self._clock.now()
        if index is not None:
            existing = buffer[index]
            stock_level = existing.stock_level + quantity
            entry = self._movement(
                MovementType.ADDITION, quantity, stock_level, **movement_kwargs,
            )
            buffer[index] = replace(
                existing,
                quantity=existing.quantity + quantity,
                stock_level=stock_level,
                addition_history=existing.addition_history + (entry,),
                updated_at=now,
            )
            return False

        part_number, tool_number, name = key
        entry = self._movement(MovementType.ADDITION, quantity, quantity, **movement_kwargs)
        buffer.append(
            InventoryItem(
                id=uuid4(),
                part_number=part_number,
                tool_number=tool_number,
                name=name,
                quantity=quantity,
                stock_level=quantity,
                min_stock_level=initial_min_stock_level(
                    quantity,
                    self._config.min_stock_ratio,
                    self._config.min_stock_floor,
                ),
                addition_history=(entry,),
                unit_of_measure=self._config.unit_of_measure,
                created_at=now,
                updated_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------------
    # Handover fold-in
    # -------------------------------------------------------------------------

    def fold_in_handover(
        self,
        inventory: Sequence[InventoryItem],
        handover: ToolHandoverRecord,
        tool_number: str | None = None,
        performed_by: str | None = None,
    ) -> tuple[InventoryItem, ...]:
        """
        Add a handover's lines to stock.

        Two passes over one buffer: the requisition lines first (part number
        = line id, tool number = ``tool_number`` or the handover's), then the
        critical spares under their own key.  A spare whose key matches a
        line from the first pass adds to that same item.
        """
        tool = tool_number or handover.tool_number or self._config.default_tool_number
        buffer = list(inventory)
        movement_kwargs = dict(
            reference_type=ReferenceType.HANDOVER,
            reference_id=handover.handover_number,
            project_id=handover.project_id,
            performed_by=performed_by,
        )
        created = updated = 0

        for item in handover.all_items:
            if self._receive(buffer, (item.id, tool, item.name), item.quantity, movement_kwargs):
                created += 1
            else:
                updated += 1

        for spare in handover.critical_spares:
            if self._receive(buffer, spare.key, spare.quantity, movement_kwargs):
                created += 1
            else:
                updated += 1

        logger.info(
            "handover_folded_into_inventory",
            extra={
                "handover_number": handover.handover_number,
                "tool_number": tool,
                "items_created": created,
                "items_updated": updated,
                "inventory_size": len(buffer),
            },
        )
        return tuple(buffer)

    # -------------------------------------------------------------------------
    # Manual maintenance
    # -------------------------------------------------------------------------

    def add_item(
        self,
        inventory: Sequence[InventoryItem],
        *,
        part_number: str,
        tool_number: str,
        name: str,
        quantity: int,
        min_stock_level: int | None = None,
        location: str = "",
        actor: Actor | None = None,
    ) -> tuple[tuple[InventoryItem, ...], InventoryItem]:
        """Create one item by hand; returns the new inventory and the item."""
        if not (part_number or "").strip() or not (name or "").strip():
            raise ValidationError("Inventory item needs a part number and a name")
        if quantity < 0:
            raise InvalidQuantityError(quantity, "initial quantity cannot be negative")
        key = (part_number.strip(), (tool_number or "").strip() or self._config.default_tool_number, name.strip())
        if _find(inventory, key) is not None:
            logger.warning(
                "inventory_item_duplicate",
                extra={"part_number": key[0], "tool_number": key[1], "item_name": key[2]},
            )
            raise DuplicateInventoryItemError(*key)

        now = self._clock.now()
        history: tuple[StockMovement, ...] = ()
        if quantity > 0:
            history = (
                self._movement(
                    MovementType.ADDITION, quantity, quantity, ReferenceType.MANUAL,
                    performed_by=actor.actor_id if actor else None,
                    notes="initial stock",
                ),
            )
        item = InventoryItem(
            id=uuid4(),
            part_number=key[0],
            tool_number=key[1],
            name=key[2],
            quantity=quantity,
            stock_level=quantity,
            min_stock_level=(
                min_stock_level
                if min_stock_level is not None
                else initial_min_stock_level(
                    quantity, self._config.min_stock_ratio, self._config.min_stock_floor,
                )
            ),
            addition_history=history,
            location=location,
            unit_of_measure=self._config.unit_of_measure,
            created_at=now,
            updated_at=now,
        )
        logger.info(
            "inventory_item_added",
            extra={"part_number": item.part_number, "tool_number": item.tool_number, "quantity": quantity},
        )
        return (*inventory, item), item

    def adjust_stock(
        self,
        inventory: Sequence[InventoryItem],
        item_id: UUID,
        movement_type: MovementType,
        quantity: int,
        *,
        actor: Actor,
        notes: str = "",
    ) -> tuple[InventoryItem, ...]:
        """
        Manual stock correction.

        Addition and Removal move both ``quantity`` and ``stock_level`` by
        ``quantity``; Adjustment sets both to ``quantity`` and records the
        difference as an addition or a removal.
        """
        if quantity < 0 or (quantity == 0 and movement_type is not MovementType.ADJUSTMENT):
            raise InvalidQuantityError(quantity, f"{movement_type.value} quantity must be positive")

        index = _index_of(inventory, item_id)
        item = inventory[index]
        movement_kwargs = dict(performed_by=actor.actor_id, notes=notes)

        with LogContext.bind(actor_id=actor.actor_id, actor_role=actor.role.value, entity_id=item_id):
            if movement_type is MovementType.ADDITION:
                new_quantity = item.quantity + quantity
                new_level = item.stock_level + quantity
            elif movement_type is MovementType.REMOVAL:
                if item.stock_level < quantity:
                    logger.warning(
                        "inventory_insufficient_stock",
                        extra={"available": item.stock_level, "requested": quantity},
                    )
                    raise InsufficientStockError(str(item_id), item.stock_level, quantity)
                new_quantity = max(0, item.quantity - quantity)
                new_level = item.stock_level - quantity
            else:
                new_quantity = quantity
                new_level = quantity

            delta = new_level - item.stock_level
            additions = item.addition_history
            removals = item.removal_history
            if delta > 0:
                additions += (
                    self._movement(movement_type, delta, new_level, ReferenceType.MANUAL, **movement_kwargs),
                )
            elif delta < 0:
                removals += (
                    self._movement(movement_type, -delta, new_level, ReferenceType.MANUAL, **movement_kwargs),
                )

            updated = replace(
                item,
                quantity=new_quantity,
                stock_level=new_level,
                addition_history=additions,
                removal_history=removals,
                updated_at=self._clock.now(),
            )
            logger.info(
                "inventory_stock_adjusted",
                extra={
                    "movement_type": movement_type.value,
                    "quantity": quantity,
                    "stock_before": item.stock_level,
                    "stock_after": new_level,
                    "status": updated.status.value,
                },
            )

        result = list(inventory)
        result[index] = updated
        return tuple(result)

    # -------------------------------------------------------------------------
    # Spares requests
    # -------------------------------------------------------------------------

    def apply_spares_fulfillment(
        self,
        inventory: Sequence[InventoryItem],
        *,
        part_number: str,
        tool_number: str,
        previous_fulfilled: int,
        new_fulfilled: int,
        request_reference: str,
        project_id: UUID | None = None,
        requested_by: str | None = None,
    ) -> tuple[InventoryItem, ...]:
        """
        Remove the newly served units of a spares request from stock.

        The item is matched on ``(part_number, tool_number)``.  When no item
        matches, the inventory is returned unchanged.
        """
        delta = new_fulfilled - previous_fulfilled
        index = _find_spare(inventory, part_number, tool_number)
        if index is None:
            logger.warning(
                "spares_fulfillment_item_not_in_inventory",
                extra={"part_number": part_number, "tool_number": tool_number, "delta": delta},
            )
            return tuple(inventory)

        item = inventory[index]
        new_level = apply_removal(item.stock_level, delta) if delta > 0 else item.stock_level
        removals = item.removal_history
        if delta > 0:
            removals += (
                self._movement(
                    MovementType.REMOVAL, delta, new_level, ReferenceType.SPARES_REQUEST,
                    reference_id=request_reference,
                    project_id=project_id,
                    performed_by=requested_by,
                ),
            )
        updated = replace(
            item,
            stock_level=new_level,
            removal_history=removals,
            updated_at=self._clock.now() if delta > 0 else item.updated_at,
        )
        logger.info(
            "spares_fulfillment_applied",
            extra={
                "request_reference": request_reference,
                "part_number": part_number,
                "delta": delta,
                "stock_before": item.stock_level,
                "stock_after": new_level,
            },
        )
        result = list(inventory)
        result[index] = updated
        return tuple(result)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def low_stock_items(inventory: Sequence[InventoryItem]) -> tuple[LowStockItem, ...]:
        """Low and Out of Stock items, Out of Stock first, then by quantity ascending."""
        rows = [
            LowStockItem(item=item, shortage=item.shortage)
            for item in inventory
            if item.quantity <= item.min_stock_level
        ]
        rows.sort(key=lambda row: (row.item.quantity > 0, row.item.quantity))
        return tuple(rows)

    @staticmethod
    def find(inventory: Sequence[InventoryItem], part_number: str, tool_number: str, name: str) -> InventoryItem | None:
        index = _find(inventory, (part_number, tool_number, name))
        return inventory[index] if index is not None else None

    @staticmethod
    def stock_on_hand(inventory: Sequence[InventoryItem], part_number: str, tool_number: str) -> int | None:
        """Stock level of the item a spares request draws on; None when it is not stocked."""
        index = _find_spare(inventory, part_number, tool_number)
        return inventory[index].stock_level if index is not None else None
