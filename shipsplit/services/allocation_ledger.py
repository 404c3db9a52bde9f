"""
Allocation Ledger

Allocated and remaining quantities are computed from (order items, drafts)
on every call and never cached, so there is a single source of truth.

allocate() and set_quantity() are the only ways line quantities change.
Both clamp against what is still unallocated, which keeps
0 <= allocated <= quantity_ordered for every item after every call.
"""
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Any, Optional

from shipsplit.core.exceptions import UnknownOrderItemError
from shipsplit.models.order import OrderItem
from shipsplit.models.shipment import DraftCollection, LineAllocation, ShipmentDraft

logger = logging.getLogger(__name__)


class AllocationLedger:
    """Quantity bookkeeping for the items of one order."""

    def __init__(self, items: Iterable[OrderItem]):
        self._items: Dict[str, OrderItem] = {item.id: item for item in items}

    @property
    def items(self) -> List[OrderItem]:
        return list(self._items.values())

    def find_item(self, item_id: str) -> Optional[OrderItem]:
        return self._items.get(item_id)

    def get_item(self, item_id: str) -> OrderItem:
        item = self._items.get(item_id)
        if item is None:
            raise UnknownOrderItemError(item_id)
        return item

    def ordered(self, item_id: str) -> int:
        return self.get_item(item_id).quantity_ordered

    def allocated(self, drafts: DraftCollection, item_id: str) -> int:
        self.get_item(item_id)
        return sum(draft.quantity_of(item_id) for draft in drafts)

    def remaining(self, drafts: DraftCollection, item_id: str) -> int:
        return self.ordered(item_id) - self.allocated(drafts, item_id)

    def summary(self, drafts: DraftCollection) -> List[Dict[str, Any]]:
        """Per-item ordered/allocated/remaining, in order-item order."""
        rows = []
        for item in self._items.values():
            allocated = self.allocated(drafts, item.id)
            rows.append({
                "item_id": item.id,
                "sku": item.sku,
                "product_name": item.product_name,
                "ordered": item.quantity_ordered,
                "allocated": allocated,
                "remaining": item.quantity_ordered - allocated,
            })
        return rows

    def is_fully_allocated(self, drafts: DraftCollection) -> bool:
        return all(self.remaining(drafts, item_id) == 0 for item_id in self._items)

    # ==================== Mutations ====================

    def allocate(
        self,
        drafts: DraftCollection,
        draft_id: str,
        item_id: str,
        requested_qty: int,
    ) -> DraftCollection:
        """
        Add up to `requested_qty` units of an item to a draft.

        The request is clamped to what remains unallocated. An existing line
        for the item is increased rather than duplicated. If nothing can be
        added the input collection is returned unchanged.
        """
        draft = drafts.get_mutable(draft_id)
        remaining = self.remaining(drafts, item_id)
        qty = min(requested_qty, remaining)

        if qty != requested_qty:
            logger.debug(
                f"Clamped allocation of {item_id} to {draft.display_name}: "
                f"requested {requested_qty}, remaining {remaining}"
            )

        if qty <= 0:
            return drafts

        current = draft.quantity_of(item_id)
        return drafts.replace_draft(_with_line_quantity(draft, item_id, current + qty))

    def set_quantity(
        self,
        drafts: DraftCollection,
        draft_id: str,
        item_id: str,
        new_qty: int,
    ) -> DraftCollection:
        """
        Set the quantity of an item on a draft.

        Clamped to [0, remaining + current quantity on this draft]. A result
        of zero removes the line.
        """
        draft = drafts.get_mutable(draft_id)
        current = draft.quantity_of(item_id)
        max_allowed = self.remaining(drafts, item_id) + current
        qty = max(0, min(new_qty, max_allowed))

        if qty != new_qty:
            logger.debug(
                f"Clamped quantity of {item_id} on {draft.display_name}: "
                f"requested {new_qty}, allowed 0..{max_allowed}"
            )

        if qty == current:
            return drafts

        return drafts.replace_draft(_with_line_quantity(draft, item_id, qty))


def _with_line_quantity(draft: ShipmentDraft, item_id: str, quantity: int) -> ShipmentDraft:
    """Return draft with the item's line set to quantity; zero drops the line."""
    lines = []
    found = False
    for line in draft.lines:
        if line.item_id == item_id:
            found = True
            if quantity > 0:
                lines.append(LineAllocation(item_id=item_id, quantity=quantity))
        else:
            lines.append(line)

    if not found and quantity > 0:
        lines.append(LineAllocation(item_id=item_id, quantity=quantity))

    return replace(draft, lines=tuple(lines))
