"""
Shipment Drafts

Creation, removal and configuration of the drafts of one order. Line
quantities are deliberately absent here; they change only through the
AllocationLedger.

Every function takes a DraftCollection and returns a new one.
"""
import logging
from dataclasses import replace
from typing import Optional

from shipsplit.core.exceptions import (
    LastDraftRemovalError,
    PackageNotFoundError,
)
from shipsplit.core.utils import generate_id
from shipsplit.models.order import Order
from shipsplit.models.shipment import (
    Dimensions,
    DraftCollection,
    DraftStatus,
    LineAllocation,
    PackageSpec,
    ShipmentDraft,
    default_dimensions,
)

logger = logging.getLogger(__name__)


def draft_name(position: int) -> str:
    """Display name for the draft at a 1-based position."""
    return f"Shipment {position}"


def new_package(
    package_type_code: str = "",
    weight: float = 0.0,
    dimensions: Optional[Dimensions] = None,
) -> PackageSpec:
    return PackageSpec(
        id=generate_id("pkg_"),
        package_type_code=package_type_code,
        weight=weight,
        dimensions=dimensions or default_dimensions(),
    )


def new_draft(position: int, carrier_id: str = "") -> ShipmentDraft:
    """Empty draft with one blank package."""
    return ShipmentDraft(
        id=generate_id("shp_"),
        display_name=draft_name(position),
        carrier_id=carrier_id,
        packages=(new_package(),),
    )


def seed_single_shipment(
    order: Order,
    initial_weight: Optional[float] = None,
    initial_dimensions: Optional[Dimensions] = None,
) -> DraftCollection:
    """
    Single-shipment starting point: one draft carrying every item in full.

    Optional initial weight/dimensions (e.g. measured at packing) are applied
    to the draft's package.
    """
    lines = tuple(
        LineAllocation(item_id=item.id, quantity=item.quantity_ordered)
        for item in order.items
        if item.quantity_ordered > 0
    )
    package = new_package(weight=initial_weight or 0.0, dimensions=initial_dimensions)
    draft = replace(new_draft(1), lines=lines, packages=(package,))

    logger.debug(f"Seeded {draft.display_name} for order {order.order_number} with {len(lines)} lines")
    return DraftCollection(drafts=(draft,), version=0)


def create_draft(drafts: DraftCollection, inherit_carrier: bool = False) -> DraftCollection:
    """Append an empty draft; optionally reuse the first draft's carrier."""
    carrier_id = ""
    if inherit_carrier and len(drafts):
        carrier_id = drafts.drafts[0].carrier_id
    return drafts.append(new_draft(len(drafts) + 1, carrier_id=carrier_id))


def remove_draft(drafts: DraftCollection, draft_id: str) -> DraftCollection:
    """
    Remove a draft and renumber the rest as Shipment 1..N.

    At least one draft always remains.
    """
    draft = drafts.get_mutable(draft_id)
    if len(drafts) <= 1:
        raise LastDraftRemovalError(draft_id)

    remaining = drafts.without(draft.id)
    renumbered = tuple(
        replace(d, display_name=draft_name(position))
        for position, d in enumerate(remaining, start=1)
    )
    logger.debug(f"Removed {draft.display_name}; {len(renumbered)} drafts remain")
    return remaining.with_drafts(renumbered)


def set_carrier(drafts: DraftCollection, draft_id: str, carrier_id: str) -> DraftCollection:
    """Select a carrier. Changing carriers clears the service, which is carrier specific."""
    draft = drafts.get_mutable(draft_id)
    if draft.carrier_id == carrier_id:
        return drafts
    return drafts.replace_draft(replace(draft, carrier_id=carrier_id, service_code=""))


def set_service(drafts: DraftCollection, draft_id: str, service_code: str) -> DraftCollection:
    draft = drafts.get_mutable(draft_id)
    return drafts.replace_draft(replace(draft, service_code=service_code))


def set_notes(drafts: DraftCollection, draft_id: str, notes: str) -> DraftCollection:
    draft = drafts.get_mutable(draft_id)
    return drafts.replace_draft(replace(draft, notes=notes))


def update_package(
    drafts: DraftCollection,
    draft_id: str,
    package_id: str,
    package_type_code: Optional[str] = None,
    weight: Optional[float] = None,
    dimensions: Optional[Dimensions] = None,
) -> DraftCollection:
    """Manual edit of one package; fields left as None are kept."""
    draft = drafts.get_mutable(draft_id)
    package = draft.get_package(package_id)
    if package is None:
        raise PackageNotFoundError(draft_id, package_id)

    changes = {}
    if package_type_code is not None:
        changes["package_type_code"] = package_type_code
    if weight is not None:
        changes["weight"] = weight
    if dimensions is not None:
        changes["dimensions"] = dimensions

    return replace_packages(
        drafts,
        draft_id,
        tuple(replace(p, **changes) if p.id == package_id else p for p in draft.packages),
    )


def remove_package(drafts: DraftCollection, draft_id: str, package_id: str) -> DraftCollection:
    draft = drafts.get_mutable(draft_id)
    if draft.get_package(package_id) is None:
        raise PackageNotFoundError(draft_id, package_id)
    return replace_packages(drafts, draft_id, tuple(p for p in draft.packages if p.id != package_id))


def replace_packages(drafts: DraftCollection, draft_id: str, packages) -> DraftCollection:
    draft = drafts.get_mutable(draft_id)
    return drafts.replace_draft(replace(draft, packages=tuple(packages)))


def mark_status(drafts: DraftCollection, draft_id: str, status: DraftStatus) -> DraftCollection:
    """Record a terminal outcome. Terminal drafts are never reopened."""
    if not status.is_terminal:
        raise ValueError(f"Only terminal statuses are stored, got {status.value}")
    draft = drafts.get_mutable(draft_id)
    return drafts.replace_draft(replace(draft, status=status))
