"""
Shipment Validator

Checks a draft set for submission readiness and derives each draft's
lifecycle state. Drafts without allocated lines are not errors; they are
pruned from validation and submission.
"""
import logging
from typing import Iterable, List

from shipsplit.models.shipment import DraftCollection, DraftStatus, ShipmentDraft, ShippingMode
from shipsplit.services.allocation_ledger import AllocationLedger

logger = logging.getLogger(__name__)


def submittable(drafts: Iterable[ShipmentDraft]) -> List[ShipmentDraft]:
    """Drafts that would be sent: non-empty and not yet terminal, in input order."""
    return [d for d in drafts if not d.is_empty and not d.is_terminal]


class ShipmentValidator:

    def __init__(self, ledger: AllocationLedger):
        self.ledger = ledger

    def draft_errors(self, draft: ShipmentDraft) -> List[str]:
        """Carrier, service and package checks for a single draft."""
        errors = []
        name = draft.display_name

        if not draft.carrier_id or not draft.service_code:
            errors.append(f"{name} needs carrier and service selected")

        if not draft.packages:
            errors.append(f"{name} must have at least one package")
        else:
            for position, package in enumerate(draft.packages, start=1):
                if not package.package_type_code:
                    errors.append(f"{name} package {position} needs a package type")
                if not package.weight or package.weight <= 0:
                    errors.append(f"{name} package {position} needs a valid weight")

        return errors

    def line_errors(self, drafts: DraftCollection) -> List[str]:
        """
        Line integrity across every draft, terminal ones included.

        Catches draft sets built outside the ledger, such as lines for an
        unknown item or more units allocated than were ordered.
        """
        errors = []
        for draft in drafts:
            name = draft.display_name
            seen = set()
            for line in draft.lines:
                item = self.ledger.find_item(line.item_id)
                if item is None:
                    errors.append(f"{name} contains unknown item {line.item_id}")
                    continue
                if line.item_id in seen:
                    errors.append(f"{name} lists {item.sku} more than once")
                seen.add(line.item_id)
                if line.quantity <= 0:
                    errors.append(f"{name} has an invalid quantity for {item.sku}")

        for row in self.ledger.summary(drafts):
            if row["remaining"] < 0:
                errors.append(f"Over-allocated items: {row['sku']} ({-row['remaining']})")
        return errors

    def allocation_errors(self, drafts: DraftCollection) -> List[str]:
        """One error per SKU that still has unallocated units."""
        errors = []
        for row in self.ledger.summary(drafts):
            if row["remaining"] > 0:
                errors.append(f"Unallocated items: {row['sku']} ({row['remaining']})")
        return errors

    def validate(self, drafts: DraftCollection, mode: ShippingMode) -> List[str]:
        """
        Validate a draft set.

        Returns a list of error strings; an empty list means the set can be
        submitted. Line integrity is checked in every mode; full allocation
        only in split mode.
        """
        errors = []
        for draft in submittable(drafts):
            errors.extend(self.draft_errors(draft))

        errors.extend(self.line_errors(drafts))
        if mode == ShippingMode.SPLIT:
            errors.extend(self.allocation_errors(drafts))

        if errors:
            logger.debug(f"Validation found {len(errors)} problems across {len(drafts)} drafts")
        return errors

    def status(self, drafts: DraftCollection, draft_id: str, mode: ShippingMode) -> DraftStatus:
        """
        Derive a draft's lifecycle state from its data.

        EMPTY -> PARTIAL -> CONFIGURED -> VALID, with SUBMITTED and FAILED
        stored once reached.
        """
        draft = drafts.get(draft_id)
        if draft.is_terminal:
            return draft.status
        if draft.is_empty:
            return DraftStatus.EMPTY
        if not is_configured(draft):
            return DraftStatus.PARTIAL
        if self.draft_errors(draft):
            return DraftStatus.CONFIGURED
        if self.line_errors(drafts):
            return DraftStatus.CONFIGURED
        if mode == ShippingMode.SPLIT and self.allocation_errors(drafts):
            return DraftStatus.CONFIGURED
        return DraftStatus.VALID


def is_configured(draft: ShipmentDraft) -> bool:
    """Carrier and service chosen, and at least one package with type and weight."""
    return (
        bool(draft.carrier_id)
        and bool(draft.service_code)
        and any(package.is_complete for package in draft.packages)
    )
