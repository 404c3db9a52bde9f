"""
Package Weight Distributor

Splits a draft's computed item weight evenly across a number of packages.
This is an equal split, not bin packing.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from shipsplit.core.exceptions import InvalidPackageCountError
from shipsplit.models.shipment import DraftCollection, ShipmentDraft
from shipsplit.services.allocation_ledger import AllocationLedger
from shipsplit.services import shipment_drafts

logger = logging.getLogger(__name__)

WEIGHT_PRECISION = Decimal("0.01")


def draft_weight(ledger: AllocationLedger, draft: ShipmentDraft) -> float:
    """Total item weight of a draft in pounds."""
    return sum(
        ledger.get_item(line.item_id).weight_in_pounds(line.quantity)
        for line in draft.lines
    )


def round_weight(value: float) -> float:
    return float(Decimal(str(value)).quantize(WEIGHT_PRECISION, rounding=ROUND_HALF_UP))


class PackageWeightDistributor:
    """Computes and redistributes per-package weight for drafts."""

    def __init__(self, ledger: AllocationLedger):
        self.ledger = ledger

    def total_weight(self, drafts: DraftCollection, draft_id: str) -> float:
        return draft_weight(self.ledger, drafts.get(draft_id))

    def distribute(self, drafts: DraftCollection, draft_id: str, package_count: int) -> DraftCollection:
        """
        Replace the draft's packages with `package_count` equal-weight packages.

        Package type and dimensions come from the draft's first package, or
        the defaults when it has none. Every existing package is discarded,
        including manual per-package edits.
        """
        if package_count < 1:
            raise InvalidPackageCountError(package_count)

        draft = drafts.get(draft_id)
        total = draft_weight(self.ledger, draft)
        per_package = round_weight(total / package_count)

        template = draft.packages[0] if draft.packages else None
        packages = tuple(
            shipment_drafts.new_package(
                package_type_code=template.package_type_code if template else "",
                weight=per_package,
                dimensions=template.dimensions if template else None,
            )
            for _ in range(package_count)
        )

        logger.info(
            f"Distributed {total:.2f} lb across {package_count} packages "
            f"({per_package:.2f} lb each) on {draft.display_name}"
        )
        return shipment_drafts.replace_packages(drafts, draft_id, packages)

    def add_package(self, drafts: DraftCollection, draft_id: str) -> DraftCollection:
        """
        Append one blank package.

        Reuses the first package's type code; other packages' weights are
        left untouched.
        """
        draft = drafts.get(draft_id)
        package_type_code = draft.packages[0].package_type_code if draft.packages else ""
        package = shipment_drafts.new_package(package_type_code=package_type_code)
        return shipment_drafts.replace_packages(drafts, draft_id, draft.packages + (package,))

    def has_custom_packages(self, drafts: DraftCollection, draft_id: str) -> bool:
        """
        True when distribute() would discard manual edits.

        Callers use this to warn before redistributing.
        """
        draft = drafts.get(draft_id)
        if len(draft.packages) > 1:
            return True
        return any(package.weight > 0 for package in draft.packages)
