"""
Shipping Session

Single owner of the draft set for one order. Every user action goes
through here, one at a time; the session swaps in the new DraftCollection
each operation returns.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from shipsplit.core.exceptions import ShipmentValidationError
from shipsplit.models.carrier import CarrierDirectory, CarrierPackageType, CarrierService
from shipsplit.models.order import Order
from shipsplit.models.shipment import (
    BatchOutcome,
    Dimensions,
    DraftCollection,
    DraftStatus,
    ShipmentDraft,
    ShippingMode,
)
from shipsplit.modules.shipping.base import CarrierDirectorySource, LabelIssuer, OrderSource
from shipsplit.services import shipment_drafts
from shipsplit.services.allocation_ledger import AllocationLedger
from shipsplit.services.label_issuance import LabelCallback, LabelIssuanceCoordinator
from shipsplit.services.shipment_validator import ShipmentValidator
from shipsplit.services.weight_distributor import PackageWeightDistributor

logger = logging.getLogger(__name__)


class ShippingSession:
    """
    Allocation, configuration and submission for one order.

    Starts in single mode with one draft holding every item. Switching to
    split mode adds a second draft; in split mode every unit must be
    allocated before labels can be purchased.
    """

    def __init__(
        self,
        order: Order,
        carrier_directory: CarrierDirectory,
        label_issuer: LabelIssuer,
        drafts: Optional[DraftCollection] = None,
        mode: ShippingMode = ShippingMode.SINGLE,
        on_label: Optional[LabelCallback] = None,
    ):
        self.order = order
        self.carrier_directory = carrier_directory
        self.ledger = AllocationLedger(order.items)
        self.distributor = PackageWeightDistributor(self.ledger)
        self.validator = ShipmentValidator(self.ledger)
        self.coordinator = LabelIssuanceCoordinator(carrier_directory, label_issuer, on_label=on_label)
        self.drafts = drafts if drafts is not None else shipment_drafts.seed_single_shipment(order)
        self.mode = mode

    @classmethod
    async def start(
        cls,
        order_id: str,
        order_source: OrderSource,
        carrier_source: CarrierDirectorySource,
        label_issuer: LabelIssuer,
        initial_weight: Optional[float] = None,
        initial_dimensions: Optional[Dimensions] = None,
        on_label: Optional[LabelCallback] = None,
    ) -> "ShippingSession":
        """Fetch the order and carriers once and seed a single-shipment session."""
        order = await order_source.get_order(order_id)
        carriers = await carrier_source.list_carriers()
        drafts = shipment_drafts.seed_single_shipment(order, initial_weight, initial_dimensions)

        logger.info(f"Shipping session started for order {order.order_number} ({len(order.items)} items)")
        return cls(order, carriers, label_issuer, drafts=drafts, on_label=on_label)

    # ==================== Drafts ====================

    def draft(self, draft_id: str) -> ShipmentDraft:
        return self.drafts.get(draft_id)

    def enable_split_mode(self) -> DraftCollection:
        """Switch to split mode; a lone draft gets a second one sharing its carrier."""
        self.mode = ShippingMode.SPLIT
        if len(self.drafts) == 1:
            self.drafts = shipment_drafts.create_draft(self.drafts, inherit_carrier=True)
        return self.drafts

    def create_draft(self) -> ShipmentDraft:
        self.drafts = shipment_drafts.create_draft(
            self.drafts, inherit_carrier=self.mode == ShippingMode.SPLIT
        )
        return self.drafts.drafts[-1]

    def remove_draft(self, draft_id: str) -> DraftCollection:
        self.drafts = shipment_drafts.remove_draft(self.drafts, draft_id)
        return self.drafts

    # ==================== Allocation ====================

    def allocate(self, draft_id: str, item_id: str, quantity: int) -> DraftCollection:
        self.drafts = self.ledger.allocate(self.drafts, draft_id, item_id, quantity)
        return self.drafts

    def set_quantity(self, draft_id: str, item_id: str, quantity: int) -> DraftCollection:
        self.drafts = self.ledger.set_quantity(self.drafts, draft_id, item_id, quantity)
        return self.drafts

    def add_item(self, draft_id: str, item_id: str) -> DraftCollection:
        """Move everything still unallocated for the item onto the draft."""
        return self.allocate(draft_id, item_id, self.ledger.remaining(self.drafts, item_id))

    def remove_item(self, draft_id: str, item_id: str) -> DraftCollection:
        return self.set_quantity(draft_id, item_id, 0)

    def increment_item(self, draft_id: str, item_id: str) -> DraftCollection:
        return self.allocate(draft_id, item_id, 1)

    def decrement_item(self, draft_id: str, item_id: str) -> DraftCollection:
        current = self.draft(draft_id).quantity_of(item_id)
        return self.set_quantity(draft_id, item_id, current - 1)

    def allocation_summary(self) -> List[Dict[str, Any]]:
        return self.ledger.summary(self.drafts)

    # ==================== Configuration ====================

    def set_carrier(self, draft_id: str, carrier_id: str) -> DraftCollection:
        self.drafts = shipment_drafts.set_carrier(self.drafts, draft_id, carrier_id)
        return self.drafts

    def set_service(self, draft_id: str, service_code: str) -> DraftCollection:
        self.drafts = shipment_drafts.set_service(self.drafts, draft_id, service_code)
        return self.drafts

    def set_notes(self, draft_id: str, notes: str) -> DraftCollection:
        self.drafts = shipment_drafts.set_notes(self.drafts, draft_id, notes)
        return self.drafts

    def carrier_options(self, draft_id: str) -> Tuple[Tuple[CarrierService, ...], Tuple[CarrierPackageType, ...]]:
        return self.carrier_directory.options(self.draft(draft_id).carrier_id)

    def update_package(
        self,
        draft_id: str,
        package_id: str,
        package_type_code: Optional[str] = None,
        weight: Optional[float] = None,
        dimensions: Optional[Dimensions] = None,
    ) -> DraftCollection:
        self.drafts = shipment_drafts.update_package(
            self.drafts, draft_id, package_id, package_type_code, weight, dimensions
        )
        return self.drafts

    def remove_package(self, draft_id: str, package_id: str) -> DraftCollection:
        self.drafts = shipment_drafts.remove_package(self.drafts, draft_id, package_id)
        return self.drafts

    def add_package(self, draft_id: str) -> DraftCollection:
        self.drafts = self.distributor.add_package(self.drafts, draft_id)
        return self.drafts

    def distribute(self, draft_id: str, package_count: int) -> DraftCollection:
        """Equal-weight split; discards existing packages (see has_custom_packages)."""
        self.drafts = self.distributor.distribute(self.drafts, draft_id, package_count)
        return self.drafts

    def has_custom_packages(self, draft_id: str) -> bool:
        return self.distributor.has_custom_packages(self.drafts, draft_id)

    def total_weight(self, draft_id: str) -> float:
        return self.distributor.total_weight(self.drafts, draft_id)

    # ==================== Validation / Submission ====================

    def validate(self) -> List[str]:
        return self.validator.validate(self.drafts, self.mode)

    def status(self, draft_id: str) -> DraftStatus:
        return self.validator.status(self.drafts, draft_id, self.mode)

    async def submit(self) -> BatchOutcome:
        """
        Validate, then purchase labels draft by draft.

        Validation failures raise before any external call. Otherwise the
        outcome is returned as-is: issued drafts become SUBMITTED, the
        failing draft FAILED, and untried drafts stay editable.
        """
        errors = self.validate()
        if errors:
            raise ShipmentValidationError(errors)

        outcome = await self.coordinator.submit(self.drafts, self.order)

        for attempt in outcome.attempts:
            status = DraftStatus.SUBMITTED if attempt.ok else DraftStatus.FAILED
            self.drafts = shipment_drafts.mark_status(self.drafts, attempt.draft_id, status)

        return outcome
