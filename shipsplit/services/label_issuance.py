"""
Label Issuance Coordinator

Drives one label batch against the label issuance API.

Protocol:
1. Drafts without lines (and drafts already SUBMITTED or FAILED) are skipped.
2. The rest are processed strictly one at a time, in input order.
3. Each success is recorded and handed to the on_label callback at once.
4. The first failure stops the batch. Labels already purchased stand;
   nothing is rolled back and the drafts after the failure are never sent.

The outcome is returned as a BatchOutcome value rather than raised, so a
partially applied batch can be inspected like any other result.
"""
import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from shipsplit.core.config import settings
from shipsplit.core.exceptions import (
    CarrierResolutionError,
    GatewayError,
    IssuanceError,
    LabelAPIError,
    SubmissionInProgressError,
)
from shipsplit.models.carrier import CarrierAccount, CarrierDirectory
from shipsplit.models.order import Order, OrderItem
from shipsplit.models.shipment import (
    AllocatedItem,
    BatchOutcome,
    DraftAttempt,
    LabelResult,
    ShipmentDraft,
)
from shipsplit.modules.shipping.base import LabelAddress, LabelIssuer, LabelPackage, LabelRequest
from shipsplit.services.shipment_validator import submittable

logger = logging.getLogger(__name__)

LabelCallback = Callable[[LabelResult], Union[None, Awaitable[None]]]


def normalize_address(order: Order) -> LabelAddress:
    """Destination address with the order's fallbacks applied."""
    address = order.shipping_address
    return LabelAddress(
        name=address.name or order.customer_name,
        address1=address.address1,
        city=address.city,
        zip=address.zip,
        province=address.province,
        province_code=address.province_code or address.province,
        country_code=address.country_code or settings.DEFAULT_COUNTRY_CODE,
    )


def default_notes(draft: ShipmentDraft, items: List[OrderItem]) -> str:
    """e.g. 'Shipment 1 - Items: ABC-1(2), XYZ-9(1)'"""
    by_id = {item.id: item for item in items}
    parts = [
        f"{by_id[line.item_id].sku if line.item_id in by_id else line.item_id}({line.quantity})"
        for line in draft.lines
    ]
    return f"{draft.display_name} - Items: {', '.join(parts)}"


def build_label_request(draft: ShipmentDraft, carrier: CarrierAccount, order: Order) -> LabelRequest:
    return LabelRequest(
        order_id=order.id,
        carrier_code=carrier.carrier_code,
        service_code=draft.service_code,
        packages=[
            LabelPackage(
                package_code=package.package_type_code,
                weight=package.weight,
                length=package.dimensions.length,
                width=package.dimensions.width,
                height=package.dimensions.height,
            )
            for package in draft.packages
        ],
        shipping_address=normalize_address(order),
        notes=draft.notes or default_notes(draft, list(order.items)),
    )


def snapshot_items(draft: ShipmentDraft, order: Order) -> tuple:
    snapshot = []
    for line in draft.lines:
        item = order.get_item(line.item_id)
        if item is None:
            continue
        snapshot.append(AllocatedItem(
            item_id=item.id,
            sku=item.sku,
            product_name=item.product_name,
            quantity=line.quantity,
            unit_price=item.unit_price,
        ))
    return tuple(snapshot)


class LabelIssuanceCoordinator:
    """
    Sequential, fail-fast label purchasing for a set of drafts.

    Only one submit() may run at a time per coordinator.
    """

    def __init__(
        self,
        carrier_directory: CarrierDirectory,
        label_issuer: LabelIssuer,
        on_label: Optional[LabelCallback] = None,
    ):
        self.carrier_directory = carrier_directory
        self.label_issuer = label_issuer
        self.on_label = on_label
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(self, drafts, order: Order) -> BatchOutcome:
        """
        Purchase labels for every submittable draft.

        Args:
            drafts: drafts in submission order (a DraftCollection or any iterable)
            order: the order being shipped; supplies the address and item data

        Returns:
            BatchOutcome with one attempt per draft sent, ending at the first
            failure, and the ids of drafts that were never attempted

        Raises:
            SubmissionInProgressError: another submit() has not finished
        """
        if self._in_flight:
            raise SubmissionInProgressError()

        self._in_flight = True
        try:
            return await self._run(submittable(drafts), order)
        finally:
            self._in_flight = False

    async def _run(self, batch: List[ShipmentDraft], order: Order) -> BatchOutcome:
        attempts = []
        logger.info(f"Submitting {len(batch)} shipments for order {order.order_number}")

        for index, draft in enumerate(batch):
            result = await self._issue(draft, order)
            attempts.append(DraftAttempt(draft_id=draft.id, draft_name=draft.display_name, result=result))

            if isinstance(result, IssuanceError):
                untried = tuple(d.id for d in batch[index + 1:])
                logger.error(
                    f"Label batch for order {order.order_number} stopped at {draft.display_name}: "
                    f"{result.message} ({len(attempts) - 1} issued, {len(untried)} not attempted)"
                )
                return BatchOutcome(attempts=tuple(attempts), untried_draft_ids=untried)

            await self._notify(result)

        return BatchOutcome(attempts=tuple(attempts))

    async def _issue(self, draft: ShipmentDraft, order: Order) -> Union[LabelResult, IssuanceError]:
        carrier = self.carrier_directory.resolve(draft.carrier_id)
        if carrier is None:
            return CarrierResolutionError(draft.id, draft.display_name, draft.carrier_id)

        request = build_label_request(draft, carrier, order)
        try:
            issued = await self.label_issuer.create_label(request)
        except GatewayError as e:
            return LabelAPIError(draft.id, draft.display_name, e.message, status_code=e.status_code)
        except Exception as e:
            logger.exception(f"Unexpected error issuing {draft.display_name} for order {order.order_number}")
            return LabelAPIError(draft.id, draft.display_name, str(e) or type(e).__name__)

        logger.info(
            f"Issued {draft.display_name} for order {order.order_number}: "
            f"{issued.tracking_number} ({carrier.friendly_name}, ${issued.cost:.2f})"
        )
        return LabelResult(
            draft_id=draft.id,
            draft_name=draft.display_name,
            tracking_number=issued.tracking_number,
            label_url=issued.label_url,
            cost=issued.cost,
            carrier_name=carrier.friendly_name,
            carrier_code=carrier.carrier_code,
            service_code=draft.service_code,
            items=snapshot_items(draft, order),
            package_tracking_numbers=issued.package_tracking_numbers,
        )

    async def _notify(self, label: LabelResult) -> None:
        if self.on_label is None:
            return
        try:
            outcome = self.on_label(label)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            # Label is already purchased; a broken callback must not stop the batch
            logger.exception(f"on_label callback failed for {label.draft_name}")
