"""
Shipping API Routes

Provides endpoints for:
- Carrier directory (accounts, services, package types)
- Draft validation
- Package weight distribution
- Label batch submission (sequential, stops at the first failure)
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from shipsplit.models.shipment import DraftCollection
from shipsplit.modules.shipping.gateway import ShippingGatewayClient, create_gateway_client
from shipsplit.schemas.shipping import (
    CarrierPayload,
    DistributeRequest,
    LabelBatchRequest,
    LabelBatchResponse,
    ShipmentDraftSchema,
    ValidateRequest,
    ValidateResponse,
)
from shipsplit.services.allocation_ledger import AllocationLedger
from shipsplit.services.shipment_validator import ShipmentValidator
from shipsplit.services.shipping_session import ShippingSession
from shipsplit.services.weight_distributor import PackageWeightDistributor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipping", tags=["shipping"])

_gateway_client: Optional[ShippingGatewayClient] = None


def get_gateway_client() -> ShippingGatewayClient:
    """Shared gateway client; overridden in tests."""
    global _gateway_client
    if _gateway_client is None:
        _gateway_client = create_gateway_client()
    return _gateway_client


async def close_gateway_client() -> None:
    global _gateway_client
    if _gateway_client is not None:
        await _gateway_client.close()
        _gateway_client = None


def _collection(drafts: List[ShipmentDraftSchema]) -> DraftCollection:
    return DraftCollection(drafts=tuple(d.to_model() for d in drafts))


# ==================== Carriers ====================


@router.get("/carriers", response_model=List[CarrierPayload])
async def list_carriers(gateway: ShippingGatewayClient = Depends(get_gateway_client)):
    """Carrier accounts with their services and package types."""
    directory = await gateway.list_carriers()
    return [CarrierPayload.from_model(carrier) for carrier in directory]


# ==================== Validation ====================


@router.post("/validate", response_model=ValidateResponse)
async def validate_drafts(request: ValidateRequest):
    """Check a draft set for submission readiness without calling any carrier."""
    ledger = AllocationLedger(item.to_model() for item in request.order_items)
    errors = ShipmentValidator(ledger).validate(_collection(request.drafts), request.mode)
    return ValidateResponse(valid=not errors, errors=errors)


# ==================== Weight Distribution ====================


@router.post("/distribute", response_model=ShipmentDraftSchema)
async def distribute_weight(request: DistributeRequest):
    """
    Split a draft's item weight evenly across package_count packages.

    Replaces every existing package on the draft.
    """
    ledger = AllocationLedger(item.to_model() for item in request.order_items)
    drafts = _collection([request.draft])
    drafts = PackageWeightDistributor(ledger).distribute(drafts, request.draft.id, request.package_count)
    return ShipmentDraftSchema.from_model(drafts.get(request.draft.id))


# ==================== Labels ====================


@router.post("/labels", response_model=LabelBatchResponse)
async def create_labels(
    request: LabelBatchRequest,
    gateway: ShippingGatewayClient = Depends(get_gateway_client),
):
    """
    Purchase labels for each non-empty draft, in order.

    Validation problems return 422 before any label is bought. A failure
    partway through returns 200 with the labels already purchased, the
    failing draft and the drafts that were never attempted.
    """
    order = await gateway.get_order(request.order_id)
    carriers = await gateway.list_carriers()

    session = ShippingSession(
        order,
        carriers,
        gateway,
        drafts=_collection(request.drafts),
        mode=request.mode,
    )
    outcome = await session.submit()

    if not outcome.succeeded:
        logger.warning(
            f"Order {order.order_number}: {len(outcome.labels)} labels issued before "
            f"failure at {outcome.failure.draft_name}"
        )
    return LabelBatchResponse.from_outcome(outcome)
