"""
Shipping Gateway Client

HTTP client for the shipping gateway that fronts the order source, the
carrier directory and label issuance. One label call per request; the
client never retries, so a failed call is never double-charged.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from shipsplit.core.config import settings
from shipsplit.core.exceptions import GatewayError
from shipsplit.models.carrier import CarrierDirectory
from shipsplit.models.order import Order
from shipsplit.modules.shipping.base import (
    CarrierDirectorySource,
    IssuedLabel,
    LabelIssuer,
    LabelRequest,
    OrderSource,
)
from shipsplit.schemas.shipping import CarrierPayload, OrderPayload

logger = logging.getLogger(__name__)


class ShippingGatewayClient(OrderSource, CarrierDirectorySource, LabelIssuer):
    """
    Gateway client implementing all three collaborator interfaces.

    The underlying httpx client is created on first use and must be
    released with close().
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["API-Key"] = self.api_key
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _make_request(self, method: str, path: str, data: Optional[Dict] = None) -> Any:
        client = await self._get_http_client()
        url = f"{self.base_url}{path}"

        try:
            if method.upper() == "GET":
                response = await client.get(url)
            elif method.upper() == "POST":
                response = await client.post(url, json=data)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")

            logger.debug(f"Gateway {method} {path} -> {response.status_code}")

            if response.status_code >= 400:
                try:
                    error_data = response.json()
                except ValueError:
                    error_data = {"raw": response.text[:500]}

                error_msg = response.reason_phrase or "Shipping gateway error"
                if isinstance(error_data, dict):
                    error_msg = error_data.get("error") or error_data.get("message") or error_msg

                logger.error(f"Gateway error: {response.status_code} - {error_msg}")
                raise GatewayError(
                    message=str(error_msg),
                    status_code=response.status_code,
                    details={"response": error_data},
                )

            try:
                return response.json()
            except ValueError:
                raise GatewayError(
                    message="Shipping gateway returned a non-JSON response",
                    status_code=response.status_code,
                )

        except httpx.RequestError as e:
            logger.error(f"Gateway request failed: {e}")
            raise GatewayError(message=f"Network error: {e}", code="NETWORK_ERROR")

    # ==================== Order Source ====================

    async def get_order(self, order_id: str) -> Order:
        path = settings.ORDER_SOURCE_PATH.format(order_id=order_id)
        response = await self._make_request("GET", path)
        payload = response.get("order", response) if isinstance(response, dict) else response

        try:
            return OrderPayload.model_validate(payload).to_model()
        except ValidationError as e:
            logger.error(f"Malformed order {order_id} from gateway: {e}")
            raise GatewayError(message=f"Malformed order payload for {order_id}", code="MALFORMED_RESPONSE")

    # ==================== Carrier Directory ====================

    async def list_carriers(self) -> CarrierDirectory:
        response = await self._make_request("GET", settings.CARRIER_DIRECTORY_PATH)
        if isinstance(response, dict):
            response = response.get("carriers", [])

        try:
            carriers = [CarrierPayload.model_validate(c).to_model() for c in response]
        except ValidationError as e:
            logger.error(f"Malformed carrier list from gateway: {e}")
            raise GatewayError(message="Malformed carrier list", code="MALFORMED_RESPONSE")

        logger.info(f"Loaded {len(carriers)} carrier accounts")
        return CarrierDirectory(carriers)

    # ==================== Label Issuance ====================

    async def create_label(self, request: LabelRequest) -> IssuedLabel:
        """
        Purchase a label for one draft.

        The gateway answers with a flat label, {"label": {...}} or
        {"labels": [...]} when it returns one label per package. The first
        label carries the master tracking number.
        """
        response = await self._make_request("POST", settings.LABEL_ISSUANCE_PATH, data=request.to_payload())
        labels = _extract_labels(response)
        if not labels or not labels[0].get("trackingNumber"):
            raise GatewayError(message="Label response missing tracking number", code="MALFORMED_RESPONSE")

        first = labels[0]
        try:
            cost = sum(float(label.get("cost") or 0) for label in labels)
            issued = IssuedLabel(
                tracking_number=str(first["trackingNumber"]),
                label_url=first.get("labelUrl") or "",
                cost=round(cost, 2),
                package_tracking_numbers=tuple(
                    str(label["trackingNumber"]) for label in labels if label.get("trackingNumber")
                ),
                raw_response=response,
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Unreadable label response for order {request.order_id}: {e}")
            raise GatewayError(message=f"Malformed label response for order {request.order_id}", code="MALFORMED_RESPONSE")

        logger.info(
            f"Label purchased for order {request.order_id} via {request.carrier_code}/"
            f"{request.service_code}: {issued.tracking_number}"
        )
        return issued


def _extract_labels(response: Any) -> List[Dict[str, Any]]:
    if not isinstance(response, dict):
        return []
    if isinstance(response.get("labels"), list):
        return [label for label in response["labels"] if isinstance(label, dict)]
    if isinstance(response.get("label"), dict):
        return [response["label"]]
    return [response]


def create_gateway_client() -> ShippingGatewayClient:
    """Create a gateway client from settings."""
    return ShippingGatewayClient(
        base_url=settings.SHIPPING_GATEWAY_URL,
        api_key=settings.SHIPPING_GATEWAY_API_KEY,
        timeout=settings.SHIPPING_GATEWAY_TIMEOUT_SECONDS,
    )
