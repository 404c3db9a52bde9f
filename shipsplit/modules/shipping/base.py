"""
Shipping Collaborator Interfaces

The engine talks to three external collaborators:
- Order source (read-only order snapshot)
- Carrier directory (accounts, services, package types)
- Label issuance API (one call per draft)

Requests are carrier-agnostic; the carrier is identified only by its code.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from shipsplit.models.carrier import CarrierDirectory
from shipsplit.models.order import Order


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass
class LabelAddress:
    """Normalized destination address."""
    name: str
    address1: str
    city: str
    zip: str
    province: str
    province_code: str
    country_code: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address1": self.address1,
            "city": self.city,
            "zip": self.zip,
            "province": self.province,
            "provinceCode": self.province_code,
            "countryCode": self.country_code,
        }


@dataclass
class LabelPackage:
    """Package weight (pounds) and dimensions (inches)."""
    package_code: str
    weight: float
    length: float
    width: float
    height: float

    def to_payload(self) -> Dict[str, Any]:
        return {
            "packageCode": self.package_code,
            "weight": self.weight,
            "length": self.length,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class LabelRequest:
    """Request to purchase a label for one draft."""
    order_id: str
    carrier_code: str
    service_code: str
    packages: List[LabelPackage]
    shipping_address: LabelAddress
    notes: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "carrierCode": self.carrier_code,
            "serviceCode": self.service_code,
            "packages": [p.to_payload() for p in self.packages],
            "shippingAddress": self.shipping_address.to_payload(),
            "notes": self.notes,
        }


@dataclass
class IssuedLabel:
    """Successful label issuance."""
    tracking_number: str
    label_url: str
    cost: float = 0.0
    package_tracking_numbers: Tuple[str, ...] = field(default_factory=tuple)
    raw_response: Optional[Any] = None


# =============================================================================
# Collaborator Interfaces
# =============================================================================

class OrderSource(ABC):

    @abstractmethod
    async def get_order(self, order_id: str) -> Order:
        """Fetch the order being shipped."""
        pass


class CarrierDirectorySource(ABC):

    @abstractmethod
    async def list_carriers(self) -> CarrierDirectory:
        """Fetch the carrier accounts with their services and package types."""
        pass


class LabelIssuer(ABC):

    @abstractmethod
    async def create_label(self, request: LabelRequest) -> IssuedLabel:
        """
        Purchase a shipping label.

        Args:
            request: carrier-agnostic label request for one draft

        Returns:
            IssuedLabel with tracking number, label URL and cost

        Raises:
            GatewayError: the call failed; nothing was purchased
        """
        pass
