"""
Carrier directory models

Carrier accounts available to the shipper, with the services and package
types each one offers. Fetched once per session.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class CarrierService:
    service_code: str
    name: str


@dataclass(frozen=True)
class CarrierPackageType:
    package_code: str
    name: str


@dataclass(frozen=True)
class CarrierAccount:
    """A carrier account as listed by the carrier directory."""
    carrier_id: str
    carrier_code: str
    friendly_name: str
    services: Tuple[CarrierService, ...] = field(default_factory=tuple)
    package_types: Tuple[CarrierPackageType, ...] = field(default_factory=tuple)

    def has_service(self, service_code: str) -> bool:
        return any(s.service_code == service_code for s in self.services)


class CarrierDirectory:
    """
    Lookup over the carrier accounts.

    Used both to populate selectable options and to resolve a draft's
    carrier_id to a carrier_code at submission time.
    """

    def __init__(self, carriers: List[CarrierAccount]):
        self._carriers: Dict[str, CarrierAccount] = {c.carrier_id: c for c in carriers}

    def __iter__(self) -> Iterator[CarrierAccount]:
        return iter(self._carriers.values())

    def __len__(self) -> int:
        return len(self._carriers)

    def __contains__(self, carrier_id: object) -> bool:
        return carrier_id in self._carriers

    def resolve(self, carrier_id: str) -> Optional[CarrierAccount]:
        if not carrier_id:
            return None
        return self._carriers.get(carrier_id)

    def options(self, carrier_id: str) -> Tuple[Tuple[CarrierService, ...], Tuple[CarrierPackageType, ...]]:
        """Services and package types for a carrier; empty for unknown carriers."""
        carrier = self.resolve(carrier_id)
        if not carrier:
            return (), ()
        return carrier.services, carrier.package_types
