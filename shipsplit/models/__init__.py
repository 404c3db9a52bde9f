"""
Domain models

Order data is read-only for a session; drafts are immutable values that
services replace rather than mutate.
"""
from shipsplit.models.order import Order, OrderItem, ShippingAddress, WeightUnit
from shipsplit.models.carrier import CarrierAccount, CarrierDirectory, CarrierPackageType, CarrierService
from shipsplit.models.shipment import (
    AllocatedItem,
    BatchOutcome,
    Dimensions,
    DraftAttempt,
    DraftCollection,
    DraftStatus,
    LabelResult,
    LineAllocation,
    PackageSpec,
    ShipmentDraft,
    ShippingMode,
)

__all__ = [
    "Order",
    "OrderItem",
    "ShippingAddress",
    "WeightUnit",
    "CarrierAccount",
    "CarrierDirectory",
    "CarrierPackageType",
    "CarrierService",
    "AllocatedItem",
    "BatchOutcome",
    "Dimensions",
    "DraftAttempt",
    "DraftCollection",
    "DraftStatus",
    "LabelResult",
    "LineAllocation",
    "PackageSpec",
    "ShipmentDraft",
    "ShippingMode",
]
