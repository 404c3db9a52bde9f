"""
Shipping collaborators

Interfaces for the order source, carrier directory and label issuance API,
plus the HTTP gateway client implementing them.
"""
from shipsplit.modules.shipping.base import (
    CarrierDirectorySource,
    IssuedLabel,
    LabelAddress,
    LabelIssuer,
    LabelPackage,
    LabelRequest,
    OrderSource,
)
from shipsplit.modules.shipping.gateway import ShippingGatewayClient, create_gateway_client

__all__ = [
    "CarrierDirectorySource",
    "IssuedLabel",
    "LabelAddress",
    "LabelIssuer",
    "LabelPackage",
    "LabelRequest",
    "OrderSource",
    "ShippingGatewayClient",
    "create_gateway_client",
]
