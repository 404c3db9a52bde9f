"""
Pytest configuration and fixtures for ShipSplit tests.
"""
import os
import pytest
from unittest.mock import AsyncMock

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["SHIPPING_GATEWAY_URL"] = "https://gateway.test/v1"
os.environ["SHIPPING_GATEWAY_API_KEY"] = "test-api-key"

from shipsplit.models.carrier import (  # noqa: E402
    CarrierAccount,
    CarrierDirectory,
    CarrierPackageType,
    CarrierService,
)
from shipsplit.models.order import Order, OrderItem, ShippingAddress, WeightUnit  # noqa: E402
from shipsplit.modules.shipping.base import IssuedLabel  # noqa: E402


@pytest.fixture
def item_x() -> OrderItem:
    """10 units at 2 oz each."""
    return OrderItem(
        id="item-x",
        sku="SKU-X",
        product_name="Widget X",
        quantity_ordered=10,
        unit_price=4.99,
        weight_per_unit=2.0,
        weight_unit=WeightUnit.OZ,
    )


@pytest.fixture
def item_y() -> OrderItem:
    """3 units at 1 lb each."""
    return OrderItem(
        id="item-y",
        sku="SKU-Y",
        product_name="Gadget Y",
        quantity_ordered=3,
        unit_price=19.99,
        weight_per_unit=1.0,
        weight_unit=WeightUnit.LB,
    )


@pytest.fixture
def shipping_address() -> ShippingAddress:
    return ShippingAddress(
        address1="123 Main St",
        city="Springfield",
        zip="62701",
        province="Illinois",
        province_code="IL",
    )


@pytest.fixture
def order(item_x, shipping_address) -> Order:
    return Order(
        id="order-1",
        order_number="1001",
        customer_name="Jordan Smith",
        customer_email="jordan@example.com",
        shipping_address=shipping_address,
        items=(item_x,),
    )


@pytest.fixture
def two_item_order(item_x, item_y, shipping_address) -> Order:
    return Order(
        id="order-2",
        order_number="1002",
        customer_name="Jordan Smith",
        shipping_address=shipping_address,
        items=(item_x, item_y),
    )


@pytest.fixture
def ups_account() -> CarrierAccount:
    return CarrierAccount(
        carrier_id="se-ups",
        carrier_code="ups",
        friendly_name="UPS",
        services=(CarrierService("ups_ground", "UPS Ground"),),
        package_types=(CarrierPackageType("package", "Package"),),
    )


@pytest.fixture
def usps_account() -> CarrierAccount:
    return CarrierAccount(
        carrier_id="se-usps",
        carrier_code="usps",
        friendly_name="USPS",
        services=(CarrierService("usps_priority_mail", "USPS Priority Mail"),),
        package_types=(
            CarrierPackageType("package", "Package"),
            CarrierPackageType("flat_rate_envelope", "Flat Rate Envelope"),
        ),
    )


@pytest.fixture
def carriers(ups_account, usps_account) -> CarrierDirectory:
    return CarrierDirectory([ups_account, usps_account])


@pytest.fixture
def mock_label_issuer() -> AsyncMock:
    """Label issuer returning TRK-1, TRK-2, ... for successive calls."""
    issuer = AsyncMock()
    counter = {"n": 0}

    async def create_label(request):
        counter["n"] += 1
        n = counter["n"]
        return IssuedLabel(
            tracking_number=f"TRK-{n}",
            label_url=f"https://labels.test/{n}.pdf",
            cost=8.5,
            package_tracking_numbers=(f"TRK-{n}",),
        )

    issuer.create_label = AsyncMock(side_effect=create_label)
    return issuer
