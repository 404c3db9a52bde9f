"""
Order models

Read-only snapshot of the order being shipped, fetched once per session
from the order source.
"""
import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple


class WeightUnit(str, enum.Enum):
    """Mass units accepted on order items. Pounds are canonical."""
    OZ = "oz"
    LB = "lb"
    G = "g"
    KG = "kg"

    @property
    def pounds_per_unit(self) -> float:
        return _POUNDS_PER_UNIT[self]

    def to_pounds(self, value: float) -> float:
        return value * self.pounds_per_unit


_POUNDS_PER_UNIT = {
    WeightUnit.OZ: 1 / 16,
    WeightUnit.LB: 1.0,
    WeightUnit.G: 1 / 453.59237,
    WeightUnit.KG: 1 / 0.45359237,
}


@dataclass(frozen=True)
class OrderItem:
    """A line of the order. quantity_ordered is the source of truth."""
    id: str
    sku: str
    product_name: str
    quantity_ordered: int
    unit_price: float = 0.0
    weight_per_unit: Optional[float] = None
    weight_unit: WeightUnit = WeightUnit.OZ

    def weight_in_pounds(self, quantity: int) -> float:
        """Weight of `quantity` units in pounds; items without a weight count as zero."""
        if not self.weight_per_unit:
            return 0.0
        return self.weight_unit.to_pounds(self.weight_per_unit * quantity)


@dataclass(frozen=True)
class ShippingAddress:
    """Destination address as delivered by the order source."""
    address1: str
    city: str
    zip: str
    province: str = ""
    province_code: Optional[str] = None
    name: Optional[str] = None
    country_code: Optional[str] = None
    address2: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class Order:
    id: str
    order_number: str
    customer_name: str
    shipping_address: ShippingAddress
    items: Tuple[OrderItem, ...] = field(default_factory=tuple)
    customer_email: Optional[str] = None

    def get_item(self, item_id: str) -> Optional[OrderItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
