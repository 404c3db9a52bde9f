"""
Shipping Schemas

Pydantic models for gateway payloads (camelCase or snake_case on the wire)
and for the shipping API requests and responses.
"""
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from shipsplit.core.config import settings
from shipsplit.models.carrier import CarrierAccount, CarrierPackageType, CarrierService
from shipsplit.models.order import Order, OrderItem, ShippingAddress, WeightUnit
from shipsplit.models.shipment import (
    BatchOutcome,
    Dimensions,
    DraftStatus,
    LabelResult,
    LineAllocation,
    PackageSpec,
    ShipmentDraft,
    ShippingMode,
    default_dimensions,
)


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# ==================== Order Source Payloads ====================


class OrderItemPayload(BaseModel):
    """Order item as returned by the order source."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sku: str
    product_name: str = Field(validation_alias=_alias("product_name", "productName"))
    quantity: int = Field(..., ge=0, validation_alias=_alias("quantity", "quantity_ordered", "quantityOrdered"))
    unit_price: float = Field(0.0, validation_alias=_alias("unit_price", "unitPrice"))
    weight_per_unit: Optional[float] = Field(
        None, ge=0, validation_alias=_alias("weight_per_unit", "weightPerUnit")
    )
    weight_unit: WeightUnit = Field(
        default_factory=lambda: WeightUnit(settings.DEFAULT_ITEM_WEIGHT_UNIT),
        validation_alias=_alias("weight_unit", "weightUnit"),
    )

    @model_validator(mode="before")
    @classmethod
    def accept_weight_oz(cls, data: Any) -> Any:
        """Older payloads carry weightOz instead of weightPerUnit + weightUnit."""
        if isinstance(data, dict) and "weightOz" in data and "weightPerUnit" not in data:
            data = dict(data)
            data["weightPerUnit"] = data.pop("weightOz")
            data.setdefault("weightUnit", WeightUnit.OZ.value)
        return data

    @field_validator("weight_unit", mode="before")
    @classmethod
    def lower_unit(cls, v):
        return v.lower() if isinstance(v, str) else v

    def to_model(self) -> OrderItem:
        return OrderItem(
            id=self.id,
            sku=self.sku,
            product_name=self.product_name,
            quantity_ordered=self.quantity,
            unit_price=self.unit_price,
            weight_per_unit=self.weight_per_unit,
            weight_unit=self.weight_unit,
        )


class ShippingAddressPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address1: str = Field(validation_alias=_alias("address1", "address_line1", "addressLine1"))
    city: str
    zip: str = Field(validation_alias=_alias("zip", "postal_code", "postalCode"))
    province: str = ""
    province_code: Optional[str] = Field(None, validation_alias=_alias("province_code", "provinceCode"))
    name: Optional[str] = None
    country_code: Optional[str] = Field(None, validation_alias=_alias("country_code", "countryCode"))
    address2: Optional[str] = Field(None, validation_alias=_alias("address2", "address_line2", "addressLine2"))
    phone: Optional[str] = None

    def to_model(self) -> ShippingAddress:
        return ShippingAddress(
            address1=self.address1,
            city=self.city,
            zip=self.zip,
            province=self.province,
            province_code=self.province_code,
            name=self.name,
            country_code=self.country_code,
            address2=self.address2,
            phone=self.phone,
        )


class OrderPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    order_number: str = Field(validation_alias=_alias("order_number", "orderNumber"))
    customer_name: str = Field("", validation_alias=_alias("customer_name", "customerName"))
    customer_email: Optional[str] = Field(None, validation_alias=_alias("customer_email", "customerEmail"))
    shipping_address: ShippingAddressPayload = Field(
        validation_alias=_alias("shipping_address", "shippingAddress")
    )
    items: List[OrderItemPayload] = []

    def to_model(self) -> Order:
        return Order(
            id=self.id,
            order_number=self.order_number,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            shipping_address=self.shipping_address.to_model(),
            items=tuple(item.to_model() for item in self.items),
        )


# ==================== Carrier Directory Payloads ====================


class CarrierServicePayload(BaseModel):
    service_code: str = Field(validation_alias=_alias("service_code", "serviceCode"))
    name: str = ""


class CarrierPackagePayload(BaseModel):
    package_code: str = Field(validation_alias=_alias("package_code", "packageCode"))
    name: str = ""


class CarrierPayload(BaseModel):
    """Carrier account as listed by the gateway."""
    model_config = ConfigDict(populate_by_name=True)

    carrier_id: str = Field(validation_alias=_alias("carrier_id", "carrierId"))
    carrier_code: str = Field(validation_alias=_alias("carrier_code", "carrierCode"))
    friendly_name: str = Field("", validation_alias=_alias("friendly_name", "friendlyName"))
    services: List[CarrierServicePayload] = []
    package_types: List[CarrierPackagePayload] = Field(
        default_factory=list, validation_alias=_alias("package_types", "packageTypes", "packages")
    )

    def to_model(self) -> CarrierAccount:
        return CarrierAccount(
            carrier_id=self.carrier_id,
            carrier_code=self.carrier_code,
            friendly_name=self.friendly_name or self.carrier_code,
            services=tuple(CarrierService(s.service_code, s.name) for s in self.services),
            package_types=tuple(CarrierPackageType(p.package_code, p.name) for p in self.package_types),
        )

    @classmethod
    def from_model(cls, carrier: CarrierAccount) -> "CarrierPayload":
        return cls(
            carrier_id=carrier.carrier_id,
            carrier_code=carrier.carrier_code,
            friendly_name=carrier.friendly_name,
            services=[{"service_code": s.service_code, "name": s.name} for s in carrier.services],
            package_types=[{"package_code": p.package_code, "name": p.name} for p in carrier.package_types],
        )


# ==================== Draft Schemas ====================


class DimensionsSchema(BaseModel):
    length: float = Field(..., gt=0, description="Length in inches")
    width: float = Field(..., gt=0, description="Width in inches")
    height: float = Field(..., gt=0, description="Height in inches")


class PackageSpecSchema(BaseModel):
    id: str
    package_type_code: str = ""
    weight: float = Field(0.0, ge=0, description="Weight in LBS")
    dimensions: Optional[DimensionsSchema] = None

    def to_model(self) -> PackageSpec:
        dims = self.dimensions
        if dims is None:
            dimensions = default_dimensions()
        else:
            dimensions = Dimensions(dims.length, dims.width, dims.height)
        return PackageSpec(
            id=self.id,
            package_type_code=self.package_type_code,
            weight=self.weight,
            dimensions=dimensions,
        )


class LineAllocationSchema(BaseModel):
    item_id: str
    quantity: int = Field(..., gt=0)


class ShipmentDraftSchema(BaseModel):
    """Draft as exchanged with API clients."""
    id: str
    display_name: str
    lines: List[LineAllocationSchema] = []
    carrier_id: str = ""
    service_code: str = ""
    packages: List[PackageSpecSchema] = []
    notes: str = ""
    status: Optional[DraftStatus] = None

    @field_validator("status")
    @classmethod
    def terminal_only(cls, v):
        if v is not None and not v.is_terminal:
            return None
        return v

    def to_model(self) -> ShipmentDraft:
        return ShipmentDraft(
            id=self.id,
            display_name=self.display_name,
            lines=tuple(LineAllocation(line.item_id, line.quantity) for line in self.lines),
            carrier_id=self.carrier_id,
            service_code=self.service_code,
            packages=tuple(p.to_model() for p in self.packages),
            notes=self.notes,
            status=self.status,
        )

    @classmethod
    def from_model(cls, draft: ShipmentDraft) -> "ShipmentDraftSchema":
        return cls(
            id=draft.id,
            display_name=draft.display_name,
            lines=[LineAllocationSchema(item_id=l.item_id, quantity=l.quantity) for l in draft.lines],
            carrier_id=draft.carrier_id,
            service_code=draft.service_code,
            packages=[
                PackageSpecSchema(
                    id=p.id,
                    package_type_code=p.package_type_code,
                    weight=p.weight,
                    dimensions=DimensionsSchema(
                        length=p.dimensions.length,
                        width=p.dimensions.width,
                        height=p.dimensions.height,
                    ),
                )
                for p in draft.packages
            ],
            notes=draft.notes,
            status=draft.status,
        )


# ==================== Request Schemas ====================


class ValidateRequest(BaseModel):
    mode: ShippingMode = ShippingMode.SINGLE
    order_items: List[OrderItemPayload]
    drafts: List[ShipmentDraftSchema]


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[str] = []


class DistributeRequest(BaseModel):
    order_items: List[OrderItemPayload]
    draft: ShipmentDraftSchema
    package_count: int = Field(..., ge=1, le=100)


class LabelBatchRequest(BaseModel):
    """Submit a batch of drafts for label purchase."""
    order_id: str
    mode: ShippingMode = ShippingMode.SINGLE
    drafts: List[ShipmentDraftSchema] = Field(..., min_length=1)


# ==================== Response Schemas ====================


class AllocatedItemResponse(BaseModel):
    item_id: str
    sku: str
    product_name: str
    quantity: int
    unit_price: float


class LabelResultResponse(BaseModel):
    draft_id: str
    draft_name: str
    tracking_number: str
    label_url: str
    cost: float
    carrier_name: str
    carrier_code: str = ""
    service_code: str = ""
    items: List[AllocatedItemResponse] = []
    package_tracking_numbers: List[str] = []

    @classmethod
    def from_model(cls, label: LabelResult) -> "LabelResultResponse":
        return cls(
            draft_id=label.draft_id,
            draft_name=label.draft_name,
            tracking_number=label.tracking_number,
            label_url=label.label_url,
            cost=label.cost,
            carrier_name=label.carrier_name,
            carrier_code=label.carrier_code,
            service_code=label.service_code,
            items=[AllocatedItemResponse(**vars(item)) for item in label.items],
            package_tracking_numbers=list(label.package_tracking_numbers),
        )


class BatchFailureResponse(BaseModel):
    draft_id: Optional[str] = None
    draft_name: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class LabelBatchResponse(BaseModel):
    """
    Outcome of a label batch.

    On a mid-batch failure, labels holds what was purchased before it,
    failure names the draft that stopped the batch and untried_draft_ids
    lists drafts that were never sent.
    """
    succeeded: bool
    labels: List[LabelResultResponse] = []
    failure: Optional[BatchFailureResponse] = None
    untried_draft_ids: List[str] = []

    @classmethod
    def from_outcome(cls, outcome: BatchOutcome) -> "LabelBatchResponse":
        failure = None
        if outcome.failure is not None:
            error = outcome.failure
            failure = BatchFailureResponse(
                draft_id=error.draft_id,
                draft_name=error.draft_name,
                code=error.code,
                message=error.message,
                details=error.details,
            )
        return cls(
            succeeded=outcome.succeeded,
            labels=[LabelResultResponse.from_model(label) for label in outcome.labels],
            failure=failure,
            untried_draft_ids=list(outcome.untried_draft_ids),
        )
