"""Repair order domain models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class RepairOrderStatus(str, Enum):
    """Repair order lifecycle status."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    READY = "Ready"
    COLLECTED = "Collected"


class DeviceCondition(str, Enum):
    """Condition of the device when it was handed in."""

    GOOD = "Good"
    FAIR = "Fair"
    DAMAGED = "Damaged"
    NOT_WORKING = "Not Working"


# Suggested brands for the intake form. Stored as free text.
DEVICE_BRANDS = (
    "Apple",
    "Samsung",
    "Google",
    "Xiaomi",
    "Huawei",
    "OnePlus",
    "Motorola",
    "Sony",
    "LG",
    "Nokia",
    "Other",
)


class RepairOrderCreate(BaseModel):
    """Data required to submit a repair order."""

    customer_name: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., min_length=1, max_length=50)
    device_brand: str = Field(..., min_length=1, max_length=100)
    device_model: str = Field(..., min_length=1, max_length=255)
    imei: str | None = Field(None, max_length=50)
    problem_description: str = Field(..., min_length=1, max_length=10000)
    device_condition: DeviceCondition
    estimated_cost: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)

    model_config = {"str_strip_whitespace": True}


class RepairOrderUpdate(BaseModel):
    """Editable fields of a repair order. All fields optional."""

    customer_name: str | None = Field(None, min_length=1, max_length=255)
    phone_number: str | None = Field(None, min_length=1, max_length=50)
    device_brand: str | None = Field(None, min_length=1, max_length=100)
    device_model: str | None = Field(None, min_length=1, max_length=255)
    imei: str | None = Field(None, max_length=50)
    problem_description: str | None = Field(None, min_length=1, max_length=10000)
    device_condition: DeviceCondition | None = None
    estimated_cost: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}


class RepairOrder(BaseModel):
    """Full repair order entity as stored."""

    id: UUID
    owner_id: str
    customer_name: str
    phone_number: str
    device_brand: str
    device_model: str
    imei: str | None
    problem_description: str
    device_condition: DeviceCondition
    estimated_cost: Decimal = Field(..., ge=0)
    status: RepairOrderStatus
    track_code: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def is_collected(self) -> bool:
        """Whether the customer has picked the device up."""
        return self.status == RepairOrderStatus.COLLECTED

    @property
    def device_label(self) -> str:
        return f"{self.device_brand} {self.device_model}".strip()


class TrackedOrderView(BaseModel):
    """
    What an anonymous customer sees when looking up a track code.

    Never carries the owner or the internal order id.
    """

    track_code: str
    customer_name: str
    device_brand: str
    device_model: str
    imei: str | None
    problem_description: str
    status: RepairOrderStatus
    estimated_cost: Decimal
    last_updated_at: datetime

    @classmethod
    def from_order(cls, order: RepairOrder) -> "TrackedOrderView":
        return cls(
            track_code=order.track_code,
            customer_name=order.customer_name,
            device_brand=order.device_brand,
            device_model=order.device_model,
            imei=order.imei,
            problem_description=order.problem_description,
            status=order.status,
            estimated_cost=order.estimated_cost,
            last_updated_at=order.updated_at,
        )
