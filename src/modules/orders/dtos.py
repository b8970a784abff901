"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: input for order creation.
- ``UpdateOrderDTO``: merge-patch input; only keys present in the payload
  (``model_fields_set``) are applied.
- ``OrderListFilter``: list query (status, creator, pickup window + pagination).
- ``OrderOutputDTO`` / ``OrderStatsDTO``: outputs.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

if TYPE_CHECKING:
    from modules.orders.models import Order


class OrderStatusEnum(StrEnum):
    """Order status (framework-agnostic mirror of ``OrderStatus``)."""

    INCOMING = "incoming"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    PENDING = "pending"
    COMPLETED = "completed"


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        raise ValueError("This field may not be blank.")
    return value.strip()


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``customer_name`` and ``order_details`` are present and not blank.
    - ``status`` (optional) is one of the five known states.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    customer_name: str
    order_details: str
    location: Optional[str] = None
    phone_number: Optional[str] = None
    pickup_date: Optional[date] = None
    meta_business_link: Optional[str] = None
    image: Optional[str] = None
    status: OrderStatusEnum = OrderStatusEnum.INCOMING

    @field_validator("customer_name", "order_details")
    @classmethod
    def required_text(cls, v: str) -> str:
        return _not_blank(v)


class UpdateOrderDTO(BaseModel):
    """Immutable DTO for merge-patch updates.

    Keys outside the order's writable columns are ignored.  A key that is
    present must carry a valid value: ``customer_name``/``order_details``
    may not be blank and ``status`` may not be null.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    customer_name: Optional[str] = None
    order_details: Optional[str] = None
    location: Optional[str] = None
    phone_number: Optional[str] = None
    pickup_date: Optional[date] = None
    meta_business_link: Optional[str] = None
    image: Optional[str] = None
    status: Optional[OrderStatusEnum] = None
    completed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def present_fields_are_valid(self):
        for name in ("customer_name", "order_details"):
            if name in self.model_fields_set:
                _not_blank(getattr(self, name))
        if "status" in self.model_fields_set and self.status is None:
            raise ValueError("status may not be null.")
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields present in the payload."""
        data = self.model_dump(include=self.model_fields_set)
        for name in ("customer_name", "order_details"):
            if name in data:
                data[name] = data[name].strip()
        if data.get("status") is not None:
            data["status"] = OrderStatusEnum(data["status"]).value
        return data


class OrderListFilter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    status: Optional[OrderStatusEnum] = None
    created_by: Optional[str] = None
    pickup_from: Optional[date] = None
    pickup_to: Optional[date] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def filter_values(self) -> Dict[str, str]:
        """Filter parameters in the string form ``OrderFilter`` expects."""
        values = {}
        if self.status is not None:
            values["status"] = self.status.value
        if self.created_by is not None:
            values["created_by"] = self.created_by
        if self.pickup_from is not None:
            values["pickup_from"] = self.pickup_from.isoformat()
        if self.pickup_to is not None:
            values["pickup_to"] = self.pickup_to.isoformat()
        return values


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderOutputDTO(BaseModel):
    """Immutable DTO for order responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    customer_name: str
    order_details: str
    location: Optional[str]
    phone_number: Optional[str]
    pickup_date: Optional[date]
    meta_business_link: Optional[str]
    image: Optional[str]
    status: OrderStatusEnum
    completed_at: Optional[datetime]
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        return cls(
            id=order.id,
            customer_name=order.customer_name,
            order_details=order.order_details,
            location=order.location,
            phone_number=order.phone_number,
            pickup_date=order.pickup_date,
            meta_business_link=order.meta_business_link,
            image=order.image,
            status=order.status,
            completed_at=order.completed_at,
            created_by=str(order.created_by_id) if order.created_by_id else None,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderStatsDTO(BaseModel):
    """Order counts, overall and per status."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    incoming: int = 0
    accepted: int = 0
    declined: int = 0
    pending: int = 0
    completed: int = 0
