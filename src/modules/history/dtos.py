"""History DTOs for the Service Layer."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.orders.dtos import OrderStatusEnum

if TYPE_CHECKING:
    from modules.history.models import OrderHistory


class HistoryEventTypeEnum(StrEnum):
    STATUS_CHANGE = "status_change"
    NOTE = "note"
    VIEW = "view"
    MANUAL = "manual"


class AppendHistoryDTO(BaseModel):
    """Immutable DTO for a new history record.

    ``order_id`` and ``event_type`` are required; everything else is
    optional.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    order_id: UUID
    event_type: HistoryEventTypeEnum
    old_status: Optional[OrderStatusEnum] = None
    new_status: Optional[OrderStatusEnum] = None
    note: Optional[str] = None


class HistoryListFilter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    order_id: Optional[UUID] = None
    date: Optional[dt.date] = None
    event_type: Optional[HistoryEventTypeEnum] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def filter_values(self) -> dict:
        """Filter parameters in the string form ``OrderHistoryFilter`` expects."""
        values = {}
        if self.order_id is not None:
            values["order_id"] = str(self.order_id)
        if self.date is not None:
            values["date"] = self.date.isoformat()
        if self.event_type is not None:
            values["event_type"] = self.event_type.value
        return values


class HistoryOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    order_id: UUID
    user_id: Optional[str]
    event_type: HistoryEventTypeEnum
    old_status: Optional[OrderStatusEnum]
    new_status: Optional[OrderStatusEnum]
    note: Optional[str]
    created_at: dt.datetime

    @classmethod
    def from_entity(cls, record: OrderHistory) -> HistoryOutputDTO:
        return cls(
            id=record.id,
            order_id=record.order_id,
            user_id=str(record.user_id) if record.user_id else None,
            event_type=record.event_type,
            old_status=record.old_status,
            new_status=record.new_status,
            note=record.note,
            created_at=record.created_at,
        )
