"""Notification DTOs for the Service Layer."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.notifications.models import Notification


class NotificationTypeEnum(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    ORDER = "order"


class CreateNotificationDTO(BaseModel):
    """Immutable DTO for an admin-authored notification.

    ``user_id``, ``title`` and ``message`` are required and not blank.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_id: str
    title: str
    message: str
    type: NotificationTypeEnum = NotificationTypeEnum.INFO
    order_id: Optional[UUID] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def identity_as_text(cls, v: object) -> object:
        return str(v) if isinstance(v, (int, UUID)) else v

    @field_validator("user_id", "title", "message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field may not be blank.")
        return v


class NotificationListFilter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    unread_only: bool = False
    limit: Optional[int] = None
    offset: Optional[int] = None


class NotificationOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: str
    title: str
    message: str
    type: NotificationTypeEnum
    order_id: Optional[UUID]
    read: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, notification: Notification) -> NotificationOutputDTO:
        return cls(
            id=notification.id,
            user_id=str(notification.user_id),
            title=notification.title,
            message=notification.message,
            type=notification.type,
            order_id=notification.order_id,
            read=notification.read,
            created_at=notification.created_at,
        )
