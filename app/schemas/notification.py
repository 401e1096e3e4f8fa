"""Notification schemas."""

from datetime import datetime
from uuid import UUID

from app.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    id: UUID
    title: str
    body: str
    notification_type: str
    booking_id: UUID | None
    is_read: bool
    created_at: datetime
    read_at: datetime | None


class NotificationListEnvelope(CamelModel):
    success: bool = True
    notifications: list[NotificationResponse]
    total: int
    unread_count: int
    page: int
    limit: int
