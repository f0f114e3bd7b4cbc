# This project was developed with assistance from AI tools.
"""Notification history schemas."""

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NotificationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    body: str
    data: dict | None = None
    created_at: datetime | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value):
        """Stored as JSON text; tolerate legacy non-JSON payloads."""
        if value is None or isinstance(value, dict):
            return value
        try:
            decoded = json.loads(value)
        except (TypeError, ValueError):
            return {"raw": value}
        return decoded if isinstance(decoded, dict) else {"value": decoded}


class NotificationListResponse(BaseModel):
    notifications: list[NotificationItem]


class SendNotificationRequest(BaseModel):
    user_id: int
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    data: dict | None = None


class SendNotificationResponse(BaseModel):
    status: str = "Notification sent"
