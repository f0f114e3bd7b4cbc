# This project was developed with assistance from AI tools.
"""Notification history and self-addressed push."""

from db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.notification import (
    NotificationItem,
    NotificationListResponse,
    SendNotificationRequest,
    SendNotificationResponse,
)
from ..services.notification import list_notifications, send_user_notification

router = APIRouter()


@router.post("/send-notification", response_model=SendNotificationResponse)
async def send_notification(
    body: SendNotificationRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> SendNotificationResponse:
    await send_user_notification(session, user, body.user_id, body.title, body.body, body.data)
    return SendNotificationResponse()


@router.get("/notifications", response_model=NotificationListResponse)
async def get_notifications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    notifications = await list_notifications(session, user.user_id)
    return NotificationListResponse(
        notifications=[NotificationItem.model_validate(n) for n in notifications]
    )
