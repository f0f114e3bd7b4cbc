# This project was developed with assistance from AI tools.
"""Push delivery and the persisted notification log.

``PushDispatcher.send`` never raises: push is best-effort and its
failures are logged. ``record_notification`` is the durable part and
always runs before the push attempt.
"""

import json
import logging

import httpx
from db import Notification, User
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..core.errors import InvalidArgument, NotAuthorized, NotFound, UpstreamUnavailable
from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)


class PushDispatcher:
    """Posts messages to an Expo-compatible push endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def build_message(push_token: str, title: str, body: str, data: dict | None) -> dict:
        return {
            "to": push_token,
            "sound": "default",
            "title": title,
            "body": body,
            "data": data or {},
        }

    async def send(self, push_token: str, title: str, body: str, data: dict | None = None) -> bool:
        """Deliver one push message. Returns False (and logs) on any failure."""
        message = self.build_message(push_token, title, body, data)
        try:
            response = await self._client.post(self._url, json=message)
        except httpx.HTTPError as exc:
            logger.warning("Push delivery failed: %s", exc)
            return False
        if response.status_code != 200:
            logger.warning("Push service returned %s: %s", response.status_code, response.text[:200])
            return False
        return True


# ---------------------------------------------------------------------------
# Notification log
# ---------------------------------------------------------------------------


async def record_notification(
    session: AsyncSession,
    user_id: int,
    title: str,
    body: str,
    data: dict | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        body=body,
        data=json.dumps(data) if data is not None else None,
    )
    session.add(notification)
    await session.commit()
    return notification


async def list_notifications(session: AsyncSession, user_id: int) -> list[Notification]:
    """Notification history for a user, newest first."""
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def notify_user(
    session: AsyncSession,
    user_id: int,
    push_token: str | None,
    title: str,
    body: str,
    data: dict | None = None,
) -> Notification:
    """Record the notification, then push it if the user has a token."""
    notification = await record_notification(session, user_id, title, body, data)
    if push_token:
        await get_push_dispatcher().send(push_token, title, body, data)
    return notification


async def send_user_notification(
    session: AsyncSession,
    caller: UserContext,
    user_id: int,
    title: str,
    body: str,
    data: dict | None = None,
) -> Notification:
    """Push a message to a portal user and log it.

    Callers may only target their own account. Unlike payment updates the
    push here is the point of the request, so a missing token or a failed
    delivery is reported to the caller; the log row is kept either way.
    """
    if user_id != caller.user_id:
        logger.warning("User %s attempted to notify user %s", caller.user_id, user_id)
        raise NotAuthorized("Cannot send notifications to another user.")

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found.")
    if not user.push_token:
        raise InvalidArgument("User does not have a push token.")

    notification = await record_notification(session, user.id, title, body, data)
    if not await get_push_dispatcher().send(user.push_token, title, body, data):
        raise UpstreamUnavailable("Push notification service returned an error.")
    return notification


# ---------------------------------------------------------------------------
# Module-level singleton)
# ---------------------------------------------------------------------------

_dispatcher: PushDispatcher | None = None


def init_push_dispatcher(cfg: Settings) -> PushDispatcher:
    """Initialise the singleton (called once from app lifespan)."""
    global _dispatcher  # noqa: PLW0603
    _dispatcher = PushDispatcher(url=cfg.PUSH_SERVICE_URL, timeout=cfg.PUSH_TIMEOUT_SECONDS)
    logger.info("PushDispatcher initialised (url=%s)", cfg.PUSH_SERVICE_URL)
    return _dispatcher


def get_push_dispatcher() -> PushDispatcher:
    """Return the initialised PushDispatcher singleton."""
    if _dispatcher is None:
        raise RuntimeError("PushDispatcher not initialised -- call init_push_dispatcher() first")
    return _dispatcher


async def close_push_dispatcher() -> None:
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is not None:
        await _dispatcher.aclose()
        _dispatcher = None
