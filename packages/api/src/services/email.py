# This project was developed with assistance from AI tools.
"""Outbound email over SMTP with implicit TLS.

Uses the blocking ``smtplib`` client run in a thread-pool executor for
async compatibility. The module exposes a singleton initialised at app
startup via ``init_email_service()``.
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from functools import partial

from ..core.config import Settings
from ..core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class EmailService:
    """Thin wrapper around ``smtplib.SMTP_SSL``."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str = "",
        timeout: float = 15.0,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender or username
        self._timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(self._host, self._port, context=context, timeout=self._timeout) as smtp:
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(msg)

    async def send(self, to: str, subject: str, body: str) -> None:
        """Send a plain-text message. Raises UpstreamUnavailable on any SMTP/socket error."""
        msg = self._build_message(to, subject, body)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(self._send_blocking, msg))
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery to %s failed: %s", to, exc)
            raise UpstreamUnavailable("Failed to send email. Please try again later.") from exc

    async def send_otp(self, to: str, otp: str) -> None:
        await self.send(to, "Your OTP Code", f"Your OTP code is: {otp}")


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_service: EmailService | None = None


def init_email_service(cfg: Settings) -> EmailService:
    """Initialise the singleton (called once from app lifespan)."""
    global _service  # noqa: PLW0603
    _service = EmailService(
        host=cfg.SMTP_HOST,
        port=cfg.SMTP_PORT,
        username=cfg.SMTP_USER,
        password=cfg.SMTP_PASSWORD,
        sender=cfg.SMTP_SENDER,
        timeout=cfg.SMTP_TIMEOUT_SECONDS,
    )
    logger.info("EmailService initialised (host=%s:%s)", cfg.SMTP_HOST, cfg.SMTP_PORT)
    return _service


def get_email_service() -> EmailService:
    """Return the initialised EmailService singleton."""
    if _service is None:
        raise RuntimeError("EmailService not initialised -- call init_email_service() first")
    return _service
