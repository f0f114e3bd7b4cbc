# This project was developed with assistance from AI tools.
"""Safaricom Daraja (M-PESA) client: OAuth, STK Push and STK Push Query.

Uses a shared ``httpx.AsyncClient``. The module exposes a singleton
initialised at app startup via ``init_daraja_client()`` and closed at
shutdown.
"""

import base64
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from ..core.config import Settings
from ..core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

# Daraja timestamps are East Africa Time
_EAT = ZoneInfo("Africa/Nairobi")
_TOKEN_REFRESH_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class StkPushResult:
    checkout_request_id: str
    merchant_request_id: str
    response_code: str
    response_description: str
    customer_message: str


@dataclass(frozen=True)
class StkQueryResult:
    result_code: int
    result_description: str


class DarajaClient:
    """Async wrapper around the Daraja REST API."""

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        passkey: str,
        short_code: str,
        callback_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._consumer_key = consumer_key
        self._consumer_secret = consumer_secret
        self._passkey = passkey
        self.short_code = short_code
        self.callback_url = callback_url
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._token: str | None = None
        self._token_expires_at: float = 0

    async def aclose(self) -> None:
        await self._client.aclose()

    # -- auth --

    async def _access_token(self) -> str:
        """Return a cached OAuth token, fetching a new one near expiry."""
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            response = await self._client.get(
                "/oauth/v1/generate",
                params={"grant_type": "client_credentials"},
                auth=(self._consumer_key, self._consumer_secret),
            )
        except httpx.HTTPError as exc:
            logger.error("Daraja OAuth request failed: %s", exc)
            raise UpstreamUnavailable("Payment service is unavailable. Please try again later.") from exc

        if response.status_code != 200:
            logger.error("Daraja OAuth returned %s: %s", response.status_code, response.text)
            raise UpstreamUnavailable("Payment service is unavailable. Please try again later.")

        body = response.json()
        token = body.get("access_token")
        if not token:
            logger.error("Daraja OAuth response missing access_token")
            raise UpstreamUnavailable("Payment service is unavailable. Please try again later.")

        expires_in = int(body.get("expires_in", 3599))
        self._token = token
        self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_REFRESH_MARGIN_SECONDS, 0)
        return token

    # -- helpers --

    @staticmethod
    def timestamp(now: datetime | None = None) -> str:
        now = now or datetime.now(_EAT)
        return now.strftime("%Y%m%d%H%M%S")

    def password(self, timestamp: str) -> str:
        raw = f"{self.short_code}{self._passkey}{timestamp}"
        return base64.b64encode(raw.encode("utf-8")).decode("utf-8")

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        token = await self._access_token()
        try:
            return await self._client.post(
                path,
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Daraja request to %s failed: %s", path, exc)
            raise UpstreamUnavailable("Payment service is unavailable. Please try again later.") from exc

    # -- STK Push --

    def build_stk_push_payload(
        self,
        amount: int,
        phone_number: str,
        account_reference: str,
        description: str,
        timestamp: str,
    ) -> dict:
        return {
            "BusinessShortCode": self.short_code,
            "Password": self.password(timestamp),
            "Timestamp": timestamp,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": amount,
            "PartyA": phone_number,
            "PartyB": self.short_code,
            "PhoneNumber": phone_number,
            "CallBackURL": self.callback_url,
            "AccountReference": account_reference,
            "TransactionDesc": description,
        }

    async def stk_push(
        self,
        amount: int,
        phone_number: str,
        account_reference: str,
        description: str,
    ) -> StkPushResult:
        """Send an STK Push prompt to the customer's handset.

        A non-200 answer, a ``ResponseCode`` other than ``"0"`` or a body
        without ``CheckoutRequestID`` raises UpstreamUnavailable carrying the
        gateway's message so the caller sees why the prompt was refused.
        """
        payload = self.build_stk_push_payload(
            amount, phone_number, account_reference, description, self.timestamp()
        )
        response = await self._post("/mpesa/stkpush/v1/processrequest", payload)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            message = body.get("errorMessage") or "Failed to initiate payment."
            logger.warning(
                "STK Push rejected (status=%s, code=%s): %s",
                response.status_code,
                body.get("errorCode"),
                message,
            )
            raise UpstreamUnavailable(message)

        response_code = str(body.get("ResponseCode", ""))
        if response_code != "0" or not body.get("CheckoutRequestID"):
            message = (
                body.get("errorMessage")
                or body.get("ResponseDescription")
                or "Failed to initiate payment."
            )
            logger.warning("STK Push not accepted (code=%s): %s", response_code or "-", message)
            raise UpstreamUnavailable(message)

        return StkPushResult(
            checkout_request_id=body["CheckoutRequestID"],
            merchant_request_id=body.get("MerchantRequestID", ""),
            response_code=response_code,
            response_description=body.get("ResponseDescription", ""),
            customer_message=body.get("CustomerMessage", ""),
        )

    # -- STK Push Query --

    async def stk_query(self, checkout_request_id: str) -> StkQueryResult | None:
        """Ask the gateway for a prompt's final result.

        Returns None while the gateway still reports the transaction as in
        progress (it answers non-200 in that state).
        """
        timestamp = self.timestamp()
        payload = {
            "BusinessShortCode": self.short_code,
            "Password": self.password(timestamp),
            "Timestamp": timestamp,
            "CheckoutRequestID": checkout_request_id,
        }
        response = await self._post("/mpesa/stkpushquery/v1/query", payload)
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200 or "ResultCode" not in body:
            logger.info(
                "STK query for %s not final (status=%s): %s",
                checkout_request_id,
                response.status_code,
                body.get("errorMessage", ""),
            )
            return None

        return StkQueryResult(
            result_code=int(body["ResultCode"]),
            result_description=str(body.get("ResultDesc", "")),
        )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_client: DarajaClient | None = None


def init_daraja_client(cfg: Settings) -> DarajaClient:
    """Initialise the singleton (called once from app lifespan)."""
    global _client  # noqa: PLW0603
    _client = DarajaClient(
        base_url=cfg.daraja_base_url,
        consumer_key=cfg.DARAJA_CONSUMER_KEY,
        consumer_secret=cfg.DARAJA_CONSUMER_SECRET,
        passkey=cfg.DARAJA_PASSKEY,
        short_code=cfg.DARAJA_BUSINESS_SHORT_CODE,
        callback_url=cfg.DARAJA_CALLBACK_URL,
        timeout=cfg.DARAJA_TIMEOUT_SECONDS,
    )
    if cfg.daraja_configured:
        logger.info(
            "Daraja client initialised (env=%s, short_code=%s)",
            cfg.DARAJA_ENVIRONMENT,
            cfg.DARAJA_BUSINESS_SHORT_CODE,
        )
    else:
        logger.warning("Daraja credentials not configured -- payment initiation will fail")
    return _client


def get_daraja_client() -> DarajaClient:
    """Return the initialised DarajaClient singleton."""
    if _client is None:
        raise RuntimeError("DarajaClient not initialised -- call init_daraja_client() first")
    return _client


async def close_daraja_client() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
