# This project was developed with assistance from AI tools.
"""Tests for the Daraja client using httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from src.core.errors import UpstreamUnavailable
from src.services.daraja import DarajaClient


def _client(handler):
    return DarajaClient(
        base_url="https://sandbox.test",
        consumer_key="key",
        consumer_secret="secret",
        passkey="passkey",
        short_code="174379",
        callback_url="https://portal.test/mpesa/callback",
        transport=httpx.MockTransport(handler),
    )


def _oauth_ok(request: httpx.Request) -> httpx.Response | None:
    if request.url.path == "/oauth/v1/generate":
        return httpx.Response(200, json={"access_token": "tok-1", "expires_in": "3599"})
    return None


def test_password_is_base64_of_shortcode_passkey_timestamp():
    client = _client(lambda r: httpx.Response(500))
    assert base64.b64decode(client.password("20260301120000")).decode() == "174379passkey20260301120000"


def test_stk_push_payload_shape():
    client = _client(lambda r: httpx.Response(500))
    payload = client.build_stk_push_payload(4000, "254712345678", "Plot 12", "Payment of Installment", "20260301120000")
    assert payload["TransactionType"] == "CustomerPayBillOnline"
    assert payload["PartyA"] == payload["PhoneNumber"] == "254712345678"
    assert payload["PartyB"] == payload["BusinessShortCode"] == "174379"
    assert payload["CallBackURL"] == "https://portal.test/mpesa/callback"
    assert payload["AccountReference"] == "Plot 12"
    assert payload["Amount"] == 4000


@pytest.mark.asyncio
async def test_stk_push_success_returns_gateway_ids():
    seen = []

    def handler(request):
        seen.append(request)
        return _oauth_ok(request) or httpx.Response(
            200,
            json={
                "MerchantRequestID": "mr-1",
                "CheckoutRequestID": "ws_CO_1",
                "ResponseCode": "0",
                "ResponseDescription": "Success. Request accepted for processing",
                "CustomerMessage": "Success. Request accepted for processing",
            },
        )

    client = _client(handler)
    result = await client.stk_push(4000, "254712345678", "Plot 12", "Payment of Installment")
    await client.aclose()

    assert result.checkout_request_id == "ws_CO_1"
    assert result.merchant_request_id == "mr-1"
    assert result.response_code == "0"
    push = seen[-1]
    assert push.headers["Authorization"] == "Bearer tok-1"
    assert json.loads(push.content)["Amount"] == 4000


@pytest.mark.asyncio
async def test_oauth_token_is_cached_between_calls():
    oauth_calls = []

    def handler(request):
        if request.url.path == "/oauth/v1/generate":
            oauth_calls.append(request)
        return _oauth_ok(request) or httpx.Response(
            200, json={"CheckoutRequestID": "ws_CO_1", "ResponseCode": "0"}
        )

    client = _client(handler)
    await client.stk_push(1, "254712345678", "ref", "desc")
    await client.stk_push(1, "254712345678", "ref", "desc")
    assert len(oauth_calls) == 1


@pytest.mark.asyncio
async def test_stk_push_rejection_surfaces_gateway_error_message():
    def handler(request):
        return _oauth_ok(request) or httpx.Response(
            400, json={"errorCode": "400.002.02", "errorMessage": "Bad Request - Invalid PhoneNumber"}
        )

    with pytest.raises(UpstreamUnavailable, match="Invalid PhoneNumber"):
        await _client(handler).stk_push(1, "254700000000", "ref", "desc")


@pytest.mark.asyncio
async def test_stk_push_non_zero_response_code_is_rejected():
    def handler(request):
        return _oauth_ok(request) or httpx.Response(
            200, json={"ResponseCode": "1", "errorMessage": "Unable to lock subscriber"}
        )

    with pytest.raises(UpstreamUnavailable, match="Unable to lock subscriber"):
        await _client(handler).stk_push(1, "254712345678", "ref", "desc")


@pytest.mark.asyncio
async def test_stk_push_without_checkout_id_is_rejected():
    def handler(request):
        return _oauth_ok(request) or httpx.Response(
            200, json={"ResponseCode": "0", "ResponseDescription": "Accepted without id"}
        )

    with pytest.raises(UpstreamUnavailable, match="Accepted without id"):
        await _client(handler).stk_push(1, "254712345678", "ref", "desc")


@pytest.mark.asyncio
async def test_oauth_failure_is_upstream_unavailable():
    with pytest.raises(UpstreamUnavailable):
        await _client(lambda r: httpx.Response(401, text="nope")).stk_push(1, "254712345678", "r", "d")


@pytest.mark.asyncio
async def test_network_error_is_upstream_unavailable():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(UpstreamUnavailable):
        await _client(handler).stk_push(1, "254712345678", "r", "d")


@pytest.mark.asyncio
async def test_stk_query_final_result():
    def handler(request):
        return _oauth_ok(request) or httpx.Response(
            200, json={"ResultCode": "1032", "ResultDesc": "Request cancelled by user"}
        )

    result = await _client(handler).stk_query("ws_CO_1")
    assert result.result_code == 1032
    assert result.result_description == "Request cancelled by user"


@pytest.mark.asyncio
async def test_stk_query_in_progress_returns_none():
    def handler(request):
        return _oauth_ok(request) or httpx.Response(
            500, json={"errorCode": "500.001.1001", "errorMessage": "The transaction is being processed"}
        )

    assert await _client(handler).stk_query("ws_CO_1") is None
