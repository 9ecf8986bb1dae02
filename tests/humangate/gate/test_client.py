"""Tests for VerificationClient."""

import json
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs

import httpx
import pytest

from humangate.errors import VerificationUnavailable
from humangate.gate.client import VerificationClient, parse_verification_body
from humangate.gate.models import VerificationRequest, VerificationResult
from humangate.timeout_config import TimeoutConfig

SECRET = "k" * 40
VERIFY_URL = "https://verify.example/siteverify"


def make_client(handler, calls=None, verify_url=VERIFY_URL):
    """VerificationClient backed by an httpx.MockTransport."""

    def recording_handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return handler(request)

    return VerificationClient(
        secret_key=SECRET,
        verify_url=verify_url,
        timeouts=TimeoutConfig(connect_timeout=1.0, read_timeout=1.0),
        transport=httpx.MockTransport(recording_handler),
    )


class TestParseVerificationBody:
    """Tests for parse_verification_body."""

    def test_success_without_error_codes(self):
        assert parse_verification_body({"success": True}) == VerificationResult(True, [])

    def test_failure_with_error_codes(self):
        result = parse_verification_body(
            {"success": False, "error-codes": ["invalid-input-response", "timeout-or-duplicate"]}
        )

        assert result.success is False
        assert result.error_codes == ["invalid-input-response", "timeout-or-duplicate"]

    def test_null_error_codes_default_to_empty(self):
        assert parse_verification_body({"success": False, "error-codes": None}).error_codes == []

    @pytest.mark.parametrize("body", [
        None,
        [],
        "success",
        {},
        {"success": "true"},
        {"success": 1},
        {"success": True, "error-codes": "bad-request"},
        {"success": False, "error-codes": [1, 2]},
    ])
    def test_malformed_bodies(self, body):
        assert parse_verification_body(body) == VerificationResult(False, ["malformed-response"])


class TestVerify:
    """Tests for VerificationClient.verify."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token_fails_locally(self, token):
        calls = []
        client = make_client(lambda r: httpx.Response(200, json={"success": True}), calls)

        result = await client.verify(client.build_request(token, "10.0.0.1"))

        assert result == VerificationResult(False, ["incorrect-captcha-sol"])
        assert calls == []

    @pytest.mark.asyncio
    async def test_posts_form_encoded_fields(self):
        calls = []
        client = make_client(lambda r: httpx.Response(200, json={"success": True}), calls)

        result = await client.verify(client.build_request("abc", "10.0.0.1"))

        assert result.success is True
        assert len(calls) == 1
        request = calls[0]
        assert request.method == "POST"
        assert str(request.url) == VERIFY_URL
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        form = parse_qs(request.content.decode())
        assert form == {"secret": [SECRET], "response": ["abc"], "remoteip": ["10.0.0.1"]}

    @pytest.mark.asyncio
    async def test_semantic_failure(self):
        client = make_client(lambda r: httpx.Response(
            200, json={"success": False, "error-codes": ["invalid-input-response"]}
        ))

        result = await client.verify(client.build_request("abc"))

        assert result.success is False
        assert result.error_codes == ["invalid-input-response"]

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        client = make_client(lambda r: httpx.Response(200, text="<html>oops</html>"))

        result = await client.verify(client.build_request("abc"))

        assert result == VerificationResult(False, ["malformed-response"])

    @pytest.mark.asyncio
    async def test_connect_error_raises_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(VerificationUnavailable) as exc_info:
            await client.verify(client.build_request("abc"))

        assert SECRET not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_raises_unavailable_without_retry(self):
        calls = []

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = make_client(handler, calls)

        with pytest.raises(VerificationUnavailable):
            await client.verify(client.build_request("abc"))

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_raises_unavailable(self):
        client = make_client(lambda r: httpx.Response(503, text="unavailable"))

        with pytest.raises(VerificationUnavailable):
            await client.verify(client.build_request("abc"))

    @pytest.mark.asyncio
    async def test_own_client_verifies_certificates(self):
        """A client is created per call with verify=True."""
        inner = MagicMock()
        inner.post = AsyncMock(return_value=httpx.Response(200, json={"success": True}))
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=inner)
        context.__aexit__ = AsyncMock(return_value=False)

        with patch("humangate.gate.client.httpx.AsyncClient", return_value=context) as client_cls:
            client = VerificationClient(secret_key=SECRET, verify_url=VERIFY_URL)
            result = await client.verify(client.build_request("abc", "10.0.0.1"))

        assert result.success is True
        kwargs = client_cls.call_args.kwargs
        assert kwargs["verify"] is True
        assert isinstance(kwargs["timeout"], httpx.Timeout)
        inner.post.assert_awaited_once()
        assert inner.post.call_args.kwargs["data"]["response"] == "abc"

    @pytest.mark.asyncio
    async def test_injected_transport_keeps_certificate_checks(self):
        inner = MagicMock()
        inner.post = AsyncMock(return_value=httpx.Response(200, json={"success": True}))
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=inner)
        context.__aexit__ = AsyncMock(return_value=False)
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"success": True}))

        with patch("humangate.gate.client.httpx.AsyncClient", return_value=context) as client_cls:
            client = VerificationClient(secret_key=SECRET, verify_url=VERIFY_URL, transport=transport)
            await client.verify(client.build_request("abc"))

        kwargs = client_cls.call_args.kwargs
        assert kwargs["verify"] is True
        assert kwargs["transport"] is transport

    @pytest.mark.asyncio
    async def test_unparseable_endpoint_raises_unavailable(self):
        calls = []
        client = make_client(
            lambda r: httpx.Response(200, json={"success": True}),
            calls,
            verify_url="https://exa mple.com:bad/siteverify",
        )

        with pytest.raises(VerificationUnavailable):
            await client.verify(client.build_request("abc"))
        assert calls == []


def test_request_repr_hides_secret_and_address():
    request = VerificationRequest(proof_token="abc", caller_address="10.0.0.1", shared_secret=SECRET)

    assert SECRET not in repr(request)
    assert "10.0.0.1" not in repr(request)
