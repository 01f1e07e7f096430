"""Tests for the hosted verification functions client."""

from __future__ import annotations

import json

import httpx
import pytest

from hausee.core.config import VerificationConfig
from hausee.verification.client import (
    FunctionsVerificationClient,
    VerificationClient,
    VerificationServiceError,
)


BASE_URL = "http://functions.test"
SEND_URL = f"{BASE_URL}/functions/v1/send-otp"
VERIFY_URL = f"{BASE_URL}/functions/v1/verify-otp"


def _client(**overrides) -> FunctionsVerificationClient:
    config = VerificationConfig(functions_url=BASE_URL, anon_key="anon-key", **overrides)
    return FunctionsVerificationClient(config=config, access_token="user-token")


class TestSendCode:
    @pytest.mark.asyncio
    async def test_posts_phone(self, httpx_mock):
        httpx_mock.add_response(url=SEND_URL, method="POST", json={"status": "pending"})
        client = _client()
        try:
            await client.request_verification_code("+15551234567")
            request = httpx_mock.get_request()
            assert json.loads(request.content) == {"phone": "+15551234567"}
            assert request.headers["apikey"] == "anon-key"
            assert request.headers["Authorization"] == "Bearer user-token"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_server_error_message(self, httpx_mock):
        httpx_mock.add_response(
            url=SEND_URL, method="POST", status_code=400, json={"error": "Invalid phone"}
        )
        client = _client()
        try:
            with pytest.raises(VerificationServiceError) as exc_info:
                await client.request_verification_code("+15551234567")
            assert exc_info.value.message == "Invalid phone"
            assert exc_info.value.status_code == 400
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_error_field_on_success_status(self, httpx_mock):
        httpx_mock.add_response(url=SEND_URL, method="POST", json={"error": "Rate limited"})
        client = _client()
        try:
            with pytest.raises(VerificationServiceError, match="Rate limited"):
                await client.request_verification_code("+15551234567")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_fallback_message(self, httpx_mock):
        httpx_mock.add_response(url=SEND_URL, method="POST", status_code=502, text="Bad gateway")
        client = _client()
        try:
            with pytest.raises(VerificationServiceError) as exc_info:
                await client.request_verification_code("+15551234567")
            assert exc_info.value.message == "Send OTP failed (502)"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_unreachable(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=SEND_URL)
        client = _client()
        try:
            with pytest.raises(VerificationServiceError, match="service unreachable"):
                await client.request_verification_code("+15551234567")
        finally:
            await client.close()


class TestCheckCode:
    @pytest.mark.asyncio
    async def test_verified(self, httpx_mock):
        httpx_mock.add_response(
            url=VERIFY_URL, method="POST", json={"verified": True, "status": "approved"}
        )
        client = _client()
        try:
            check = await client.check_verification_code("+15551234567", "123456")
            assert check.verified is True
            assert check.status == "approved"
            body = json.loads(httpx_mock.get_request().content)
            assert body == {"phone": "+15551234567", "code": "123456"}
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_not_verified(self, httpx_mock):
        httpx_mock.add_response(url=VERIFY_URL, method="POST", json={"status": "pending"})
        client = _client()
        try:
            check = await client.check_verification_code("+15551234567", "000000")
            assert check.verified is False
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_truthy_non_boolean_is_not_verified(self, httpx_mock):
        httpx_mock.add_response(url=VERIFY_URL, method="POST", json={"verified": "yes"})
        client = _client()
        try:
            check = await client.check_verification_code("+15551234567", "123456")
            assert check.verified is False
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_message_field(self, httpx_mock):
        httpx_mock.add_response(
            url=VERIFY_URL, method="POST", status_code=400, json={"message": "Code expired"}
        )
        client = _client()
        try:
            with pytest.raises(VerificationServiceError, match="Code expired"):
                await client.check_verification_code("+15551234567", "123456")
        finally:
            await client.close()


class TestProtocol:
    @pytest.mark.asyncio
    async def test_satisfies_protocol(self):
        client = FunctionsVerificationClient()
        try:
            assert isinstance(client, VerificationClient)
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_no_auth_headers_without_credentials(self, httpx_mock):
        httpx_mock.add_response(url="http://localhost:54321/functions/v1/send-otp", json={})
        client = FunctionsVerificationClient()
        try:
            await client.request_verification_code("+15551234567")
            request = httpx_mock.get_request()
            assert "apikey" not in request.headers
            assert "Authorization" not in request.headers
        finally:
            await client.close()
