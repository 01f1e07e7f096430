"""Client for the hosted phone verification functions."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from hausee.core.config import VerificationConfig
from hausee.verification.models import VerificationCheck

logger = logging.getLogger(__name__)

SEND_PATH = "/functions/v1/send-otp"
VERIFY_PATH = "/functions/v1/verify-otp"


class VerificationServiceError(Exception):
    """The verification service rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@runtime_checkable
class VerificationClient(Protocol):
    """Protocol for one-time-code verification services."""

    async def request_verification_code(self, phone: str) -> None: ...

    async def check_verification_code(self, phone: str, code: str) -> VerificationCheck: ...


class FunctionsVerificationClient:
    """Calls the ``send-otp`` / ``verify-otp`` serverless functions.

    Both functions take a JSON body and answer with JSON. A non-2xx status or
    an ``error`` field in the body is a failure; the server's message is
    surfaced when present.
    """

    def __init__(
        self,
        config: VerificationConfig | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or VerificationConfig()
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self.config.anon_key:
            headers["apikey"] = self.config.anon_key
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._http = httpx.AsyncClient(
            base_url=self.config.functions_url,
            timeout=httpx.Timeout(self.config.timeout_seconds),
            headers=headers,
            transport=transport,
        )

    # -- public API ----------------------------------------------------------

    async def request_verification_code(self, phone: str) -> None:
        await self._call(SEND_PATH, {"phone": phone}, "Send OTP failed")

    async def check_verification_code(self, phone: str, code: str) -> VerificationCheck:
        data = await self._call(VERIFY_PATH, {"phone": phone, "code": code}, "Verify OTP failed")
        return VerificationCheck(
            verified=data.get("verified") is True,
            status=str(data.get("status", "")),
        )

    async def close(self) -> None:
        await self._http.aclose()

    # -- internal ------------------------------------------------------------

    async def _call(self, path: str, payload: dict[str, Any], failure: str) -> dict[str, Any]:
        try:
            resp = await self._http.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Verification call to %s failed: %s", path, exc)
            raise VerificationServiceError(f"{failure}: service unreachable") from exc

        data = _json_body(resp)
        if resp.is_success and not data.get("error"):
            return data

        message = data.get("error") or data.get("message") or f"{failure} ({resp.status_code})"
        logger.warning(
            "Verification call to %s returned %d: %s", path, resp.status_code, message
        )
        raise VerificationServiceError(str(message), status_code=resp.status_code)


def _json_body(resp: httpx.Response) -> dict[str, Any]:
    # Non-JSON bodies are treated as empty.
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
