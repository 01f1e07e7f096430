"""Phone verification sub-flow for step 1 of the intake wizard."""

from __future__ import annotations

import logging
import re

from hausee.core.types import VerificationAction, VerificationStatus
from hausee.intake.validators.common import digits_only
from hausee.verification.client import VerificationClient, VerificationServiceError
from hausee.verification.models import PhoneVerification

logger = logging.getLogger(__name__)

INVALID_PHONE_MESSAGE = "Please enter a valid 10-digit phone number"
INVALID_CODE_FORMAT_MESSAGE = "Please enter a 6-digit verification code"
SEND_FAILED_MESSAGE = "Failed to send verification code. Please try again."
INVALID_CODE_MESSAGE = "Invalid verification code"

_CODE_PATTERN = re.compile(r"\d{6}")


class VerificationBusyError(Exception):
    """A send or verify call is already in flight."""


def phone_to_e164(phone: str) -> str | None:
    """Convert a 10-digit North American number to E.164, or None."""
    digits = digits_only(phone)
    if len(digits) == 10:
        return f"+1{digits}"
    return None


class PhoneVerificationFlow:
    """Requests and checks one-time codes against a verification service.

    States move ``unsent -> sent -> verified``. Any edit of the phone number
    must call :meth:`reset`. Only one call may be in flight at a time; service
    failures become a single error message on the state and are never retried.
    """

    def __init__(self, client: VerificationClient) -> None:
        self._client = client
        self._state = PhoneVerification()

    @property
    def state(self) -> PhoneVerification:
        return self._state

    @property
    def status(self) -> VerificationStatus:
        return self._state.status

    def is_verified_for(self, phone: str) -> bool:
        return self._state.is_verified_for(digits_only(phone))

    def reset(self) -> None:
        """Discard any sent code, entered code, error and verification."""
        self._state = PhoneVerification()

    def set_code(self, code: str) -> None:
        self._state.code = code
        self._state.error = None

    async def request_code(self, phone: str) -> bool:
        """Ask the service to text a code to ``phone``.

        Returns:
            True if the service accepted the request.

        Raises:
            VerificationBusyError: If another call is in flight.
        """
        self._ensure_idle()
        e164 = phone_to_e164(phone)
        if e164 is None:
            self._state.error = INVALID_PHONE_MESSAGE
            return False

        state = self._state
        state.loading = VerificationAction.SEND
        state.error = None
        try:
            await self._client.request_verification_code(e164)
        except VerificationServiceError as exc:
            state.error = exc.message or SEND_FAILED_MESSAGE
            return False
        finally:
            state.loading = None

        if self._is_stale(state):
            return False
        if state.status == VerificationStatus.UNSENT:
            state.status = VerificationStatus.SENT
        logger.info("Verification code sent to %s", _mask(e164))
        return True

    async def submit_code(self, phone: str, code: str | None = None) -> bool:
        """Check ``code`` (or the code entered via :meth:`set_code`).

        Returns:
            True if the service approved the code.

        Raises:
            VerificationBusyError: If another call is in flight.
        """
        self._ensure_idle()
        if code is not None:
            self._state.code = code

        e164 = phone_to_e164(phone)
        if e164 is None:
            self._state.error = INVALID_PHONE_MESSAGE
            return False
        if not _CODE_PATTERN.fullmatch(self._state.code):
            self._state.error = INVALID_CODE_FORMAT_MESSAGE
            return False

        state = self._state
        state.loading = VerificationAction.VERIFY
        state.error = None
        try:
            check = await self._client.check_verification_code(e164, state.code)
        except VerificationServiceError as exc:
            state.error = exc.message or INVALID_CODE_MESSAGE
            return False
        finally:
            state.loading = None

        if self._is_stale(state):
            return False
        if not check.verified:
            logger.info("Verification code rejected (status=%s)", check.status or "unknown")
            state.error = INVALID_CODE_MESSAGE
            return False

        state.status = VerificationStatus.VERIFIED
        state.verified_phone = digits_only(phone)
        state.error = None
        logger.info("Phone %s verified", _mask(e164))
        return True

    def _is_stale(self, state: PhoneVerification) -> bool:
        # The phone was edited while the call was in flight.
        if state is self._state:
            return False
        logger.info("Discarding verification result for a replaced phone number")
        return True

    def _ensure_idle(self) -> None:
        if self._state.loading is not None:
            raise VerificationBusyError(
                f"Verification {self._state.loading.value} already in progress."
            )


def _mask(e164: str) -> str:
    return f"****{e164[-4:]}"
