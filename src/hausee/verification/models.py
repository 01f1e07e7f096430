"""Phone verification data models."""

from __future__ import annotations

from pydantic import BaseModel

from hausee.core.types import VerificationAction, VerificationStatus


class VerificationCheck(BaseModel):
    """Result of checking a one-time code with the verification service."""

    verified: bool = False
    status: str = ""


class PhoneVerification(BaseModel):
    """Client-side state of the phone verification sub-flow.

    ``verified_phone`` holds the exact 10-digit string that was verified;
    verification does not carry over to any other number.
    """

    status: VerificationStatus = VerificationStatus.UNSENT
    code: str = ""
    loading: VerificationAction | None = None
    error: str | None = None
    verified_phone: str | None = None

    def is_verified_for(self, phone_digits: str) -> bool:
        return (
            self.status == VerificationStatus.VERIFIED
            and self.verified_phone is not None
            and self.verified_phone == phone_digits
        )
