"""Phone verification via one-time codes.

Provides the HTTP client for the hosted verification functions and the
client-side sub-flow that gates step 1 of the intake wizard.
"""

from hausee.verification.client import (
    FunctionsVerificationClient,
    VerificationClient,
    VerificationServiceError,
)
from hausee.verification.flow import PhoneVerificationFlow, VerificationBusyError, phone_to_e164
from hausee.verification.models import PhoneVerification, VerificationCheck

__all__ = [
    "FunctionsVerificationClient",
    "PhoneVerification",
    "PhoneVerificationFlow",
    "VerificationBusyError",
    "VerificationCheck",
    "VerificationClient",
    "VerificationServiceError",
    "phone_to_e164",
]
