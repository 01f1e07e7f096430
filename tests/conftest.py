"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from hausee.intake.catalog import load_catalog
from hausee.intake.drafts import MemoryDraftStore
from hausee.intake.engine import IntakeWizard
from hausee.intake.models import Identity
from hausee.intake.validation import StepValidator
from hausee.verification.client import VerificationServiceError
from hausee.verification.flow import PhoneVerificationFlow
from hausee.verification.models import VerificationCheck


VALID_CODE = "123456"
PHONE_DIGITS = "5551234567"


class FakeVerificationClient:
    """Records calls and approves ``VALID_CODE`` unless told to fail."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.checked: list[tuple[str, str]] = []
        self.send_error: str | None = None
        self.check_error: str | None = None

    async def request_verification_code(self, phone: str) -> None:
        self.sent.append(phone)
        if self.send_error is not None:
            raise VerificationServiceError(self.send_error, status_code=500)

    async def check_verification_code(self, phone: str, code: str) -> VerificationCheck:
        self.checked.append((phone, code))
        if self.check_error is not None:
            raise VerificationServiceError(self.check_error, status_code=400)
        if code == VALID_CODE:
            return VerificationCheck(verified=True, status="approved")
        return VerificationCheck(verified=False, status="pending")


def make_identity(**overrides) -> Identity:
    defaults = {
        "user_id": "user-1",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "",
    }
    defaults.update(overrides)
    return Identity(**defaults)


BUYER_ANSWERS = {
    "preferred_cities": ["Toronto", "Markham"],
    "budget_range": "$900K or less",
    "property_types": ["Detached House"],
    "timeline": "Ready to buy in next 3 months",
    "pre_approval_status": "in_progress",
    "is_primary_residence": True,
}

SELLER_ANSWERS = {
    "property_type": "Condo / Condo Townhouse",
    "city": "Oakville",
    "intersection_or_address": "Trafalgar & Upper Middle",
    "price_expectation_range": "$1.1M – $1.3M",
    "selling_timeline": "Anytime in the next 6 months",
    "selling_reason": "downsizing",
    "property_condition": "good",
}

CONSENT_ANSWERS = {
    "communication_consent": True,
    "terms_accepted": True,
    "contact_preference": "email",
}


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def step_validator(catalog):
    return StepValidator(catalog=catalog)


@pytest.fixture
def verification_client():
    return FakeVerificationClient()


@pytest.fixture
def drafts():
    return MemoryDraftStore()


@pytest.fixture
def make_wizard(drafts, verification_client, step_validator, catalog):
    """Factory for wizards sharing the same draft store."""

    def factory(identity: Identity | None = None, **kwargs) -> IntakeWizard:
        return IntakeWizard(
            identity=identity or make_identity(),
            drafts=drafts,
            verification=PhoneVerificationFlow(verification_client),
            validator=step_validator,
            catalog=catalog,
            **kwargs,
        )

    return factory


@pytest.fixture
def wizard(make_wizard):
    return make_wizard()


async def verify_phone(wizard: IntakeWizard, phone: str = PHONE_DIGITS) -> None:
    """Enter and verify a phone number on step 1."""
    wizard.set_phone(phone)
    assert await wizard.send_code()
    assert await wizard.verify_code(VALID_CODE)


async def complete_to_review(wizard: IntakeWizard, intent: str = "buy-first") -> None:
    """Fill every step with valid answers and land on step 4."""
    await verify_phone(wizard)
    assert wizard.next()
    wizard.set_property_intent(intent)
    assert wizard.next()
    if intent in ("buy-first", "buy-another", "sell-and-buy"):
        wizard.update_buyer(**BUYER_ANSWERS)
    if intent in ("sell-current", "sell-and-buy"):
        wizard.update_seller(**SELLER_ANSWERS)
    assert wizard.next()
    wizard.update_consent(**CONSENT_ANSWERS)
