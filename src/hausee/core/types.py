"""Core type definitions shared across all Hausee modules."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class WizardStep(IntEnum):
    """Steps of the agent-matching intake wizard."""

    CONTACT_INFO = 1
    PROPERTY_INTENT = 2
    DETAILS = 3
    REVIEW = 4
    COMPLETE = 5


class IntakeStatus(StrEnum):
    """Lifecycle status of an intake. Only ``draft -> submitted`` is allowed."""

    DRAFT = "draft"
    SUBMITTED = "submitted"


class PropertyIntent(StrEnum):
    """What the user wants to do, selected at step 2."""

    BUY_FIRST = "buy-first"
    BUY_ANOTHER = "buy-another"
    SELL_CURRENT = "sell-current"
    SELL_AND_BUY = "sell-and-buy"


class IntentCategory(StrEnum):
    """Which step-3 question blocks apply for an intent."""

    BUYER = "buyer"
    SELLER = "seller"
    BOTH = "both"


_INTENT_CATEGORIES: dict[PropertyIntent, IntentCategory] = {
    PropertyIntent.BUY_FIRST: IntentCategory.BUYER,
    PropertyIntent.BUY_ANOTHER: IntentCategory.BUYER,
    PropertyIntent.SELL_CURRENT: IntentCategory.SELLER,
    PropertyIntent.SELL_AND_BUY: IntentCategory.BOTH,
}


def intent_category(intent: PropertyIntent | None) -> IntentCategory | None:
    """Map an intent to its question category, or None while unset."""
    if intent is None:
        return None
    return _INTENT_CATEGORIES[intent]


class PreApprovalStatus(StrEnum):
    """Mortgage pre-approval status of a buyer."""

    YES = "yes"
    IN_PROGRESS = "in_progress"
    NO = "no"


class ContactPreference(StrEnum):
    """How the user prefers to be contacted by matched agents."""

    CALL = "call"
    WHATSAPP = "whatsapp"
    EMAIL = "email"


class VerificationStatus(StrEnum):
    """Phone verification sub-flow states."""

    UNSENT = "unsent"
    SENT = "sent"
    VERIFIED = "verified"


class VerificationAction(StrEnum):
    """The verification call currently in flight."""

    SEND = "send"
    VERIFY = "verify"
