"""Shared models for the agent-matching intake wizard."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hausee.core.types import (
    ContactPreference,
    IntakeStatus,
    IntentCategory,
    PreApprovalStatus,
    PropertyIntent,
    WizardStep,
    intent_category,
)

NOTES_MAX_LENGTH = 500
MAX_PREFERRED_CITIES = 3

# Field name -> human-readable message. A missing key means the field is valid.
ErrorMap = dict[str, str]


def _blank_to_none(value: Any) -> Any:
    # Drafts written by the browser client store unset selects as "".
    if isinstance(value, str) and not value.strip():
        return None
    return value


class IntakeModel(BaseModel):
    """Base for wizard records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class Identity(IntakeModel):
    """Snapshot of the authenticated user the wizard is filled in for."""

    user_id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""


class AboutYou(IntakeModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    has_referral: bool = False
    referral_code: str = ""


class BuyerQuestions(IntakeModel):
    preferred_cities: list[str] = Field(default_factory=list)
    budget_range: str = ""
    property_types: list[str] = Field(default_factory=list)
    timeline: str = ""
    pre_approval_status: PreApprovalStatus | None = None
    mortgage_approved_amount: str = ""
    is_primary_residence: bool | None = None

    blank_status_to_none = field_validator("pre_approval_status", mode="before")(
        _blank_to_none
    )


class SellerQuestions(IntakeModel):
    property_type: str = ""
    city: str = ""
    intersection_or_address: str = ""
    price_expectation_range: str = ""
    selling_timeline: str = ""
    selling_reason: str = ""
    property_condition: str = ""
    property_notes: str = ""


class Consent(IntakeModel):
    communication_consent: bool = False
    terms_accepted: bool = False
    has_current_agent: bool = False
    contact_preference: ContactPreference | None = None
    additional_notes: str = ""

    blank_preference_to_none = field_validator("contact_preference", mode="before")(
        _blank_to_none
    )


class BuyerOnly(IntakeModel):
    category: Literal["buyer"] = "buyer"
    buyer: BuyerQuestions


class SellerOnly(IntakeModel):
    category: Literal["seller"] = "seller"
    seller: SellerQuestions


class BuyerAndSeller(IntakeModel):
    category: Literal["both"] = "both"
    buyer: BuyerQuestions
    seller: SellerQuestions


QuestionSet = Annotated[
    Union[BuyerOnly, SellerOnly, BuyerAndSeller],
    Field(discriminator="category"),
]


class WizardState(IntakeModel):
    """Runtime state of an intake wizard instance.

    Both question blocks are always carried so that re-selecting an intent
    restores earlier answers; only the block(s) selected by
    ``property_intent`` are validated, reviewed and submitted.
    """

    current_step: int = Field(default=WizardStep.CONTACT_INFO, ge=1, le=5)
    status: IntakeStatus = IntakeStatus.DRAFT
    property_intent: PropertyIntent | None = None
    about_you: AboutYou = Field(default_factory=AboutYou)
    buyer_questions: BuyerQuestions = Field(default_factory=BuyerQuestions)
    seller_questions: SellerQuestions = Field(default_factory=SellerQuestions)
    consent: Consent = Field(default_factory=Consent)
    submitted_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    blank_intent_to_none = field_validator("property_intent", mode="before")(_blank_to_none)

    @property
    def intent_category(self) -> IntentCategory | None:
        return intent_category(self.property_intent)

    @property
    def is_buyer(self) -> bool:
        return self.intent_category in (IntentCategory.BUYER, IntentCategory.BOTH)

    @property
    def is_seller(self) -> bool:
        return self.intent_category in (IntentCategory.SELLER, IntentCategory.BOTH)

    @property
    def is_submitted(self) -> bool:
        return self.status == IntakeStatus.SUBMITTED

    def active_questions(self) -> BuyerOnly | SellerOnly | BuyerAndSeller | None:
        """Return the step-3 question blocks selected by the current intent."""
        category = self.intent_category
        if category == IntentCategory.BUYER:
            return BuyerOnly(buyer=self.buyer_questions.model_copy(deep=True))
        if category == IntentCategory.SELLER:
            return SellerOnly(seller=self.seller_questions.model_copy(deep=True))
        if category == IntentCategory.BOTH:
            return BuyerAndSeller(
                buyer=self.buyer_questions.model_copy(deep=True),
                seller=self.seller_questions.model_copy(deep=True),
            )
        return None

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class SubmittedIntake(IntakeModel):
    """The final record produced when a wizard is submitted."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str = ""
    email: str
    property_intent: PropertyIntent
    about_you: AboutYou
    questions: QuestionSet
    consent: Consent
    submitted_at: datetime
    status: IntakeStatus = IntakeStatus.SUBMITTED
