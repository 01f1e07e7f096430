"""Read-only review summary shown on step 4."""

from __future__ import annotations

from pydantic import BaseModel, Field

from hausee.core.types import WizardStep
from hausee.intake.catalog import IntakeCatalog
from hausee.intake.models import BuyerQuestions, SellerQuestions, WizardState


class ReviewItem(BaseModel):
    label: str
    value: str


class ReviewSection(BaseModel):
    """One group of answers with the step to jump back to for editing."""

    id: str
    title: str
    edit_step: int
    items: list[ReviewItem] = Field(default_factory=list)


class ReviewSummary(BaseModel):
    sections: list[ReviewSection] = Field(default_factory=list)

    def section(self, section_id: str) -> ReviewSection | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None


def _yes_no(value: bool | None) -> str:
    if value is None:
        return ""
    return "Yes" if value else "No"


def _about_you(state: WizardState) -> ReviewSection:
    about = state.about_you
    items = [
        ReviewItem(label="Name", value=f"{about.first_name} {about.last_name}".strip()),
        ReviewItem(label="Email", value=about.email),
        ReviewItem(label="Phone", value=about.phone),
    ]
    if about.has_referral:
        items.append(ReviewItem(label="Referral code", value=about.referral_code))
    return ReviewSection(
        id="about_you", title="About You", edit_step=WizardStep.CONTACT_INFO, items=items
    )


def _intent(state: WizardState, catalog: IntakeCatalog) -> ReviewSection:
    return ReviewSection(
        id="intent",
        title="Your Goal",
        edit_step=WizardStep.PROPERTY_INTENT,
        items=[ReviewItem(label="Intent", value=catalog.label("intents", state.property_intent))],
    )


def _buyer(buyer: BuyerQuestions, catalog: IntakeCatalog) -> ReviewSection:
    items = [
        ReviewItem(label="Preferred cities", value=", ".join(buyer.preferred_cities)),
        ReviewItem(label="Budget", value=buyer.budget_range),
        ReviewItem(label="Property types", value=", ".join(buyer.property_types)),
        ReviewItem(label="Timeline", value=buyer.timeline),
        ReviewItem(
            label="Pre-approval",
            value=catalog.label("pre_approval_statuses", buyer.pre_approval_status),
        ),
    ]
    if buyer.mortgage_approved_amount:
        items.append(ReviewItem(label="Approved amount", value=buyer.mortgage_approved_amount))
    items.append(ReviewItem(label="Primary residence", value=_yes_no(buyer.is_primary_residence)))
    return ReviewSection(
        id="buyer", title="Home Search", edit_step=WizardStep.DETAILS, items=items
    )


def _seller(seller: SellerQuestions, catalog: IntakeCatalog) -> ReviewSection:
    items = [
        ReviewItem(label="Property type", value=seller.property_type),
        ReviewItem(label="City", value=seller.city),
        ReviewItem(label="Intersection or address", value=seller.intersection_or_address),
        ReviewItem(label="Price expectation", value=seller.price_expectation_range),
        ReviewItem(label="Selling timeline", value=seller.selling_timeline),
        ReviewItem(
            label="Reason for selling",
            value=catalog.label("selling_reasons", seller.selling_reason),
        ),
        ReviewItem(
            label="Condition",
            value=catalog.label("property_conditions", seller.property_condition),
        ),
    ]
    if seller.property_notes:
        items.append(ReviewItem(label="Notes", value=seller.property_notes))
    return ReviewSection(
        id="seller", title="Your Property", edit_step=WizardStep.DETAILS, items=items
    )


def _preferences(state: WizardState, catalog: IntakeCatalog) -> ReviewSection:
    consent = state.consent
    items = [
        ReviewItem(label="Working with an agent", value=_yes_no(consent.has_current_agent)),
        ReviewItem(
            label="Contact preference",
            value=catalog.label("contact_preferences", consent.contact_preference),
        ),
    ]
    if consent.additional_notes:
        items.append(ReviewItem(label="Additional notes", value=consent.additional_notes))
    return ReviewSection(
        id="preferences", title="Preferences", edit_step=WizardStep.REVIEW, items=items
    )


def build_review(state: WizardState, catalog: IntakeCatalog) -> ReviewSummary:
    """Summarise the answers, showing only the question blocks the intent selects."""
    sections = [_about_you(state), _intent(state, catalog)]
    if state.is_buyer:
        sections.append(_buyer(state.buyer_questions, catalog))
    if state.is_seller:
        sections.append(_seller(state.seller_questions, catalog))
    sections.append(_preferences(state, catalog))
    return ReviewSummary(sections=sections)
