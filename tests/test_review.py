"""Tests for the step-4 review summary."""

from __future__ import annotations

from hausee.core.types import WizardStep
from hausee.intake.catalog import load_catalog
from hausee.intake.models import WizardState
from hausee.intake.review import build_review
from tests.conftest import BUYER_ANSWERS, CONSENT_ANSWERS, SELLER_ANSWERS


def _state(intent: str | None, **extra) -> WizardState:
    return WizardState(
        property_intent=intent,
        about_you={
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone": "(555) 123-4567",
        },
        buyer_questions=BUYER_ANSWERS,
        seller_questions=SELLER_ANSWERS,
        consent=CONSENT_ANSWERS,
        **extra,
    )


def _items(section) -> dict[str, str]:
    return {item.label: item.value for item in section.items}


class TestSections:
    def test_buyer_only(self, catalog):
        summary = build_review(_state("buy-first"), catalog)
        assert [s.id for s in summary.sections] == ["about_you", "intent", "buyer", "preferences"]

    def test_seller_only(self, catalog):
        summary = build_review(_state("sell-current"), catalog)
        assert [s.id for s in summary.sections] == ["about_you", "intent", "seller", "preferences"]

    def test_sell_and_buy(self, catalog):
        summary = build_review(_state("sell-and-buy"), catalog)
        assert summary.section("buyer") is not None
        assert summary.section("seller") is not None

    def test_edit_steps(self, catalog):
        summary = build_review(_state("sell-and-buy"), catalog)
        assert summary.section("about_you").edit_step == WizardStep.CONTACT_INFO
        assert summary.section("intent").edit_step == WizardStep.PROPERTY_INTENT
        assert summary.section("buyer").edit_step == WizardStep.DETAILS
        assert summary.section("seller").edit_step == WizardStep.DETAILS
        assert summary.section("preferences").edit_step == WizardStep.REVIEW

    def test_unknown_section(self, catalog):
        assert build_review(_state("buy-first"), catalog).section("seller") is None


class TestLabels:
    def test_intent_title(self, catalog):
        summary = build_review(_state("sell-and-buy"), catalog)
        assert _items(summary.section("intent"))["Intent"] == (
            "Sell my current home to buy another home"
        )

    def test_buyer_labels(self, catalog):
        items = _items(build_review(_state("buy-first"), catalog).section("buyer"))
        assert items["Preferred cities"] == "Toronto, Markham"
        assert items["Pre-approval"] == "In progress"
        assert items["Primary residence"] == "Yes"
        assert "Approved amount" not in items

    def test_approved_amount_shown(self, catalog):
        state = _state("buy-first")
        state.buyer_questions.pre_approval_status = "yes"
        state.buyer_questions.mortgage_approved_amount = "850000"
        items = _items(build_review(state, catalog).section("buyer"))
        assert items["Pre-approval"] == "Yes, I have pre-approval"
        assert items["Approved amount"] == "850000"

    def test_seller_labels(self, catalog):
        items = _items(build_review(_state("sell-current"), catalog).section("seller"))
        assert items["Reason for selling"] == "Downsizing"
        assert items["Condition"] == "Good - Minor updates needed"
        assert "Notes" not in items

    def test_about_you(self, catalog):
        state = _state("buy-first")
        state.about_you.has_referral = True
        state.about_you.referral_code = "FRIEND10"
        items = _items(build_review(state, catalog).section("about_you"))
        assert items["Name"] == "Jane Doe"
        assert items["Referral code"] == "FRIEND10"

    def test_preferences(self, catalog):
        items = _items(build_review(_state("buy-first"), catalog).section("preferences"))
        assert items["Contact preference"] == "Email"
        assert items["Working with an agent"] == "No"

    def test_unset_values_are_blank(self):
        summary = build_review(WizardState(), load_catalog())
        assert _items(summary.section("intent"))["Intent"] == ""
        assert _items(summary.section("preferences"))["Contact preference"] == ""
