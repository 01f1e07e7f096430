"""Step validation for the intake wizard.

Validation is pure: given a step number and the wizard state it returns an
``ErrorMap`` and never touches the network or storage.
"""

from __future__ import annotations

from typing import Any, Callable, NamedTuple

from hausee.core.types import WizardStep
from hausee.intake.catalog import IntakeCatalog
from hausee.intake.models import NOTES_MAX_LENGTH, ErrorMap, WizardState
from hausee.intake.validators.common import VALIDATORS, digits_only
from hausee.intake.validators.cross_field import CrossFieldValidator
from hausee.verification.models import PhoneVerification

PHONE_UNVERIFIED_MESSAGE = "Please verify your phone number (OTP) before continuing"
NOTES_TOO_LONG_MESSAGE = f"Notes must be {NOTES_MAX_LENGTH} characters or fewer"


class FieldRule(NamedTuple):
    """Checks for one field, run in order until the first failure.

    ``section`` is the WizardState attribute holding the field, or ``""`` for
    fields stored on the state itself. ``key`` is the wire (camelCase) name,
    which is also the error key.
    """

    key: str
    section: str
    checks: tuple[tuple[str, str], ...]


ABOUT_YOU_RULES = (
    FieldRule("firstName", "about_you", (
        ("min_length:length=2", "First name must be at least 2 characters"),
    )),
    FieldRule("lastName", "about_you", (
        ("min_length:length=2", "Last name must be at least 2 characters"),
    )),
    FieldRule("phone", "about_you", (
        ("digits:count=10", "Please enter a valid 10-digit phone number"),
    )),
)

INTENT_RULES = (
    FieldRule("propertyIntent", "", (
        ("required", "Please select your property intent"),
    )),
)

BUYER_RULES = (
    FieldRule("preferredCities", "buyer_questions", (
        ("required", "Please select at least one city"),
        ("max_items:count=3", "You can select up to 3 cities"),
        ("one_of:options=cities", "Please select cities from the list"),
    )),
    FieldRule("budgetRange", "buyer_questions", (
        ("required", "Please select your budget range"),
        ("one_of:options=budget_ranges", "Please select your budget range"),
    )),
    FieldRule("propertyTypes", "buyer_questions", (
        ("required", "Please select at least one property type"),
        ("one_of:options=property_types", "Please select at least one property type"),
    )),
    FieldRule("timeline", "buyer_questions", (
        ("required", "Please select your timeline"),
        ("one_of:options=buyer_timelines", "Please select your timeline"),
    )),
    FieldRule("preApprovalStatus", "buyer_questions", (
        ("required", "Please select your pre-approval status"),
    )),
    FieldRule("isPrimaryResidence", "buyer_questions", (
        ("required", "Please indicate if this is for primary residence"),
    )),
)

SELLER_RULES = (
    FieldRule("propertyType", "seller_questions", (
        ("required", "Please select property type"),
        ("one_of:options=property_types", "Please select property type"),
    )),
    FieldRule("city", "seller_questions", (
        ("required", "Please select a city"),
        ("one_of:options=cities", "Please select a city"),
    )),
    FieldRule("intersectionOrAddress", "seller_questions", (
        ("required", "Please enter intersection or address"),
    )),
    FieldRule("priceExpectationRange", "seller_questions", (
        ("required", "Please select price expectation range"),
        ("one_of:options=price_expectation_ranges", "Please select price expectation range"),
    )),
    FieldRule("sellingTimeline", "seller_questions", (
        ("required", "Please select selling timeline"),
        ("one_of:options=selling_timelines", "Please select selling timeline"),
    )),
    FieldRule("sellingReason", "seller_questions", (
        ("required", "Please select reason for selling"),
        ("one_of:options=selling_reasons", "Please select reason for selling"),
    )),
    FieldRule("propertyCondition", "seller_questions", (
        ("required", "Please select property condition"),
        ("one_of:options=property_conditions", "Please select property condition"),
    )),
    FieldRule("propertyNotes", "seller_questions", (
        (f"max_length:length={NOTES_MAX_LENGTH}", NOTES_TOO_LONG_MESSAGE),
    )),
)

CONSENT_RULES = (
    FieldRule("communicationConsent", "consent", (
        ("accepted", "You must consent to receive communication"),
    )),
    FieldRule("termsAccepted", "consent", (
        ("accepted", "You must accept all terms to continue"),
    )),
    FieldRule("contactPreference", "consent", (
        ("required", "Please select your preferred contact method"),
    )),
    FieldRule("additionalNotes", "consent", (
        (f"max_length:length={NOTES_MAX_LENGTH}", NOTES_TOO_LONG_MESSAGE),
    )),
)


def _parse_spec(spec: str) -> tuple[str, dict[str, Any]]:
    # Validator specs may carry params, e.g. "digits:count=10".
    parts = spec.split(":", 1)
    params: dict[str, Any] = {}
    if len(parts) > 1:
        for pair in parts[1].split(","):
            k, _, v = pair.partition("=")
            params[k.strip()] = v.strip()
    return parts[0], params


def _section_data(state: WizardState, section: str) -> dict[str, Any]:
    if not section:
        return state.model_dump(mode="json", by_alias=True, include={"property_intent"})
    return getattr(state, section).model_dump(mode="json", by_alias=True)


class StepValidator:
    """Registry-based validator for the five wizard steps.

    Field rules run first; cross-field rules loaded from YAML only add errors
    for fields that passed their own checks.
    """

    def __init__(
        self,
        catalog: IntakeCatalog | None = None,
        cross_field: CrossFieldValidator | None = None,
    ) -> None:
        self._validators: dict[str, Callable[..., str | None]] = dict(VALIDATORS)
        self._catalog = catalog
        self._cross_field = cross_field or CrossFieldValidator()

    def register(self, name: str, fn: Callable[..., str | None]) -> None:
        self._validators[name] = fn

    def check_rule(self, rule: FieldRule, value: Any) -> str | None:
        """Run one rule's checks. Returns the first failing check's message."""
        for spec, message in rule.checks:
            name, params = _parse_spec(spec)
            fn = self._validators.get(name)
            if fn is None:
                continue
            if fn(value, catalog=self._catalog, **params):
                return message
        return None

    def validate(
        self,
        step: int,
        state: WizardState,
        verification: PhoneVerification | None = None,
    ) -> ErrorMap:
        """Validate one step of ``state``. An empty map means the step is valid."""
        errors: ErrorMap = {}

        if step == WizardStep.CONTACT_INFO:
            self._run_rules(ABOUT_YOU_RULES, state, errors)
            self._run_cross_field("about_you", state, errors)
            phone_digits = digits_only(state.about_you.phone)
            verified = verification is not None and verification.is_verified_for(phone_digits)
            if "phone" not in errors and not verified:
                errors["phone"] = PHONE_UNVERIFIED_MESSAGE

        elif step == WizardStep.PROPERTY_INTENT:
            self._run_rules(INTENT_RULES, state, errors)

        elif step == WizardStep.DETAILS:
            if state.intent_category is None:
                self._run_rules(INTENT_RULES, state, errors)
            if state.is_buyer:
                self._run_rules(BUYER_RULES, state, errors)
                self._run_cross_field("buyer_questions", state, errors)
            if state.is_seller:
                self._run_rules(SELLER_RULES, state, errors)
                self._run_cross_field("seller_questions", state, errors)

        elif step == WizardStep.REVIEW:
            self._run_rules(CONSENT_RULES, state, errors)

        return errors

    def validate_field(
        self,
        step: int,
        key: str,
        state: WizardState,
        verification: PhoneVerification | None = None,
    ) -> str | None:
        """Return the current error for one field, or None if it is valid."""
        return self.validate(step, state, verification).get(key)

    def _run_rules(
        self, rules: tuple[FieldRule, ...], state: WizardState, errors: ErrorMap
    ) -> None:
        cache: dict[str, dict[str, Any]] = {}
        for rule in rules:
            if rule.section not in cache:
                cache[rule.section] = _section_data(state, rule.section)
            message = self.check_rule(rule, cache[rule.section].get(rule.key))
            if message:
                errors[rule.key] = message

    def _run_cross_field(self, section: str, state: WizardState, errors: ErrorMap) -> None:
        results = self._cross_field.validate(section, _section_data(state, section))
        for key, messages in results.items():
            if key not in errors and messages:
                errors[key] = messages[0]
