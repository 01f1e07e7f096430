"""Agent-matching intake wizard state machine."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from hausee.core.types import IntakeStatus, PropertyIntent, WizardStep
from hausee.intake.catalog import IntakeCatalog, load_catalog
from hausee.intake.drafts import DEFAULT_DRAFT_KEY, DraftStore, clear_draft, load_draft
from hausee.intake.models import (
    MAX_PREFERRED_CITIES,
    NOTES_MAX_LENGTH,
    AboutYou,
    BuyerQuestions,
    Consent,
    ErrorMap,
    Identity,
    SellerQuestions,
    SubmittedIntake,
    WizardState,
)
from hausee.intake.review import ReviewSummary, build_review
from hausee.intake.validation import NOTES_TOO_LONG_MESSAGE, StepValidator
from hausee.intake.validators.common import digits_only
from hausee.verification.flow import PhoneVerificationFlow

logger = logging.getLogger(__name__)

StateListener = Callable[[WizardState], None]

CITY_LIMIT_MESSAGE = f"You can select up to {MAX_PREFERRED_CITIES} cities"
UNKNOWN_OPTION_MESSAGE = "Please select from the available options"
EMAIL_READ_ONLY_MESSAGE = "Email comes from your account and cannot be changed."

_LAST_EDITABLE_STEP = WizardStep.REVIEW


class WizardClosedError(Exception):
    """The wizard has been submitted and accepts no further changes."""


def format_phone(value: str) -> str:
    """Format up to 10 digits as ``(555) 123-4567`` while typing."""
    digits = digits_only(value)[:10]
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


class IntakeWizard:
    """Five-step intake wizard owned by a single user.

    Resumes from a local draft when one exists, otherwise starts fresh at
    step 1. The identity snapshot always supplies the email and fills in
    name and phone when it has them. Every mutation is announced to
    subscribers; persisting those snapshots is left to an autosave policy.
    The draft is cleared only by :meth:`submit`.
    """

    def __init__(
        self,
        identity: Identity,
        drafts: DraftStore,
        verification: PhoneVerificationFlow,
        validator: StepValidator | None = None,
        catalog: IntakeCatalog | None = None,
        draft_key: str = DEFAULT_DRAFT_KEY,
        wizard_id: str | None = None,
    ) -> None:
        self.id = wizard_id or str(uuid.uuid4())
        self._identity = identity
        self._drafts = drafts
        self._draft_key = draft_key
        self._verification = verification
        self._catalog = catalog or load_catalog()
        self._validator = validator or StepValidator(catalog=self._catalog)
        self._errors: ErrorMap = {}
        self._listeners: list[StateListener] = []
        self._submission: SubmittedIntake | None = None

        state = load_draft(drafts, draft_key)
        self.resumed = state is not None
        if state is None:
            state = WizardState()
        self._state = state
        self._apply_identity()
        logger.info(
            "Intake wizard %s %s at step %d",
            self.id, "resumed" if self.resumed else "started", state.current_step,
        )

    # -- read access ---------------------------------------------------------

    @property
    def state(self) -> WizardState:
        """A snapshot of the current state."""
        return self._state.model_copy(deep=True)

    @property
    def errors(self) -> ErrorMap:
        return dict(self._errors)

    @property
    def current_step(self) -> int:
        return self._state.current_step

    @property
    def status(self) -> IntakeStatus:
        return self._state.status

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def verification(self) -> PhoneVerificationFlow:
        return self._verification

    @property
    def catalog(self) -> IntakeCatalog:
        return self._catalog

    @property
    def draft_key(self) -> str:
        return self._draft_key

    @property
    def submission(self) -> SubmittedIntake | None:
        return self._submission

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state-changed listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def validate(self, step: int | None = None) -> ErrorMap:
        """Validate a step (default: the current one) without changing errors."""
        return self._validator.validate(
            step or self._state.current_step, self._state, self._verification.state
        )

    def review(self) -> ReviewSummary:
        return build_review(self._state, self._catalog)

    # -- navigation ----------------------------------------------------------

    def go_to_step(self, target: int) -> bool:
        """Move to ``target``.

        Going back is always allowed. Going forward requires the current step
        and every step skipped over to validate; otherwise the errors of the
        first failing step are recorded and the wizard stays put.

        Returns:
            True if the wizard moved.

        Raises:
            ValueError: If target is not a navigable step (1-4).
            WizardClosedError: If the wizard was submitted.
        """
        self._ensure_open()
        if not WizardStep.CONTACT_INFO <= target <= _LAST_EDITABLE_STEP:
            raise ValueError(
                f"Step {target} is not navigable; use submit() to complete the wizard."
            )

        current = self._state.current_step
        if target >= current:
            for step in range(current, max(target, current + 1)):
                errors = self.validate(step)
                if errors:
                    self._errors = errors
                    return False
            if target == current:
                self._errors = {}
                return True

        self._errors = {}
        self._state.current_step = target
        self._changed()
        return True

    def next(self) -> bool:
        return self.go_to_step(self._state.current_step + 1)

    def back(self) -> bool:
        """Go back one step, preserving entered data.

        Raises:
            ValueError: If already at the first step.
        """
        if self._state.current_step <= WizardStep.CONTACT_INFO:
            raise ValueError("Already at the first step.")
        return self.go_to_step(self._state.current_step - 1)

    def submit(self) -> SubmittedIntake | None:
        """Submit from the review step.

        Returns:
            The submitted record, or None if step 4 does not validate.

        Raises:
            ValueError: If the wizard is not on the review step.
            WizardClosedError: If the wizard was already submitted.
        """
        self._ensure_open()
        if self._state.current_step != WizardStep.REVIEW:
            raise ValueError("Submit is only available from the review step.")

        errors = self.validate(WizardStep.REVIEW)
        questions = self._state.active_questions()
        if questions is None:
            errors.setdefault("propertyIntent", "Please select your property intent")
        self._errors = errors
        if errors:
            return None

        now = datetime.now(timezone.utc)
        self._state.status = IntakeStatus.SUBMITTED
        self._state.submitted_at = now
        clear_draft(self._drafts, self._draft_key)
        self._state.current_step = WizardStep.COMPLETE

        self._submission = SubmittedIntake(
            user_id=self._identity.user_id,
            email=self._state.about_you.email,
            property_intent=self._state.property_intent,
            about_you=self._state.about_you.model_copy(deep=True),
            questions=questions,
            consent=self._state.consent.model_copy(deep=True),
            submitted_at=now,
        )
        logger.info(
            "Intake wizard %s submitted as %s (%s)",
            self.id, self._submission.id, self._state.property_intent,
        )
        self._changed()
        return self._submission

    # -- field edits ---------------------------------------------------------

    def update_about_you(self, **fields: Any) -> None:
        """Edit step-1 fields. ``phone`` is routed through :meth:`set_phone`.

        Raises:
            ValueError: For unknown fields or an attempt to change the email.
        """
        self._ensure_open()
        if "email" in fields:
            raise ValueError(EMAIL_READ_ONLY_MESSAGE)
        phone = fields.pop("phone", None)
        self._check_fields(AboutYou, fields)
        self._apply("about_you", fields)
        if phone is not None:
            self._set_phone(phone)
        self._after_edit(WizardStep.CONTACT_INFO, fields)

    def set_phone(self, phone: str) -> None:
        """Edit the phone number. Any edit resets phone verification."""
        self._ensure_open()
        self._set_phone(phone)
        self._after_edit(WizardStep.CONTACT_INFO, ("phone",))

    def set_property_intent(self, intent: PropertyIntent | str) -> None:
        """Select the step-2 intent. Answers for the other branch are kept."""
        self._ensure_open()
        self._state.property_intent = PropertyIntent(intent)
        self._clear_if_valid(WizardStep.PROPERTY_INTENT, "propertyIntent")
        self._changed()

    def add_city(self, city: str) -> bool:
        """Add a preferred city. A fourth city is rejected, not truncated."""
        self._ensure_open()
        buyer = self._state.buyer_questions
        if city in buyer.preferred_cities:
            return False
        if len(buyer.preferred_cities) >= MAX_PREFERRED_CITIES:
            self._errors["preferredCities"] = CITY_LIMIT_MESSAGE
            return False
        if self._catalog.cities and city not in self._catalog.cities:
            self._errors["preferredCities"] = UNKNOWN_OPTION_MESSAGE
            return False
        buyer.preferred_cities = [*buyer.preferred_cities, city]
        self._after_edit(WizardStep.DETAILS, ("preferred_cities",))
        return True

    def remove_city(self, city: str) -> bool:
        self._ensure_open()
        buyer = self._state.buyer_questions
        if city not in buyer.preferred_cities:
            return False
        buyer.preferred_cities = [c for c in buyer.preferred_cities if c != city]
        self._after_edit(WizardStep.DETAILS, ("preferred_cities",))
        return True

    def toggle_property_type(self, property_type: str) -> bool:
        """Add or remove a buyer property type. Returns True if now selected."""
        self._ensure_open()
        buyer = self._state.buyer_questions
        if property_type in buyer.property_types:
            buyer.property_types = [t for t in buyer.property_types if t != property_type]
            selected = False
        else:
            if self._catalog.property_types and property_type not in self._catalog.property_types:
                self._errors["propertyTypes"] = UNKNOWN_OPTION_MESSAGE
                return False
            buyer.property_types = [*buyer.property_types, property_type]
            selected = True
        self._after_edit(WizardStep.DETAILS, ("property_types",))
        return selected

    def update_buyer(self, **fields: Any) -> None:
        self._ensure_open()
        self._check_fields(BuyerQuestions, fields)
        cities = fields.get("preferred_cities")
        if cities is not None:
            cities = list(dict.fromkeys(cities))
            if len(cities) > MAX_PREFERRED_CITIES:
                self._errors["preferredCities"] = CITY_LIMIT_MESSAGE
                fields.pop("preferred_cities")
            else:
                fields["preferred_cities"] = cities
        if fields.get("property_types") is not None:
            fields["property_types"] = list(dict.fromkeys(fields["property_types"]))
        self._apply("buyer_questions", fields)
        self._after_edit(WizardStep.DETAILS, fields)

    def update_seller(self, **fields: Any) -> None:
        self._ensure_open()
        self._check_fields(SellerQuestions, fields)
        self._reject_long_notes(fields, "property_notes")
        self._apply("seller_questions", fields)
        self._after_edit(WizardStep.DETAILS, fields)

    def update_consent(self, **fields: Any) -> None:
        self._ensure_open()
        self._check_fields(Consent, fields)
        self._reject_long_notes(fields, "additional_notes")
        self._apply("consent", fields)
        self._after_edit(WizardStep.REVIEW, fields)

    # -- phone verification --------------------------------------------------

    async def send_code(self) -> bool:
        """Request a one-time code for the current phone number."""
        self._ensure_open()
        return await self._verification.request_code(self._state.about_you.phone)

    async def verify_code(self, code: str) -> bool:
        """Check a one-time code; on success the phone error clears."""
        self._ensure_open()
        verified = await self._verification.submit_code(self._state.about_you.phone, code)
        if verified:
            self._clear_if_valid(WizardStep.CONTACT_INFO, "phone")
        return verified

    # -- internal ------------------------------------------------------------

    def _apply_identity(self) -> None:
        about = self._state.about_you
        about.first_name = self._identity.first_name or about.first_name
        about.last_name = self._identity.last_name or about.last_name
        about.email = self._identity.email or about.email
        if self._identity.phone:
            about.phone = format_phone(self._identity.phone)

    def _set_phone(self, phone: str) -> None:
        self._state.about_you.phone = format_phone(phone)
        self._verification.reset()

    def _ensure_open(self) -> None:
        if self._state.status == IntakeStatus.SUBMITTED:
            raise WizardClosedError(f"Intake wizard {self.id!r} has already been submitted.")

    @staticmethod
    def _check_fields(model: type[BaseModel], fields: dict[str, Any]) -> None:
        unknown = [name for name in fields if name not in model.model_fields]
        if unknown:
            raise ValueError(f"Unknown {model.__name__} field(s): {', '.join(sorted(unknown))}")

    def _apply(self, section: str, fields: dict[str, Any]) -> None:
        """Replace a section with ``fields`` applied; a bad value changes nothing."""
        current = getattr(self._state, section)
        updated = type(current).model_validate({**current.model_dump(), **fields})
        setattr(self._state, section, updated)

    def _reject_long_notes(self, fields: dict[str, Any], name: str) -> None:
        value = fields.get(name)
        if isinstance(value, str) and len(value) > NOTES_MAX_LENGTH:
            self._errors[to_camel(name)] = NOTES_TOO_LONG_MESSAGE
            fields.pop(name)

    def _after_edit(self, step: int, names: Iterable[str]) -> None:
        for name in names:
            self._clear_if_valid(step, to_camel(name))
        self._changed()

    def _clear_if_valid(self, step: int, key: str) -> None:
        if key not in self._errors:
            return
        if self._validator.validate_field(step, key, self._state, self._verification.state) is None:
            del self._errors[key]

    def _changed(self) -> None:
        self._state.touch()
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)
