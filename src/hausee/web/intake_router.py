"""FastAPI router for the agent-matching intake wizard."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import APIRouter, HTTPException, Query, Request

from hausee.core.types import (
    ContactPreference,
    PreApprovalStatus,
    PropertyIntent,
    VerificationAction,
    VerificationStatus,
)
from hausee.intake.autosave import AutosaveScheduler
from hausee.intake.engine import IntakeWizard, WizardClosedError
from hausee.intake.models import ErrorMap, Identity, IntakeModel, SubmittedIntake, WizardState
from hausee.intake.review import ReviewSummary
from hausee.verification.flow import PhoneVerificationFlow, VerificationBusyError

router = APIRouter()


# --- Request/Response models ---


class StartWizardRequest(Identity):
    device_id: str | None = None


class AboutYouPatch(IntakeModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    has_referral: bool | None = None
    referral_code: str | None = None


class IntentRequest(IntakeModel):
    property_intent: PropertyIntent


class BuyerPatch(IntakeModel):
    preferred_cities: list[str] | None = None
    budget_range: str | None = None
    property_types: list[str] | None = None
    timeline: str | None = None
    pre_approval_status: PreApprovalStatus | None = None
    mortgage_approved_amount: str | None = None
    is_primary_residence: bool | None = None


class SellerPatch(IntakeModel):
    property_type: str | None = None
    city: str | None = None
    intersection_or_address: str | None = None
    price_expectation_range: str | None = None
    selling_timeline: str | None = None
    selling_reason: str | None = None
    property_condition: str | None = None
    property_notes: str | None = None


class ConsentPatch(IntakeModel):
    communication_consent: bool | None = None
    terms_accepted: bool | None = None
    has_current_agent: bool | None = None
    contact_preference: ContactPreference | None = None
    additional_notes: str | None = None


class CityRequest(IntakeModel):
    city: str


class PhoneRequest(IntakeModel):
    phone: str


class CodeRequest(IntakeModel):
    code: str


class VerificationView(IntakeModel):
    status: VerificationStatus
    loading: VerificationAction | None = None
    error: str | None = None


class WizardResponse(IntakeModel):
    id: str
    resumed: bool
    state: WizardState
    errors: ErrorMap
    verification: VerificationView
    submission_id: str | None = None


class ActionResponse(WizardResponse):
    ok: bool


# --- Helpers ---


def _draft_key(base_key: str, device_id: str | None) -> str:
    return f"{base_key}:{device_id}" if device_id else base_key


def _get_wizard(request: Request, wizard_id: str) -> IntakeWizard:
    wizard = request.app.state.intake_store.get_wizard(wizard_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail=f"Intake wizard {wizard_id!r} not found")
    return wizard


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (WizardClosedError, VerificationBusyError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _response(wizard: IntakeWizard) -> WizardResponse:
    verification = wizard.verification.state
    return WizardResponse(
        id=wizard.id,
        resumed=wizard.resumed,
        state=wizard.state,
        errors=wizard.errors,
        verification=VerificationView(
            status=verification.status,
            loading=verification.loading,
            error=verification.error,
        ),
        submission_id=wizard.submission.id if wizard.submission else None,
    )


def _action(wizard: IntakeWizard, ok: bool) -> ActionResponse:
    return ActionResponse(ok=ok, **_response(wizard).model_dump())


def _patch(body: IntakeModel) -> dict[str, Any]:
    return body.model_dump(exclude_unset=True)


# --- Wizard lifecycle ---


@router.get("/api/intake/catalog")
async def get_catalog(request: Request) -> dict[str, Any]:
    return request.app.state.catalog.model_dump()


@router.get("/api/intake/catalog/cities")
async def search_cities(
    request: Request, q: str = "", exclude: list[str] | None = Query(default=None)
) -> list[str]:
    """City autocomplete for the preferred-cities picker."""
    return request.app.state.catalog.search_cities(q, exclude)


@router.post("/api/intake/wizards")
async def start_wizard(body: StartWizardRequest, request: Request) -> WizardResponse:
    """Start a wizard, resuming the device's draft when one exists."""
    app_state = request.app.state
    settings = app_state.settings
    key = _draft_key(settings.intake.draft_key, body.device_id)
    identity = Identity(**body.model_dump(exclude={"device_id"}))

    wizard = app_state.intake_store.find_wizard(identity.user_id, key)
    if wizard is None:
        wizard = IntakeWizard(
            identity=identity,
            drafts=app_state.draft_store,
            verification=PhoneVerificationFlow(app_state.verification_client),
            validator=app_state.step_validator,
            catalog=app_state.catalog,
            draft_key=key,
        )
        wizard.subscribe(
            AutosaveScheduler(
                app_state.draft_store, key, settings.intake.autosave_delay_seconds
            )
        )
        app_state.intake_store.save_wizard(wizard)
    return _response(wizard)


@router.get("/api/intake/wizards/{wizard_id}")
async def get_wizard(wizard_id: str, request: Request) -> WizardResponse:
    return _response(_get_wizard(request, wizard_id))


@router.get("/api/intake/wizards/{wizard_id}/review")
async def get_review(wizard_id: str, request: Request) -> ReviewSummary:
    return _get_wizard(request, wizard_id).review()


# --- Field edits ---


@router.patch("/api/intake/wizards/{wizard_id}/about-you")
async def update_about_you(
    wizard_id: str, body: AboutYouPatch, request: Request
) -> WizardResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        wizard.update_about_you(**_patch(body))
    return _response(wizard)


@router.post("/api/intake/wizards/{wizard_id}/phone")
async def set_phone(wizard_id: str, body: PhoneRequest, request: Request) -> WizardResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        wizard.set_phone(body.phone)
    return _response(wizard)


@router.patch("/api/intake/wizards/{wizard_id}/intent")
async def set_intent(wizard_id: str, body: IntentRequest, request: Request) -> WizardResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        wizard.set_property_intent(body.property_intent)
    return _response(wizard)


@router.patch("/api/intake/wizards/{wizard_id}/buyer")
async def update_buyer(wizard_id: str, body: BuyerPatch, request: Request) -> WizardResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        wizard.update_buyer(**_patch(body))
    return _response(wizard)


@router.post("/api/intake/wizards/{wizard_id}/buyer/cities")
async def add_city(wizard_id: str, body: CityRequest, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        added = wizard.add_city(body.city)
    return _action(wizard, added)


@router.delete("/api/intake/wizards/{wizard_id}/buyer/cities/{city}")
async def remove_city(wizard_id: str, city: str, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        removed = wizard.remove_city(city)
    return _action(wizard, removed)


@router.post("/api/intake/wizards/{wizard_id}/buyer/property-types/{property_type}")
async def toggle_property_type(
    wizard_id: str, property_type: str, request: Request
) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        selected = wizard.toggle_property_type(property_type)
    return _action(wizard, selected)


@router.patch("/api/intake/wizards/{wizard_id}/seller")
async def update_seller(wizard_id: str, body: SellerPatch, request: Request) -> WizardResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        wizard.update_seller(**_patch(body))
    return _response(wizard)


@router.patch("/api/intake/wizards/{wizard_id}/consent")
async def update_consent(
    wizard_id: str, body: ConsentPatch, request: Request
) -> WizardResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        wizard.update_consent(**_patch(body))
    return _response(wizard)


# --- Phone verification ---


@router.post("/api/intake/wizards/{wizard_id}/otp/send")
async def send_code(wizard_id: str, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        sent = await wizard.send_code()
    return _action(wizard, sent)


@router.post("/api/intake/wizards/{wizard_id}/otp/verify")
async def verify_code(wizard_id: str, body: CodeRequest, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        verified = await wizard.verify_code(body.code)
    return _action(wizard, verified)


# --- Navigation and submission ---


@router.post("/api/intake/wizards/{wizard_id}/steps/{step}")
async def go_to_step(wizard_id: str, step: int, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        moved = wizard.go_to_step(step)
    return _action(wizard, moved)


@router.post("/api/intake/wizards/{wizard_id}/next")
async def next_step(wizard_id: str, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        moved = wizard.next()
    return _action(wizard, moved)


@router.post("/api/intake/wizards/{wizard_id}/back")
async def previous_step(wizard_id: str, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        moved = wizard.back()
    return _action(wizard, moved)


@router.post("/api/intake/wizards/{wizard_id}/submit")
async def submit_wizard(wizard_id: str, request: Request) -> ActionResponse:
    wizard = _get_wizard(request, wizard_id)
    with _translate_errors():
        submission = wizard.submit()
    if submission is not None:
        request.app.state.intake_store.save_submission(submission, wizard.id)
    return _action(wizard, submission is not None)


@router.get("/api/intake/submissions/{submission_id}")
async def get_submission(submission_id: str, request: Request) -> SubmittedIntake:
    submission = request.app.state.intake_store.get_submission(submission_id)
    if submission is None:
        raise HTTPException(
            status_code=404, detail=f"Submission {submission_id!r} not found"
        )
    return submission
