"""Tests for local draft persistence."""

from __future__ import annotations

import json

import pytest

from hausee.core.types import IntakeStatus, PreApprovalStatus, PropertyIntent
from hausee.intake.drafts import (
    DraftStore,
    FileDraftStore,
    MemoryDraftStore,
    clear_draft,
    load_draft,
    save_draft,
)
from hausee.intake.engine import IntakeWizard
from hausee.intake.models import WizardState
from hausee.verification.flow import PhoneVerificationFlow
from tests.conftest import make_identity


KEY = "agentMatchingForm"


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryDraftStore()
    return FileDraftStore(tmp_path / "drafts")


class TestDraftStores:
    def test_protocol(self, store):
        assert isinstance(store, DraftStore)

    def test_set_get_remove(self, store):
        assert store.get_item(KEY) is None
        store.set_item(KEY, "{}")
        assert store.get_item(KEY) == "{}"
        store.remove_item(KEY)
        assert store.get_item(KEY) is None
        store.remove_item(KEY)

    def test_file_store_sanitises_keys(self, tmp_path):
        store = FileDraftStore(tmp_path)
        store.set_item("agentMatchingForm:../device", "{}")
        assert [p.name for p in tmp_path.iterdir()] == ["agentMatchingForm_.._device.json"]
        assert store.get_item("agentMatchingForm:../device") == "{}"


class TestSaveLoad:
    def test_round_trip_preserves_answers(self, store):
        state = WizardState(current_step=3, property_intent=PropertyIntent.SELL_AND_BUY)
        state.buyer_questions.preferred_cities = ["Toronto", "Ajax"]
        state.buyer_questions.pre_approval_status = PreApprovalStatus.YES
        state.seller_questions.city = "Guelph"
        assert save_draft(store, KEY, state)

        loaded = load_draft(store, KEY)
        assert loaded.model_dump() == state.model_dump()

    def test_saved_with_wire_names(self, store):
        save_draft(store, KEY, WizardState(property_intent=PropertyIntent.BUY_FIRST))
        data = json.loads(store.get_item(KEY))
        assert data["currentStep"] == 1
        assert data["propertyIntent"] == "buy-first"
        assert "buyerQuestions" in data

    def test_submitted_state_not_saved(self, store):
        state = WizardState(status=IntakeStatus.SUBMITTED, current_step=5)
        assert not save_draft(store, KEY, state)
        assert store.get_item(KEY) is None

    def test_missing_draft(self, store):
        assert load_draft(store, KEY) is None

    @pytest.mark.parametrize(
        "raw",
        ["", "{not json", "[]", '{"currentStep": 9}', '{"propertyIntent": "rent"}'],
    )
    def test_malformed_draft_is_absent(self, store, raw):
        store.set_item(KEY, raw)
        assert load_draft(store, KEY) is None

    def test_submitted_draft_is_discarded(self, store):
        store.set_item(KEY, json.dumps({"status": "submitted", "currentStep": 5}))
        assert load_draft(store, KEY) is None

    def test_browser_draft_with_blank_selects(self, store):
        raw = {
            "currentStep": 2,
            "propertyIntent": "",
            "aboutYou": {"firstName": "Jane", "phone": "(555) 123-4567"},
            "buyerQuestions": {"preApprovalStatus": "", "preferredCities": []},
            "consent": {"contactPreference": ""},
        }
        store.set_item(KEY, json.dumps(raw))
        state = load_draft(store, KEY)
        assert state is not None
        assert state.current_step == 2
        assert state.property_intent is None
        assert state.buyer_questions.pre_approval_status is None
        assert state.consent.contact_preference is None
        assert state.about_you.first_name == "Jane"

    def test_clear(self, store):
        save_draft(store, KEY, WizardState())
        clear_draft(store, KEY)
        assert load_draft(store, KEY) is None


class UnreadableStore(MemoryDraftStore):
    def get_item(self, key: str) -> str | None:
        raise PermissionError(13, "Permission denied", key)


class TestUnreadableDrafts:
    def test_undecodable_file(self, tmp_path):
        store = FileDraftStore(tmp_path)
        (tmp_path / f"{KEY}.json").write_bytes(b"\xff\xfe{bad")
        assert load_draft(store, KEY) is None

    def test_read_error(self):
        assert load_draft(UnreadableStore(), KEY) is None

    def test_wizard_starts_fresh(self, tmp_path, catalog, step_validator, verification_client):
        store = FileDraftStore(tmp_path)
        (tmp_path / f"{KEY}.json").write_bytes(b"\xff\xfe{bad")
        wizard = IntakeWizard(
            identity=make_identity(),
            drafts=store,
            verification=PhoneVerificationFlow(verification_client),
            validator=step_validator,
            catalog=catalog,
        )
        assert not wizard.resumed
        assert wizard.current_step == 1
