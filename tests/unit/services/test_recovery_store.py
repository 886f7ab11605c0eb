"""Tests for the local recovery copy, form draft and endpoint override."""

import json

import pytest

from intake_bridge.core.models import Attachment
from intake_bridge.core.types import SurveyForm
from intake_bridge.services.recovery import (
    JSONRecoveryStore,
    form_from_draft,
    form_to_draft,
)

pytestmark = pytest.mark.unit


def test_load_without_file_returns_none(tmp_path):
    assert JSONRecoveryStore(tmp_path / "missing.json").load() is None


def test_save_overwrites_previous_copy(tmp_path):
    store = JSONRecoveryStore(tmp_path / "recovery.json")
    store.save({"unitInfo": "101"})
    store.save({"unitInfo": "202"})
    assert store.load() == {"unitInfo": "202"}


def test_save_leaves_no_temp_file(tmp_path):
    store = JSONRecoveryStore(tmp_path / "recovery.json")
    store.save({"a": 1})
    assert sorted(p.name for p in tmp_path.iterdir()) == ["recovery.json"]


def test_corrupt_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "recovery.json"
    path.write_text("{not json", encoding="utf-8")
    store = JSONRecoveryStore(path)
    assert store.load() is None
    store.save({"a": 1})
    assert store.load() == {"a": 1}


def test_other_keys_are_preserved(tmp_path):
    path = tmp_path / "recovery.json"
    path.write_text('{"other": 5}', encoding="utf-8")
    JSONRecoveryStore(path).save({"a": 1})
    assert JSONRecoveryStore(path, key="other").load() is None
    assert '"other": 5' in path.read_text(encoding="utf-8")


# --- form draft ---

DRAFT_FORM = SurveyForm(
    property_id="kv-1",
    first_name="Dana",
    services=("Tile - Wall",),
    notes="Leaking faucet in 204",
    attachments=(Attachment(name="a.png", type="image/png", data="AAAA"),),
)


def test_draft_excludes_attachments():
    draft = form_to_draft(DRAFT_FORM)
    assert "attachments" not in draft
    assert draft["services"] == ["Tile - Wall"]
    json.dumps(draft)


def test_draft_round_trip_drops_only_attachments(tmp_path):
    store = JSONRecoveryStore(tmp_path / "recovery.json")
    store.save_draft(DRAFT_FORM)

    restored = form_from_draft(store.load_draft())

    assert restored.notes == "Leaking faucet in 204"
    assert restored.services == ("Tile - Wall",)
    assert restored.attachments == ()


def test_draft_merge_order_is_defaults_then_draft_then_prefill():
    draft = {"property_id": "kv-1", "email": "saved@example.com", "unknown": "x"}

    form = form_from_draft(draft, property_id="kv-2", first_name=None)

    assert form.property_id == "kv-2"
    assert form.email == "saved@example.com"
    assert form.first_name == ""
    assert form.timeline == ""


def test_form_from_missing_draft_uses_defaults():
    assert form_from_draft(None) == SurveyForm()


def test_clear_draft_keeps_other_entries(tmp_path):
    store = JSONRecoveryStore(tmp_path / "recovery.json")
    store.save({"unitInfo": "101"})
    store.save_draft(DRAFT_FORM)

    store.clear_draft()

    assert store.load_draft() is None
    assert store.load() == {"unitInfo": "101"}


def test_clear_draft_without_file_writes_nothing(tmp_path):
    JSONRecoveryStore(tmp_path / "recovery.json").clear_draft()
    assert list(tmp_path.iterdir()) == []


def test_draft_and_last_submission_use_separate_keys(tmp_path):
    path = tmp_path / "recovery.json"
    store = JSONRecoveryStore(path)
    store.save({"unitInfo": "101"})
    store.save_draft(DRAFT_FORM)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"lastSurvey", "surveyDraft"}
    assert data["lastSurvey"] == {"unitInfo": "101"}


# --- endpoint override ---


def test_api_url_round_trip(tmp_path):
    store = JSONRecoveryStore(tmp_path / "recovery.json")
    assert store.load_api_url() is None
    store.save_api_url("https://example.test/exec")
    assert store.load_api_url() == "https://example.test/exec"


@pytest.mark.parametrize("stored", ['""', "42", "null"])
def test_api_url_ignores_unusable_values(tmp_path, stored):
    path = tmp_path / "recovery.json"
    path.write_text(f'{{"scriptUrl": {stored}}}', encoding="utf-8")
    assert JSONRecoveryStore(path).load_api_url() is None
