"""
Tests for SettingsStore and the Settings record
"""

import json

import pytest
from pydantic import ValidationError

from inbox_assistant.models import Settings, DEFAULT_SETTINGS
from inbox_assistant.settings import SettingsStore
from inbox_assistant.storage import SETTINGS_KEY


@pytest.fixture
def custom_settings() -> Settings:
    return Settings(
        promotional=False,
        old_emails=True,
        age_threshold=90,
        schedule_enabled=True,
        frequency="daily",
        schedule_time="21:30",
        require_confirmation=False,
        max_emails_per_run=500,
    )


class TestLoad:
    """Tests for load with defaults"""

    def test_missing_store_gives_defaults(self, persistence):
        store = SettingsStore(persistence)
        assert store.load() == DEFAULT_SETTINGS

    def test_default_record_values(self):
        assert DEFAULT_SETTINGS.model_dump(by_alias=True) == {
            "promotional": True,
            "oldEmails": True,
            "ageThreshold": 30,
            "scheduleEnabled": False,
            "frequency": "weekly",
            "scheduleTime": "09:00",
            "requireConfirmation": True,
            "maxEmailsPerRun": 100,
        }

    @pytest.mark.parametrize("raw", [
        "not json at all",
        json.dumps({"promotional": False}),
        json.dumps({**DEFAULT_SETTINGS.model_dump(by_alias=True), "ageThreshold": 45}),
        json.dumps([1, 2, 3]),
    ])
    def test_corrupt_or_partial_store_gives_defaults(self, persistence, store, raw):
        store.data[SETTINGS_KEY] = raw
        assert SettingsStore(persistence).load() == DEFAULT_SETTINGS

    def test_unreadable_store_gives_defaults(self, persistence, store):
        store.fail_reads = True
        assert SettingsStore(persistence).load() == DEFAULT_SETTINGS

    def test_reads_camel_case_record(self, persistence, store):
        """Records written by the browser version of the app load unchanged"""
        store.data[SETTINGS_KEY] = json.dumps({
            "promotional": False,
            "oldEmails": False,
            "ageThreshold": 7,
            "scheduleEnabled": True,
            "frequency": "disabled",
            "scheduleTime": "06:15",
            "requireConfirmation": True,
            "maxEmailsPerRun": 50,
        })

        loaded = SettingsStore(persistence).load()

        assert loaded.age_threshold == 7
        assert loaded.frequency == "disabled"
        assert loaded.schedule_time == "06:15"


class TestSave:
    """Tests for explicit save semantics"""

    def test_round_trip(self, persistence, custom_settings):
        store = SettingsStore(persistence)
        assert store.save(custom_settings) is True

        assert SettingsStore(persistence).load() == custom_settings

    def test_save_sets_saved_signal(self, settings_store):
        assert settings_store.saved is False
        settings_store.save()
        assert settings_store.saved is True

        settings_store.clear_saved()
        assert settings_store.saved is False

    def test_draft_is_not_persisted_until_save(self, settings_store, store):
        settings_store.update_draft(age_threshold=60)

        assert SETTINGS_KEY not in store.data
        assert settings_store.settings == DEFAULT_SETTINGS
        assert settings_store.has_unsaved_changes

        settings_store.save()

        assert json.loads(store.data[SETTINGS_KEY])["ageThreshold"] == 60
        assert settings_store.settings.age_threshold == 60
        assert not settings_store.has_unsaved_changes

    def test_save_persists_exactly_the_given_draft(self, settings_store, store, custom_settings):
        settings_store.update_draft(age_threshold=14)

        settings_store.save(custom_settings)

        assert json.loads(store.data[SETTINGS_KEY]) == custom_settings.model_dump(by_alias=True)
        assert settings_store.draft == custom_settings

    def test_failed_save_keeps_state_and_no_signal(self, settings_store, store):
        settings_store.update_draft(promotional=False)
        store.fail_writes = True

        assert settings_store.save() is False
        assert settings_store.saved is False
        assert settings_store.settings == DEFAULT_SETTINGS
        assert settings_store.draft.promotional is False


class TestDraft:
    """Tests for draft editing"""

    def test_accepts_camel_case_names(self, settings_store):
        draft = settings_store.update_draft(maxEmailsPerRun=200, scheduleTime="18:45")

        assert draft.max_emails_per_run == 200
        assert draft.schedule_time == "18:45"

    @pytest.mark.parametrize("changes", [
        {"age_threshold": 45},
        {"max_emails_per_run": 1000},
        {"frequency": "hourly"},
        {"schedule_time": "25:00"},
    ])
    def test_rejects_invalid_values(self, settings_store, changes):
        with pytest.raises(ValidationError):
            settings_store.update_draft(**changes)
        assert settings_store.draft == DEFAULT_SETTINGS

    def test_rejects_unknown_setting(self, settings_store):
        with pytest.raises(ValueError, match="Unknown setting"):
            settings_store.update_draft(retention_days=3)

    def test_discard_draft(self, settings_store):
        settings_store.update_draft(old_emails=False)
        settings_store.discard_draft()

        assert settings_store.draft == settings_store.settings
