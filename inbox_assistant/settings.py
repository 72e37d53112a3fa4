"""
Settings Store - cleanup policy with an editable draft and explicit save
"""

import logging
from typing import Any

from pydantic.alias_generators import to_camel

from inbox_assistant.models import Settings, DEFAULT_SETTINGS
from inbox_assistant.storage import PersistenceAdapter


logger = logging.getLogger(__name__)

# How long the "saved" confirmation stays up before the caller clears it
SAVED_SIGNAL_SECONDS = 3.0

# Accepts both python and camelCase field names
_FIELD_NAMES = {
    key: name
    for name in Settings.model_fields
    for key in (name, to_camel(name))
}


class SettingsStore:
    """Holds the committed settings and a pending draft.

    Edits go to ``draft`` only; nothing reaches storage until ``save``.
    """

    def __init__(self, persistence: PersistenceAdapter):
        self.persistence = persistence
        self.settings: Settings = DEFAULT_SETTINGS
        self.draft: Settings = DEFAULT_SETTINGS
        self.saved = False

    def load(self) -> Settings:
        """Load persisted settings (or defaults) and reset the draft to them"""
        self.settings = self.persistence.load_settings()
        self.draft = self.settings
        self.saved = False
        return self.settings

    def update_draft(self, **changes: Any) -> Settings:
        """Apply field changes to the draft; raises ValueError if the result is invalid

        Fields may be named either way, e.g. ``age_threshold`` or ``ageThreshold``.
        """
        updates = {}
        for key, value in changes.items():
            name = _FIELD_NAMES.get(key)
            if name is None:
                raise ValueError(f"Unknown setting: {key}")
            updates[name] = value

        self.draft = Settings.model_validate({**self.draft.model_dump(), **updates})
        return self.draft

    def discard_draft(self) -> Settings:
        self.draft = self.settings
        return self.draft

    def save(self, draft: Settings = None) -> bool:
        """Persist exactly the given draft (or the pending one); True on success"""
        target = self.draft if draft is None else draft
        if not self.persistence.save_settings(target):
            logger.error("Failed to save settings")
            return False

        self.settings = target
        self.draft = target
        self.saved = True
        logger.info("Settings saved")
        return True

    def clear_saved(self) -> None:
        self.saved = False

    @property
    def has_unsaved_changes(self) -> bool:
        return self.draft != self.settings
