"""
Inbox Session - session-lifetime owner of settings, activity log and chat state
"""

import logging
from dataclasses import asdict
from typing import Callable, Dict, Optional

from inbox_assistant.activity import ActivityRecorder
from inbox_assistant.chat import ChatOrchestrator
from inbox_assistant.config import AppConfig
from inbox_assistant.gateway import AgentGateway
from inbox_assistant.periodic import PeriodicRunner
from inbox_assistant.selection import SelectionTracker
from inbox_assistant.settings import SettingsStore
from inbox_assistant.storage import JsonFileStore, KeyValueStore, PersistenceAdapter


logger = logging.getLogger(__name__)


class InboxSession:
    """Facade wiring the persistence adapter, recorder, stores and both agents together"""

    def __init__(
        self,
        config: AppConfig,
        store: Optional[KeyValueStore] = None,
        gateway=None
    ):
        self.config = config
        self.persistence = PersistenceAdapter(store if store is not None else JsonFileStore(config.store_path))
        self.gateway = gateway if gateway is not None else AgentGateway(config.agent)

        self.settings = SettingsStore(self.persistence)
        self.activity = ActivityRecorder(self.persistence)
        self.selection = SelectionTracker()

        self.chat = ChatOrchestrator(
            self.gateway, self.activity, self.selection, config.agent.interactive_agent_id
        )
        self.periodic = PeriodicRunner(
            self.gateway, self.activity, self.settings, config.agent.periodic_agent_id
        )

    def load(self) -> None:
        """Read settings and the activity log from durable storage"""
        self.settings.load()
        self.activity.load()
        logger.info(f"Session loaded with {len(self.activity.entries)} activity entries")

    def set_progress_callback(self, callback: Optional[Callable]) -> None:
        """Set callback for progress updates from both agents"""
        self.chat.progress_callback = callback
        self.periodic.progress_callback = callback

    def reset_chat(self) -> None:
        self.chat.reset()

    async def aclose(self) -> None:
        if isinstance(self.gateway, AgentGateway):
            await self.gateway.aclose()

    # === Snapshots ===

    def chat_state(self) -> Dict:
        return {
            "messages": [asdict(message) for message in self.chat.messages],
            "previews": [preview.model_dump() for preview in self.selection.previews],
            "selected": self.selection.selected_ids(),
            "loading": self.chat.loading,
            "error": self.chat.error,
        }

    def settings_state(self) -> Dict:
        return {
            "settings": self.settings.settings.model_dump(by_alias=True),
            "draft": self.settings.draft.model_dump(by_alias=True),
            "saved": self.settings.saved,
            "unsaved_changes": self.settings.has_unsaved_changes,
        }

    def periodic_state(self) -> Dict:
        last_result = self.periodic.last_result
        return {
            "loading": self.periodic.loading,
            "error": self.periodic.error,
            "last_result": last_result.model_dump() if last_result else None,
        }

    def activity_state(self) -> Dict:
        return {
            "entries": [entry.model_dump(mode="json", by_alias=True) for entry in self.activity.entries],
        }

    def stats_state(self) -> Dict:
        stats = self.activity.stats()
        return {
            "week_count": stats.week_count,
            "month_count": stats.month_count,
            "last_cleanup": stats.last_cleanup.isoformat() if stats.last_cleanup else None,
        }

    def snapshot(self) -> Dict:
        return {
            "chat": self.chat_state(),
            "settings": self.settings_state(),
            "periodic": self.periodic_state(),
            "activity": self.activity_state(),
            "stats": self.stats_state(),
        }
