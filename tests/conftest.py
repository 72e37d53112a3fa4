"""
Shared test fixtures for Inbox Assistant tests
"""

import asyncio
from typing import Dict, List, Optional, Tuple, Union

import pytest

from inbox_assistant.activity import ActivityRecorder
from inbox_assistant.chat import ChatOrchestrator
from inbox_assistant.config import AgentConfig, AppConfig
from inbox_assistant.exceptions import AgentGatewayError
from inbox_assistant.models import Envelope
from inbox_assistant.periodic import PeriodicRunner
from inbox_assistant.selection import SelectionTracker
from inbox_assistant.session import InboxSession
from inbox_assistant.settings import SettingsStore
from inbox_assistant.storage import PersistenceAdapter


INTERACTIVE_AGENT_ID = "agent-interactive"
PERIODIC_AGENT_ID = "agent-periodic"


# === Mock Key-Value Store ===

class MockStore:
    """In-memory key-value store that can be told to fail"""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes: List[Tuple[str, str]] = []

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("store unavailable")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        self.data[key] = value
        self.writes.append((key, value))


# === Mock Agent Gateway ===

class MockGateway:
    """Scripted agent gateway: returns queued envelopes or raises queued errors"""

    def __init__(self):
        self.replies: List[Union[Envelope, Exception]] = []
        self.calls: List[Tuple[str, str]] = []
        self.gate: Optional[asyncio.Event] = None

    def reply(self, envelope: Union[Envelope, Exception]) -> "MockGateway":
        self.replies.append(envelope)
        return self

    def hold(self) -> asyncio.Event:
        """Make calls wait until the returned event is set"""
        self.gate = asyncio.Event()
        return self.gate

    async def call(self, instruction: str, agent_id: str) -> Envelope:
        self.calls.append((instruction, agent_id))
        reply = self.replies.pop(0)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(reply, Exception):
            raise reply
        return reply


# === Envelope Builders ===

def make_preview(email_id: str, sender: str = "Deals <deals@shop.com>", category: Optional[str] = "Promotions") -> dict:
    return {
        "id": email_id,
        "sender": sender,
        "subject": f"Offer {email_id}",
        "date": "2026-10-01T10:00:00Z",
        "snippet": "Don't miss out",
        "category": category,
    }


def interactive_envelope(
    message: str = "Here is what I found.",
    previews: Optional[List[dict]] = None,
    emails_deleted: int = 0,
    category: str = "promotional",
) -> Envelope:
    previews = previews or []
    return Envelope.model_validate({
        "success": True,
        "response": {
            "status": "success",
            "result": {
                "action": "search" if not emails_deleted else "delete",
                "emails_found": len(previews),
                "emails_deleted": emails_deleted,
                "criteria_identified": {
                    "sender": None,
                    "date_range": "all",
                    "category": category,
                    "keywords": [],
                },
                "email_preview": previews,
                "confirmation_required": False,
                "message": message,
            },
        },
    })


def periodic_envelope(processed: int = 0, deleted: int = 0) -> Envelope:
    return Envelope.model_validate({
        "success": True,
        "response": {
            "status": "success",
            "result": {
                "cleanup_summary": {
                    "total_emails_processed": processed,
                    "total_emails_deleted": deleted,
                    "rules_executed": 2,
                    "execution_time_seconds": 1.5,
                },
                "rules_results": [
                    {
                        "rule_name": "Promotions",
                        "rule_type": "label",
                        "emails_found": processed,
                        "emails_deleted": deleted,
                        "criteria_applied": {"label_ids": ["CATEGORY_PROMOTIONS"]},
                        "status": "completed",
                    }
                ],
                "next_scheduled_run": "2026-10-26T09:00:00Z",
                "errors": [],
            },
        },
    })


def success_envelope(result: dict, message: Optional[str] = None) -> Envelope:
    """Successful envelope carrying exactly the given result, nothing filled in"""
    return Envelope.model_validate({
        "success": True,
        "response": {"status": "success", "message": message, "result": result},
    })


def failed_envelope(error: Optional[str] = None, message: Optional[str] = None, success: bool = True) -> Envelope:
    return Envelope.model_validate({
        "success": success,
        "error": error,
        "response": {"status": "error", "message": message},
    })


# === Fixtures ===

@pytest.fixture
def store() -> MockStore:
    return MockStore()


@pytest.fixture
def persistence(store) -> PersistenceAdapter:
    return PersistenceAdapter(store)


@pytest.fixture
def recorder(persistence) -> ActivityRecorder:
    return ActivityRecorder(persistence)


@pytest.fixture
def selection() -> SelectionTracker:
    return SelectionTracker()


@pytest.fixture
def settings_store(persistence) -> SettingsStore:
    settings = SettingsStore(persistence)
    settings.load()
    return settings


@pytest.fixture
def gateway() -> MockGateway:
    return MockGateway()


@pytest.fixture
def chat(gateway, recorder, selection) -> ChatOrchestrator:
    return ChatOrchestrator(gateway, recorder, selection, INTERACTIVE_AGENT_ID)


@pytest.fixture
def periodic(gateway, recorder, settings_store) -> PeriodicRunner:
    return PeriodicRunner(gateway, recorder, settings_store, PERIODIC_AGENT_ID)


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        agent=AgentConfig(
            api_url="https://agents.example.test/chat",
            interactive_agent_id=INTERACTIVE_AGENT_ID,
            periodic_agent_id=PERIODIC_AGENT_ID,
        ),
        store_path=str(tmp_path / "store.json"),
    )


@pytest.fixture
def session(app_config, store, gateway) -> InboxSession:
    session = InboxSession(app_config, store=store, gateway=gateway)
    session.load()
    return session


@pytest.fixture
def transport_error() -> AgentGatewayError:
    return AgentGatewayError("Agent request failed: connection refused")
