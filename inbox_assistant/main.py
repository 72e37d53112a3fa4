#!/usr/bin/env python3
"""
Inbox Assistant Web Application
FastAPI server exposing the chat and periodic cleanup session, with
WebSocket support for real-time updates
"""

import asyncio
import logging
from typing import Callable, Dict, Optional, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from inbox_assistant.config import load_config
from inbox_assistant.session import InboxSession
from inbox_assistant.settings import SAVED_SIGNAL_SECONDS

config = load_config()

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

logger.info(f"Starting Inbox Assistant with log level: {config.log_level}")

app = FastAPI(title="Inbox Assistant", description="Chat with an agent to clean your inbox, or run a cleanup policy")


class ConnectionManager:
    """Push session events to WebSocket clients.

    Every message carries the full session snapshot next to the event, so a
    client can re-render from any single message. A client is sent the
    current state as soon as it connects.
    """

    def __init__(self, state_provider: Callable[[], Dict]):
        self.state_provider = state_provider
        self.clients: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_json(self._message("state", {}))

    def disconnect(self, websocket: WebSocket) -> None:
        self.clients.discard(websocket)

    async def publish(self, event: str, data: Dict) -> int:
        """Send one event to every client; returns how many are still connected"""
        message = self._message(event, data)
        stale = []

        for client in list(self.clients):
            try:
                await client.send_json(message)
            except Exception as error:
                logger.debug(f"Dropping websocket client: {error}")
                stale.append(client)

        self.clients.difference_update(stale)
        return len(self.clients)

    def _message(self, event: str, data: Dict) -> Dict:
        return {"type": event, "data": data, "state": self.state_provider()}


# Resolved at send time so the snapshot always reflects the live session
manager = ConnectionManager(lambda: session.snapshot())


async def progress_callback(event: str, data: Dict):
    """Forward orchestrator progress to WebSocket clients"""
    await manager.publish(event, data)


# Global state
session = InboxSession(config)
session.load()
session.set_progress_callback(progress_callback)


# Request/Response models
class ChatRequest(BaseModel):
    message: str


class ToggleRequest(BaseModel):
    email_id: str


class SettingsDraftRequest(BaseModel):
    """Partial settings update; unset fields keep their draft value"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    promotional: Optional[bool] = None
    old_emails: Optional[bool] = None
    age_threshold: Optional[int] = None
    schedule_enabled: Optional[bool] = None
    frequency: Optional[str] = None
    schedule_time: Optional[str] = None
    require_confirmation: Optional[bool] = None
    max_emails_per_run: Optional[int] = None


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.get("/state")
def get_state():
    """Everything the UI renders, in one payload"""
    return session.snapshot()


# === Dashboard ===

@app.get("/activity")
def get_activity():
    return session.activity_state()


@app.get("/stats")
def get_stats():
    return session.stats_state()


# === Settings ===

@app.get("/settings")
def get_settings():
    return session.settings_state()


@app.put("/settings/draft")
def update_settings_draft(request: SettingsDraftRequest):
    """Edit the pending draft; nothing is persisted until /settings/save"""
    changes = request.model_dump(exclude_unset=True)
    try:
        session.settings.update_draft(**changes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session.settings_state()


@app.post("/settings/save")
async def save_settings():
    """Persist the draft and raise the saved signal for a few seconds"""
    if session.settings.save():
        asyncio.get_running_loop().call_later(SAVED_SIGNAL_SECONDS, session.settings.clear_saved)
    return session.settings_state()


# === Chat ===

@app.post("/chat")
async def send_chat_message(request: ChatRequest):
    """Send one utterance to the interactive agent"""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty")

    if not await session.chat.submit(request.message):
        raise HTTPException(status_code=409, detail="A chat request is already in progress")

    return session.chat_state()


@app.post("/chat/selection/toggle")
def toggle_selection(request: ToggleRequest):
    session.selection.toggle(request.email_id)
    return session.chat_state()


@app.post("/chat/selection/all")
def select_all_or_none():
    session.selection.select_all_or_none()
    return session.chat_state()


@app.post("/chat/delete")
async def delete_selected_emails():
    """Delete the selected previews through the interactive agent"""
    if not session.selection.selected:
        raise HTTPException(status_code=400, detail="No emails selected")

    if not await session.chat.delete_selected():
        raise HTTPException(status_code=409, detail="A chat request is already in progress")

    return session.chat_state()


@app.post("/chat/reset")
def reset_chat():
    session.reset_chat()
    return session.chat_state()


# === Periodic Cleanup ===

@app.post("/cleanup/run")
async def run_cleanup_now():
    """Run the cleanup policy now"""
    outcome = await session.periodic.run_now()
    if outcome.status == "rejected":
        raise HTTPException(status_code=409, detail="A cleanup run is already in progress")

    return {
        "status": outcome.status,
        "show_summary": outcome.show_summary,
        "error": outcome.error,
        "result": outcome.result.model_dump() if outcome.result else None,
    }


@app.post("/cleanup/test")
async def test_run_cleanup():
    """Dry run of the cleanup policy; nothing is deleted"""
    outcome = await session.periodic.test_run()
    if outcome.status == "rejected":
        raise HTTPException(status_code=409, detail="A cleanup run is already in progress")

    return {
        "status": outcome.status,
        "error": outcome.error,
        "result": outcome.result.model_dump() if outcome.result else None,
    }


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for real-time updates"""
    await manager.connect(websocket)

    try:
        while True:
            # Keep connection alive; clients only listen
            await websocket.receive_text()

    except WebSocketDisconnect:
        manager.disconnect(websocket)


# To run this application, use:
# uv run python -m uvicorn inbox_assistant.main:app --reload
