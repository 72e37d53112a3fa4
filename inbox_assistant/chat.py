"""
Chat Orchestrator - turns a user utterance into one interactive-agent call
and folds the reply into the transcript, preview batch and activity log
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from inbox_assistant.activity import ActivityRecorder
from inbox_assistant.gateway import NETWORK_ERROR_MESSAGE, describe
from inbox_assistant.models import ChatMessage, ChatRole, InteractiveResult
from inbox_assistant.selection import SelectionTracker


logger = logging.getLogger(__name__)

SEND_FAILED_MESSAGE = "Failed to process request"
DELETE_FAILED_MESSAGE = "Failed to delete emails"
EMPTY_REPLY_MESSAGE = "Done."


class ChatOrchestrator:
    """Owns the chat transcript and the chat in-flight gate.

    ``submit`` and ``delete_selected`` share one gate: while either is
    awaiting the agent, both reject new work instead of queueing it.
    """

    def __init__(
        self,
        gateway,  # anything with `async call(instruction, agent_id) -> Envelope`
        recorder: ActivityRecorder,
        selection: SelectionTracker,
        agent_id: str,
        progress_callback: Optional[Callable] = None
    ):
        self.gateway = gateway
        self.recorder = recorder
        self.selection = selection
        self.agent_id = agent_id
        self.progress_callback = progress_callback

        self.messages: List[ChatMessage] = []
        self.input_buffer = ""
        self.loading = False
        self.error: Optional[str] = None

    # === Send ===

    async def submit(self, utterance: Optional[str] = None) -> bool:
        """Send one utterance (or the input buffer); returns False if it was ignored"""
        text = self.input_buffer if utterance is None else utterance
        if not text.strip() or self.loading:
            return False

        # Optimistic: the user's line stays in the transcript even if the call fails
        self._append_message("user", text)
        self.input_buffer = ""
        self.loading = True
        self.error = None

        try:
            succeeded = await self._send(text)
        finally:
            self.loading = False

        await self._report_progress("chat_completed" if succeeded else "chat_failed", {
            "messages": len(self.messages),
            "previews": len(self.selection.previews),
            "error": self.error
        })
        return True

    async def _send(self, text: str) -> bool:
        try:
            envelope = await self.gateway.call(text, self.agent_id)
        except Exception as error:
            logger.warning(f"Chat request failed: {error}")
            self._send_failed(NETWORK_ERROR_MESSAGE)
            return False

        logger.debug(f"Chat response: {describe(envelope)}")
        if not envelope.succeeded:
            self._send_failed(envelope.failure_message(SEND_FAILED_MESSAGE))
            return False

        try:
            result = InteractiveResult.model_validate(envelope.response.result)
        except ValidationError as error:
            logger.warning(f"Unreadable chat result: {error.error_count()} errors")
            self._send_failed(NETWORK_ERROR_MESSAGE)
            return False

        self._append_message("assistant", result.message or envelope.response.message or EMPTY_REPLY_MESSAGE)

        if result.email_preview:
            self.selection.replace(result.email_preview)
        else:
            self.selection.clear()

        # Logged only when the agent reports deletions
        if result.emails_deleted > 0:
            category = result.criteria_identified.category or "emails"
            self.recorder.record(f"Chat cleanup: {category}", result.emails_deleted, "success")

        return True

    def _send_failed(self, message: str) -> None:
        self.error = message
        self._append_message("assistant", message)

    # === Delete Selected ===

    async def delete_selected(self) -> bool:
        """Ask the agent to delete the selected previews; returns False if it was ignored"""
        email_ids = self.selection.selected_ids()
        if not email_ids or self.loading:
            return False

        self.loading = True
        self.error = None

        try:
            succeeded = await self._delete(email_ids)
        finally:
            self.loading = False

        await self._report_progress("delete_completed" if succeeded else "delete_failed", {
            "requested": len(email_ids),
            "previews": len(self.selection.previews),
            "error": self.error
        })
        return True

    async def _delete(self, email_ids: List[str]) -> bool:
        instruction = f"Delete these specific emails: {', '.join(email_ids)}"

        try:
            envelope = await self.gateway.call(instruction, self.agent_id)
        except Exception as error:
            logger.warning(f"Delete request failed: {error}")
            self.error = NETWORK_ERROR_MESSAGE
            return False

        logger.debug(f"Delete response: {describe(envelope)}")
        if not envelope.succeeded:
            self.error = envelope.failure_message(DELETE_FAILED_MESSAGE)
            return False

        try:
            result = InteractiveResult.model_validate(envelope.response.result)
        except ValidationError as error:
            logger.warning(f"Unreadable delete result: {error.error_count()} errors")
            self.error = NETWORK_ERROR_MESSAGE
            return False

        # Selected count and agent-reported count are kept apart; they can differ
        self.recorder.record(f"Deleted {len(email_ids)} selected emails", result.emails_deleted, "success")
        self.selection.remove(email_ids)
        self.selection.clear_selection()
        self._append_message("assistant", f"Successfully deleted {result.emails_deleted} emails.")
        return True

    # === Session ===

    def reset(self) -> None:
        """Forget the transcript, preview batch and selection"""
        self.messages = []
        self.input_buffer = ""
        self.error = None
        self.selection.clear()

    def _append_message(self, role: ChatRole, content: str) -> ChatMessage:
        message = ChatMessage(
            id=uuid.uuid4().hex,
            role=role,
            content=content,
            timestamp=datetime.now(timezone.utc).isoformat()
        )
        self.messages.append(message)
        return message

    async def _report_progress(self, event: str, data: Dict) -> None:
        """Send progress update if callback is set"""
        if self.progress_callback:
            await self.progress_callback(event, data)
