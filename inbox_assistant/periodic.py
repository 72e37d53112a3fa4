"""
Periodic Runner - runs the cleanup policy on demand through the periodic agent
"""

import logging
from typing import Callable, Dict, Optional

from pydantic import ValidationError

from inbox_assistant.activity import ActivityRecorder
from inbox_assistant.gateway import NETWORK_ERROR_MESSAGE, describe
from inbox_assistant.models import PeriodicResult, RunOutcome, Settings
from inbox_assistant.settings import SettingsStore


logger = logging.getLogger(__name__)

RUN_FAILED_MESSAGE = "Cleanup failed"
TEST_RUN_FAILED_MESSAGE = "Test run failed"


def build_instruction(settings: Settings, dry_run: bool) -> str:
    """Render the cleanup policy as an instruction for the periodic agent"""
    policy = (
        f"promotional={str(settings.promotional).lower()}, "
        f"old_emails={str(settings.old_emails).lower()}, "
        f"age_threshold={settings.age_threshold} days"
    )
    if dry_run:
        return f"Test cleanup (dry run) with settings: {policy}. Do not delete, just show what would be deleted."
    return f"Run cleanup with settings: {policy}"


class PeriodicRunner:
    """Run-now and test-run entry points sharing their own in-flight gate.

    Both use the settings draft, so unsaved edits apply. A real run logs
    both outcomes; a dry run logs only success, and always with a count of 0.
    """

    def __init__(
        self,
        gateway,  # anything with `async call(instruction, agent_id) -> Envelope`
        recorder: ActivityRecorder,
        settings: SettingsStore,
        agent_id: str,
        progress_callback: Optional[Callable] = None
    ):
        self.gateway = gateway
        self.recorder = recorder
        self.settings = settings
        self.agent_id = agent_id
        self.progress_callback = progress_callback

        self.loading = False
        self.error: Optional[str] = None
        self.last_result: Optional[PeriodicResult] = None

    # === Entry Points ===

    async def run_now(self) -> RunOutcome:
        """Run the cleanup for real"""
        return await self._run(dry_run=False)

    async def test_run(self) -> RunOutcome:
        """Ask the agent what the cleanup would delete, without deleting"""
        return await self._run(dry_run=True)

    async def _run(self, dry_run: bool) -> RunOutcome:
        if self.loading:
            return RunOutcome(status="rejected")

        self.loading = True
        self.error = None
        instruction = build_instruction(self.settings.draft, dry_run)

        try:
            if dry_run:
                outcome = await self._execute_test_run(instruction)
            else:
                outcome = await self._execute_run(instruction)
        finally:
            self.loading = False

        await self._report_progress(f"cleanup_{'completed' if outcome.status == 'success' else 'failed'}", {
            "dry_run": dry_run,
            "emails_deleted": outcome.entry.emails_deleted if outcome.entry else 0,
            "error": outcome.error
        })
        return outcome

    # === Run Now ===

    async def _execute_run(self, instruction: str) -> RunOutcome:
        result, error = await self._call(instruction, RUN_FAILED_MESSAGE)
        if result is None:
            self.error = error
            entry = self.recorder.record("Scheduled cleanup failed", 0, "error")
            return RunOutcome(status="error", error=error, entry=entry)

        self.last_result = result
        entry = self.recorder.record(
            "Scheduled cleanup executed",
            result.cleanup_summary.total_emails_deleted,
            "success"
        )
        return RunOutcome(status="success", show_summary=True, result=result, entry=entry)

    # === Test Run ===

    async def _execute_test_run(self, instruction: str) -> RunOutcome:
        result, error = await self._call(instruction, TEST_RUN_FAILED_MESSAGE)
        if result is None:
            self.error = error
            return RunOutcome(status="error", error=error)

        self.last_result = result
        # Dry runs never count as deletions; the label carries the would-be count
        entry = self.recorder.record(
            f"Test run: would delete {result.cleanup_summary.total_emails_processed} emails",
            0,
            "success"
        )
        return RunOutcome(status="success", result=result, entry=entry)

    # === Agent Call ===

    async def _call(self, instruction: str, fallback: str):
        """Returns (result, None) on success or (None, error message) on any failure"""
        try:
            envelope = await self.gateway.call(instruction, self.agent_id)
        except Exception as error:
            logger.warning(f"Cleanup request failed: {error}")
            return None, NETWORK_ERROR_MESSAGE

        logger.debug(f"Cleanup response: {describe(envelope)}")
        if not envelope.succeeded:
            return None, envelope.failure_message(fallback)

        try:
            return PeriodicResult.model_validate(envelope.response.result), None
        except ValidationError as error:
            logger.warning(f"Unreadable cleanup result: {error.error_count()} errors")
            return None, NETWORK_ERROR_MESSAGE

    async def _report_progress(self, event: str, data: Dict) -> None:
        """Send progress update if callback is set"""
        if self.progress_callback:
            await self.progress_callback(event, data)
