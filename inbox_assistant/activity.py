"""
Activity Recorder - bounded, newest-first log of cleanup outcomes
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from inbox_assistant.models import ActivityLogEntry, ActivityStats, ActivityStatus
from inbox_assistant.storage import PersistenceAdapter


logger = logging.getLogger(__name__)

ACTIVITY_LOG_LIMIT = 50


class ActivityRecorder:
    """Appends outcome records and persists the whole log after each append"""

    def __init__(self, persistence: PersistenceAdapter, limit: int = ACTIVITY_LOG_LIMIT):
        self.persistence = persistence
        self.limit = limit
        self.entries: List[ActivityLogEntry] = []

    def load(self) -> List[ActivityLogEntry]:
        """Replace the in-memory log with the persisted one"""
        self.entries = self.persistence.load_activity_log()[:self.limit]
        logger.debug(f"Loaded {len(self.entries)} activity entries")
        return list(self.entries)

    def record(self, action: str, emails_deleted: int, status: ActivityStatus) -> ActivityLogEntry:
        """Create a new entry stamped with the current time and append it"""
        entry = ActivityLogEntry(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            action=action,
            emails_deleted=emails_deleted,
            status=status,
        )
        return self.append(entry)

    def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        self.entries = [entry, *self.entries][:self.limit]
        logger.info(f"Activity recorded: {entry.action} ({entry.emails_deleted} emails, {entry.status})")

        # Persistence failures never reach the caller
        if not self.persistence.save_activity_log(self.entries):
            logger.warning("Activity log was not persisted")
        return entry

    # === Dashboard ===

    def stats(self, now: Optional[datetime] = None) -> ActivityStats:
        """Emails deleted by successful runs over the last week and month"""
        now = _as_utc(now) if now else datetime.now(timezone.utc)
        week_ago = now - timedelta(days=7)
        month_ago = now - timedelta(days=30)

        week_count = 0
        month_count = 0
        for entry in self.entries:
            if entry.status != "success":
                continue
            timestamp = _as_utc(entry.timestamp)
            if timestamp >= week_ago:
                week_count += entry.emails_deleted
            if timestamp >= month_ago:
                month_count += entry.emails_deleted

        return ActivityStats(
            week_count=week_count,
            month_count=month_count,
            last_cleanup=self.entries[0].timestamp if self.entries else None,
        )


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp
