"""
Selection Tracker - the latest preview batch and which of its emails are selected
"""

import logging
from typing import Iterable, List, Set

from inbox_assistant.models import EmailPreview


logger = logging.getLogger(__name__)


class SelectionTracker:
    """Keeps the selection a subset of the ids in the current preview batch"""

    def __init__(self):
        self.previews: List[EmailPreview] = []
        self.selected: Set[str] = set()

    @property
    def preview_ids(self) -> Set[str]:
        return {preview.id for preview in self.previews}

    # === Preview Batch ===

    def replace(self, previews: Iterable[EmailPreview]) -> None:
        """Swap in a new batch; the selection always starts empty"""
        self.previews = list(previews)
        self.selected = set()
        logger.debug(f"Preview batch replaced with {len(self.previews)} emails")

    def clear(self) -> None:
        self.replace([])

    def remove(self, ids: Iterable[str]) -> None:
        """Drop the given emails from the batch and from the selection"""
        removed = set(ids)
        self.previews = [preview for preview in self.previews if preview.id not in removed]
        self.selected &= self.preview_ids

    # === Selection ===

    def toggle(self, email_id: str) -> bool:
        """Flip membership of one email; returns whether it is now selected"""
        if email_id not in self.preview_ids:
            logger.debug(f"Ignoring toggle for {email_id}: not in the current preview batch")
            return False

        if email_id in self.selected:
            self.selected.discard(email_id)
        else:
            self.selected.add(email_id)
        return email_id in self.selected

    def select_all_or_none(self) -> None:
        """Select every preview, or clear the selection if all are already selected"""
        all_ids = self.preview_ids
        if len(self.selected) == len(all_ids):
            self.selected = set()
        else:
            self.selected = all_ids

    def clear_selection(self) -> None:
        self.selected = set()

    def is_selected(self, email_id: str) -> bool:
        return email_id in self.selected

    def selected_ids(self) -> List[str]:
        """Selected ids in preview-batch order"""
        seen = set()
        ordered = []
        for preview in self.previews:
            if preview.id in self.selected and preview.id not in seen:
                seen.add(preview.id)
                ordered.append(preview.id)
        return ordered
