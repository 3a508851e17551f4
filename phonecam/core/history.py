"""
In-memory answer history.

Keeps every accepted Answer for the lifetime of the process. Durable
storage belongs to whoever consumes these records.
"""
import time
import uuid
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import Answer

logger = logging.getLogger(__name__)


class HistoryMode(Enum):
    """Which screen produced the entry."""
    SCANNER = "scanner"
    WEBCAM = "webcam"


@dataclass(frozen=True)
class HistoryItem:
    question: str
    answer: str
    mode: HistoryMode = HistoryMode.SCANNER
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class AnswerHistory:
    """Newest-first list of answered questions."""

    def __init__(self, max_items: Optional[int] = None):
        self.max_items = max_items
        self._items: List[HistoryItem] = []

    def record(self, answer: Answer, mode: HistoryMode = HistoryMode.SCANNER) -> HistoryItem:
        """Store an Answer and return the created entry."""
        item = HistoryItem(
            question=answer.question.text,
            answer=answer.answer_text,
            mode=mode,
            timestamp=answer.answered_at,
        )
        self._items.insert(0, item)
        if self.max_items is not None and len(self._items) > self.max_items:
            del self._items[self.max_items:]
        logger.debug(f"History entry {item.id[:8]} recorded ({mode.value})")
        return item

    def query(self, mode: Optional[HistoryMode] = None, limit: Optional[int] = None) -> List[HistoryItem]:
        """
        List entries, newest first.

        Args:
            mode: Only entries from this mode (None for all)
            limit: Maximum number of entries
        """
        items = [i for i in self._items if mode is None or i.mode == mode]
        return items[:limit] if limit is not None else items

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def delete(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [i for i in self._items if i.id != item_id]
        return len(self._items) < before

    def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        logger.info(f"History cleared ({count} entries)")
        return count

    def stats(self) -> Dict[str, Any]:
        by_mode = {mode.value: 0 for mode in HistoryMode}
        for item in self._items:
            by_mode[item.mode.value] += 1
        return {
            "total_count": len(self._items),
            "by_mode": by_mode,
            "latest": self._items[0].timestamp if self._items else None,
        }

    def __len__(self) -> int:
        return len(self._items)
