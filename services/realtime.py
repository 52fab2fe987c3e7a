"""
services/realtime.py

In-process change notifications for the attendance table.

Every committed write publishes a ChangeEvent; the broker re-fetches the full,
ordered row set once and hands it to each subscriber. Subscribers always get
the whole table, so the latest delivery wins and no ordering is promised
between deliveries.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from schemas.attendance import Attendance as AttendanceSchema

logger = logging.getLogger(__name__)

Subscriber = Callable[[List[AttendanceSchema]], None]
Loader = Callable[[Session], list]


@dataclass(frozen=True)
class ChangeEvent:
    event_type: str                     # INSERT | UPDATE | DELETE
    table: str = "attendance"
    date_key: Optional[str] = None


class AttendanceBroker:
    def __init__(self, loader: Loader, channel: str = "attendance-channel"):
        self.channel = channel
        self._loader = loader
        self._subscribers: Dict[int, Subscriber] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns the matching unsubscribe function."""
        with self._lock:
            token = next(self._ids)
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, db: Session, event: ChangeEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.values())
        if not callbacks:
            return

        logger.info("Change received on %s: %s", self.channel, event)
        try:
            rows = [AttendanceSchema.model_validate(r) for r in self._loader(db)]
        except Exception:
            logger.exception("Error fetching updated attendance data")
            return

        for callback in callbacks:
            try:
                callback(rows)
            except Exception:
                logger.exception("Error handling database changes")
