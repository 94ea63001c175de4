"""
Explanation Log for the adaptive UI engine.

A live, human-readable trace of every automated decision: layout choice,
rewards, guided mode changes, consent changes, resets and persistence
warnings. Newest entries come first. The log lives for one session only
and is never persisted.
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from ..clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class ExplanationKind(str, Enum):
    """Categories of explained decisions."""
    LAYOUT_CHOICE = "layout_choice"
    REWARD = "reward"
    ASSISTANCE = "assistance"
    PREFERENCES = "preferences"
    CONSENT = "consent"
    RESET = "reset"
    WARNING = "warning"


@dataclass(frozen=True)
class ExplanationEntry:
    """One timestamped explanation line."""
    timestamp: datetime
    kind: ExplanationKind
    message: str

    def render(self) -> str:
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "message": self.message,
        }


Listener = Callable[[ExplanationEntry], None]


class ExplanationLog:
    """
    Bounded, most-recent-first explanation trail.

    Once capacity is reached the oldest entry is dropped for each new one.
    Listeners registered with subscribe() receive every new entry as it
    is pushed.
    """

    def __init__(self, capacity: int = 200, clock: Optional[Clock] = None):
        self.capacity = capacity
        self.clock = clock or SystemClock()
        self._entries: Deque[ExplanationEntry] = deque(maxlen=capacity)
        self._listeners: List[Listener] = []

    def push(self, message: str, kind: ExplanationKind) -> ExplanationEntry:
        """
        Append a new entry at the front of the log.

        Args:
            message: Human-readable explanation
            kind: Decision category

        Returns:
            The created entry
        """
        entry = ExplanationEntry(timestamp=self.clock.now(), kind=kind, message=message)
        self._entries.appendleft(entry)
        logger.debug(f"[EXPLAIN] {kind.value}: {message}")

        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception as e:
                logger.warning(f"[EXPLAIN] Listener failed: {e}")

        return entry

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for new entries.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def entries(self) -> List[ExplanationEntry]:
        """All entries, newest first."""
        return list(self._entries)

    def latest(self) -> Optional[ExplanationEntry]:
        return self._entries[0] if self._entries else None

    def messages(self) -> List[str]:
        return [entry.message for entry in self._entries]

    def render(self) -> List[str]:
        return [entry.render() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
