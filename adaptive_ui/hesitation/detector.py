"""
Hesitation Detector.

Turns sustained hover/focus on a label-like element into a hesitation
signal. Entering a watched element starts a single debounce timer;
leaving before it expires cancels it silently. At most one timer is ever
pending, so overlapping enters restart tracking instead of stacking.
"""

import logging
from typing import Callable, Iterable, Optional

from ..clock import Clock, TimerHandle

logger = logging.getLogger(__name__)


class HesitationDetector:
    """
    Debounced dwell detector.

    Usage:
        detector = HesitationDetector(clock, on_hesitation=engine_callback)
        detector.hover_enter("label")
        ...                        # 1200ms later, on_hesitation() runs
        detector.hover_leave()     # before expiry: nothing happens
    """

    def __init__(
        self,
        clock: Clock,
        on_hesitation: Callable[[], None],
        dwell_ms: int = 1200,
        watched_elements: Iterable[str] = ("label",),
    ):
        """
        Initialize the detector.

        Args:
            clock: Clock that schedules the debounce timer
            on_hesitation: Called once per completed dwell, at expiry time
            dwell_ms: Dwell duration in milliseconds
            watched_elements: Element kinds that start a dwell
        """
        self.clock = clock
        self.on_hesitation = on_hesitation
        self.dwell_ms = dwell_ms
        self.watched_elements = frozenset(watched_elements)
        self._timer: Optional[TimerHandle] = None
        self._element: Optional[str] = None

    @property
    def pending(self) -> bool:
        """True while a dwell timer is waiting to expire."""
        return self._timer is not None and self._timer.active

    @property
    def watching(self) -> Optional[str]:
        """Element kind of the pending dwell, if any."""
        return self._element if self.pending else None

    def is_watched(self, element_kind: str) -> bool:
        return element_kind in self.watched_elements

    def hover_enter(self, element_kind: str) -> bool:
        """
        Start tracking a dwell on an element.

        Args:
            element_kind: Kind of element entered (e.g. "label")

        Returns:
            True if a dwell timer was started
        """
        if not self.is_watched(element_kind):
            return False

        self.cancel()
        self._element = element_kind
        self._timer = self.clock.call_later(self.dwell_ms, self._expire)
        logger.debug(f"[HESITATION] Watching {element_kind} for {self.dwell_ms}ms")
        return True

    def hover_leave(self) -> None:
        """Stop tracking; a pending dwell is dropped without a signal."""
        self.cancel()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._element = None

    def _expire(self) -> None:
        logger.debug(f"[HESITATION] Dwell completed on {self._element}")
        self._timer = None
        self._element = None
        self.on_hesitation()
