"""
Consent Gate for personalization persistence.

Tri-state consent (unset/allow/deny). Only "allow" lets user model and
bandit state reach the persistence store; the engine keeps working in
memory either way. The consent value itself is always written, since it
records the user's choice rather than personalization data.
"""

import logging
from enum import Enum

from ..explanations import ExplanationKind, ExplanationLog
from ..persistence import PersistenceStore

logger = logging.getLogger(__name__)


class ConsentState(str, Enum):
    """User's choice about durable personalization storage."""
    UNSET = "unset"
    ALLOW = "allow"
    DENY = "deny"


class ConsentGate:
    """
    Holds the consent state and writes it to the store.

    grant() and deny() may be called any number of times; the last call
    wins. clear() is reserved for a full reset.
    """

    def __init__(
        self,
        store: PersistenceStore,
        key: str,
        explanations: ExplanationLog,
        state: ConsentState = ConsentState.UNSET,
    ):
        self.store = store
        self.key = key
        self.explanations = explanations
        self._state = state

    @classmethod
    def load(
        cls,
        store: PersistenceStore,
        key: str,
        explanations: ExplanationLog,
    ) -> "ConsentGate":
        """
        Build a gate from the stored consent value.

        Missing, unreadable or unknown values all mean "unset".
        """
        state = ConsentState.UNSET
        raw = None
        try:
            raw = store.get(key)
        except Exception as e:
            logger.warning(f"[CONSENT] Failed to load consent: {e}")

        if raw is not None:
            try:
                state = ConsentState(raw)
            except ValueError:
                logger.warning(f"[CONSENT] Ignoring unknown stored consent value {raw!r}")

        logger.info(f"[CONSENT] Loaded consent state: {state.value}")
        return cls(store, key, explanations, state)

    @property
    def state(self) -> ConsentState:
        return self._state

    @property
    def allows_persistence(self) -> bool:
        return self._state == ConsentState.ALLOW

    @property
    def prompt_visible(self) -> bool:
        """The consent banner is shown while no choice has been made."""
        return self._state == ConsentState.UNSET

    def grant(self) -> bool:
        """
        Record consent.

        Returns:
            True if the consent value was written to the store
        """
        self._state = ConsentState.ALLOW
        self.explanations.push(
            "Consent granted: personalization enabled.", ExplanationKind.CONSENT
        )
        saved = self._write()
        logger.info("[CONSENT] Granted")
        return saved

    def deny(self) -> bool:
        """
        Record refusal.

        Returns:
            True if the consent value was written to the store
        """
        self._state = ConsentState.DENY
        self.explanations.push(
            "Consent denied: only session defaults applied.", ExplanationKind.CONSENT
        )
        saved = self._write()
        logger.info("[CONSENT] Denied")
        return saved

    def clear(self) -> None:
        """Return to "unset" and remove the stored value."""
        self._state = ConsentState.UNSET
        try:
            self.store.delete(self.key)
        except Exception as e:
            logger.warning(f"[CONSENT] Failed to clear consent: {e}")
            self.explanations.push(
                "Could not erase the stored consent choice.", ExplanationKind.WARNING
            )

    def _write(self) -> bool:
        try:
            self.store.set(self.key, self._state.value)
            return True
        except Exception as e:
            logger.warning(f"[CONSENT] Failed to save consent: {e}")
            self.explanations.push(
                "Could not save your consent choice; it applies to this session only.",
                ExplanationKind.WARNING,
            )
            return False
