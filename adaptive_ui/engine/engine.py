"""
Adaptive UI Engine.

Owns one visitor session: the bandit that picks the layout, the user
model, the hesitation detector, the explanation log and the consent gate.
Every UI event flows the same way:

    command -> model/bandit mutation -> explanation entry
            -> store write (only when consent is "allow")

Persistence failures never interrupt the session. Reads fall back to
defaults; failed writes keep the in-memory change and add a warning to
the explanation log.
"""

import json
import logging
import random
from typing import Any, Callable, Dict, Optional

from ..bandits import BanditState, EpsilonGreedyBandit
from ..clock import Clock, SystemClock
from ..config import AdaptiveConfig, get_adaptive_config
from ..consent import ConsentGate, ConsentState
from ..errors import UnknownArmError, UnknownCommandError
from ..explanations import ExplanationKind, ExplanationLog
from ..hesitation import HesitationDetector
from ..persistence import PersistenceStore, StorageKeys
from ..user_model import UserModel
from .commands import CommandType, EngineCommand, EngineSnapshot

logger = logging.getLogger(__name__)


class AdaptiveEngine:
    """
    Decision engine for one page session.

    Construction is the "page load": consent is read, personalization
    state is loaded when consent allows it, and a layout is chosen.
    Engines share nothing, so several can run side by side.

    Usage:
        engine = AdaptiveEngine(store=FileStore(), config=AdaptiveConfig())
        engine.grant_consent()
        engine.record_reward()           # primary action clicked
        snapshot = engine.snapshot()
    """

    def __init__(
        self,
        store: PersistenceStore,
        config: Optional[AdaptiveConfig] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Durable key-value store
            config: Optional AdaptiveConfig. Uses global if None.
            clock: Time and timer source. SystemClock if None.
            rng: Random source for exploration
        """
        self.config = config or get_adaptive_config()
        self.config.validate()

        self.store = store
        self.clock = clock or SystemClock()
        self.keys = StorageKeys.with_prefix(self.config.key_prefix)

        self.explanations = ExplanationLog(
            capacity=self.config.explanation_capacity,
            clock=self.clock,
        )
        self.consent = ConsentGate.load(store, self.keys.consent, self.explanations)

        model, bandit_state = self._load_personalization()
        self.model = model
        self.bandit = EpsilonGreedyBandit(
            arms=self.config.arms,
            epsilon=self.config.epsilon,
            rng=rng,
            state=bandit_state,
        )
        self.hesitation = HesitationDetector(
            clock=self.clock,
            on_hesitation=self._on_hesitation,
            dwell_ms=self.config.hesitation_dwell_ms,
            watched_elements=self.config.watched_elements,
        )

        self._handlers: Dict[CommandType, Callable[[Dict[str, Any]], None]] = {
            CommandType.APPLY_PREFERENCES: lambda p: self.apply_preferences(
                p["font_size"], p["contrast"], p["density"]
            ),
            CommandType.TOGGLE_ASSISTANCE: lambda p: self.toggle_assistance(),
            CommandType.RECORD_REWARD: lambda p: self.record_reward(p.get("reward")),
            CommandType.REQUEST_RESET: lambda p: self.reset(),
            CommandType.GRANT_CONSENT: lambda p: self.grant_consent(),
            CommandType.DENY_CONSENT: lambda p: self.deny_consent(),
            CommandType.HOVER_ENTER: lambda p: self.hover_enter(p["element_kind"]),
            CommandType.HOVER_LEAVE: lambda p: self.hover_leave(),
        }

        self.choose_layout()
        logger.info(
            f"[ENGINE] Session started: layout={self.model.layout_variant}, "
            f"consent={self.consent.state.value}"
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_personalization(self):
        """Load user model and bandit state, or defaults without consent."""
        if not self.consent.allows_persistence:
            logger.info("[ENGINE] No persistence consent, starting from defaults")
            return self._default_model(), BanditState.for_arms(self.config.arms)

        model = self._read(
            self.keys.user_model,
            UserModel.from_dict,
            "saved preferences",
        )
        bandit_state = self._read(
            self.keys.bandit_state,
            lambda data: BanditState.from_dict(data, self.config.arms),
            "saved layout statistics",
        )
        return (
            model or self._default_model(),
            bandit_state or BanditState.for_arms(self.config.arms),
        )

    def _read(self, key: str, decode: Callable[[Any], Any], label: str) -> Optional[Any]:
        try:
            raw = self.store.get(key)
            if raw is None:
                return None
            value = decode(json.loads(raw))
            logger.info(f"[ENGINE] Loaded {key}")
            return value
        except Exception as e:
            logger.warning(f"[ENGINE] Failed to load {key}: {e}")
            self.explanations.push(
                f"Could not load {label}; using defaults.",
                ExplanationKind.WARNING,
            )
            return None

    def _default_model(self) -> UserModel:
        return UserModel(last_updated=self.clock.now())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _write(self, key: str, payload: Dict[str, Any], label: str) -> bool:
        if not self.consent.allows_persistence:
            logger.debug(f"[ENGINE] Consent is {self.consent.state.value}, not saving {key}")
            return False
        try:
            self.store.set(key, json.dumps(payload))
            return True
        except Exception as e:
            logger.warning(f"[ENGINE] Failed to save {key}: {e}")
            self.explanations.push(
                f"Could not save {label}; continuing with session-only state.",
                ExplanationKind.WARNING,
            )
            return False

    def _commit_model(self) -> bool:
        self.model.last_updated = self.clock.now()
        return self._write(self.keys.user_model, self.model.to_dict(), "your preferences")

    def _save_bandit(self, state: BanditState) -> bool:
        return self._write(self.keys.bandit_state, state.to_dict(), "layout statistics")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def choose_layout(self) -> str:
        """
        Pick the layout for this session with the bandit.

        Returns:
            Chosen arm
        """
        arm = self.bandit.select_arm()
        self.model.layout_variant = arm
        if self.bandit.last_explored:
            message = f"Chose layout {arm} to explore alternatives."
        else:
            message = f"Chose layout {arm} based on previous click success."
        self.explanations.push(message, ExplanationKind.LAYOUT_CHOICE)
        self._commit_model()
        return arm

    def apply_preferences(self, font_size: Any, contrast: Any, density: Any) -> None:
        """
        Update display preferences.

        Raises:
            InvalidPreferenceError: If a value is not allowed (nothing changes)
        """
        self.model.apply_preferences(font_size, contrast, density)
        self.explanations.push(
            "Applied your preferences (font, contrast, density).",
            ExplanationKind.PREFERENCES,
        )
        self._commit_model()

    def toggle_assistance(self) -> bool:
        """
        Flip guided mode.

        Returns:
            True if guided mode is now on
        """
        self.model.toggle_assistance()
        return self._assistance_changed()

    def set_assistance(self, on: bool) -> bool:
        self.model.set_assistance(on)
        return self._assistance_changed()

    def _assistance_changed(self) -> bool:
        on = self.model.assistance_on
        self.explanations.push(
            f"Guided mode {'enabled' if on else 'disabled'}.",
            ExplanationKind.ASSISTANCE,
        )
        self._commit_model()
        return on

    def record_reward(self, reward: Optional[float] = None) -> str:
        """
        Credit the current layout with a reward.

        Args:
            reward: Reward value; config.reward_value if None

        Returns:
            Arm that received the reward

        Raises:
            UnknownArmError: If the current layout is not a configured arm
            InvalidRewardError: If the reward is not a finite number
        """
        arm = self.model.layout_variant
        if arm not in self.bandit.arms:
            raise UnknownArmError(arm, self.bandit.arms)

        value = self.config.reward_value if reward is None else reward
        self.bandit.update(arm, value)

        if value > 0:
            message = f"Recorded a successful click for layout {arm}."
        else:
            message = f"Recorded reward {value:g} for layout {arm}."
        self.explanations.push(message, ExplanationKind.REWARD)

        self._save_bandit(self.bandit.state)
        return arm

    def grant_consent(self) -> None:
        """Allow persistence and save the session so far."""
        self.consent.grant()
        self._write(self.keys.user_model, self.model.to_dict(), "your preferences")
        self._save_bandit(self.bandit.state)

    def deny_consent(self) -> None:
        self.consent.deny()

    def hover_enter(self, element_kind: str) -> bool:
        return self.hesitation.hover_enter(element_kind)

    def hover_leave(self) -> None:
        self.hesitation.hover_leave()

    def _on_hesitation(self) -> None:
        activated = self.model.record_hesitation(self.config.hesitation_threshold)
        logger.debug(f"[ENGINE] Hesitation count: {self.model.hesitations}")
        if activated:
            self.explanations.push(
                "We detected possible hesitation and enabled Guided Mode.",
                ExplanationKind.ASSISTANCE,
            )
            logger.info(
                f"[ENGINE] Guided mode enabled after {self.model.hesitations} hesitations"
            )
        self._commit_model()

    def reset(self) -> None:
        """
        Erase all personalization and start over.

        Clears bandit state, user model and consent, deletes every stored
        entry, and chooses a fresh layout.
        """
        self.hesitation.cancel()

        for key in (self.keys.user_model, self.keys.bandit_state):
            try:
                self.store.delete(key)
            except Exception as e:
                logger.warning(f"[ENGINE] Failed to delete {key}: {e}")
                self.explanations.push(
                    "Could not erase all saved data.", ExplanationKind.WARNING
                )
        self.consent.clear()

        self.bandit.reset()
        self.model = self._default_model()
        self.choose_layout()
        self.explanations.push("All data cleared. Using defaults.", ExplanationKind.RESET)
        logger.info("[ENGINE] Reset all personalization data")

    def tick(self) -> int:
        """Fire due timers; hosts using SystemClock call this from their loop."""
        return self.clock.run_due()

    # ------------------------------------------------------------------
    # Command interface
    # ------------------------------------------------------------------

    def dispatch(self, command: EngineCommand) -> EngineSnapshot:
        """
        Route a UI command and return the resulting snapshot.

        Raises:
            UnknownCommandError: If no handler exists for the command
        """
        handler = self._handlers.get(command.type)
        if handler is None:
            raise UnknownCommandError(f"No handler for {command.type!r}")

        logger.debug(f"[ENGINE] Dispatch {command.type.value}")
        handler(command.payload)
        return self.snapshot()

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            model=self.model.to_dict(),
            layout_variant=self.model.layout_variant,
            consent=self.consent.state.value,
            consent_prompt_visible=self.consent.prompt_visible,
            hesitation_pending=self.hesitation.pending,
            bandit=self.bandit.get_stats(),
        )

    @property
    def consent_state(self) -> ConsentState:
        return self.consent.state
