"""
Configuration for the adaptive UI engine.

All settings are configurable via environment variables prefixed with
ADAPTIVE_UI_. Engines accept an explicit AdaptiveConfig; the lazy global
below is only a fallback for callers that do not pass one.
"""

import math
import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class AdaptiveConfig:
    """
    Configuration for the adaptive UI engine.

    Attributes:
        arms: Ordered layout variants; the first one wins exploit ties
        epsilon: Exploration probability for the bandit
        hesitation_dwell_ms: Dwell time before a hover counts as hesitation
        hesitation_threshold: Hesitations needed to switch guided mode on
        watched_elements: Element kinds the hesitation detector watches
        explanation_capacity: Max entries kept in the explanation log
        reward_value: Reward recorded for a primary action click

        # Persistence
        key_prefix: Prefix for the three persisted keys
        store_dir: Directory used by FileStore
    """

    arms: Tuple[str, ...] = ("A", "B")
    epsilon: float = 0.2
    hesitation_dwell_ms: int = 1200
    hesitation_threshold: int = 2
    watched_elements: Tuple[str, ...] = ("label",)
    explanation_capacity: int = 200
    reward_value: float = 1.0

    # Persistence
    key_prefix: str = "adaptive_ui_"
    store_dir: str = "kb/adaptive_ui/"

    def __post_init__(self):
        self.arms = tuple(self.arms)
        self.watched_elements = tuple(self.watched_elements)

    @classmethod
    def from_env(cls) -> "AdaptiveConfig":
        """
        Create configuration from environment variables.

        Environment variables:
            ADAPTIVE_UI_ARMS: comma-separated arm names
            ADAPTIVE_UI_EPSILON: float in [0, 1]
            ADAPTIVE_UI_HESITATION_DWELL_MS: int
            ADAPTIVE_UI_HESITATION_THRESHOLD: int
            ADAPTIVE_UI_WATCHED_ELEMENTS: comma-separated element kinds
            ADAPTIVE_UI_EXPLANATION_CAPACITY: int
            ADAPTIVE_UI_REWARD_VALUE: float
            ADAPTIVE_UI_KEY_PREFIX: string
            ADAPTIVE_UI_STORE_DIR: path string
        """
        defaults = cls()

        def get_float(key: str, default: float) -> float:
            try:
                value = float(os.environ.get(key, default))
            except (ValueError, TypeError):
                return default
            return value if math.isfinite(value) else default

        def get_int(key: str, default: int) -> int:
            try:
                return int(os.environ.get(key, default))
            except (ValueError, TypeError):
                return default

        def get_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
            raw = os.environ.get(key, "")
            items = tuple(item.strip() for item in raw.split(",") if item.strip())
            return items or default

        epsilon = get_float("ADAPTIVE_UI_EPSILON", defaults.epsilon)
        if not 0.0 <= epsilon <= 1.0:
            epsilon = defaults.epsilon

        return cls(
            arms=get_list("ADAPTIVE_UI_ARMS", defaults.arms),
            epsilon=epsilon,
            hesitation_dwell_ms=get_int(
                "ADAPTIVE_UI_HESITATION_DWELL_MS", defaults.hesitation_dwell_ms
            ),
            hesitation_threshold=get_int(
                "ADAPTIVE_UI_HESITATION_THRESHOLD", defaults.hesitation_threshold
            ),
            watched_elements=get_list(
                "ADAPTIVE_UI_WATCHED_ELEMENTS", defaults.watched_elements
            ),
            explanation_capacity=get_int(
                "ADAPTIVE_UI_EXPLANATION_CAPACITY", defaults.explanation_capacity
            ),
            reward_value=get_float("ADAPTIVE_UI_REWARD_VALUE", defaults.reward_value),
            key_prefix=os.environ.get("ADAPTIVE_UI_KEY_PREFIX", defaults.key_prefix),
            store_dir=os.environ.get("ADAPTIVE_UI_STORE_DIR", defaults.store_dir),
        )

    def validate(self) -> None:
        """
        Check the configuration for values the engine cannot run with.

        Raises:
            ConfigurationError: If any value is out of range
        """
        if not self.arms:
            raise ConfigurationError("At least one arm must be configured")
        if len(set(self.arms)) != len(self.arms):
            raise ConfigurationError(f"Duplicate arms in {list(self.arms)}")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ConfigurationError(f"epsilon must be in [0, 1], got {self.epsilon}")
        if not math.isfinite(self.reward_value):
            raise ConfigurationError(
                f"reward_value must be a finite number, got {self.reward_value}"
            )
        if self.hesitation_dwell_ms <= 0:
            raise ConfigurationError(
                f"hesitation_dwell_ms must be positive, got {self.hesitation_dwell_ms}"
            )
        if self.hesitation_threshold < 1:
            raise ConfigurationError(
                f"hesitation_threshold must be >= 1, got {self.hesitation_threshold}"
            )
        if self.explanation_capacity < 1:
            raise ConfigurationError(
                f"explanation_capacity must be >= 1, got {self.explanation_capacity}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "arms": list(self.arms),
            "epsilon": self.epsilon,
            "hesitation_dwell_ms": self.hesitation_dwell_ms,
            "hesitation_threshold": self.hesitation_threshold,
            "watched_elements": list(self.watched_elements),
            "explanation_capacity": self.explanation_capacity,
            "reward_value": self.reward_value,
            "key_prefix": self.key_prefix,
            "store_dir": self.store_dir,
        }


# Global config instance (lazy-loaded)
_config: Optional[AdaptiveConfig] = None


def get_adaptive_config(force_reload: bool = False) -> AdaptiveConfig:
    """
    Get the global adaptive UI configuration.

    Lazy-loads configuration from environment variables.

    Args:
        force_reload: Force reload from environment

    Returns:
        AdaptiveConfig instance
    """
    global _config

    if _config is None or force_reload:
        _config = AdaptiveConfig.from_env()
        logger.info(
            f"[CONFIG] Loaded arms={list(_config.arms)}, "
            f"epsilon={_config.epsilon}, "
            f"dwell_ms={_config.hesitation_dwell_ms}, "
            f"threshold={_config.hesitation_threshold}"
        )

    return _config


def reset_adaptive_config() -> None:
    """Reset global config (mainly for testing)."""
    global _config
    _config = None
