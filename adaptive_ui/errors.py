"""
Exception types for the adaptive UI engine.

Configuration problems are raised to the caller. Persistence problems are
caught by the engine, logged, and degraded to session-only behavior.
"""

from typing import Optional


class AdaptiveUIError(Exception):
    """Base class for all adaptive UI errors."""
    pass


class ConfigurationError(AdaptiveUIError):
    """Raised when the engine is configured with invalid values."""
    pass


class UnknownArmError(ConfigurationError):
    """Raised when an arm outside the configured arm set is referenced."""
    
    def __init__(self, arm: str, arms: Optional[list] = None):
        super().__init__(f"Unknown arm {arm!r} (configured: {arms or []})")
        self.arm = arm
        self.arms = list(arms or [])


class InvalidPreferenceError(AdaptiveUIError, ValueError):
    """Raised when a preference value is not one of the allowed choices."""
    
    def __init__(self, field_name: str, value, allowed: Optional[list] = None):
        super().__init__(
            f"Invalid {field_name}: {value!r} (allowed: {allowed or []})"
        )
        self.field_name = field_name
        self.value = value
        self.allowed = list(allowed or [])


class InvalidRewardError(AdaptiveUIError, ValueError):
    """Raised when a reward is not a finite number."""

    def __init__(self, reward):
        super().__init__(f"Reward must be a finite number, got {reward!r}")
        self.reward = reward


class UnknownCommandError(AdaptiveUIError, ValueError):
    """Raised when a command cannot be parsed or routed."""
    pass


class PersistenceError(AdaptiveUIError):
    """Exception raised when the persistence store fails."""
    
    def __init__(self, message: str, key: str = "", cause: Optional[Exception] = None):
        super().__init__(message)
        self.key = key
        self.cause = cause


class MalformedPayloadError(PersistenceError):
    """
    Raised when a stored payload exists but cannot be decoded.
    
    Treated the same as a missing entry by the engine.
    """
    pass
