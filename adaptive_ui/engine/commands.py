"""
Command and snapshot types exchanged with the UI layer.

The UI layer never touches engine state directly: it sends EngineCommand
values to AdaptiveEngine.dispatch() and renders the EngineSnapshot it
gets back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import UnknownCommandError


class CommandType(str, Enum):
    """Inbound events consumed by the engine."""
    APPLY_PREFERENCES = "apply_preferences"
    TOGGLE_ASSISTANCE = "toggle_assistance"
    RECORD_REWARD = "record_reward"
    REQUEST_RESET = "request_reset"
    GRANT_CONSENT = "grant_consent"
    DENY_CONSENT = "deny_consent"
    HOVER_ENTER = "hover_enter"
    HOVER_LEAVE = "hover_leave"


# Payload fields each command must carry
_REQUIRED_FIELDS = {
    CommandType.APPLY_PREFERENCES: ("font_size", "contrast", "density"),
    CommandType.HOVER_ENTER: ("element_kind",),
}


@dataclass(frozen=True)
class EngineCommand:
    """
    A single UI event.

    Attributes:
        type: Command type
        payload: Command arguments (see CommandType)
    """
    type: CommandType
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        for name in _REQUIRED_FIELDS.get(self.type, ()):
            if name not in self.payload:
                raise UnknownCommandError(
                    f"{self.type.value} requires '{name}' in its payload"
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineCommand":
        """
        Parse the {"type": ..., **payload} form.

        Raises:
            UnknownCommandError: If the type is missing or unknown
        """
        if not isinstance(data, dict) or "type" not in data:
            raise UnknownCommandError(f"Command needs a 'type': {data!r}")
        try:
            command_type = CommandType(data["type"])
        except ValueError:
            raise UnknownCommandError(f"Unknown command type: {data['type']!r}")

        payload = {key: value for key, value in data.items() if key != "type"}
        return cls(type=command_type, payload=payload)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, **self.payload}

    # Convenience constructors

    @classmethod
    def apply_preferences(cls, font_size: str, contrast: str, density: str) -> "EngineCommand":
        return cls(
            CommandType.APPLY_PREFERENCES,
            {"font_size": font_size, "contrast": contrast, "density": density},
        )

    @classmethod
    def toggle_assistance(cls) -> "EngineCommand":
        return cls(CommandType.TOGGLE_ASSISTANCE)

    @classmethod
    def record_reward(cls, reward: Optional[float] = None) -> "EngineCommand":
        payload = {} if reward is None else {"reward": reward}
        return cls(CommandType.RECORD_REWARD, payload)

    @classmethod
    def request_reset(cls) -> "EngineCommand":
        return cls(CommandType.REQUEST_RESET)

    @classmethod
    def grant_consent(cls) -> "EngineCommand":
        return cls(CommandType.GRANT_CONSENT)

    @classmethod
    def deny_consent(cls) -> "EngineCommand":
        return cls(CommandType.DENY_CONSENT)

    @classmethod
    def hover_enter(cls, element_kind: str) -> "EngineCommand":
        return cls(CommandType.HOVER_ENTER, {"element_kind": element_kind})

    @classmethod
    def hover_leave(cls) -> "EngineCommand":
        return cls(CommandType.HOVER_LEAVE)


@dataclass(frozen=True)
class EngineSnapshot:
    """
    Everything the UI layer needs to render.

    Attributes:
        model: Serialized user model
        layout_variant: Currently chosen arm
        consent: Consent state value
        consent_prompt_visible: Whether to show the consent banner
        hesitation_pending: Whether a dwell timer is running
        bandit: Bandit statistics
    """
    model: Dict[str, Any]
    layout_variant: Optional[str]
    consent: str
    consent_prompt_visible: bool
    hesitation_pending: bool
    bandit: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "layout_variant": self.layout_variant,
            "consent": self.consent,
            "consent_prompt_visible": self.consent_prompt_visible,
            "hesitation_pending": self.hesitation_pending,
            "bandit": self.bandit,
        }
