"""
User Model data types for the adaptive UI engine.

Defines the per-visitor preference record:
- FontSize, Contrast, Density: display preferences
- AssistanceMode: guided mode off/on
- UserModel: preferences, assistance, chosen layout and hesitation count
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Type

from ..errors import InvalidPreferenceError, MalformedPayloadError


class FontSize(str, Enum):
    """Base text size."""
    BASE = "base"
    LG = "lg"
    XL = "xl"


class Contrast(str, Enum):
    """Color scheme."""
    LIGHT = "light"
    DARK = "dark"
    HIGH = "high"


class Density(str, Enum):
    """Spacing and line height."""
    COMPACT = "compact"
    COZY = "cozy"
    COMFORTABLE = "comfortable"


class AssistanceMode(str, Enum):
    """Guided mode (help panel) state."""
    OFF = "off"
    ON = "on"


def _coerce(enum_cls: Type[Enum], field_name: str, value: Any) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidPreferenceError(
            field_name, value, [member.value for member in enum_cls]
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserModel:
    """
    Aggregate preference, assistance and hesitation record.

    Attributes:
        font_size: Text size preference
        contrast: Color scheme preference
        density: Spacing preference
        assistance: Guided mode state
        layout_variant: Last arm chosen by the bandit, None before the first choice
        hesitations: Completed hesitation dwells since the last reset
        last_updated: When the model was last committed
    """
    font_size: FontSize = FontSize.BASE
    contrast: Contrast = Contrast.LIGHT
    density: Density = Density.COZY
    assistance: AssistanceMode = AssistanceMode.OFF
    layout_variant: Optional[str] = None
    hesitations: int = 0
    last_updated: datetime = field(default_factory=_utcnow)

    @property
    def assistance_on(self) -> bool:
        return self.assistance == AssistanceMode.ON

    def apply_preferences(self, font_size: Any, contrast: Any, density: Any) -> None:
        """
        Set the three display preferences.

        All values are validated before any field changes.

        Raises:
            InvalidPreferenceError: If any value is not an allowed choice
        """
        new_font_size = _coerce(FontSize, "font_size", font_size)
        new_contrast = _coerce(Contrast, "contrast", contrast)
        new_density = _coerce(Density, "density", density)

        self.font_size = new_font_size
        self.contrast = new_contrast
        self.density = new_density

    def toggle_assistance(self) -> AssistanceMode:
        """Flip guided mode and return the new mode."""
        self.assistance = AssistanceMode.OFF if self.assistance_on else AssistanceMode.ON
        return self.assistance

    def set_assistance(self, on: bool) -> AssistanceMode:
        self.assistance = AssistanceMode.ON if on else AssistanceMode.OFF
        return self.assistance

    def record_hesitation(self, threshold: int) -> bool:
        """
        Count one hesitation and apply the threshold rule.

        Guided mode is forced on once hesitations reach threshold while it
        is off. This never turns guided mode off.

        Args:
            threshold: Hesitations needed for automatic activation

        Returns:
            True if guided mode was switched on by this call
        """
        self.hesitations += 1
        if self.hesitations >= threshold and not self.assistance_on:
            self.assistance = AssistanceMode.ON
            return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "font_size": self.font_size.value,
            "contrast": self.contrast.value,
            "density": self.density.value,
            "assistance": self.assistance.value,
            "layout_variant": self.layout_variant,
            "hesitations": self.hesitations,
            "last_updated": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserModel":
        """
        Rebuild a model from a stored payload.

        Raises:
            MalformedPayloadError: If any field is missing or invalid
        """
        if not isinstance(data, dict):
            raise MalformedPayloadError("User model payload is not an object")

        try:
            font_size = _coerce(FontSize, "font_size", data["font_size"])
            contrast = _coerce(Contrast, "contrast", data["contrast"])
            density = _coerce(Density, "density", data["density"])
            assistance = _coerce(AssistanceMode, "assistance", data["assistance"])
            last_updated = datetime.fromisoformat(data["last_updated"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedPayloadError(f"Invalid user model payload: {e}", cause=e)

        hesitations = data.get("hesitations", 0)
        if isinstance(hesitations, bool) or not isinstance(hesitations, int) or hesitations < 0:
            raise MalformedPayloadError(f"Invalid hesitations: {hesitations!r}")

        layout_variant = data.get("layout_variant")
        if layout_variant is not None and not isinstance(layout_variant, str):
            raise MalformedPayloadError(f"Invalid layout_variant: {layout_variant!r}")

        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)

        return cls(
            font_size=font_size,
            contrast=contrast,
            density=density,
            assistance=assistance,
            layout_variant=layout_variant,
            hesitations=hesitations,
            last_updated=last_updated,
        )
