"""User preference model and its enumerated values."""

from .model import AssistanceMode, Contrast, Density, FontSize, UserModel

__all__ = [
    "UserModel",
    "FontSize",
    "Contrast",
    "Density",
    "AssistanceMode",
]
