"""Debounced hesitation signal source."""

from .detector import HesitationDetector

__all__ = ["HesitationDetector"]
