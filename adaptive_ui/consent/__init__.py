"""Consent gating for personalization persistence."""

from .gate import ConsentGate, ConsentState

__all__ = [
    "ConsentGate",
    "ConsentState",
]
