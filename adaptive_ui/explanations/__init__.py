"""Session-only explanation trail for engine decisions."""

from .log import ExplanationEntry, ExplanationKind, ExplanationLog

__all__ = [
    "ExplanationEntry",
    "ExplanationKind",
    "ExplanationLog",
]
