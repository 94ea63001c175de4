"""Engine wiring and the command interface used by the UI layer."""

from .commands import CommandType, EngineCommand, EngineSnapshot
from .engine import AdaptiveEngine

__all__ = [
    "AdaptiveEngine",
    "CommandType",
    "EngineCommand",
    "EngineSnapshot",
]
