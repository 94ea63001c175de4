"""
Adaptive UI - personalization decision engine.

Selects between layout variants with an epsilon-greedy bandit, keeps a
per-visitor preference model, switches on guided mode when the visitor
hesitates, and persists all of it only with consent.

Key Components:
- AdaptiveEngine: one visitor session, driven by EngineCommand values
- EpsilonGreedyBandit: layout selection
- UserModel: preferences, guided mode and hesitation count
- HesitationDetector: debounced dwell signal
- ConsentGate: gates persistence of personalization data
- ExplanationLog: human-readable trace of every decision

Quick Start:
    from adaptive_ui import AdaptiveEngine, FileStore

    engine = AdaptiveEngine(store=FileStore())
    engine.grant_consent()
    engine.record_reward()
    print(engine.explanations.render())
"""

__version__ = "0.1.0"

from .bandits import BanditState, EpsilonGreedyBandit
from .clock import Clock, ManualClock, SystemClock, TimerHandle
from .config import AdaptiveConfig, get_adaptive_config, reset_adaptive_config
from .consent import ConsentGate, ConsentState
from .engine import AdaptiveEngine, CommandType, EngineCommand, EngineSnapshot
from .errors import (
    AdaptiveUIError,
    ConfigurationError,
    InvalidPreferenceError,
    InvalidRewardError,
    MalformedPayloadError,
    PersistenceError,
    UnknownArmError,
    UnknownCommandError,
)
from .explanations import ExplanationEntry, ExplanationKind, ExplanationLog
from .hesitation import HesitationDetector
from .persistence import FileStore, InMemoryStore, PersistenceStore, StorageKeys
from .user_model import AssistanceMode, Contrast, Density, FontSize, UserModel

__all__ = [
    # Engine
    "AdaptiveEngine",
    "CommandType",
    "EngineCommand",
    "EngineSnapshot",
    # Config
    "AdaptiveConfig",
    "get_adaptive_config",
    "reset_adaptive_config",
    # Components
    "BanditState",
    "EpsilonGreedyBandit",
    "UserModel",
    "FontSize",
    "Contrast",
    "Density",
    "AssistanceMode",
    "HesitationDetector",
    "ConsentGate",
    "ConsentState",
    "ExplanationEntry",
    "ExplanationKind",
    "ExplanationLog",
    # Time
    "Clock",
    "SystemClock",
    "ManualClock",
    "TimerHandle",
    # Persistence
    "PersistenceStore",
    "InMemoryStore",
    "FileStore",
    "StorageKeys",
    # Errors
    "AdaptiveUIError",
    "ConfigurationError",
    "UnknownArmError",
    "InvalidPreferenceError",
    "InvalidRewardError",
    "UnknownCommandError",
    "PersistenceError",
    "MalformedPayloadError",
]
