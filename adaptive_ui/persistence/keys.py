"""
Persisted key names.

Three independent entries: consent, user model and bandit state.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StorageKeys:
    """Concrete store keys derived from a configurable prefix."""
    consent: str
    user_model: str
    bandit_state: str

    @classmethod
    def with_prefix(cls, prefix: str = "adaptive_ui_") -> "StorageKeys":
        return cls(
            consent=f"{prefix}consent",
            user_model=f"{prefix}user_model",
            bandit_state=f"{prefix}bandit_state",
        )

    def all(self) -> tuple:
        return (self.consent, self.user_model, self.bandit_state)
