"""
Bandits Module for adaptive layout selection.

- BanditState: per-arm counts and accumulated rewards
- EpsilonGreedyBandit: explore/exploit selector with first-arm tie-break
"""

from .epsilon_greedy import BanditState, EpsilonGreedyBandit

__all__ = [
    "BanditState",
    "EpsilonGreedyBandit",
]
