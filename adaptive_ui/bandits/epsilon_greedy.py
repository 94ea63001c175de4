"""
Epsilon-Greedy Bandit for layout selection.

Chooses between layout variants (arms) to maximize click-through:
- explore: with probability epsilon pick a uniformly random arm
- exploit: otherwise pick the arm with the highest average reward

Average reward of an arm that was never rewarded is 0. Exploit ties go
to the first configured arm so selection is reproducible without
exploration.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

from ..errors import (
    ConfigurationError,
    InvalidRewardError,
    MalformedPayloadError,
    UnknownArmError,
)

logger = logging.getLogger(__name__)


@dataclass
class BanditState:
    """
    Counts and accumulated rewards per arm.

    Attributes:
        counts: Arm -> number of rewarded selections
        rewards: Arm -> sum of rewards received
    """
    counts: Dict[str, int] = field(default_factory=dict)
    rewards: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def for_arms(cls, arms: Sequence[str]) -> "BanditState":
        """Fresh state with a zero entry for every arm."""
        return cls(
            counts={arm: 0 for arm in arms},
            rewards={arm: 0.0 for arm in arms},
        )

    def average(self, arm: str) -> float:
        """Average reward for arm; 0.0 when the arm has no observations."""
        count = self.counts.get(arm, 0)
        if count == 0:
            return 0.0
        return self.rewards.get(arm, 0.0) / count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "counts": dict(self.counts),
            "rewards": dict(self.rewards),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], arms: Sequence[str]) -> "BanditState":
        """
        Rebuild state from a stored payload.

        Args:
            data: Payload produced by to_dict()
            arms: Configured arm set the payload must match

        Raises:
            MalformedPayloadError: If the payload does not describe exactly
                the configured arms with valid numbers
        """
        if not isinstance(data, dict):
            raise MalformedPayloadError("Bandit payload is not an object")

        counts = data.get("counts")
        rewards = data.get("rewards")
        if not isinstance(counts, dict) or not isinstance(rewards, dict):
            raise MalformedPayloadError("Bandit payload missing counts/rewards")

        expected = set(arms)
        if set(counts) != expected or set(rewards) != expected:
            raise MalformedPayloadError(
                f"Bandit arms {sorted(counts)} do not match configured {sorted(expected)}"
            )

        state = cls()
        for arm in arms:
            count = counts[arm]
            reward = rewards[arm]
            # bool is an int subclass; reject it explicitly
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise MalformedPayloadError(f"Invalid count for {arm}: {count!r}")
            if isinstance(reward, bool) or not isinstance(reward, (int, float)):
                raise MalformedPayloadError(f"Invalid reward for {arm}: {reward!r}")
            if not math.isfinite(reward):
                raise MalformedPayloadError(f"Non-finite reward for {arm}: {reward!r}")
            state.counts[arm] = count
            state.rewards[arm] = float(reward)
        return state


class EpsilonGreedyBandit:
    """
    Epsilon-greedy selector over a fixed, ordered arm set.

    Usage:
        bandit = EpsilonGreedyBandit(arms=["A", "B"], epsilon=0.2)
        arm = bandit.select_arm()

        # After the user clicks the primary action:
        bandit.update(arm, 1.0)

    The optional on_change callback runs after every update with the new
    state; the engine uses it to persist the state behind the consent gate.
    """

    def __init__(
        self,
        arms: Sequence[str],
        epsilon: float = 0.2,
        rng: Optional[random.Random] = None,
        state: Optional[BanditState] = None,
        on_change: Optional[Callable[[BanditState], None]] = None,
    ):
        """
        Initialize the bandit.

        Args:
            arms: Ordered arm names; order defines the tie-break priority
            epsilon: Exploration probability in [0, 1]
            rng: Random source. A fresh random.Random if None.
            state: Previously loaded state. Zeroed state if None.
            on_change: Called with the state after each update
        """
        self.arms = list(arms)
        if not self.arms:
            raise ConfigurationError("At least one arm must be configured")
        if len(set(self.arms)) != len(self.arms):
            raise ConfigurationError(f"Duplicate arms in {self.arms}")
        if not 0.0 <= epsilon <= 1.0:
            raise ConfigurationError(f"epsilon must be in [0, 1], got {epsilon}")

        self.epsilon = epsilon
        self.rng = rng or random.Random()
        self.on_change = on_change
        self.state = state if state is not None else BanditState.for_arms(self.arms)
        missing = [
            arm for arm in self.arms
            if arm not in self.state.counts or arm not in self.state.rewards
        ]
        if missing:
            raise ConfigurationError(f"Bandit state has no entry for arms {missing}")
        self.last_explored = False

    def average_reward(self, arm: str) -> float:
        self._check_arm(arm)
        return self.state.average(arm)

    def best_arm(self) -> str:
        """
        Arm with the highest average reward.

        Only a strictly higher average displaces an earlier arm, so the
        first configured arm wins ties (including the all-zero start).
        """
        best = self.arms[0]
        best_avg = self.state.average(best)
        for arm in self.arms[1:]:
            avg = self.state.average(arm)
            if avg > best_avg:
                best, best_avg = arm, avg
        return best

    def select_arm(self) -> str:
        """
        Select an arm with the epsilon-greedy rule.

        Returns:
            Selected arm name
        """
        if self.rng.random() < self.epsilon:
            arm = self.arms[self.rng.randrange(len(self.arms))]
            self.last_explored = True
            logger.debug(f"[BANDIT] Explore selected: {arm} (epsilon={self.epsilon})")
            return arm

        arm = self.best_arm()
        self.last_explored = False
        logger.debug(
            f"[BANDIT] Exploit selected: {arm} (avg={self.state.average(arm):.3f})"
        )
        return arm

    def update(self, arm: str, reward: float) -> None:
        """
        Record a reward observation for an arm.

        Args:
            arm: The arm that was active
            reward: Observed reward

        Raises:
            UnknownArmError: If arm is not configured (nothing is mutated)
            InvalidRewardError: If reward is not finite (nothing is mutated)
        """
        self._check_arm(arm)
        reward = self.check_reward(reward)

        self.state.counts[arm] += 1
        self.state.rewards[arm] += reward

        logger.debug(
            f"[BANDIT] Updated {arm}: reward={reward:.3f}, "
            f"count={self.state.counts[arm]}, "
            f"mean={self.state.average(arm):.3f}"
        )

        if self.on_change is not None:
            self.on_change(self.state)

    def reset(self) -> None:
        """Zero counts and rewards for every configured arm."""
        self.state = BanditState.for_arms(self.arms)
        logger.info("[BANDIT] Reset bandit state")

    def get_stats(self) -> Dict[str, Any]:
        """Get bandit statistics."""
        return {
            "epsilon": self.epsilon,
            "total_count": sum(self.state.counts.values()),
            "arms": {
                arm: {
                    "count": self.state.counts[arm],
                    "reward": self.state.rewards[arm],
                    "mean_reward": self.state.average(arm),
                }
                for arm in self.arms
            },
            "best_arm": self.best_arm(),
        }

    def _check_arm(self, arm: str) -> None:
        if arm not in self.arms:
            raise UnknownArmError(arm, self.arms)

    @staticmethod
    def check_reward(reward: Any) -> float:
        """
        Validate a reward before any state is touched.

        Raises:
            InvalidRewardError: If reward is not a finite real number
        """
        # bool is an int subclass; reject it explicitly
        if isinstance(reward, bool) or not isinstance(reward, (int, float)):
            raise InvalidRewardError(reward)
        if not math.isfinite(reward):
            raise InvalidRewardError(reward)
        return float(reward)
