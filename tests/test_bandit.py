"""
Tests for Bandit module.

Tests the epsilon-greedy layout bandit: zero-count averages, exploit
tie-break, explore path, updates, unknown arms and state serialization.
"""

import random

import pytest

from conftest import ScriptedRandom


class TestBanditState:
    """Test BanditState class."""

    def test_import(self):
        """Test that bandit module can be imported."""
        from adaptive_ui.bandits import BanditState, EpsilonGreedyBandit
        assert BanditState is not None
        assert EpsilonGreedyBandit is not None

    def test_for_arms(self):
        """Test fresh state has a zero entry for every arm."""
        from adaptive_ui.bandits import BanditState

        state = BanditState.for_arms(["A", "B"])

        assert state.counts == {"A": 0, "B": 0}
        assert state.rewards == {"A": 0.0, "B": 0.0}

    def test_average_zero_count(self):
        """Test average with zero count is exactly 0, not NaN."""
        from adaptive_ui.bandits import BanditState

        state = BanditState(counts={"A": 0, "B": 0}, rewards={"A": 5.0, "B": 0.0})

        assert state.average("A") == 0.0
        assert state.average("B") == 0.0

    def test_average(self):
        """Test average reward computation."""
        from adaptive_ui.bandits import BanditState

        state = BanditState(counts={"A": 4, "B": 1}, rewards={"A": 2.0, "B": 1.0})

        assert state.average("A") == 0.5
        assert state.average("B") == 1.0

    def test_to_dict_from_dict(self):
        """Test state serialization round-trip."""
        from adaptive_ui.bandits import BanditState

        state = BanditState(counts={"A": 3, "B": 7}, rewards={"A": 2.0, "B": 0.5})

        restored = BanditState.from_dict(state.to_dict(), ["A", "B"])

        assert restored == state

    @pytest.mark.parametrize("payload", [
        "not a dict",
        {"counts": {"A": 0, "B": 0}},
        {"counts": {"A": 0}, "rewards": {"A": 0.0}},
        {"counts": {"A": 0, "B": 0, "C": 0}, "rewards": {"A": 0, "B": 0, "C": 0}},
        {"counts": {"A": -1, "B": 0}, "rewards": {"A": 0, "B": 0}},
        {"counts": {"A": 1.5, "B": 0}, "rewards": {"A": 0, "B": 0}},
        {"counts": {"A": True, "B": 0}, "rewards": {"A": 0, "B": 0}},
        {"counts": {"A": 0, "B": 0}, "rewards": {"A": "1", "B": 0}},
    ])
    def test_from_dict_rejects_malformed(self, payload):
        """Test malformed payloads raise MalformedPayloadError."""
        from adaptive_ui.bandits import BanditState
        from adaptive_ui.errors import MalformedPayloadError

        with pytest.raises(MalformedPayloadError):
            BanditState.from_dict(payload, ["A", "B"])


class TestEpsilonGreedyBandit:
    """Test EpsilonGreedyBandit class."""

    def test_creation(self):
        """Test bandit creation."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["A", "B"])

        assert bandit.arms == ["A", "B"]
        assert bandit.epsilon == 0.2
        assert bandit.state.counts == {"A": 0, "B": 0}

    @pytest.mark.parametrize("arms,epsilon", [
        ([], 0.2),
        (["A", "A"], 0.2),
        (["A", "B"], -0.1),
        (["A", "B"], 1.5),
    ])
    def test_invalid_configuration(self, arms, epsilon):
        """Test invalid arms or epsilon are rejected."""
        from adaptive_ui.bandits import EpsilonGreedyBandit
        from adaptive_ui.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            EpsilonGreedyBandit(arms=arms, epsilon=epsilon)

    def test_state_missing_arm_rejected(self):
        """Test a provided state must cover every configured arm."""
        from adaptive_ui.bandits import BanditState, EpsilonGreedyBandit
        from adaptive_ui.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            EpsilonGreedyBandit(arms=["A", "B"], state=BanditState.for_arms(["A"]))

    def test_exploit_tie_break_first_arm(self):
        """Test fresh state on the exploit path returns the first arm."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(
            arms=["A", "B"], epsilon=0.2, rng=ScriptedRandom([0.99])
        )

        assert [bandit.select_arm() for _ in range(20)] == ["A"] * 20
        assert bandit.last_explored is False

    def test_tie_break_follows_configured_order(self):
        """Test the tie-break is the configured order, not alphabetical."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["B", "A"], epsilon=0.0)

        assert bandit.select_arm() == "B"

    def test_epsilon_zero_picks_strictly_better_arm(self):
        """Test epsilon=0 always returns the arm with higher average."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["A", "B"], epsilon=0.0)
        bandit.update("B", 1.0)
        bandit.update("A", 0.0)

        assert all(bandit.select_arm() == "B" for _ in range(50))

    def test_three_rewards_on_a(self):
        """Test three rewards on A and zero on B makes exploit pick A."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(
            arms=["A", "B"], epsilon=0.2, rng=ScriptedRandom([0.5])
        )
        for _ in range(3):
            bandit.update("A", 1.0)
        bandit.update("B", 0.0)

        assert all(bandit.select_arm() == "A" for _ in range(50))

    def test_explore_path(self):
        """Test the explore path picks a configured arm at random."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(
            arms=["A", "B"], epsilon=0.2, rng=ScriptedRandom([0.1])
        )

        arm = bandit.select_arm()

        assert arm in ("A", "B")
        assert bandit.last_explored is True

    def test_epsilon_one_explores_all_arms(self):
        """Test epsilon=1 eventually selects every arm."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(
            arms=["A", "B", "C"], epsilon=1.0, rng=random.Random(7)
        )
        bandit.update("A", 10.0)

        results = set(bandit.select_arm() for _ in range(200))

        assert results == {"A", "B", "C"}

    def test_update(self):
        """Test update(A, 1) touches only arm A."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["A", "B"])

        bandit.update("A", 1)

        assert bandit.state.counts["A"] == 1
        assert bandit.state.rewards["A"] == 1
        assert bandit.state.counts["B"] == 0
        assert bandit.state.rewards["B"] == 0

    def test_update_unknown_arm(self):
        """Test unknown arm is rejected without mutating state."""
        from adaptive_ui.bandits import EpsilonGreedyBandit
        from adaptive_ui.errors import UnknownArmError

        changes = []
        bandit = EpsilonGreedyBandit(arms=["A", "B"], on_change=changes.append)

        with pytest.raises(UnknownArmError) as exc_info:
            bandit.update("C", 1.0)

        assert exc_info.value.arm == "C"
        assert bandit.state.counts == {"A": 0, "B": 0}
        assert bandit.state.rewards == {"A": 0.0, "B": 0.0}
        assert changes == []

    def test_on_change_called_after_update(self):
        """Test the persistence hook sees the updated state."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        seen = []
        bandit = EpsilonGreedyBandit(
            arms=["A", "B"],
            on_change=lambda state: seen.append(dict(state.counts)),
        )

        bandit.update("B", 1.0)

        assert seen == [{"A": 0, "B": 1}]

    def test_more_than_two_arms(self):
        """Test the algorithm works for any number of arms."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["A", "B", "C", "D"], epsilon=0.0)
        bandit.update("C", 1.0)
        bandit.update("D", 0.5)

        assert bandit.select_arm() == "C"

    def test_get_stats(self):
        """Test getting bandit statistics."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["A", "B"])
        bandit.update("A", 1.0)
        bandit.update("A", 0.0)
        bandit.update("B", 1.0)

        stats = bandit.get_stats()

        assert stats["total_count"] == 3
        assert stats["arms"]["A"]["mean_reward"] == 0.5
        assert stats["arms"]["B"]["count"] == 1
        assert stats["best_arm"] == "B"

    def test_reset(self):
        """Test resetting bandit state."""
        from adaptive_ui.bandits import EpsilonGreedyBandit

        bandit = EpsilonGreedyBandit(arms=["A", "B"])
        bandit.update("A", 1.0)

        bandit.reset()

        assert bandit.state.counts == {"A": 0, "B": 0}
        assert bandit.state.rewards == {"A": 0.0, "B": 0.0}

    @pytest.mark.parametrize("reward", ["1", None, True, float("nan"), float("inf")])
    def test_update_invalid_reward(self, reward):
        """Test a rejected reward leaves counts and rewards untouched."""
        from adaptive_ui.bandits import EpsilonGreedyBandit
        from adaptive_ui.errors import InvalidRewardError

        changes = []
        bandit = EpsilonGreedyBandit(arms=["A", "B"], on_change=changes.append)

        with pytest.raises(InvalidRewardError):
            bandit.update("A", reward)

        assert bandit.state.counts == {"A": 0, "B": 0}
        assert bandit.state.rewards == {"A": 0.0, "B": 0.0}
        assert changes == []

    @pytest.mark.parametrize("reward", [float("nan"), float("inf"), float("-inf")])
    def test_from_dict_rejects_non_finite_reward(self, reward):
        """Test a stored NaN or infinite reward is malformed."""
        from adaptive_ui.bandits import BanditState
        from adaptive_ui.errors import MalformedPayloadError

        payload = {"counts": {"A": 1, "B": 0}, "rewards": {"A": reward, "B": 0.0}}

        with pytest.raises(MalformedPayloadError):
            BanditState.from_dict(payload, ["A", "B"])
