"""
Tests for the command-line interface.

Each invocation is a separate page load against a FileStore in a
temporary directory.
"""

import json

from click.testing import CliRunner

from adaptive_ui.persistence import FileStore
from main import cli


def run(temp_dir, *args):
    runner = CliRunner()
    return runner.invoke(cli, ["--store-dir", str(temp_dir), "--epsilon", "0", *args])


class TestCLI:
    """Test CLI commands."""

    def test_status(self, temp_dir):
        result = run(temp_dir, "status")

        assert result.exit_code == 0
        assert "Adaptive UI Status" in result.output
        assert "Chose layout A based on previous click success." in result.output

    def test_without_consent_nothing_is_saved(self, temp_dir):
        result = run(temp_dir, "reward")

        assert result.exit_code == 0
        assert "Recorded a successful click for layout A." in result.output
        assert not any(temp_dir.iterdir())

    def test_consent_then_reward_persists(self, temp_dir):
        assert run(temp_dir, "consent", "allow").exit_code == 0
        assert run(temp_dir, "reward").exit_code == 0
        assert run(temp_dir, "reward").exit_code == 0

        store = FileStore(temp_dir)
        assert store.get("adaptive_ui_consent") == "allow"
        bandit = json.loads(store.get("adaptive_ui_bandit_state"))
        assert bandit["counts"] == {"A": 2, "B": 0}

    def test_deny(self, temp_dir):
        result = run(temp_dir, "consent", "deny")

        assert result.exit_code == 0
        assert "Consent denied: only session defaults applied." in result.output
        assert FileStore(temp_dir).get("adaptive_ui_user_model") is None

    def test_prefs(self, temp_dir):
        run(temp_dir, "consent", "allow")

        result = run(temp_dir, "prefs", "--font-size", "xl")

        assert result.exit_code == 0
        model = json.loads(FileStore(temp_dir).get("adaptive_ui_user_model"))
        assert model["font_size"] == "xl"
        assert model["contrast"] == "light"

    def test_prefs_rejects_unknown_value(self, temp_dir):
        result = run(temp_dir, "prefs", "--contrast", "neon")

        assert result.exit_code != 0

    def test_assist(self, temp_dir):
        result = run(temp_dir, "assist")

        assert result.exit_code == 0
        assert "Guided mode enabled." in result.output

    def test_hover_twice_enables_guided_mode(self, temp_dir):
        result = run(temp_dir, "hover", "--times", "2")

        assert result.exit_code == 0
        assert "Hesitations: 2, guided mode: on" in result.output
        assert "We detected possible hesitation and enabled Guided Mode." in result.output

    def test_short_hover(self, temp_dir):
        result = run(temp_dir, "hover", "--dwell-ms", "500")

        assert "Hesitations: 0, guided mode: off" in result.output

    def test_reset(self, temp_dir):
        run(temp_dir, "consent", "allow")
        run(temp_dir, "reward")

        result = run(temp_dir, "reset", "--yes")

        assert result.exit_code == 0
        assert "All data cleared. Using defaults." in result.output
        assert list(temp_dir.glob("*.json")) == []

    def test_simulate(self, temp_dir):
        runner = CliRunner()
        result = runner.invoke(cli, [
            "--store-dir", str(temp_dir), "--seed", "3",
            "simulate", "--visits", "50", "--ctr", "A=0.1", "--ctr", "B=0.9",
        ])

        assert result.exit_code == 0
        assert "Simulated 50 visits" in result.output
        assert list(temp_dir.glob("*.json")) == []

    def test_simulate_bad_ctr(self, temp_dir):
        result = run(temp_dir, "simulate", "--ctr", "C=0.5")

        assert result.exit_code != 0

    def test_reward_rejects_nan(self, temp_dir):
        run(temp_dir, "consent", "allow")

        result = run(temp_dir, "reward", "--value", "nan")

        assert result.exit_code == 1
        bandit = json.loads(FileStore(temp_dir).get("adaptive_ui_bandit_state"))
        assert bandit["counts"] == {"A": 0, "B": 0}
