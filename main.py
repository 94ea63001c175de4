#!/usr/bin/env python3
"""
Adaptive UI - Main CLI Entry Point

Command-line interface for driving the adaptive UI engine. Each command
is one page load against a file store, so state carries over between
invocations exactly as it would between visits.
"""

import logging
import random
import sys
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from adaptive_ui import (
    AdaptiveEngine,
    AdaptiveUIError,
    Contrast,
    Density,
    FileStore,
    FontSize,
    InMemoryStore,
    ManualClock,
    __version__,
    get_adaptive_config,
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _new_engine(ctx: click.Context, store=None, rng: Optional[random.Random] = None) -> AdaptiveEngine:
    obj = ctx.obj
    return AdaptiveEngine(
        store=store if store is not None else FileStore(obj["store_dir"]),
        config=obj["config"],
        clock=obj["clock"],
        rng=rng or random.Random(obj["seed"]),
    )


def _echo_explanations(engine: AdaptiveEngine) -> None:
    # Stored newest first; print in the order they happened
    for line in reversed(engine.explanations.render()):
        click.echo(f"  {line}")


def _status_table(engine: AdaptiveEngine) -> Table:
    snapshot = engine.snapshot()
    table = Table(title="Adaptive UI Status")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for name, value in snapshot.model.items():
        table.add_row(name, str(value))
    table.add_row("consent", snapshot.consent)
    table.add_row("consent prompt", "visible" if snapshot.consent_prompt_visible else "hidden")
    return table


def _bandit_table(engine: AdaptiveEngine) -> Table:
    stats = engine.bandit.get_stats()
    table = Table(title=f"Layout Bandit (epsilon={stats['epsilon']})")
    table.add_column("Arm", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Reward", justify="right")
    table.add_column("Mean", justify="right")

    for arm, arm_stats in stats["arms"].items():
        marker = " *" if arm == stats["best_arm"] else ""
        table.add_row(
            f"{arm}{marker}",
            str(arm_stats["count"]),
            f"{arm_stats['reward']:g}",
            f"{arm_stats['mean_reward']:.3f}",
        )
    return table


def _parse_ctr(values: Tuple[str, ...], arms) -> Dict[str, float]:
    rates = {arm: 0.0 for arm in arms}
    for item in values:
        arm, sep, rate = item.partition("=")
        if not sep or arm not in rates:
            raise click.BadParameter(f"expected ARM=RATE with ARM in {list(arms)}, got {item!r}")
        try:
            rates[arm] = float(rate)
        except ValueError:
            raise click.BadParameter(f"rate for {arm} is not a number: {rate!r}")
        if not 0.0 <= rates[arm] <= 1.0:
            raise click.BadParameter(f"rate for {arm} must be in [0, 1]")
    return rates


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for persisted state (default: ADAPTIVE_UI_STORE_DIR or kb/adaptive_ui/)"
)
@click.option(
    "--epsilon",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Override the exploration probability"
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for layout exploration"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging"
)
@click.pass_context
def cli(ctx, store_dir, epsilon, seed, verbose):
    """
    Adaptive UI - layout bandit, preference model and guided mode.

    Every command is a fresh page load that reads the persisted state.
    """
    _configure_logging(verbose)

    config = get_adaptive_config()
    if epsilon is not None:
        config = replace(config, epsilon=epsilon)

    ctx.ensure_object(dict)
    ctx.obj.update({
        "config": config,
        "store_dir": store_dir or config.store_dir,
        "seed": seed,
        "clock": ManualClock(start=datetime.now(timezone.utc)),
    })


@cli.command()
@click.pass_context
def status(ctx):
    """Show the current user model, consent and bandit statistics."""
    engine = _new_engine(ctx)
    console.print(_status_table(engine))
    console.print(_bandit_table(engine))
    _echo_explanations(engine)


@cli.command()
@click.argument("choice", type=click.Choice(["allow", "deny"]))
@click.pass_context
def consent(ctx, choice):
    """Grant or deny persistence of personalization data."""
    engine = _new_engine(ctx)
    if choice == "allow":
        engine.grant_consent()
    else:
        engine.deny_consent()
    _echo_explanations(engine)


@cli.command()
@click.option("--font-size", type=click.Choice([m.value for m in FontSize]), default=None)
@click.option("--contrast", type=click.Choice([m.value for m in Contrast]), default=None)
@click.option("--density", type=click.Choice([m.value for m in Density]), default=None)
@click.pass_context
def prefs(ctx, font_size, contrast, density):
    """Apply display preferences (unspecified ones keep their value)."""
    engine = _new_engine(ctx)
    model = engine.model
    engine.apply_preferences(
        font_size or model.font_size.value,
        contrast or model.contrast.value,
        density or model.density.value,
    )
    _echo_explanations(engine)


@cli.command()
@click.pass_context
def assist(ctx):
    """Toggle guided mode."""
    engine = _new_engine(ctx)
    engine.toggle_assistance()
    _echo_explanations(engine)


@cli.command()
@click.option("--value", type=float, default=None, help="Reward value (default: config reward_value)")
@click.pass_context
def reward(ctx, value):
    """Record a primary action click on the layout chosen for this load."""
    engine = _new_engine(ctx)
    try:
        engine.record_reward(value)
    except AdaptiveUIError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)
    _echo_explanations(engine)


@cli.command()
@click.option("--kind", default="label", help="Element kind hovered (default: label)")
@click.option("--dwell-ms", type=int, default=None, help="How long the pointer stays (default: dwell threshold)")
@click.option("--times", type=int, default=1, help="Number of separate dwells")
@click.pass_context
def hover(ctx, kind, dwell_ms, times):
    """Simulate hovering an element, possibly long enough to count as hesitation."""
    engine = _new_engine(ctx)
    clock = ctx.obj["clock"]
    stay = engine.config.hesitation_dwell_ms if dwell_ms is None else dwell_ms

    for _ in range(times):
        engine.hover_enter(kind)
        clock.advance(stay)
        engine.hover_leave()

    click.echo(f"Hesitations: {engine.model.hesitations}, guided mode: {engine.model.assistance.value}")
    _echo_explanations(engine)


@cli.command()
@click.confirmation_option(prompt="Erase all personalization data?")
@click.pass_context
def reset(ctx):
    """Erase all stored data and start over with defaults."""
    engine = _new_engine(ctx)
    engine.reset()
    _echo_explanations(engine)


@cli.command()
@click.option("--visits", type=int, default=200, help="Number of simulated page loads (default: 200)")
@click.option(
    "--ctr",
    multiple=True,
    help="Click-through rate per arm as ARM=RATE, e.g. --ctr A=0.1 --ctr B=0.3"
)
@click.option(
    "--persist",
    is_flag=True,
    help="Run against the file store instead of a throwaway in-memory store"
)
@click.pass_context
def simulate(ctx, visits, ctr, persist):
    """Simulate visitors to watch the bandit converge on the better layout."""
    config = ctx.obj["config"]
    rates = _parse_ctr(ctr, config.arms)
    click_rng = random.Random(ctx.obj["seed"])

    first = _new_engine(ctx, None if persist else InMemoryStore(), random.Random(click_rng.random()))
    if not first.consent.allows_persistence:
        first.grant_consent()
    store = first.store

    chosen = {arm: 0 for arm in config.arms}
    engine = first
    for visit in range(visits):
        if visit:
            engine = _new_engine(ctx, store, random.Random(click_rng.random()))
        arm = engine.model.layout_variant
        chosen[arm] += 1
        clicked = click_rng.random() < rates[arm]
        engine.record_reward(1.0 if clicked else 0.0)

    click.echo(f"Simulated {visits} visits")
    for arm in config.arms:
        click.echo(f"   Layout {arm}: shown {chosen[arm]} times (ctr={rates[arm]})")
    console.print(_bandit_table(engine))


if __name__ == "__main__":
    cli()
