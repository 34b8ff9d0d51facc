"""Companion CLI - run the character event demo and inspect configuration.

Usage:
    companion demo
    companion demo --undo-mode restore --history-size 5
    companion config --show
    companion config --init ./companion_config.json
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

# Load .env early so COMPANION_* overrides reach the config loader
load_dotenv()
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from companion.app.config import UNDO_MODES, CompanionConfig, get_default_config_path
from companion.core.errors import ValidationFailed
from companion.core.event_bus import EventBus
from companion.core.events.base import Event, EventKind
from companion.core.models.dice import RollBuilder
from companion.domain.character.service import CharacterService
from companion.infrastructure.store import InMemoryCharacterStore
from companion.utils.logging import setup_logging

app = typer.Typer(
    name="companion",
    help="D&D companion character event bus",
    add_completion=False,
)

console = Console()

KIND_STYLES = {
    EventKind.CREATED: "green",
    EventKind.DELETED: "red",
    EventKind.DAMAGE_APPLIED: "red",
    EventKind.HEALING_RECEIVED: "green",
    EventKind.DICE_ROLL: "magenta",
    EventKind.ERROR_OCCURRED: "bold red",
}


def _describe(event: Event) -> str:
    payload = event.payload
    if event.kind == EventKind.DICE_ROLL:
        return f"{payload.roll.expression} = {payload.roll.total}"
    if event.kind == EventKind.ERROR_OCCURRED:
        return f"{payload.context.get('operation')}: {payload.error}"
    if event.kind == EventKind.ABILITY_SCORE_UPDATED:
        return f"{payload.ability} {payload.old_score} -> {payload.new_score} ({payload.modifier_change:+d})"
    if event.kind in (EventKind.DAMAGE_APPLIED, EventKind.HEALING_RECEIVED):
        hp = payload.new_state.hit_points if payload.new_state else None
        return f"{payload.amount} ({hp.current}/{hp.max} HP)" if hp else str(payload.amount)
    return payload.character_id


def _print_event(event: Event, prefix: str = "") -> None:
    style = KIND_STYLES.get(event.kind, "cyan")
    console.print(f"{prefix}[{style}]{event.kind.value}[/{style}] {_describe(event)}")


def _history_table(bus: EventBus) -> Table:
    snapshot = bus.get_history()
    table = Table(title=f"History (cursor {snapshot.cursor}, capacity {snapshot.capacity})")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Target")
    table.add_column("Detail")
    for index, event in enumerate(snapshot.events):
        marker = "→" if index == snapshot.cursor else ""
        table.add_row(f"{marker}{index}", event.kind.value, event.target_id or "-", _describe(event))
    return table


async def _run_demo(config: CompanionConfig) -> EventBus:
    bus = EventBus.from_config(config)
    service = CharacterService(bus, InMemoryCharacterStore(), config)

    bus.subscribe(lambda event: _print_event(event, "  "))
    bus.subscribe(
        lambda event: console.print(f"  [yellow]hp watcher[/yellow] saw {event.kind.value}"),
        {"kind": [EventKind.DAMAGE_APPLIED, EventKind.HEALING_RECEIVED]},
    )

    hero = await service.create(
        {
            "name": "Aria",
            "race": "ELF",
            "character_class": "WIZARD",
            "level": 3,
            "ability_scores": {
                "strength": 8,
                "dexterity": 14,
                "constitution": 12,
                "intelligence": 16,
                "wisdom": 12,
                "charisma": 10,
            },
            "hit_points": {"max": 20, "current": 20, "temporary": 0},
        }
    )
    try:
        await service.update(hero.id, {"level": 0})
    except ValidationFailed as exc:
        console.print(f"  [dim]update rejected: {exc}[/dim]")

    await service.update_ability_score(hero.id, "INT", 18)
    await service.update_skill_proficiency(hero.id, "arcana", proficient=True)
    await service.publish_dice_roll(RollBuilder().add("1d20").with_modifier(4).with_label("Arcana"))
    await service.apply_damage(hero.id, 7, damage_type="fire")
    await service.apply_healing(hero.id, 3)

    console.print("[bold]Undo[/bold]")
    await service.undo()
    console.print("[bold]Redo[/bold]")
    await service.redo()

    current = await service.store.get_by_id(hero.id)
    console.print(f"Final state: {current} HP {current.hit_points.current}/{current.hit_points.max}")
    return bus


@app.command("demo")
def demo(
    undo_mode: Annotated[
        Optional[str],
        typer.Option("--undo-mode", "-u", help=f"One of {', '.join(UNDO_MODES)}"),
    ] = None,
    history_size: Annotated[
        Optional[int],
        typer.Option("--history-size", "-n", min=1, help="Events kept for undo/redo"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a JSON config file"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Run a scripted character session and show the resulting history."""
    config = CompanionConfig.load(config_path)
    if undo_mode is not None:
        if undo_mode not in UNDO_MODES:
            console.print(f"[red]Unknown undo mode: {undo_mode}[/red]")
            raise typer.Exit(code=2)
        config.undo_mode = undo_mode
    if history_size is not None:
        config.history.max_size = history_size

    setup_logging(level="DEBUG" if verbose else config.log_level)

    console.print(
        Panel.fit(
            f"undo mode: [cyan]{config.undo_mode}[/cyan]  history: [cyan]{config.history.max_size}[/cyan]",
            title="Companion demo",
        )
    )
    bus = asyncio.run(_run_demo(config))
    console.print(_history_table(bus))

    stats = bus.get_event_stats()
    console.print(f"[dim]{stats.total_events} events recorded, {len(bus.recent_failures)} handler failures[/dim]")


@app.command("config")
def config_command(
    show: Annotated[bool, typer.Option("--show", help="Print the effective configuration")] = False,
    init: Annotated[
        Optional[Path],
        typer.Option("--init", help="Write a default config file to this path"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a JSON config file"),
    ] = None,
):
    """Show the effective configuration or write a default one."""
    if init is not None:
        saved = CompanionConfig().save(init)
        console.print(f"[green]Wrote default config to {saved}[/green]")
        return

    try:
        config = CompanionConfig.load(config_path)
    except ValueError as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(code=1)

    source = config_path or get_default_config_path()
    if show:
        console.print(Panel(json.dumps(config.to_dict(), indent=2), title=str(source)))
    else:
        console.print(f"undo mode: {config.undo_mode}, history: {config.history.max_size} ({source})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
