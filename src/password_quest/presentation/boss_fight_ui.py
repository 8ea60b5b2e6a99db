import time
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from password_quest.application.dtos import BossFightView, CombatantView, FightOutcomeRecord
from password_quest.application.services.combat_controller import CombatController
from password_quest.application.services.combat_timeline import TaskKind
from password_quest.application.services.event_bus import EventBus
from password_quest.domain.events import (
    AttackReady,
    AttackResolved,
    CombatResolved,
    CombatStarted,
    DefenseUsed,
    PhaseReached,
    TurnFlipped,
)
from password_quest.domain.models.combatant import CombatOutcome, CombatPhase, DefenseKind, Side
from password_quest.presentation.input_controls import CONTROLS_HINT, Intent, normalize_intent, read_key


_BORDER_PLAYER_TURN = "green"
_BORDER_ENEMY_TURN = "red"
_BORDER_VICTORY = "bright_green"
_BORDER_DEFEAT = "bright_red"
_BAR_WIDTH = 20

_DEFENSE_LABELS = {
    DefenseKind.DODGE_LEFT: "Dodged!",
    DefenseKind.DODGE_RIGHT: "Dodged!",
    DefenseKind.JUMP: "Jumped!",
}
_PHASE_BANNERS = {
    2: "PHASE 2!",
    3: "FINAL PHASE!",
}
_INTENT_DEFENSE = {
    Intent.DODGE_LEFT: DefenseKind.DODGE_LEFT,
    Intent.DODGE_RIGHT: DefenseKind.DODGE_RIGHT,
    Intent.JUMP: DefenseKind.JUMP,
}


def _bar_style(percent: float) -> str:
    if percent < 0.3:
        return "red"
    if percent < 0.6:
        return "yellow"
    return "green"


def health_bar(view: CombatantView, width: int = _BAR_WIDTH) -> str:
    percent = max(0.0, min(1.0, view.percent))
    filled = int(width * percent)
    style = _bar_style(percent)
    return f"[{style}]{'#' * filled}[/{style}]{'.' * (width - filled)} {view.health}/{view.max_health}"


def turn_indicator(view: BossFightView) -> str:
    if view.phase == CombatPhase.INTRO.value:
        return "The dragon awakens..."
    if view.active_side == Side.PLAYER.value:
        return f"YOUR TURN - a: cast spell | w/j: jump | l/r: dodge ({view.actions_remaining} spells left)"
    return "DRAGON'S TURN - press w/j to JUMP or l/r to DODGE!"


class BossFightPresenter:
    """Renders boss fight events; holds no combat rules of its own."""

    def __init__(self, event_bus: EventBus, console: Console | None = None) -> None:
        self.console = console or Console()
        event_bus.subscribe(CombatStarted, self.on_combat_started)
        event_bus.subscribe(AttackResolved, self.on_attack_resolved)
        event_bus.subscribe(TurnFlipped, self.on_turn_flipped)
        event_bus.subscribe(DefenseUsed, self.on_defense_used)
        event_bus.subscribe(AttackReady, self.on_attack_ready)
        event_bus.subscribe(PhaseReached, self.on_phase_reached)
        event_bus.subscribe(CombatResolved, self.on_combat_resolved)

    def on_combat_started(self, event: CombatStarted) -> None:
        self.console.print(f"[bold yellow]The dragon attacks![/bold yellow] ({event.difficulty.upper()})")

    def on_attack_resolved(self, event: AttackResolved) -> None:
        who = "Your spell" if event.attacker is Side.PLAYER else "Dragon fireball"
        if event.hit:
            colour = "white" if event.attacker is Side.PLAYER else "bright_red"
            self.console.print(f"{who}: [{colour}]-{event.damage}[/{colour}]")
        else:
            self.console.print(f"{who}: [yellow]MISS![/yellow]")

    def on_turn_flipped(self, event: TurnFlipped) -> None:
        if event.active_side is Side.ENEMY:
            self.console.print("[bold red]DRAGON'S TURN[/bold red] - Jump/Dodge Ready!")
        else:
            self.console.print("[bold green]YOUR TURN[/bold green] - Jump/Dodge Ready!")

    def on_defense_used(self, event: DefenseUsed) -> None:
        self.console.print(f"[green]{_DEFENSE_LABELS[event.kind]}[/green]")

    def on_attack_ready(self, event: AttackReady) -> None:
        self.console.print(f"[dim]Spell ready ({event.actions_remaining} left this turn)[/dim]")

    def on_phase_reached(self, event: PhaseReached) -> None:
        banner = _PHASE_BANNERS.get(event.phase_number, f"PHASE {event.phase_number}!")
        self.console.print(f"[bold red]{banner}[/bold red]")

    def on_combat_resolved(self, event: CombatResolved) -> None:
        if event.outcome is CombatOutcome.VICTORY:
            self.console.print("[bold bright_green]VICTORY![/bold bright_green]")
        else:
            self.console.print("[bold bright_red]DEFEAT[/bold bright_red]")

    def render_status(self, view: BossFightView) -> None:
        grid = Table.grid(padding=(0, 1))
        grid.add_column(style="bold yellow", justify="right")
        grid.add_column(style="white")
        grid.add_row(view.enemy.name, health_bar(view.enemy))
        grid.add_row(view.player.name, health_bar(view.player))
        grid.add_row("Dodge", "Jump/Dodge Ready!" if view.player_dodge_ready else "Used")
        grid.add_row("Time", f"{view.elapsed_active_ms / 1000.0:.1f}s")
        border = _BORDER_PLAYER_TURN if view.active_side == Side.PLAYER.value else _BORDER_ENEMY_TURN
        self.console.print(
            Panel.fit(
                grid,
                title="[bold yellow]Dragon's Lair[/bold yellow]",
                subtitle=f"[dim]{turn_indicator(view)}[/dim]",
                subtitle_align="left",
                border_style=border,
            )
        )

    def render_outcome(self, record: FightOutcomeRecord) -> None:
        breakdown = record.breakdown
        table = Table.grid(padding=(0, 1))
        table.add_column(style="bold yellow", justify="right")
        table.add_column(style="white")
        if record.victory:
            table.add_row("Final score", f"{record.final_score:.2f}")
            table.add_row("Difficulty", record.difficulty.upper())
            table.add_row("Level 1 tokens", str(breakdown.level1_coins))
            level2 = str(breakdown.level2_coins) if breakdown.level2_counted else f"{breakdown.level2_coins} (not counted)"
            table.add_row("Level 2 tokens", level2)
            table.add_row("Level 2 alerts", str(breakdown.level2_alerts))
            table.add_row("Total tokens", str(breakdown.total_coins))
            table.add_row("Boss kill time", f"{breakdown.boss_kill_time_s:.2f}s")
            message = "You recovered your login credentials!"
            border = _BORDER_VICTORY
        else:
            table.add_row("Difficulty", record.difficulty.upper())
            message = "The dragon kept your credentials..."
            border = _BORDER_DEFEAT
        self.console.print(
            Panel.fit(
                table,
                title="[bold yellow]VICTORY![/bold yellow]" if record.victory else "[bold yellow]DEFEAT[/bold yellow]",
                subtitle=f"[dim]{message}[/dim]",
                subtitle_align="left",
                border_style=border,
            )
        )


def _settle(controller: CombatController, prompted_turns: set[int]) -> None:
    """Run scheduled continuations until the player has something to decide."""
    timeline = controller.timeline
    state = controller.state
    while state.phase is not CombatPhase.RESOLVED and not controller.can_player_attack():
        next_due = timeline.next_due_ms()
        if next_due is None:
            return
        upcoming = timeline.pending_tasks()[0]
        if (
            upcoming.kind is TaskKind.ENEMY_ACTION
            and upcoming.sequence_index == 1
            and state.player_dodge_ready
            and upcoming.turn_number not in prompted_turns
        ):
            prompted_turns.add(upcoming.turn_number)
            return
        timeline.advance(max(0.0, next_due - timeline.now_ms))


def run_boss_fight(
    controller: CombatController,
    presenter: BossFightPresenter,
    *,
    key_reader: Callable[[], Optional[str]] = read_key,
    clock: Callable[[], float] = time.monotonic,
) -> Optional[FightOutcomeRecord]:
    """Drive one fight from line-based input; returns ``None`` if the player quits."""

    prompted_turns: set[int] = set()
    controller.start()
    _settle(controller, prompted_turns)
    last_tick = clock()

    while controller.state.phase is not CombatPhase.RESOLVED:
        presenter.render_status(controller.snapshot())
        presenter.console.print(f"[dim]{CONTROLS_HINT}[/dim]")
        raw_key = key_reader()
        if raw_key is None:
            return None
        intent = normalize_intent(raw_key)
        if intent is Intent.QUIT:
            return None

        if intent is Intent.ATTACK:
            if controller.player_attack() is None:
                presenter.console.print("[dim]You can't cast right now.[/dim]")
        elif intent in _INTENT_DEFENSE:
            if not controller.player_defend(_INTENT_DEFENSE[intent]):
                presenter.console.print("[dim]Already used your jump/dodge this turn.[/dim]")
        elif intent is None:
            presenter.console.print("[dim]Unknown command.[/dim]")

        now = clock()
        controller.timeline.advance(max(0.0, (now - last_tick) * 1000.0))
        last_tick = now
        _settle(controller, prompted_turns)

    record = controller.outcome_record()
    presenter.render_outcome(record)
    return record
