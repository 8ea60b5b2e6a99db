import logging
import random
from dataclasses import dataclass
from typing import Optional

from password_quest.application.dtos import BossFightView, CombatantView, FightOutcomeRecord, ScoreBreakdown
from password_quest.application.services import balance_tables
from password_quest.application.services.action_resolver import ActionResolver, AttackResult
from password_quest.application.services.combat_timeline import CombatTimeline, ScheduledTask, TaskKind
from password_quest.application.services.defense_gate import DefenseGate
from password_quest.application.services.event_bus import EventBus
from password_quest.application.services.score_service import defeat_breakdown, victory_breakdown
from password_quest.application.services.turn_scheduler import TurnScheduler
from password_quest.domain.errors import CombatError, InvalidCombatValueError
from password_quest.domain.events import (
    AttackReady,
    AttackResolved,
    CombatResolved,
    CombatStarted,
    DefenseUsed,
    PhaseReached,
    TurnFlipped,
)
from password_quest.domain.models.combatant import (
    CombatantState,
    CombatOutcome,
    CombatPhase,
    DefenseKind,
    Side,
)
from password_quest.domain.models.stage_results import StageResults


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombatTimings:
    intro_delay_ms: float = balance_tables.INTRO_DELAY_MS
    cast_cooldown_ms: float = balance_tables.CAST_COOLDOWN_MS
    enemy_turn_delay_ms: float = balance_tables.ENEMY_TURN_DELAY_MS
    enemy_action_delay_ms: float = balance_tables.ENEMY_ACTION_DELAY_MS


@dataclass
class FightState:
    """Everything the boss fight mutates, owned by one controller."""

    difficulty: str
    stage_results: StageResults
    player: CombatantState
    enemy: CombatantState
    defense_gate: DefenseGate
    scheduler: TurnScheduler
    phase: CombatPhase = CombatPhase.INTRO
    outcome: CombatOutcome = CombatOutcome.NONE
    can_cast: bool = False
    boss_phase: int = 1
    started_at_ms: Optional[float] = None
    resolved_at_ms: Optional[float] = None
    breakdown: Optional[ScoreBreakdown] = None

    @property
    def is_combat_active(self) -> bool:
        return self.phase is CombatPhase.ACTIVE

    @property
    def player_dodge_ready(self) -> bool:
        return self.defense_gate.is_available(Side.PLAYER)


class CombatController:
    def __init__(
        self,
        stage_results: StageResults,
        event_bus: EventBus,
        timeline: Optional[CombatTimeline] = None,
        *,
        rng: Optional[random.Random] = None,
        enemy_dodge_chance: float = balance_tables.ENEMY_DODGE_CHANCE,
        timings: Optional[CombatTimings] = None,
        player_name: str = "Hero",
        enemy_name: str = "Dragon",
    ) -> None:
        profile = balance_tables.difficulty_profile(stage_results.difficulty)
        gate = DefenseGate()
        self.event_bus = event_bus
        self.timeline = timeline or CombatTimeline()
        self.timings = timings or CombatTimings()
        self.resolver = ActionResolver(gate, rng=rng, enemy_dodge_chance=enemy_dodge_chance)
        self.state = FightState(
            difficulty=balance_tables.normalize_difficulty(stage_results.difficulty),
            stage_results=stage_results,
            player=CombatantState(Side.PLAYER, player_name, profile["player_max_health"]),
            enemy=CombatantState(Side.ENEMY, enemy_name, profile["enemy_max_health"]),
            defense_gate=gate,
            scheduler=TurnScheduler(gate),
        )
        self._intro_scheduled = False
        logger.info(
            "Boss fight created: difficulty=%s dragon_hp=%s player_hp=%s",
            self.state.difficulty,
            self.state.enemy.health,
            self.state.player.health,
        )

    # -- lifecycle -----------------------------------------------------------------

    def start(self) -> None:
        if self._intro_scheduled:
            return
        self._intro_scheduled = True
        self.timeline.schedule(self.timings.intro_delay_ms, ScheduledTask(TaskKind.BEGIN_COMBAT), self._begin_combat)

    def _begin_combat(self, task: ScheduledTask) -> None:
        state = self.state
        if state.phase is not CombatPhase.INTRO:
            return
        state.phase = CombatPhase.ACTIVE
        state.started_at_ms = self.timeline.now_ms
        state.can_cast = True
        logger.info("Boss fight started at %.0fms; scoring clock running", state.started_at_ms)
        self.event_bus.publish(
            CombatStarted(
                difficulty=state.difficulty,
                player_max_health=state.player.max_health,
                enemy_max_health=state.enemy.max_health,
                started_at_ms=state.started_at_ms,
            )
        )

    @property
    def elapsed_active_ms(self) -> float:
        state = self.state
        if state.started_at_ms is None:
            return 0.0
        if state.phase is CombatPhase.RESOLVED:
            if state.outcome is CombatOutcome.VICTORY and state.resolved_at_ms is not None:
                return state.resolved_at_ms - state.started_at_ms
            return 0.0
        return self.timeline.now_ms - state.started_at_ms

    # -- player intents ------------------------------------------------------------

    def can_player_attack(self) -> bool:
        state = self.state
        return (
            state.is_combat_active
            and state.can_cast
            and state.scheduler.active_side is Side.PLAYER
            and not state.scheduler.flip_pending
        )

    def player_attack(self) -> Optional[AttackResult]:
        if not self.can_player_attack():
            return None
        state = self.state
        state.can_cast = False
        result = self.resolver.resolve_attack(state.player, state.enemy, Side.PLAYER)
        turn_complete = state.scheduler.record_action(Side.PLAYER)
        self._publish_attack(Side.PLAYER, result)

        if result.terminal:
            self._resolve(CombatOutcome.VICTORY)
            return result
        self._check_phase_markers()

        if turn_complete:
            self._flip_turn()
            self.timeline.schedule(
                self.timings.enemy_turn_delay_ms,
                ScheduledTask(
                    TaskKind.ENEMY_ACTION,
                    side=Side.ENEMY,
                    sequence_index=1,
                    turn_number=state.scheduler.turn_number,
                ),
                self._enemy_action,
            )
        else:
            self.timeline.schedule(
                self.timings.cast_cooldown_ms,
                ScheduledTask(TaskKind.RESTORE_CAST, side=Side.PLAYER, turn_number=state.scheduler.turn_number),
                self._restore_cast,
            )
        return result

    def player_defend(self, kind: DefenseKind = DefenseKind.JUMP) -> bool:
        try:
            kind = DefenseKind(kind)
        except ValueError as exc:
            raise InvalidCombatValueError(f"unknown defense {kind!r}") from exc
        if not self.state.is_combat_active:
            return False
        if not self.state.defense_gate.try_consume(Side.PLAYER):
            return False
        logger.debug("Player used %s", kind.value)
        self.event_bus.publish(DefenseUsed(side=Side.PLAYER, kind=kind, at_ms=self.timeline.now_ms))
        return True

    # -- scheduled continuations ---------------------------------------------------

    def _task_is_current(self, task: ScheduledTask) -> bool:
        if not self.state.is_combat_active:
            logger.debug("Ignoring %s after fight resolved", task.kind.value)
            return False
        if task.turn_number != self.state.scheduler.turn_number:
            logger.debug(
                "Ignoring stale %s for turn %s (now turn %s)",
                task.kind.value,
                task.turn_number,
                self.state.scheduler.turn_number,
            )
            return False
        return True

    def _restore_cast(self, task: ScheduledTask) -> None:
        if not self._task_is_current(task):
            return
        self.state.can_cast = True
        self.event_bus.publish(AttackReady(actions_remaining=self.state.scheduler.actions_remaining))

    def _enemy_action(self, task: ScheduledTask) -> None:
        if not self._task_is_current(task):
            return
        state = self.state
        result = self.resolver.resolve_attack(state.enemy, state.player, Side.ENEMY)
        turn_complete = state.scheduler.record_action(Side.ENEMY)
        self._publish_attack(Side.ENEMY, result)

        if result.terminal:
            self._resolve(CombatOutcome.DEFEAT)
            return

        if not turn_complete:
            self.timeline.schedule(
                self.timings.enemy_action_delay_ms,
                ScheduledTask(
                    TaskKind.ENEMY_ACTION,
                    side=Side.ENEMY,
                    sequence_index=task.sequence_index + 1,
                    turn_number=task.turn_number,
                ),
                self._enemy_action,
            )
            return

        self._flip_turn()
        state.can_cast = True

    # -- internals -----------------------------------------------------------------

    def _publish_attack(self, attacker_side: Side, result: AttackResult) -> None:
        state = self.state
        defender = state.enemy if attacker_side is Side.PLAYER else state.player
        self.event_bus.publish(
            AttackResolved(
                attacker=attacker_side,
                defender=attacker_side.opponent,
                hit=result.hit,
                damage=result.damage,
                defender_health_after=result.defender_health_after,
                defender_max_health=defender.max_health,
                action_number=state.scheduler.actions_taken_this_turn,
                terminal=result.terminal,
            )
        )

    def _flip_turn(self) -> None:
        scheduler = self.state.scheduler
        active = scheduler.flip_turn()
        logger.info("Turn %s: %s to act", scheduler.turn_number, active.value)
        self.event_bus.publish(
            TurnFlipped(active_side=active, turn_number=scheduler.turn_number, flips_total=scheduler.flips_total)
        )

    def _check_phase_markers(self) -> None:
        state = self.state
        for phase_number, threshold in balance_tables.ENEMY_PHASE_THRESHOLDS:
            if state.boss_phase >= phase_number:
                continue
            if state.enemy.health > state.enemy.max_health * threshold:
                break
            state.boss_phase = phase_number
            logger.info("Dragon entering phase %s", phase_number)
            self.event_bus.publish(
                PhaseReached(
                    phase_number=phase_number,
                    threshold=threshold,
                    enemy_health=state.enemy.health,
                    enemy_max_health=state.enemy.max_health,
                )
            )

    def _resolve(self, outcome: CombatOutcome) -> None:
        state = self.state
        state.phase = CombatPhase.RESOLVED
        state.outcome = outcome
        state.can_cast = False
        state.resolved_at_ms = self.timeline.now_ms
        if outcome is CombatOutcome.VICTORY:
            state.breakdown = victory_breakdown(state.stage_results, self.elapsed_active_ms)
        else:
            state.breakdown = defeat_breakdown(state.stage_results)
        logger.info("Boss fight resolved: %s (score %.2f)", outcome.value, state.breakdown.final_score)
        self.event_bus.publish(
            CombatResolved(
                outcome=outcome,
                elapsed_active_ms=self.elapsed_active_ms,
                final_score=state.breakdown.final_score,
            )
        )

    # -- read side -----------------------------------------------------------------

    def outcome_record(self) -> FightOutcomeRecord:
        state = self.state
        if state.phase is not CombatPhase.RESOLVED or state.breakdown is None:
            raise CombatError("Boss fight has not been resolved yet")
        return FightOutcomeRecord(
            outcome=state.outcome.value,
            difficulty=state.difficulty,
            final_score=state.breakdown.final_score,
            breakdown=state.breakdown,
        )

    def snapshot(self) -> BossFightView:
        state = self.state
        return BossFightView(
            phase=state.phase.value,
            outcome=state.outcome.value,
            difficulty=state.difficulty,
            active_side=state.scheduler.active_side.value,
            actions_remaining=state.scheduler.actions_remaining,
            can_cast=self.can_player_attack(),
            player_dodge_ready=state.player_dodge_ready,
            boss_phase=state.boss_phase,
            player=CombatantView(state.player.name, state.player.health, state.player.max_health),
            enemy=CombatantView(state.enemy.name, state.enemy.health, state.enemy.max_health),
            elapsed_active_ms=self.elapsed_active_ms,
            pending_tasks=[task.kind.value for task in self.timeline.pending_tasks()],
            final_score=state.breakdown.final_score if state.breakdown is not None else None,
        )
