from dataclasses import dataclass

from password_quest.domain.models.combatant import CombatOutcome, DefenseKind, Side


@dataclass
class CombatStarted:
    difficulty: str
    player_max_health: int
    enemy_max_health: int
    started_at_ms: float


@dataclass
class AttackResolved:
    attacker: Side
    defender: Side
    hit: bool
    damage: int
    defender_health_after: int
    defender_max_health: int
    action_number: int
    terminal: bool


@dataclass
class TurnFlipped:
    active_side: Side
    turn_number: int
    flips_total: int


@dataclass
class DefenseUsed:
    side: Side
    kind: DefenseKind
    at_ms: float


@dataclass
class AttackReady:
    actions_remaining: int


@dataclass
class PhaseReached:
    phase_number: int
    threshold: float
    enemy_health: int
    enemy_max_health: int


@dataclass
class CombatResolved:
    outcome: CombatOutcome
    elapsed_active_ms: float
    final_score: float
