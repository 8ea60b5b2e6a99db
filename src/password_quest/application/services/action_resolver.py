import math
import random
from dataclasses import dataclass

from password_quest.application.services.balance_tables import ATTACK_DAMAGE, ENEMY_DODGE_CHANCE
from password_quest.application.services.defense_gate import DefenseGate
from password_quest.domain.errors import InvalidCombatValueError
from password_quest.domain.models.combatant import CombatantState, Side


@dataclass(frozen=True)
class AttackResult:
    hit: bool
    damage: int
    defender_health_after: int
    terminal: bool = False

    @property
    def label(self) -> str:
        return f"-{self.damage}" if self.hit else "MISS!"


class ActionResolver:
    """Resolves one attack; hit rules differ by who swings.

    Player spells miss on a random dragon dodge. Dragon fireballs miss only when the
    player's defense charge is already spent at resolution time.
    """

    def __init__(
        self,
        defense_gate: DefenseGate,
        rng: random.Random | None = None,
        enemy_dodge_chance: float = ENEMY_DODGE_CHANCE,
        damage: int = ATTACK_DAMAGE,
    ) -> None:
        if isinstance(enemy_dodge_chance, bool) or not isinstance(enemy_dodge_chance, (int, float)):
            raise InvalidCombatValueError(f"enemy_dodge_chance must be a number, got {enemy_dodge_chance!r}")
        if not math.isfinite(enemy_dodge_chance) or not 0.0 <= enemy_dodge_chance <= 1.0:
            raise InvalidCombatValueError(f"enemy_dodge_chance must be within [0, 1], got {enemy_dodge_chance!r}")
        self.defense_gate = defense_gate
        self.rng = rng or random.Random()
        self.enemy_dodge_chance = float(enemy_dodge_chance)
        self.damage = int(damage)

    def _defender_evades(self, attacker_side: Side) -> bool:
        if attacker_side is Side.PLAYER:
            return self.rng.random() < self.enemy_dodge_chance
        return not self.defense_gate.is_available(Side.PLAYER)

    def resolve_attack(self, attacker: CombatantState, defender: CombatantState, attacker_side: Side) -> AttackResult:
        attacker_side = Side(attacker_side)
        if attacker.side is not attacker_side or defender.side is not attacker_side.opponent:
            raise InvalidCombatValueError(
                f"{attacker.name} ({attacker.side.value}) cannot attack {defender.name} as {attacker_side.value}"
            )
        hit = not self._defender_evades(attacker_side)
        damage = self.damage if hit else 0
        health_after, _ = defender.apply_damage(damage)
        return AttackResult(
            hit=hit,
            damage=damage,
            defender_health_after=health_after,
            terminal=not defender.is_alive,
        )
