import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from password_quest.domain.errors import InvalidCombatValueError


class Side(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> "Side":
        return Side.ENEMY if self is Side.PLAYER else Side.PLAYER


class CombatPhase(str, Enum):
    INTRO = "intro"
    ACTIVE = "active"
    RESOLVED = "resolved"


class CombatOutcome(str, Enum):
    NONE = "none"
    VICTORY = "victory"
    DEFEAT = "defeat"


class DefenseKind(str, Enum):
    DODGE_LEFT = "dodge_left"
    DODGE_RIGHT = "dodge_right"
    JUMP = "jump"


def require_count(value, label: str, *, minimum: int = 0) -> int:
    """Accept a plain integer at or above ``minimum``; anything else is an upstream defect."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCombatValueError(f"{label} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidCombatValueError(f"{label} must be finite, got {value!r}")
        raise InvalidCombatValueError(f"{label} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidCombatValueError(f"{label} must be >= {minimum}, got {value}")
    return int(value)


@dataclass
class CombatantState:
    side: Side
    name: str
    max_health: int
    health: int | None = None

    def __post_init__(self) -> None:
        self.max_health = require_count(self.max_health, "max_health", minimum=1)
        if self.health is None:
            self.health = self.max_health
        self.health = require_count(self.health, "health")
        if self.health > self.max_health:
            raise InvalidCombatValueError(
                f"health {self.health} exceeds max_health {self.max_health} for {self.name}"
            )

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def apply_damage(self, amount: int) -> Tuple[int, bool]:
        amount = require_count(amount, "damage")
        was_alive = self.is_alive
        self.health = max(0, self.health - amount)
        return self.health, was_alive and not self.is_alive
