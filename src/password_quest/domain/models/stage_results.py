from dataclasses import dataclass

from password_quest.domain.models.combatant import require_count


@dataclass(frozen=True)
class StageResults:
    """Totals carried into the boss fight from the earlier levels."""

    difficulty: str
    level1_coins: int = 0
    level2_coins: int = 0
    level2_alerts: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "difficulty", str(self.difficulty or "").strip().lower())
        object.__setattr__(self, "level1_coins", require_count(self.level1_coins, "level1_coins"))
        object.__setattr__(self, "level2_coins", require_count(self.level2_coins, "level2_coins"))
        object.__setattr__(self, "level2_alerts", require_count(self.level2_alerts, "level2_alerts"))

    @property
    def level2_counts(self) -> bool:
        return self.level2_alerts >= 1
