from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class ScoreBreakdown:
    total_coins: int
    boss_kill_time_s: float
    final_score: float
    level1_coins: int = 0
    level2_coins: int = 0
    level2_alerts: int = 0
    level2_counted: bool = False


@dataclass
class FightOutcomeRecord:
    """What a leaderboard collaborator needs once the fight is over."""

    outcome: str
    difficulty: str
    final_score: float
    breakdown: ScoreBreakdown

    @property
    def victory(self) -> bool:
        return self.outcome == "victory"

    def as_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "victory": self.victory,
            "difficulty": self.difficulty,
            "finalScore": self.final_score,
            "totalCoins": self.breakdown.total_coins,
            "bossKillTime": self.breakdown.boss_kill_time_s,
        }
        if self.victory:
            payload.update(
                {
                    "level1Coins": self.breakdown.level1_coins,
                    "level2Coins": self.breakdown.level2_coins,
                    "level2Alerts": self.breakdown.level2_alerts,
                }
            )
        return payload


@dataclass
class CombatantView:
    name: str
    health: int
    max_health: int

    @property
    def percent(self) -> float:
        return self.health / self.max_health if self.max_health else 0.0


@dataclass
class BossFightView:
    phase: str
    outcome: str
    difficulty: str
    active_side: str
    actions_remaining: int
    can_cast: bool
    player_dodge_ready: bool
    boss_phase: int
    player: CombatantView
    enemy: CombatantView
    elapsed_active_ms: float = 0.0
    pending_tasks: List[str] = field(default_factory=list)
    final_score: Optional[float] = None
