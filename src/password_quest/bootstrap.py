import os
from typing import Optional

from password_quest.application.services import balance_tables
from password_quest.application.services.combat_controller import CombatController, CombatTimings
from password_quest.application.services.combat_timeline import CombatTimeline
from password_quest.application.services.event_bus import EventBus
from password_quest.application.services.seed_policy import derive_rng
from password_quest.domain.errors import InvalidCombatValueError
from password_quest.domain.models.stage_results import StageResults


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidCombatValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidCombatValueError(f"{name} must be a number, got {raw!r}") from exc


def load_stage_results() -> StageResults:
    difficulty = os.getenv("PQ_DIFFICULTY", balance_tables.DEFAULT_DIFFICULTY)
    return StageResults(
        difficulty=balance_tables.normalize_difficulty(difficulty),
        level1_coins=_env_int("PQ_LEVEL1_COINS", 0),
        level2_coins=_env_int("PQ_LEVEL2_COINS", 0),
        level2_alerts=_env_int("PQ_LEVEL2_ALERTS", 0),
    )


def load_timings() -> CombatTimings:
    return CombatTimings(
        intro_delay_ms=_env_float("PQ_INTRO_DELAY_MS", balance_tables.INTRO_DELAY_MS),
        cast_cooldown_ms=_env_float("PQ_CAST_COOLDOWN_MS", balance_tables.CAST_COOLDOWN_MS),
        enemy_turn_delay_ms=_env_float("PQ_ENEMY_TURN_DELAY_MS", balance_tables.ENEMY_TURN_DELAY_MS),
        enemy_action_delay_ms=_env_float("PQ_ENEMY_ACTION_DELAY_MS", balance_tables.ENEMY_ACTION_DELAY_MS),
    )


def load_seed() -> Optional[int]:
    raw = os.getenv("PQ_SEED", "").strip()
    if not raw:
        return None
    return _env_int("PQ_SEED", 0)


def create_boss_fight(
    stage_results: StageResults | None = None,
    event_bus: EventBus | None = None,
    timeline: CombatTimeline | None = None,
    seed: Optional[int] = None,
) -> CombatController:
    stage_results = stage_results or load_stage_results()
    seed = seed if seed is not None else load_seed()
    rng = None
    if seed is not None:
        rng = derive_rng(
            "boss.enemy_dodge",
            {"seed": seed, "difficulty": balance_tables.normalize_difficulty(stage_results.difficulty)},
        )

    return CombatController(
        stage_results,
        event_bus or EventBus(),
        timeline or CombatTimeline(),
        rng=rng,
        enemy_dodge_chance=_env_float("PQ_ENEMY_DODGE_CHANCE", balance_tables.ENEMY_DODGE_CHANCE),
        timings=load_timings(),
    )
