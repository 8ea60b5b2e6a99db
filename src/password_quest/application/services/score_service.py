import logging
import math

from password_quest.application.dtos import ScoreBreakdown
from password_quest.application.services.balance_tables import SCORE_DECIMALS
from password_quest.domain.errors import InvalidCombatValueError
from password_quest.domain.models.stage_results import StageResults


logger = logging.getLogger(__name__)


def total_coins(stage_results: StageResults) -> int:
    """Level 1 coins always count; level 2 coins only once at least one alert was collected."""
    total = stage_results.level1_coins
    if stage_results.level2_counts:
        total += stage_results.level2_coins
    return total


def final_score(total: int, elapsed_seconds: float) -> float:
    if isinstance(elapsed_seconds, bool) or not isinstance(elapsed_seconds, (int, float)):
        raise InvalidCombatValueError(f"elapsed time must be a number of seconds, got {elapsed_seconds!r}")
    if not math.isfinite(elapsed_seconds) or elapsed_seconds < 0:
        raise InvalidCombatValueError(f"elapsed time must be finite and >= 0, got {elapsed_seconds!r}")
    if elapsed_seconds == 0:
        logger.warning("Boss kill time was zero; scoring 0 instead of dividing by zero")
        return 0.0
    return round(total / elapsed_seconds, SCORE_DECIMALS)


def victory_breakdown(stage_results: StageResults, elapsed_active_ms: float) -> ScoreBreakdown:
    seconds = float(elapsed_active_ms) / 1000.0
    total = total_coins(stage_results)
    score = final_score(total, seconds)
    if stage_results.level2_counts:
        logger.info(
            "Level 2 coins counted: %s (alerts: %s)", stage_results.level2_coins, stage_results.level2_alerts
        )
    else:
        logger.info("Level 2 coins not counted (no alerts collected)")
    logger.info("Final score %.2f = %s coins / %.2fs", score, total, seconds)
    return ScoreBreakdown(
        total_coins=total,
        boss_kill_time_s=seconds,
        final_score=score,
        level1_coins=stage_results.level1_coins,
        level2_coins=stage_results.level2_coins,
        level2_alerts=stage_results.level2_alerts,
        level2_counted=stage_results.level2_counts,
    )


def defeat_breakdown(stage_results: StageResults) -> ScoreBreakdown:
    return ScoreBreakdown(
        total_coins=0,
        boss_kill_time_s=0.0,
        final_score=0.0,
        level1_coins=stage_results.level1_coins,
        level2_coins=stage_results.level2_coins,
        level2_alerts=stage_results.level2_alerts,
        level2_counted=False,
    )
