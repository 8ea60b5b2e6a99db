from __future__ import annotations

from password_quest.domain.errors import DifficultyConfigurationError
from password_quest.domain.models.combatant import Side


DIFFICULTY_PRESET_PROFILES = {
    "easy": {
        "player_max_health": 10,
        "enemy_max_health": 10,
    },
    "medium": {
        "player_max_health": 10,
        "enemy_max_health": 10,
    },
    "hard": {
        "player_max_health": 10,
        "enemy_max_health": 10,
    },
}
DEFAULT_DIFFICULTY = "medium"

ACTIONS_PER_TURN = {
    Side.PLAYER: 2,
    Side.ENEMY: 2,
}

ATTACK_DAMAGE = 1
ENEMY_DODGE_CHANCE = 0.30

INTRO_DELAY_MS = 2000
CAST_COOLDOWN_MS = 800
ENEMY_TURN_DELAY_MS = 1000
ENEMY_ACTION_DELAY_MS = 500

# (phase number, enemy health ratio at or below which it fires)
ENEMY_PHASE_THRESHOLDS = (
    (2, 0.50),
    (3, 0.25),
)

SCORE_DECIMALS = 2


def normalize_difficulty(value: object) -> str:
    key = str(value or "").strip().lower()
    if key not in DIFFICULTY_PRESET_PROFILES:
        raise DifficultyConfigurationError(value, tuple(DIFFICULTY_PRESET_PROFILES))
    return key


def difficulty_profile(value: object) -> dict:
    return dict(DIFFICULTY_PRESET_PROFILES[normalize_difficulty(value)])
