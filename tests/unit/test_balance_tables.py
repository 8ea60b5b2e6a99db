import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from fight_helpers import build_fight

from password_quest.application.services import balance_tables
from password_quest.domain.errors import DifficultyConfigurationError
from password_quest.domain.models.combatant import Side


class DifficultyProfileTests(unittest.TestCase):
    def test_all_tiers_share_the_same_health(self) -> None:
        for tier in ("easy", "medium", "hard"):
            with self.subTest(tier=tier):
                controller, _, _ = build_fight(tier)
                self.assertEqual(10, controller.state.player.max_health)
                self.assertEqual(10, controller.state.enemy.max_health)

    def test_tiers_share_turn_structure_and_damage(self) -> None:
        self.assertEqual({Side.PLAYER: 2, Side.ENEMY: 2}, balance_tables.ACTIONS_PER_TURN)
        self.assertEqual(1, balance_tables.ATTACK_DAMAGE)
        self.assertEqual(0.30, balance_tables.ENEMY_DODGE_CHANCE)

    def test_normalize_difficulty_is_case_insensitive(self) -> None:
        self.assertEqual("hard", balance_tables.normalize_difficulty(" Hard "))

    def test_unknown_difficulty_lists_known_tiers(self) -> None:
        with self.assertRaises(DifficultyConfigurationError) as ctx:
            balance_tables.difficulty_profile("nightmare")

        self.assertEqual(("easy", "medium", "hard"), ctx.exception.known)
        self.assertIn("nightmare", str(ctx.exception))

    def test_missing_difficulty_is_rejected(self) -> None:
        with self.assertRaises(DifficultyConfigurationError):
            balance_tables.normalize_difficulty(None)


if __name__ == "__main__":
    unittest.main()
