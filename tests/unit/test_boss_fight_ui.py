import io
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rich.console import Console

from fight_helpers import build_fight

from password_quest.application.dtos import CombatantView
from password_quest.presentation.boss_fight_ui import BossFightPresenter, health_bar, run_boss_fight
from password_quest.presentation.input_controls import Intent, normalize_intent


def _scripted_keys(keys):
    remaining = iter(keys)
    return lambda: next(remaining, None)


def _presenter(controller) -> BossFightPresenter:
    return BossFightPresenter(controller.event_bus, Console(file=io.StringIO(), width=100))


class InputControlsTests(unittest.TestCase):
    def test_keys_map_to_intents(self) -> None:
        self.assertIs(Intent.ATTACK, normalize_intent(" "))
        self.assertIs(Intent.ATTACK, normalize_intent("A"))
        self.assertIs(Intent.JUMP, normalize_intent("w"))
        self.assertIs(Intent.DODGE_LEFT, normalize_intent("l"))
        self.assertIs(Intent.DODGE_RIGHT, normalize_intent("right"))
        self.assertIs(Intent.WAIT, normalize_intent(""))
        self.assertIs(Intent.QUIT, normalize_intent("q"))
        self.assertIsNone(normalize_intent("xyzzy"))


class BossFightUiTests(unittest.TestCase):
    def test_health_bar_shows_current_over_max(self) -> None:
        bar = health_bar(CombatantView("Dragon", 5, 10), width=10)
        self.assertIn("#####", bar)
        self.assertIn("5/10", bar)

    def test_scripted_casts_win_with_virtual_time_score(self) -> None:
        controller, _, _ = build_fight(level1_coins=10)
        presenter = _presenter(controller)

        record = run_boss_fight(controller, presenter, key_reader=_scripted_keys(["a"] * 30), clock=lambda: 0.0)

        self.assertIsNotNone(record)
        self.assertTrue(record.victory)
        self.assertEqual(10.0, record.breakdown.boss_kill_time_s)
        self.assertEqual(1.0, record.final_score)
        self.assertEqual(2, controller.state.player.health)
        transcript = presenter.console.file.getvalue()
        self.assertIn("VICTORY!", transcript)
        self.assertIn("PHASE 2!", transcript)

    def test_dodging_each_enemy_turn_avoids_damage(self) -> None:
        controller, _, _ = build_fight()
        presenter = _presenter(controller)
        keys = ["a", "a", "w"] * 4 + ["a", "a"]

        record = run_boss_fight(controller, presenter, key_reader=_scripted_keys(keys), clock=lambda: 0.0)

        self.assertIsNotNone(record)
        self.assertTrue(record.victory)
        self.assertEqual(10, controller.state.player.health)
        self.assertIn("Jumped!", presenter.console.file.getvalue())

    def test_quit_returns_none(self) -> None:
        controller, _, _ = build_fight()

        record = run_boss_fight(controller, _presenter(controller), key_reader=_scripted_keys(["a", "q"]), clock=lambda: 0.0)

        self.assertIsNone(record)

    def test_end_of_input_returns_none(self) -> None:
        controller, _, _ = build_fight()

        record = run_boss_fight(controller, _presenter(controller), key_reader=_scripted_keys([]), clock=lambda: 0.0)

        self.assertIsNone(record)


if __name__ == "__main__":
    unittest.main()
