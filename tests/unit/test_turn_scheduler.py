import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from password_quest.application.services.defense_gate import DefenseGate
from password_quest.application.services.turn_scheduler import TurnScheduler
from password_quest.domain.errors import InvalidCombatValueError, InvalidTurnError
from password_quest.domain.models.combatant import Side


class TurnSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.gate = DefenseGate()
        self.scheduler = TurnScheduler(self.gate)

    def test_starts_on_player_with_no_actions(self) -> None:
        self.assertIs(Side.PLAYER, self.scheduler.active_side)
        self.assertEqual(0, self.scheduler.actions_taken_this_turn)
        self.assertEqual(2, self.scheduler.actions_remaining)
        self.assertEqual(1, self.scheduler.turn_number)

    def test_wrong_side_is_rejected_without_mutation(self) -> None:
        with self.assertRaises(InvalidTurnError) as ctx:
            self.scheduler.record_action(Side.ENEMY)

        self.assertIs(Side.ENEMY, ctx.exception.side)
        self.assertIs(Side.PLAYER, ctx.exception.active_side)
        self.assertEqual(0, self.scheduler.actions_taken_this_turn)
        self.assertIs(Side.PLAYER, self.scheduler.active_side)

    def test_flip_becomes_pending_exactly_at_the_bound(self) -> None:
        self.assertFalse(self.scheduler.record_action(Side.PLAYER))
        self.assertFalse(self.scheduler.flip_pending)
        self.assertTrue(self.scheduler.record_action(Side.PLAYER))
        self.assertTrue(self.scheduler.flip_pending)
        self.assertIs(Side.PLAYER, self.scheduler.active_side)

    def test_extra_action_before_flip_is_rejected(self) -> None:
        self.scheduler.record_action(Side.PLAYER)
        self.scheduler.record_action(Side.PLAYER)

        with self.assertRaises(InvalidTurnError):
            self.scheduler.record_action(Side.PLAYER)
        self.assertEqual(2, self.scheduler.actions_taken_this_turn)

    def test_flip_resets_counter_and_reopens_gates(self) -> None:
        self.scheduler.record_action(Side.PLAYER)
        self.scheduler.record_action(Side.PLAYER)
        self.gate.try_consume(Side.PLAYER)

        self.assertIs(Side.ENEMY, self.scheduler.flip_turn())

        self.assertEqual(0, self.scheduler.actions_taken_this_turn)
        self.assertFalse(self.scheduler.flip_pending)
        self.assertEqual(1, self.scheduler.flips_total)
        self.assertTrue(self.gate.is_available(Side.PLAYER))

    def test_alternation_over_several_turns(self) -> None:
        player_actions = 0
        for _ in range(3):
            for _ in range(2):
                self.scheduler.record_action(Side.PLAYER)
                player_actions += 1
            self.scheduler.flip_turn()
            for _ in range(2):
                self.scheduler.record_action(Side.ENEMY)
            self.scheduler.flip_turn()

        self.assertEqual(6, player_actions)
        self.assertEqual(6, self.scheduler.flips_total)
        self.assertIs(Side.PLAYER, self.scheduler.active_side)

    def test_odd_flip_count_leaves_enemy_active(self) -> None:
        self.scheduler.record_action(Side.PLAYER)
        self.scheduler.record_action(Side.PLAYER)
        self.scheduler.flip_turn()

        self.assertEqual(1, self.scheduler.flips_total)
        self.assertIs(Side.ENEMY, self.scheduler.active_side)

    def test_custom_action_counts(self) -> None:
        scheduler = TurnScheduler(DefenseGate(), actions_per_turn={Side.PLAYER: 3})

        self.assertEqual(3, scheduler.actions_per_turn(Side.PLAYER))
        self.assertEqual(2, scheduler.actions_per_turn(Side.ENEMY))

    def test_zero_actions_per_turn_is_rejected(self) -> None:
        with self.assertRaises(InvalidCombatValueError):
            TurnScheduler(DefenseGate(), actions_per_turn={Side.ENEMY: 0})


if __name__ == "__main__":
    unittest.main()
