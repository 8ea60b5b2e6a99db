import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from fight_helpers import build_fight, start_active

from password_quest.domain.events import PhaseReached


class PhaseMarkerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller, self.timeline, self.recorder = build_fight(enemy_dodge_chance=0.0)
        start_active(self.controller)

    def _cast(self) -> None:
        while self.controller.player_attack() is None:
            self.timeline.run_until_idle()

    def test_markers_fire_at_half_and_quarter_health(self) -> None:
        health_at_marker = {}
        self.controller.event_bus.subscribe(
            PhaseReached, lambda evt: health_at_marker.setdefault(evt.phase_number, evt.enemy_health)
        )

        for _ in range(8):
            self._cast()

        self.assertEqual({2: 5, 3: 2}, health_at_marker)
        self.assertEqual(3, self.controller.state.boss_phase)

    def test_markers_fire_once_even_if_health_recovers(self) -> None:
        for _ in range(5):
            self._cast()
        self.assertEqual([2], [e.phase_number for e in self.recorder.of_type(PhaseReached)])

        self.controller.state.enemy.health = 10
        self._cast()
        self.controller.state.enemy.health = 5
        self._cast()

        self.assertEqual([2], [e.phase_number for e in self.recorder.of_type(PhaseReached)])

    def test_markers_fire_in_order_when_one_hit_crosses_both(self) -> None:
        self.controller.state.enemy.health = 3
        self._cast()

        events = self.recorder.of_type(PhaseReached)
        self.assertEqual([2, 3], [e.phase_number for e in events])
        self.assertEqual([0.5, 0.25], [e.threshold for e in events])

    def test_killing_blow_does_not_fire_markers(self) -> None:
        self.controller.state.enemy.health = 1
        self._cast()

        self.assertEqual([], self.recorder.of_type(PhaseReached))


if __name__ == "__main__":
    unittest.main()
