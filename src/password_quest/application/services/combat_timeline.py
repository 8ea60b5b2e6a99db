from __future__ import annotations

import heapq
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from password_quest.domain.errors import InvalidCombatValueError
from password_quest.domain.models.combatant import Side


class TaskKind(str, Enum):
    BEGIN_COMBAT = "begin_combat"
    RESTORE_CAST = "restore_cast"
    ENEMY_ACTION = "enemy_action"


@dataclass(frozen=True)
class ScheduledTask:
    """Snapshot of what a delayed continuation is allowed to act on."""

    kind: TaskKind
    side: Optional[Side] = None
    sequence_index: int = 0
    turn_number: int = 0


TaskCallback = Callable[[ScheduledTask], None]


class CombatTimeline:
    """Single-threaded virtual clock of fire-once continuations, in milliseconds.

    Tasks fire in (due time, scheduling order). Nothing blocks; callers move time
    forward with ``advance`` or drain everything with ``run_until_idle``.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._queue: List[Tuple[float, int, ScheduledTask, TaskCallback]] = []
        self._order = 0

    @property
    def now_ms(self) -> float:
        return self._now_ms

    @property
    def pending(self) -> int:
        return len(self._queue)

    def next_due_ms(self) -> Optional[float]:
        return self._queue[0][0] if self._queue else None

    def pending_tasks(self) -> List[ScheduledTask]:
        return [row[2] for row in sorted(self._queue, key=lambda row: (row[0], row[1]))]

    def schedule(self, delay_ms: float, task: ScheduledTask, callback: TaskCallback) -> float:
        delay = _require_delay(delay_ms)
        due = self._now_ms + delay
        heapq.heappush(self._queue, (due, self._order, task, callback))
        self._order += 1
        return due

    def advance(self, delta_ms: float) -> int:
        target = self._now_ms + _require_delay(delta_ms)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task, callback = heapq.heappop(self._queue)
            self._now_ms = max(self._now_ms, due)
            callback(task)
            fired += 1
        self._now_ms = target
        return fired

    def run_until_idle(self) -> int:
        fired = 0
        while self._queue:
            due, _, task, callback = heapq.heappop(self._queue)
            self._now_ms = max(self._now_ms, due)
            callback(task)
            fired += 1
        return fired

    def clear(self) -> None:
        self._queue.clear()


def _require_delay(value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCombatValueError(f"delay must be a number of milliseconds, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise InvalidCombatValueError(f"delay must be finite and >= 0, got {value!r}")
    return float(value)
