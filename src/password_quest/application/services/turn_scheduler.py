import logging
from typing import Dict, Mapping, Optional

from password_quest.application.services.balance_tables import ACTIONS_PER_TURN
from password_quest.application.services.defense_gate import DefenseGate
from password_quest.domain.errors import InvalidTurnError
from password_quest.domain.models.combatant import Side, require_count


logger = logging.getLogger(__name__)


class TurnScheduler:
    """Strictly alternating, action-bounded turns.

    ``record_action`` only marks a flip as pending once the active side has spent
    its actions; the controller calls ``flip_turn`` after checking for a kill, so a
    fight that ends mid-turn never flips.
    """

    def __init__(
        self,
        defense_gate: DefenseGate,
        actions_per_turn: Optional[Mapping[Side, int]] = None,
        first_side: Side = Side.PLAYER,
    ) -> None:
        source = dict(ACTIONS_PER_TURN)
        source.update(actions_per_turn or {})
        self._actions_per_turn: Dict[Side, int] = {
            Side(side): require_count(count, f"actions_per_turn[{Side(side).value}]", minimum=1)
            for side, count in source.items()
        }
        self.defense_gate = defense_gate
        self.active_side = Side(first_side)
        self.actions_taken_this_turn = 0
        self.flips_total = 0
        self.flip_pending = False

    def actions_per_turn(self, side: Side) -> int:
        return self._actions_per_turn[Side(side)]

    @property
    def actions_remaining(self) -> int:
        return self.actions_per_turn(self.active_side) - self.actions_taken_this_turn

    @property
    def turn_number(self) -> int:
        return self.flips_total + 1

    def record_action(self, side: Side) -> bool:
        side = Side(side)
        if side is not self.active_side:
            raise InvalidTurnError(side, self.active_side)
        if self.flip_pending:
            raise InvalidTurnError(side, self.active_side, "turn already spent; waiting for flip")
        self.actions_taken_this_turn += 1
        if self.actions_taken_this_turn >= self.actions_per_turn(side):
            self.flip_pending = True
        return self.flip_pending

    def flip_turn(self) -> Side:
        previous = self.active_side
        self.active_side = previous.opponent
        self.actions_taken_this_turn = 0
        self.flip_pending = False
        self.flips_total += 1
        self.defense_gate.reopen_all()
        logger.debug("Turn flipped %s -> %s (flip %s)", previous.value, self.active_side.value, self.flips_total)
        return self.active_side
