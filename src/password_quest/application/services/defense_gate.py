from typing import Dict

from password_quest.domain.models.combatant import Side


class DefenseGate:
    """One evasion charge per side, refreshed on every turn flip.

    A closed gate is a normal state: ``try_consume`` reports it with ``False``.
    """

    def __init__(self) -> None:
        self._available: Dict[Side, bool] = {side: True for side in Side}

    def is_available(self, side: Side) -> bool:
        return self._available[Side(side)]

    def try_consume(self, side: Side) -> bool:
        side = Side(side)
        if not self._available[side]:
            return False
        self._available[side] = False
        return True

    def reopen(self, side: Side) -> None:
        self._available[Side(side)] = True

    def reopen_all(self) -> None:
        for side in self._available:
            self._available[side] = True
