class CombatError(Exception):
    """Base class for boss fight failures that callers must handle."""


class InvalidTurnError(CombatError):
    def __init__(self, side, active_side, reason: str = "") -> None:
        self.side = side
        self.active_side = active_side
        if not reason:
            reason = f"{active_side.value} holds the turn"
        super().__init__(f"{side.value} cannot act: {reason}")


class InvalidCombatValueError(CombatError, ValueError):
    pass


class DifficultyConfigurationError(CombatError, ValueError):
    def __init__(self, difficulty, known: tuple[str, ...]) -> None:
        self.difficulty = difficulty
        self.known = known
        super().__init__(f"Unknown difficulty {difficulty!r}; expected one of: {', '.join(known)}")
