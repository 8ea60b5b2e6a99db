import sys
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    ATTACK = "attack"
    DODGE_LEFT = "dodge_left"
    DODGE_RIGHT = "dodge_right"
    JUMP = "jump"
    WAIT = "wait"
    QUIT = "quit"


_KEY_INTENTS = {
    "space": Intent.ATTACK,
    "a": Intent.ATTACK,
    "attack": Intent.ATTACK,
    "cast": Intent.ATTACK,
    "left": Intent.DODGE_LEFT,
    "l": Intent.DODGE_LEFT,
    "right": Intent.DODGE_RIGHT,
    "r": Intent.DODGE_RIGHT,
    "up": Intent.JUMP,
    "w": Intent.JUMP,
    "j": Intent.JUMP,
    "jump": Intent.JUMP,
    "": Intent.WAIT,
    "enter": Intent.WAIT,
    "wait": Intent.WAIT,
    "q": Intent.QUIT,
    "esc": Intent.QUIT,
    "quit": Intent.QUIT,
}

CONTROLS_HINT = "a: cast spell | w/j: jump | l/r: dodge | ENTER: wait | q: quit"


def read_key() -> Optional[str]:
    """Read one line of input; ``None`` on end of stream."""

    line = sys.stdin.readline()
    if line == "":
        return None
    return line.rstrip("\r\n")


def normalize_intent(key) -> Optional[Intent]:
    if key is None:
        return None
    if isinstance(key, Intent):
        return key
    if key == " ":
        return Intent.ATTACK
    return _KEY_INTENTS.get(str(key).strip().lower())
