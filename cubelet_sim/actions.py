"""Face-turn actions, turn commands and key decoding."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

QUARTER_TURN = math.pi / 2

# Face -> (axis, layer coordinate, angle of the face's own turn).
FACE_TURNS = {
    "U": ("y", +1, +QUARTER_TURN),
    "D": ("y", -1, -QUARTER_TURN),
    "L": ("x", -1, +QUARTER_TURN),
    "R": ("x", +1, -QUARTER_TURN),
    "F": ("z", -1, +QUARTER_TURN),
    "B": ("z", +1, -QUARTER_TURN),
}

# Action index -> (face, direction)
# direction: +1 is the face turn from FACE_TURNS, -1 is its inverse.
ACTION_TABLE = [
    ("U", +1),
    ("U", -1),
    ("D", +1),
    ("D", -1),
    ("L", +1),
    ("L", -1),
    ("R", +1),
    ("R", -1),
    ("F", +1),
    ("F", -1),
    ("B", +1),
    ("B", -1),
]

ACTION_NAMES = [face if direction > 0 else f"{face}'" for face, direction in ACTION_TABLE]
ACTION_INDEX = {name: i for i, name in enumerate(ACTION_NAMES)}

KEY_BINDINGS = {
    "u": 0,
    "j": 1,
    "d": 2,
    "c": 3,
    "l": 4,
    "k": 5,
    "r": 6,
    "e": 7,
    "f": 8,
    "g": 9,
    "b": 10,
    "n": 11,
}


@dataclass(frozen=True)
class TurnCommand:
    """A request to turn one layer: basis ``axis``, ``layer_coordinate`` in -1..1, signed ``angle`` in radians."""

    axis: Any
    layer_coordinate: int
    angle: float

    @classmethod
    def from_action(cls, action: int) -> TurnCommand:
        if not isinstance(action, int) or isinstance(action, bool) or not 0 <= action < len(ACTION_TABLE):
            raise ValueError(f"Action must be an integer in range 0..{len(ACTION_TABLE) - 1}")
        face, direction = ACTION_TABLE[action]
        axis, layer, angle = FACE_TURNS[face]
        return cls(axis=axis, layer_coordinate=layer, angle=angle * direction)

    @classmethod
    def from_move(cls, move: str) -> TurnCommand:
        return cls.from_action(parse_move(move))

    def inverse(self) -> TurnCommand:
        return TurnCommand(axis=self.axis, layer_coordinate=self.layer_coordinate, angle=-self.angle)


def action_name(action: int) -> str:
    return ACTION_NAMES[action]


def inverse_action(action: int) -> int:
    return action ^ 1


def parse_move(move: str) -> int:
    """Return the action index for a move written like ``U`` or ``R'``."""
    key = move.strip().upper()
    if key not in ACTION_INDEX:
        raise ValueError(f"Unsupported move: {move!r}")
    return ACTION_INDEX[key]


def decode_turn(key: str | None) -> TurnCommand | None:
    """Map a key name (``"u"``, ``"KeyU"``) to its turn command, or None if unbound."""
    if not isinstance(key, str):
        return None
    name = key.strip()
    if name.startswith("Key") and len(name) == 4:
        name = name[3:]
    action = KEY_BINDINGS.get(name.lower())
    if action is None:
        return None
    return TurnCommand.from_action(action)
