"""Rubik 3x3x3 cubelet pose simulator package."""

from .actions import TurnCommand, decode_turn
from .cube_state import Cubelet, CubeState
from .engine import LayerRotationEngine, LayerSelectionError, rotate_layer
from .geometry import InvalidAxisError
from .simulator import CubeSimulator
from .solved_check import is_solved_orientation_invariant

__all__ = [
    "CubeSimulator",
    "CubeState",
    "Cubelet",
    "InvalidAxisError",
    "LayerRotationEngine",
    "LayerSelectionError",
    "TurnCommand",
    "decode_turn",
    "is_solved_orientation_invariant",
    "rotate_layer",
]
