"""Solved-state checks for the cubelet model."""

from __future__ import annotations

import numpy as np

from .cube_state import CubeState
from .state_codec import StateValidationError, facelet_colors


def is_solved_orientation_invariant(state: CubeState) -> bool:
    """True when every outer face shows a single colour, whatever the whole-cube orientation."""
    facelets = facelet_colors(state)
    return all(bool(np.all(face == face[0, 0])) for face in facelets)


def assert_valid_and_solved(state: CubeState) -> None:
    state.check_invariants()
    if not is_solved_orientation_invariant(state):
        raise StateValidationError("State is valid but not solved")
