"""Layer rotation engine: select one layer of cubelets and turn it."""

from __future__ import annotations

from typing import Any

from .actions import TurnCommand
from .cube_state import LAYER_SIZE, Cubelet, CubeState
from .geometry import axis_index, rotation_matrix

LAYER_COORDINATES = (-1, 0, 1)


class LayerSelectionError(RuntimeError):
    """Raised when a layer query does not select exactly nine cubelets."""


def resolve_tolerance(state: CubeState, tolerance: float | None = None) -> float:
    """Return the layer membership tolerance, defaulting to half the layer spacing."""
    half_spacing = state.spacing / 2.0
    if tolerance is None:
        return half_spacing
    tol = float(tolerance)
    if not 0.0 < tol <= half_spacing:
        raise ValueError(f"tolerance must be in (0, {half_spacing}], got {tolerance!r}")
    return tol


def select_layer(
    state: CubeState,
    axis: Any,
    layer_coordinate: int,
    tolerance: float | None = None,
) -> list[Cubelet]:
    """Return the cubelets whose live position lies on the requested layer."""
    idx = axis_index(axis)
    if layer_coordinate not in LAYER_COORDINATES:
        raise LayerSelectionError(f"layer_coordinate must be one of -1, 0, 1, got {layer_coordinate!r}")
    tol = resolve_tolerance(state, tolerance)

    target = layer_coordinate * state.spacing
    selected = [c for c in state.cubelets() if abs(float(c.position[idx]) - target) < tol]
    if len(selected) != LAYER_SIZE:
        raise LayerSelectionError(
            f"Layer axis={'xyz'[idx]} coordinate={layer_coordinate} selected {len(selected)} cubelets, "
            f"expected {LAYER_SIZE}"
        )
    return selected


def rotate_layer(
    state: CubeState,
    axis: Any,
    layer_coordinate: int,
    angle: float,
    tolerance: float | None = None,
) -> int:
    """Rotate one layer by ``angle`` radians about ``axis`` and return the number of cubelets moved.

    Position and orientation of every selected cubelet are composed with the
    same rotation matrix. Cubelets outside the layer are not touched. The
    selection is validated before anything is written.
    """
    selected = select_layer(state, axis, layer_coordinate, tolerance=tolerance)
    rot = rotation_matrix(axis, angle)

    for cubelet in selected:
        cubelet.position = rot @ cubelet.position
        cubelet.orientation = rot @ cubelet.orientation
    return len(selected)


def apply_turn(state: CubeState, command: TurnCommand, tolerance: float | None = None) -> int:
    return rotate_layer(state, command.axis, command.layer_coordinate, command.angle, tolerance=tolerance)


class LayerRotationEngine:
    """Turns layers with a fixed membership tolerance; holds no cube state."""

    def __init__(self, tolerance: float | None = None):
        if tolerance is not None and float(tolerance) <= 0.0:
            raise ValueError("tolerance must be positive")
        self.tolerance = tolerance

    def rotate_layer(self, state: CubeState, axis: Any, layer_coordinate: int, angle: float) -> int:
        return rotate_layer(state, axis, layer_coordinate, angle, tolerance=self.tolerance)

    def apply(self, state: CubeState, command: TurnCommand) -> int:
        return apply_turn(state, command, tolerance=self.tolerance)
