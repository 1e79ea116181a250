"""Pose validation, JSON payload and facelet view helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from .geometry import FACE_INDEX, FACE_ORDER, FACE_SPECS, NORMAL_TO_FACE, matrix_to_quaternion, snap_orientation

if TYPE_CHECKING:
    from .cube_state import Cubelet, CubeState

N_CUBELETS = 27
FACE_SIZE = 3
POSE_ATOL = 1e-6


class StateValidationError(ValueError):
    """Raised when a cube state or pose payload is invalid."""


def cubelet_to_payload(cubelet: Cubelet) -> dict[str, Any]:
    return {
        "grid": [int(v) for v in cubelet.grid_coordinate],
        "position": [float(v) for v in cubelet.position],
        "orientation": cubelet.orientation.astype(float).tolist(),
        "quaternion": [float(v) for v in matrix_to_quaternion(cubelet.orientation)],
    }


def state_to_payload(state: CubeState) -> dict[str, Any]:
    return {
        "cube_size": state.cube_size,
        "gap": state.gap,
        "cubelets": [cubelet_to_payload(c) for c in state.cubelets()],
    }


def _validate_grid(raw: Any) -> tuple[int, int, int]:
    arr = np.asarray(raw)
    if arr.shape != (3,) or not np.issubdtype(arr.dtype, np.integer):
        raise StateValidationError(f"grid must be 3 integers, got {raw!r}")
    if np.any(np.abs(arr) > 1):
        raise StateValidationError(f"grid values must be in -1..1, got {raw!r}")
    return int(arr[0]), int(arr[1]), int(arr[2])


def _validate_vector(raw: Any, shape: tuple[int, ...], name: str) -> np.ndarray:
    try:
        arr = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise StateValidationError(f"{name} must be numeric") from exc
    if arr.shape != shape:
        raise StateValidationError(f"{name} must have shape {shape}, got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise StateValidationError(f"{name} must be finite")
    return arr


def validate_poses(
    payload: dict[str, Any] | list[dict[str, Any]], spacing: float
) -> dict[tuple[int, int, int], tuple[np.ndarray, np.ndarray]]:
    """Validate a pose payload and return canonical poses keyed by grid coordinate.

    A pose is accepted only if its orientation is a cube rotation and its
    position equals that rotation applied to the cubelet's home slot. No two
    cubelets may end up in the same slot.
    """
    entries = payload.get("cubelets") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise StateValidationError("State must be a list of cubelet poses or an object with 'cubelets'")
    if len(entries) != N_CUBELETS:
        raise StateValidationError(f"State must have {N_CUBELETS} cubelets, got {len(entries)}")

    poses: dict[tuple[int, int, int], tuple[np.ndarray, np.ndarray]] = {}
    cells: set[tuple[int, ...]] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            raise StateValidationError("Each cubelet pose must be an object")
        for key in ("grid", "position", "orientation"):
            if key not in entry:
                raise StateValidationError(f"Missing required cubelet field: {key}")

        grid = _validate_grid(entry["grid"])
        if grid in poses:
            raise StateValidationError(f"Duplicate cubelet grid coordinate {list(grid)}")

        position = _validate_vector(entry["position"], (3,), "position")
        orientation = _validate_vector(entry["orientation"], (3, 3), "orientation")
        try:
            canonical = snap_orientation(orientation, atol=POSE_ATOL)
        except ValueError as exc:
            raise StateValidationError(f"Cubelet {list(grid)}: {exc}") from exc

        expected = canonical @ (np.array(grid, dtype=np.float64) * spacing)
        if not np.allclose(position, expected, atol=POSE_ATOL):
            raise StateValidationError(
                f"Cubelet {list(grid)}: position {position.tolist()} does not match its orientation"
            )

        cell = tuple(int(v) for v in np.rint(canonical @ np.array(grid, dtype=np.float64)))
        if cell in cells:
            raise StateValidationError(f"Cubelet {list(grid)} collides with another cubelet in grid slot {list(cell)}")
        cells.add(cell)
        poses[grid] = (expected, canonical)

    return poses


def facelet_colors(state: CubeState) -> np.ndarray:
    """Return the 6x3x3 sticker colours seen from outside, faces in ``FACE_ORDER``.

    Row 0 is the top of a face and column 0 its left edge, both from outside view.
    """
    facelets = np.zeros((len(FACE_ORDER), FACE_SIZE, FACE_SIZE), dtype=np.int64)
    filled = np.zeros(facelets.shape, dtype=bool)

    for cubelet in state.cubelets():
        cell = np.rint(cubelet.position / state.spacing).astype(np.int64)
        for local_face, color in cubelet.face_colors.items():
            local_normal = np.array(FACE_SPECS[local_face]["normal"], dtype=np.float64)
            normal = np.rint(cubelet.orientation @ local_normal).astype(np.int64)
            world_face = NORMAL_TO_FACE.get(tuple(int(v) for v in normal))
            if world_face is None:
                raise StateValidationError(
                    f"Cubelet {list(cubelet.grid_coordinate)} has a non-axis-aligned orientation"
                )
            if int(cell @ normal) != 1:
                continue

            spec = FACE_SPECS[world_face]
            col = int(cell @ np.array(spec["right"])) + 1
            row = 1 - int(cell @ np.array(spec["up"]))
            idx = (FACE_INDEX[world_face], row, col)
            if filled[idx]:
                raise StateValidationError(f"Two stickers overlap on face {world_face} at row={row} col={col}")
            facelets[idx] = color
            filled[idx] = True

    if not filled.all():
        raise StateValidationError("Cubelet poses leave gaps in the outer faces")
    return facelets


def facelets_to_json(facelets: np.ndarray) -> dict[str, list[list[int]]]:
    return {face: facelets[i].astype(int).tolist() for i, face in enumerate(FACE_ORDER)}
