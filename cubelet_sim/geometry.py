"""Axis, rotation and face geometry for the 3x3x3 cubelet model."""

from __future__ import annotations

import math
from collections import deque
from typing import Any

import numpy as np

AXIS_NAMES = ("x", "y", "z")
AXIS_INDEX = {name: i for i, name in enumerate(AXIS_NAMES)}
BASIS = np.eye(3, dtype=np.float64)

FACE_ORDER = ("U", "R", "F", "D", "L", "B")
FACE_INDEX = {face: i for i, face in enumerate(FACE_ORDER)}

# Face specification from outside view. The front face is the z=-1 side.
FACE_SPECS = {
    "U": {"normal": (0, 1, 0), "right": (-1, 0, 0), "up": (0, 0, 1)},
    "R": {"normal": (1, 0, 0), "right": (0, 0, -1), "up": (0, 1, 0)},
    "F": {"normal": (0, 0, -1), "right": (-1, 0, 0), "up": (0, 1, 0)},
    "D": {"normal": (0, -1, 0), "right": (-1, 0, 0), "up": (0, 0, -1)},
    "L": {"normal": (-1, 0, 0), "right": (0, 0, 1), "up": (0, 1, 0)},
    "B": {"normal": (0, 0, 1), "right": (1, 0, 0), "up": (0, 1, 0)},
}

NORMAL_TO_FACE = {spec["normal"]: face for face, spec in FACE_SPECS.items()}

FACE_COLORS = {
    "U": 0xFFFFFF,  # white
    "D": 0xFFFF00,  # yellow
    "F": 0xFF0000,  # red
    "B": 0x0000FF,  # blue
    "L": 0xFFA500,  # orange
    "R": 0x00FF00,  # green
}


class InvalidAxisError(ValueError):
    """Raised when an axis is not one of the three basis axes."""


def axis_index(axis: Any) -> int:
    """Return 0/1/2 for an axis given as ``"x"``/``"y"``/``"z"`` or a unit basis vector."""
    if isinstance(axis, str):
        idx = AXIS_INDEX.get(axis.lower())
        if idx is None:
            raise InvalidAxisError(f"Unsupported axis: {axis!r}; expected one of x, y, z")
        return idx

    try:
        vec = np.asarray(axis, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InvalidAxisError(f"Unsupported axis: {axis!r}") from exc

    if vec.shape == (3,):
        for i in range(3):
            if np.array_equal(vec, BASIS[i]):
                return i
    raise InvalidAxisError(f"Unsupported axis: {axis!r}; expected a unit basis vector")


def rotation_matrix(axis: Any, angle_rad: float) -> np.ndarray:
    """Return the right-handed rotation matrix for ``angle_rad`` about a basis axis."""
    idx = axis_index(axis)
    angle = float(angle_rad)
    if not math.isfinite(angle):
        raise ValueError(f"Rotation angle must be finite, got {angle_rad!r}")

    c = math.cos(angle)
    s = math.sin(angle)
    if idx == 0:
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]], dtype=np.float64)
    if idx == 1:
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=np.float64)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)


def _matrix_key(mat: np.ndarray) -> tuple[int, ...]:
    return tuple(int(v) for v in mat.reshape(-1))


def _generate_orientation_matrices() -> list[np.ndarray]:
    quarter = math.pi / 2
    gens = [np.rint(rotation_matrix(axis, quarter)).astype(np.int8) for axis in AXIS_NAMES]
    identity = np.eye(3, dtype=np.int8)

    mats: list[np.ndarray] = []
    seen: set[tuple[int, ...]] = set()
    q: deque[np.ndarray] = deque([identity])

    while q:
        mat = q.popleft()
        key = _matrix_key(mat)
        if key in seen:
            continue
        seen.add(key)
        mats.append(mat)
        for g in gens:
            q.append(g @ mat)

    if len(mats) != 24:
        raise RuntimeError(f"Expected 24 orientation matrices, got {len(mats)}")
    return mats


ORIENTATION_MATRICES = tuple(_generate_orientation_matrices())


def snap_orientation(mat: np.ndarray, atol: float = 0.25) -> np.ndarray:
    """Return the cube rotation closest to ``mat`` as a float matrix.

    Raises ``ValueError`` when no cube rotation lies within ``atol`` (max-abs).
    """
    arr = np.asarray(mat, dtype=np.float64)
    if arr.shape != (3, 3) or not np.all(np.isfinite(arr)):
        raise ValueError("Orientation must be a finite 3x3 matrix")

    best = min(ORIENTATION_MATRICES, key=lambda m: float(np.max(np.abs(arr - m))))
    err = float(np.max(np.abs(arr - best)))
    if err > atol:
        raise ValueError(f"Orientation is {err:.3g} away from any cube rotation")
    return best.astype(np.float64)


def matrix_to_quaternion(mat: np.ndarray) -> np.ndarray:
    """Convert a rotation matrix to a unit quaternion ``(w, x, y, z)`` with ``w >= 0``."""
    m = np.asarray(mat, dtype=np.float64)
    trace = float(m[0, 0] + m[1, 1] + m[2, 2])

    if trace > 0.0:
        s = 2.0 * math.sqrt(trace + 1.0)
        q = np.array(
            [0.25 * s, (m[2, 1] - m[1, 2]) / s, (m[0, 2] - m[2, 0]) / s, (m[1, 0] - m[0, 1]) / s]
        )
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = np.array(
            [(m[2, 1] - m[1, 2]) / s, 0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s]
        )
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = np.array(
            [(m[0, 2] - m[2, 0]) / s, (m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s]
        )
    else:
        s = 2.0 * math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = np.array(
            [(m[1, 0] - m[0, 1]) / s, (m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s]
        )

    q = q / np.linalg.norm(q)
    if q[0] < 0.0:
        q = -q
    return q
