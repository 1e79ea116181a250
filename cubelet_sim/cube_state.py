"""Cubelet poses of a 3x3x3 cube."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

import numpy as np

from .geometry import FACE_COLORS, FACE_SPECS, NORMAL_TO_FACE, snap_orientation
from .state_codec import N_CUBELETS, StateValidationError, validate_poses

GRID_VALUES = (-1, 0, 1)
LAYER_SIZE = 9
SNAP_ATOL = 0.25

_SOLVED_COLORS: Mapping[str, int] = MappingProxyType(dict(FACE_COLORS))


@dataclass(eq=False)
class Cubelet:
    """One of the 27 sub-cubes.

    ``grid_coordinate`` is the home slot and never changes. ``position`` and
    ``orientation`` form the live pose. ``face_colors`` maps local faces to
    colours and rotates with ``orientation``.
    """

    grid_coordinate: tuple[int, int, int]
    position: np.ndarray
    orientation: np.ndarray
    face_colors: Mapping[str, int] = field(default_factory=lambda: _SOLVED_COLORS)

    def copy(self) -> Cubelet:
        return Cubelet(
            grid_coordinate=self.grid_coordinate,
            position=self.position.copy(),
            orientation=self.orientation.copy(),
            face_colors=self.face_colors,
        )

    def world_face_colors(self) -> dict[str, int]:
        """Map world face letters to the colour currently pointing that way."""
        out: dict[str, int] = {}
        for local_face, color in self.face_colors.items():
            normal = self.orientation @ np.array(FACE_SPECS[local_face]["normal"], dtype=np.float64)
            world_face = NORMAL_TO_FACE.get(tuple(int(v) for v in np.rint(normal)))
            if world_face is not None:
                out[world_face] = color
        return out


class CubeState:
    """The 27 cubelets of one cube; single source of truth for its geometry."""

    def __init__(self, cube_size: float = 1.0, gap: float = 0.05):
        if cube_size <= 0:
            raise ValueError("cube_size must be positive")
        if gap < 0:
            raise ValueError("gap must be non-negative")

        self.cube_size = float(cube_size)
        self.gap = float(gap)
        self._cubelets: list[Cubelet] = []
        self.initialize()

    @property
    def spacing(self) -> float:
        return self.cube_size + self.gap

    def initialize(self) -> None:
        """Place all cubelets at their home slots with identity orientation."""
        cubelets = []
        for x, y, z in itertools.product(GRID_VALUES, repeat=3):
            cubelets.append(
                Cubelet(
                    grid_coordinate=(x, y, z),
                    position=np.array([x, y, z], dtype=np.float64) * self.spacing,
                    orientation=np.eye(3, dtype=np.float64),
                )
            )
        # Keep the same list object so handles from cubelets() stay live.
        self._cubelets[:] = cubelets

    def cubelets(self) -> list[Cubelet]:
        return self._cubelets

    def __len__(self) -> int:
        return len(self._cubelets)

    def __iter__(self) -> Iterator[Cubelet]:
        return iter(self._cubelets)

    def cubelet_at_grid(self, grid: tuple[int, int, int]) -> Cubelet:
        key = tuple(int(v) for v in grid)
        for cubelet in self._cubelets:
            if cubelet.grid_coordinate == key:
                return cubelet
        raise KeyError(f"No cubelet with grid coordinate {key}")

    def copy(self) -> CubeState:
        other = CubeState(cube_size=self.cube_size, gap=self.gap)
        other._cubelets[:] = [c.copy() for c in self._cubelets]
        return other

    def check_invariants(self, atol: float = 1e-6) -> None:
        if len(self._cubelets) != N_CUBELETS:
            raise StateValidationError(f"Expected {N_CUBELETS} cubelets, got {len(self._cubelets)}")

        grids = {c.grid_coordinate for c in self._cubelets}
        if len(grids) != N_CUBELETS:
            raise StateValidationError("Cubelet grid coordinates are not unique")

        bound = self.spacing + atol
        for c in self._cubelets:
            if np.any(np.abs(c.position) > bound):
                raise StateValidationError(
                    f"Cubelet {list(c.grid_coordinate)} drifted outside the cube: {c.position.tolist()}"
                )
            home = np.array(c.grid_coordinate, dtype=np.float64) * self.spacing
            if not np.allclose(c.position, c.orientation @ home, atol=atol):
                raise StateValidationError(
                    f"Cubelet {list(c.grid_coordinate)} position does not match its orientation"
                )

    def snap(self) -> None:
        """Snap every pose to the nearest canonical grid pose to remove drift.

        All poses are computed before any is written, so a failure leaves the
        state untouched.
        """
        snapped: list[tuple[Cubelet, np.ndarray, np.ndarray]] = []
        cells: set[tuple[int, ...]] = set()

        for c in self._cubelets:
            try:
                orientation = snap_orientation(c.orientation, atol=SNAP_ATOL)
            except ValueError as exc:
                raise StateValidationError(f"Cubelet {list(c.grid_coordinate)}: {exc}") from exc

            cell = orientation @ np.array(c.grid_coordinate, dtype=np.float64)
            scaled = c.position / self.spacing
            if np.any(np.abs(scaled - cell) > SNAP_ATOL):
                raise StateValidationError(
                    f"Cubelet {list(c.grid_coordinate)} is too far from a grid slot to snap: {c.position.tolist()}"
                )
            cells.add(tuple(int(v) for v in np.rint(cell)))
            snapped.append((c, cell * self.spacing, orientation))

        if len(cells) != N_CUBELETS:
            raise StateValidationError("Snapped cubelets collide in the same grid slot")

        for c, position, orientation in snapped:
            c.position = position
            c.orientation = orientation

    def load_poses(self, payload: dict[str, Any] | list[dict[str, Any]]) -> None:
        """Replace every pose from a validated payload (see ``state_codec.validate_poses``)."""
        poses = validate_poses(payload, self.spacing)
        for c in self._cubelets:
            position, orientation = poses[c.grid_coordinate]
            c.position = position.copy()
            c.orientation = orientation.copy()
