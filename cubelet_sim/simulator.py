"""Thread-safe host around one CubeState."""

from __future__ import annotations

import math
import threading
from typing import Any

import numpy as np

from .actions import ACTION_NAMES, QUARTER_TURN, TurnCommand, inverse_action
from .config import SimConfig
from .cube_state import CubeState
from .engine import LayerRotationEngine, resolve_tolerance
from .solved_check import is_solved_orientation_invariant
from .state_codec import StateValidationError, state_to_payload


def _is_quarter_multiple(angle: float) -> bool:
    turns = angle / QUARTER_TURN
    return math.isfinite(turns) and abs(turns - round(turns)) < 1e-9


class CubeSimulator:
    """Owns one cube, serialises turns on it and snaps drift every ``snap_every`` turns."""

    def __init__(
        self,
        cube_size: float = 1.0,
        gap: float = 0.05,
        tolerance: float | None = None,
        snap_every: int = 16,
    ):
        if snap_every < 0:
            raise ValueError("snap_every must be non-negative")

        self._lock = threading.RLock()
        self._rng = np.random.default_rng()
        self._state = CubeState(cube_size=cube_size, gap=gap)
        resolve_tolerance(self._state, tolerance)
        self.engine = LayerRotationEngine(tolerance=tolerance)
        self.snap_every = snap_every
        self.turn_count = 0

    @property
    def lock(self) -> threading.RLock:
        """Reentrant lock guarding the cube; hold it to combine several calls atomically."""
        return self._lock

    @classmethod
    def from_config(cls, config: SimConfig) -> CubeSimulator:
        return cls(
            cube_size=config.cube_size,
            gap=config.gap,
            tolerance=config.tolerance,
            snap_every=config.snap_every,
        )

    def get_state(self) -> CubeState:
        """Return an independent copy of the cube."""
        with self._lock:
            return self._state.copy()

    def reset(self) -> CubeState:
        with self._lock:
            self._state.initialize()
            self.turn_count = 0
            return self._state.copy()

    def set_state(self, payload: dict[str, Any] | list[dict[str, Any]]) -> CubeState:
        with self._lock:
            self._state.load_poses(payload)
            self.turn_count = 0
            return self._state.copy()

    def is_solved(self) -> bool:
        with self._lock:
            return is_solved_orientation_invariant(self._state)

    def snap(self) -> CubeState:
        with self._lock:
            self._state.snap()
            return self._state.copy()

    def _apply_locked(self, command: TurnCommand) -> None:
        self.engine.apply(self._state, command)
        self.turn_count += 1
        if self.snap_every and self.turn_count % self.snap_every == 0:
            self._state.snap()

    def apply(self, command: TurnCommand) -> CubeState:
        if not _is_quarter_multiple(float(command.angle)):
            raise StateValidationError("Simulator turns must be multiples of a quarter turn")
        with self._lock:
            self._apply_locked(command)
            return self._state.copy()

    def rotate(self, axis: Any, layer_coordinate: int, angle: float) -> CubeState:
        return self.apply(TurnCommand(axis=axis, layer_coordinate=layer_coordinate, angle=angle))

    def turn(self, action: int) -> CubeState:
        if not isinstance(action, int) or isinstance(action, bool) or action < 0 or action >= len(ACTION_NAMES):
            raise StateValidationError(f"Action must be an integer in range 0..{len(ACTION_NAMES) - 1}")
        return self.apply(TurnCommand.from_action(action))

    def scramble(self, steps: int, seed: int | None = None) -> tuple[CubeState, list[int]]:
        if not isinstance(steps, int) or steps < 0:
            raise StateValidationError("Scramble steps must be a non-negative integer")

        with self._lock:
            rng = np.random.default_rng(seed) if seed is not None else self._rng
            action_list: list[int] = []
            prev_action: int | None = None

            for _ in range(steps):
                all_actions = np.arange(len(ACTION_NAMES), dtype=np.int32)
                if prev_action is not None:
                    candidates = all_actions[all_actions != inverse_action(prev_action)]
                else:
                    candidates = all_actions
                action = int(rng.choice(candidates))
                action_list.append(action)
                prev_action = action

            for action in action_list:
                self._apply_locked(TurnCommand.from_action(action))
            return self._state.copy(), action_list

    def state_payload(self) -> dict[str, Any]:
        with self._lock:
            payload = state_to_payload(self._state)
            payload["turn_count"] = self.turn_count
            payload["solved"] = is_solved_orientation_invariant(self._state)
            return payload
