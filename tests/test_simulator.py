import math
import threading
import unittest

import numpy as np

from cubelet_sim.actions import TurnCommand
from cubelet_sim.config import SimConfig
from cubelet_sim.engine import LayerSelectionError
from cubelet_sim.geometry import InvalidAxisError
from cubelet_sim.simulator import CubeSimulator
from cubelet_sim.state_codec import StateValidationError, state_to_payload


def _positions(state):
    return np.array([c.position for c in state.cubelets()])


class TestCubeSimulator(unittest.TestCase):
    def test_turn_counts_and_returns_copy(self):
        sim = CubeSimulator()
        state = sim.turn(0)
        self.assertEqual(sim.turn_count, 1)
        state.cubelets()[0].position[:] = 99.0
        self.assertFalse(np.any(_positions(sim.get_state()) == 99.0))

    def test_four_turns_solved_again(self):
        sim = CubeSimulator(snap_every=0)
        for _ in range(4):
            sim.turn(6)
        self.assertTrue(sim.is_solved())

    def test_invalid_action_raises(self):
        sim = CubeSimulator()
        with self.assertRaises(StateValidationError):
            sim.turn(12)
        with self.assertRaises(StateValidationError):
            sim.turn(True)
        self.assertEqual(sim.turn_count, 0)

    def test_rotate_requires_quarter_turns(self):
        sim = CubeSimulator()
        with self.assertRaises(StateValidationError):
            sim.rotate("x", 1, math.pi / 3)
        self.assertEqual(sim.turn_count, 0)
        sim.rotate("x", 0, math.pi)
        self.assertEqual(sim.turn_count, 1)

    def test_rotate_propagates_engine_errors(self):
        sim = CubeSimulator()
        with self.assertRaises(InvalidAxisError):
            sim.rotate("q", 1, math.pi / 2)
        with self.assertRaises(LayerSelectionError):
            sim.rotate("x", 3, math.pi / 2)

    def test_periodic_snap_keeps_poses_canonical(self):
        sim = CubeSimulator(snap_every=4)
        for action in (0, 6, 8, 3):
            sim.turn(action)
        state = sim.get_state()
        for c in state.cubelets():
            cell = c.position / state.spacing
            self.assertTrue(np.array_equal(cell, np.rint(cell)))
            self.assertTrue(np.array_equal(c.orientation, np.rint(c.orientation)))

    def test_long_scramble_without_snap_keeps_working(self):
        sim = CubeSimulator(snap_every=0)
        state, actions = sim.scramble(steps=500, seed=1)
        self.assertEqual(len(actions), 500)
        state.check_invariants(atol=1e-6)

    def test_scramble_is_deterministic_for_fixed_seed(self):
        s1, a1 = CubeSimulator().scramble(steps=30, seed=123)
        s2, a2 = CubeSimulator().scramble(steps=30, seed=123)
        self.assertEqual(a1, a2)
        self.assertTrue(np.allclose(_positions(s1), _positions(s2)))

    def test_scramble_has_no_immediate_inverse_move(self):
        _, actions = CubeSimulator().scramble(steps=200, seed=99)
        for prev_a, next_a in zip(actions[:-1], actions[1:]):
            self.assertNotEqual(next_a, prev_a ^ 1)

    def test_scramble_rejects_negative_steps(self):
        with self.assertRaises(StateValidationError):
            CubeSimulator().scramble(steps=-1)

    def test_reset_and_set_state(self):
        source = CubeSimulator()
        source.scramble(steps=10, seed=3)
        payload = state_to_payload(source.get_state())

        sim = CubeSimulator()
        sim.set_state(payload)
        self.assertTrue(np.allclose(_positions(sim.get_state()), _positions(source.get_state()), atol=1e-9))
        self.assertEqual(sim.turn_count, 0)

        sim.reset()
        self.assertTrue(sim.is_solved())

    def test_state_payload_fields(self):
        sim = CubeSimulator()
        sim.apply(TurnCommand.from_move("L"))
        payload = sim.state_payload()
        self.assertEqual(payload["turn_count"], 1)
        self.assertFalse(payload["solved"])
        self.assertEqual(len(payload["cubelets"]), 27)

    def test_from_config(self):
        sim = CubeSimulator.from_config(SimConfig(cube_size=2.0, gap=0.1, tolerance=0.5, snap_every=3))
        self.assertEqual(sim.snap_every, 3)
        self.assertAlmostEqual(sim.get_state().spacing, 2.1)
        self.assertEqual(sim.engine.tolerance, 0.5)

    def test_tolerance_larger_than_half_spacing_is_rejected(self):
        with self.assertRaises(ValueError):
            CubeSimulator(tolerance=0.6)

    def test_concurrent_turns_are_serialised(self):
        sim = CubeSimulator(snap_every=8)
        errors = []

        def worker(action):
            try:
                for _ in range(40):
                    sim.turn(action)
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(a,)) for a in (0, 6, 8, 11)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertEqual(sim.turn_count, 160)
        sim.get_state().check_invariants()


if __name__ == "__main__":
    unittest.main()
