import math
import unittest

import numpy as np

from cubelet_sim.geometry import (
    FACE_SPECS,
    ORIENTATION_MATRICES,
    InvalidAxisError,
    axis_index,
    matrix_to_quaternion,
    rotation_matrix,
    snap_orientation,
)


class TestGeometry(unittest.TestCase):
    def test_axis_index_accepts_names_and_basis_vectors(self):
        self.assertEqual(axis_index("x"), 0)
        self.assertEqual(axis_index("Y"), 1)
        self.assertEqual(axis_index((0, 0, 1)), 2)

    def test_axis_index_rejects_other_axes(self):
        for axis in ("xy", (0.5, 0.5, 0.0), (0, 0, -1), "", object()):
            with self.assertRaises(InvalidAxisError):
                axis_index(axis)

    def test_rotation_matrix_is_right_handed(self):
        rot = rotation_matrix("z", math.pi / 2)
        self.assertTrue(np.allclose(rot @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0]))
        rot = rotation_matrix("x", math.pi / 2)
        self.assertTrue(np.allclose(rot @ np.array([0.0, 1.0, 0.0]), [0.0, 0.0, 1.0]))
        rot = rotation_matrix("y", math.pi / 2)
        self.assertTrue(np.allclose(rot @ np.array([0.0, 0.0, 1.0]), [1.0, 0.0, 0.0]))

    def test_rotation_matrix_rejects_non_finite_angle(self):
        with self.assertRaises(ValueError):
            rotation_matrix("x", float("nan"))

    def test_there_are_24_distinct_proper_orientations(self):
        self.assertEqual(len(ORIENTATION_MATRICES), 24)
        for mat in ORIENTATION_MATRICES:
            self.assertEqual(int(round(np.linalg.det(mat))), 1)

    def test_snap_orientation(self):
        noisy = rotation_matrix("y", math.pi / 2) + 0.01
        snapped = snap_orientation(noisy)
        self.assertTrue(np.array_equal(snapped, np.array([[0, 0, 1], [0, 1, 0], [-1, 0, 0]], dtype=np.float64)))
        with self.assertRaises(ValueError):
            snap_orientation(rotation_matrix("y", math.pi / 4))

    def test_quaternion_of_quarter_turn(self):
        q = matrix_to_quaternion(rotation_matrix("y", math.pi / 2))
        half = math.sqrt(0.5)
        self.assertTrue(np.allclose(q, [half, 0.0, half, 0.0]))
        q = matrix_to_quaternion(rotation_matrix("x", math.pi))
        self.assertTrue(np.allclose(np.abs(q), [0.0, 1.0, 0.0, 0.0]))

    def test_face_frames_are_right_handed(self):
        for face, spec in FACE_SPECS.items():
            n = np.array(spec["normal"])
            r = np.array(spec["right"])
            up = np.array(spec["up"])
            self.assertTrue(np.array_equal(np.cross(up, n), r), msg=face)


if __name__ == "__main__":
    unittest.main()
