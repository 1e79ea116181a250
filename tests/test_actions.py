import math
import unittest

from cubelet_sim.actions import (
    ACTION_NAMES,
    FACE_TURNS,
    TurnCommand,
    action_name,
    decode_turn,
    inverse_action,
    parse_move,
)


class TestActions(unittest.TestCase):
    def test_face_turn_table(self):
        expected = {
            "U": ("y", 1, math.pi / 2),
            "D": ("y", -1, -math.pi / 2),
            "L": ("x", -1, math.pi / 2),
            "R": ("x", 1, -math.pi / 2),
            "F": ("z", -1, math.pi / 2),
            "B": ("z", 1, -math.pi / 2),
        }
        self.assertEqual(FACE_TURNS, expected)

    def test_action_names_and_inverse(self):
        self.assertEqual(ACTION_NAMES[:4], ["U", "U'", "D", "D'"])
        self.assertEqual(len(ACTION_NAMES), 12)
        for action in range(12):
            inv = inverse_action(action)
            a = TurnCommand.from_action(action)
            b = TurnCommand.from_action(inv)
            self.assertEqual((a.axis, a.layer_coordinate), (b.axis, b.layer_coordinate))
            self.assertEqual(a.angle, -b.angle)
            self.assertEqual(action_name(inv).rstrip("'"), action_name(action).rstrip("'"))

    def test_parse_move(self):
        self.assertEqual(parse_move("R"), 6)
        self.assertEqual(parse_move(" b' "), 11)
        with self.assertRaises(ValueError):
            parse_move("M")

    def test_from_action_rejects_out_of_range(self):
        for bad in (-1, 12, True, "0"):
            with self.assertRaises(ValueError):
                TurnCommand.from_action(bad)

    def test_decode_turn(self):
        self.assertEqual(decode_turn("KeyU"), TurnCommand("y", 1, math.pi / 2))
        self.assertEqual(decode_turn("u"), TurnCommand("y", 1, math.pi / 2))
        self.assertEqual(decode_turn("J"), TurnCommand("y", 1, -math.pi / 2))
        self.assertEqual(decode_turn("KeyR"), TurnCommand("x", 1, -math.pi / 2))
        self.assertIsNone(decode_turn("KeyZ"))
        self.assertIsNone(decode_turn("space"))
        self.assertIsNone(decode_turn(None))

    def test_command_inverse(self):
        cmd = TurnCommand.from_move("F")
        self.assertEqual(cmd.inverse(), TurnCommand.from_move("F'"))


if __name__ == "__main__":
    unittest.main()
