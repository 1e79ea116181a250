import os
import tempfile
import unittest
from pathlib import Path

from cubelet_sim.cli import build_parser, config_from_args
from cubelet_sim.config import ConfigError, SimConfig, config_from_dict, load_config, resolve_config

REPO_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "cube.yaml"


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = config_from_dict({})
        self.assertEqual(cfg, SimConfig())
        self.assertAlmostEqual(cfg.spacing, 1.05)

    def test_sections_are_flattened(self):
        cfg = config_from_dict({"cube": {"gap": 0.1, "snap_every": 4}, "server": {"port": 9001}})
        self.assertEqual(cfg.gap, 0.1)
        self.assertEqual(cfg.snap_every, 4)
        self.assertEqual(cfg.port, 9001)

    def test_unknown_key_is_rejected(self):
        with self.assertRaises(ConfigError):
            config_from_dict({"cube": {"colour": "red"}})

    def test_out_of_range_values_are_rejected(self):
        for data in (
            {"cube_size": 0},
            {"gap": -1},
            {"tolerance": 0.9},
            {"snap_every": -2},
            {"port": 70000},
            {"gap": "wide"},
            {"port": None},
        ):
            with self.assertRaises(ConfigError, msg=str(data)):
                config_from_dict(data)

    def test_repo_config_loads(self):
        cfg = config_from_dict(load_config(REPO_CONFIG))
        self.assertIsNone(cfg.tolerance)
        self.assertEqual(cfg.snap_every, 16)

    def test_resolve_config_applies_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "cfg.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("cube:\n  gap: 0.2\nserver:\n  port: 8100\n")
            cfg = resolve_config(path, port=9000, host=None)
        self.assertEqual(cfg.gap, 0.2)
        self.assertEqual(cfg.port, 9000)
        self.assertEqual(cfg.host, "127.0.0.1")

    def test_empty_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "empty.yaml")
            Path(path).write_text("", encoding="utf-8")
            self.assertEqual(resolve_config(path), SimConfig())


class TestCLI(unittest.TestCase):
    def test_parser_and_overrides(self):
        args = build_parser().parse_args(
            ["headless", "--config", str(REPO_CONFIG), "--port", "0", "--snap-every", "2"]
        )
        self.assertEqual(args.mode, "headless")
        cfg = config_from_args(args)
        self.assertEqual(cfg.port, 0)
        self.assertEqual(cfg.snap_every, 2)
        self.assertEqual(cfg.scramble_steps, 20)

    def test_mode_is_required(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args([])


if __name__ == "__main__":
    unittest.main()
