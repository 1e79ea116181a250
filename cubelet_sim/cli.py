"""CLI entrypoint for the cubelet simulator."""

from __future__ import annotations

import argparse

from .config import SimConfig, resolve_config
from .server import CubeHTTPServer
from .simulator import CubeSimulator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rubik 3x3 cubelet simulator")
    sub = parser.add_subparsers(dest="mode", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=str, default=None, help="YAML config file")
    common.add_argument("--host", default=None)
    common.add_argument("--port", type=int, default=None)
    common.add_argument("--scramble-steps", type=int, default=None)
    common.add_argument("--snap-every", type=int, default=None)

    sub.add_parser("headless", parents=[common], help="Run headless HTTP simulator")
    sub.add_parser("gui", parents=[common], help="Run pygame GUI with HTTP server")

    return parser


def config_from_args(args: argparse.Namespace) -> SimConfig:
    return resolve_config(
        args.config,
        host=args.host,
        port=args.port,
        scramble_steps=args.scramble_steps,
        snap_every=args.snap_every,
    )


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    config = config_from_args(args)
    simulator = CubeSimulator.from_config(config)
    print(
        f"simulator_init cube_size={config.cube_size} gap={config.gap} "
        f"tolerance={config.tolerance} snap_every={config.snap_every}",
        flush=True,
    )

    if args.mode == "headless":
        server = CubeHTTPServer(simulator=simulator, host=config.host, port=config.port, mode="headless")
        if config.scramble_steps > 0:
            simulator.scramble(config.scramble_steps)
        print(f"Cubelet headless server listening on http://{server.host}:{server.port}", flush=True)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            server.shutdown()
        return

    if args.mode == "gui":
        from .gui import CubeGUI

        app = CubeGUI(
            simulator=simulator,
            host=config.host,
            port=config.port,
            scramble_steps=config.scramble_steps,
        )
        app.run()
        return

    parser.error(f"Unsupported mode: {args.mode}")


if __name__ == "__main__":
    main()
