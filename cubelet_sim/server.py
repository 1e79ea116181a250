"""HTTP API server for the cubelet simulator."""

from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from .actions import ACTION_NAMES, TurnCommand, parse_move
from .engine import LayerSelectionError
from .simulator import CubeSimulator
from .state_codec import StateValidationError, facelet_colors, facelets_to_json, state_to_payload


class CubeHTTPServer:
    def __init__(
        self,
        simulator: CubeSimulator,
        host: str = "127.0.0.1",
        port: int = 8000,
        mode: str = "headless",
    ):
        self.simulator = simulator
        self.mode = mode
        self._lock = threading.RLock()

        handler_cls = self._build_handler()
        self.httpd = ThreadingHTTPServer((host, port), handler_cls)
        self.host, self.port = self.httpd.server_address[:2]

    def _build_handler(self):
        parent = self

        class Handler(BaseHTTPRequestHandler):
            server_version = "CubeletSim/1.0"

            def log_message(self, fmt: str, *args):
                return

            def _send_json(self, code: int, payload: dict[str, Any]):
                body = json.dumps(payload).encode("utf-8")
                self.send_response(code)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def _read_json(self) -> dict[str, Any]:
                length = int(self.headers.get("Content-Length", "0"))
                if length == 0:
                    return {}
                data = self.rfile.read(length)
                try:
                    obj = json.loads(data.decode("utf-8"))
                except json.JSONDecodeError as exc:
                    raise StateValidationError(f"Invalid JSON body: {exc}") from exc
                if not isinstance(obj, dict):
                    raise StateValidationError("JSON body must be an object")
                return obj

            def _turn_response(self, **extra) -> dict[str, Any]:
                payload = parent.simulator.state_payload()
                payload.update(extra)
                return payload

            def do_GET(self):
                try:
                    with parent._lock:
                        if self.path == "/health":
                            self._send_json(
                                200,
                                {
                                    "mode": parent.mode,
                                    "cubelets": len(parent.simulator.get_state()),
                                    "actions": ACTION_NAMES,
                                    "ready": True,
                                },
                            )
                            return

                        if self.path == "/state":
                            self._send_json(200, parent.simulator.state_payload())
                            return

                        if self.path == "/solved":
                            self._send_json(200, {"solved": parent.simulator.is_solved()})
                            return

                        if self.path == "/facelets":
                            facelets = facelet_colors(parent.simulator.get_state())
                            self._send_json(200, {"faces": facelets_to_json(facelets)})
                            return

                except LayerSelectionError as exc:
                    self._send_json(409, {"error": str(exc)})
                    return
                except ValueError as exc:
                    self._send_json(400, {"error": str(exc)})
                    return

                self._send_json(404, {"error": "Not Found"})

            def do_POST(self):
                try:
                    body = self._read_json()
                    with parent._lock:
                        if self.path == "/state":
                            state = body.get("state")
                            if state is None:
                                raise StateValidationError("Missing required field: state")
                            parent.simulator.set_state(state)
                            self._send_json(200, parent.simulator.state_payload())
                            return

                        if self.path == "/reset":
                            parent.simulator.reset()
                            self._send_json(200, parent.simulator.state_payload())
                            return

                        if self.path == "/snap":
                            parent.simulator.snap()
                            self._send_json(200, parent.simulator.state_payload())
                            return

                        if self.path == "/scramble":
                            if "steps" not in body:
                                raise StateValidationError("Missing required field: steps")
                            steps = body["steps"]
                            seed = body.get("seed")
                            if seed is not None and not isinstance(seed, int):
                                raise StateValidationError("seed must be an integer or null")
                            with parent.simulator.lock:
                                _, actions = parent.simulator.scramble(steps=steps, seed=seed)
                                payload = self._turn_response(actions=actions)
                            self._send_json(200, payload)
                            return

                        if self.path == "/turn":
                            if "move" in body:
                                move = body["move"]
                                if not isinstance(move, str):
                                    raise StateValidationError("move must be a string such as \"U\" or \"R'\"")
                                action = parse_move(move)
                            elif "action" in body:
                                action = body["action"]
                                if not isinstance(action, int) or isinstance(action, bool):
                                    raise StateValidationError("action must be an integer in range 0..11")
                            else:
                                raise StateValidationError("Missing required field: action or move")
                            with parent.simulator.lock:
                                parent.simulator.turn(action)
                                payload = self._turn_response(action=action, move=ACTION_NAMES[action])
                            self._send_json(200, payload)
                            return

                        if self.path == "/rotate":
                            for key in ("axis", "layer", "angle"):
                                if key not in body:
                                    raise StateValidationError(f"Missing required field: {key}")
                            if not isinstance(body["layer"], int) or isinstance(body["layer"], bool):
                                raise StateValidationError("layer must be an integer in -1..1")
                            if not isinstance(body["angle"], (int, float)) or isinstance(body["angle"], bool):
                                raise StateValidationError("angle must be a number in radians")
                            command = TurnCommand(
                                axis=body["axis"],
                                layer_coordinate=body["layer"],
                                angle=float(body["angle"]),
                            )
                            with parent.simulator.lock:
                                parent.simulator.apply(command)
                                payload = self._turn_response()
                            self._send_json(200, payload)
                            return

                except LayerSelectionError as exc:
                    self._send_json(409, {"error": str(exc)})
                    return
                except ValueError as exc:
                    self._send_json(400, {"error": str(exc)})
                    return

                self._send_json(404, {"error": "Not Found"})

        return Handler

    def serve_forever(self):
        self.httpd.serve_forever()

    def start_background(self, daemon: bool = True) -> threading.Thread:
        thread = threading.Thread(target=self.serve_forever, daemon=daemon)
        thread.start()
        return thread

    def shutdown(self):
        self.httpd.shutdown()
        self.httpd.server_close()
