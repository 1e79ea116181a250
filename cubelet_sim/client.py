"""HTTP client for the cubelet simulator server."""

from __future__ import annotations

import json
from urllib import request

import numpy as np


class CubeAPIClient:
    def __init__(self, host: str = "127.0.0.1", port: int = 8000, timeout: float = 10.0):
        self.base = f"http://{host}:{port}"
        self.timeout = timeout

    def _call(self, method: str, path: str, payload: dict | None = None) -> dict:
        data = None
        headers = {}
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = request.Request(url=f"{self.base}{path}", method=method, data=data, headers=headers)
        with request.urlopen(req, timeout=self.timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))

    def health(self) -> dict:
        return self._call("GET", "/health")

    def get_state(self) -> dict:
        return self._call("GET", "/state")

    def positions(self) -> np.ndarray:
        """Return cubelet positions as a (27, 3) array in server order."""
        out = self.get_state()
        return np.asarray([c["position"] for c in out["cubelets"]], dtype=np.float64)

    def facelets(self) -> dict[str, np.ndarray]:
        out = self._call("GET", "/facelets")
        return {face: np.asarray(grid, dtype=np.int64) for face, grid in out["faces"].items()}

    def set_state(self, state: dict | list) -> dict:
        return self._call("POST", "/state", {"state": state})

    def reset(self) -> dict:
        return self._call("POST", "/reset", {})

    def snap(self) -> dict:
        return self._call("POST", "/snap", {})

    def scramble(self, steps: int, seed: int | None = None) -> dict:
        payload = {"steps": int(steps), "seed": seed}
        return self._call("POST", "/scramble", payload)

    def turn(self, action: int | str) -> dict:
        if isinstance(action, str):
            return self._call("POST", "/turn", {"move": action})
        return self._call("POST", "/turn", {"action": int(action)})

    def rotate(self, axis: str, layer: int, angle: float) -> dict:
        return self._call("POST", "/rotate", {"axis": axis, "layer": int(layer), "angle": float(angle)})

    def solved(self) -> bool:
        out = self._call("GET", "/solved")
        return bool(out["solved"])
