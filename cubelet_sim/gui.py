"""Pygame GUI for the cubelet simulator."""

from __future__ import annotations

import math

import numpy as np
import pygame

from .actions import ACTION_NAMES, KEY_BINDINGS, decode_turn
from .cube_state import Cubelet
from .engine import LayerSelectionError
from .geometry import FACE_SPECS
from .server import CubeHTTPServer
from .simulator import CubeSimulator
from .state_codec import StateValidationError

BG = (18, 22, 30)
LINE = (28, 32, 42)
TEXT = (220, 225, 235)
BUTTON = (52, 60, 78)
BUTTON_BORDER = (92, 110, 140)

# Corner offsets of a face quad in its (right, up) frame, drawn in order.
_QUAD_CORNERS = ((-1.0, 1.0), (1.0, 1.0), (1.0, -1.0), (-1.0, -1.0))


def _rotation_matrix_float(axis: str, angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    if axis == "x":
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]], dtype=np.float64)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=np.float64)


def hex_to_rgb(color: int) -> tuple[int, int, int]:
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


class CubeGUI:
    def __init__(
        self,
        simulator: CubeSimulator,
        host: str = "127.0.0.1",
        port: int = 8000,
        scramble_steps: int = 20,
    ):
        self.simulator = simulator
        self.scramble_steps = scramble_steps

        self.server = CubeHTTPServer(simulator=simulator, host=host, port=port, mode="gui")

        pygame.init()
        self.size = (960, 640)
        self.screen = pygame.display.set_mode(self.size)
        pygame.display.set_caption("Rubik 3x3 Cubelet Simulator")
        self.clock = pygame.time.Clock()

        self.font = pygame.font.SysFont("monospace", 18)
        self.small_font = pygame.font.SysFont("monospace", 14)

        self.scramble_btn = pygame.Rect(40, 560, 180, 44)
        self.reset_btn = pygame.Rect(240, 560, 180, 44)
        self.snap_btn = pygame.Rect(440, 560, 180, 44)

        self.yaw = -0.75
        self.pitch = 0.45
        self.camera_distance = 9.0
        self.focal = 520.0

        self.dragging = False
        self.last_mouse = (0, 0)
        self.last_error: str | None = None

    def _apply_camera(self, point: np.ndarray) -> np.ndarray:
        rot_y = _rotation_matrix_float("y", self.yaw)
        rot_x = _rotation_matrix_float("x", self.pitch)
        return rot_x @ (rot_y @ point)

    def _project(self, point_view: np.ndarray) -> tuple[int, int] | None:
        denom = self.camera_distance - point_view[2]
        if denom <= 0.2:
            return None
        x = self.size[0] * 0.5 + self.focal * point_view[0] / denom
        y = self.size[1] * 0.54 - self.focal * point_view[1] / denom
        return int(x), int(y)

    @staticmethod
    def _cubelet_quads(cubelet: Cubelet, half: float) -> list[tuple[list[np.ndarray], np.ndarray, int]]:
        """Return (world vertices, world normal, colour) for each face of a cubelet."""
        quads = []
        for face, color in cubelet.face_colors.items():
            spec = FACE_SPECS[face]
            n = np.array(spec["normal"], dtype=np.float64)
            r = np.array(spec["right"], dtype=np.float64)
            up = np.array(spec["up"], dtype=np.float64)

            verts = [cubelet.position + cubelet.orientation @ (half * (n + a * r + b * up)) for a, b in _QUAD_CORNERS]
            quads.append((verts, cubelet.orientation @ n, color))
        return quads

    def _draw_cube(self):
        state = self.simulator.get_state()
        half = state.cube_size * 0.5

        draw_items = []
        for cubelet in state.cubelets():
            for poly_world, normal_world, color in self._cubelet_quads(cubelet, half):
                poly_view = [self._apply_camera(p) for p in poly_world]
                normal_view = self._apply_camera(normal_world)
                if normal_view[2] <= 0.0:
                    continue

                poly_screen = [self._project(p) for p in poly_view]
                if any(pt is None for pt in poly_screen):
                    continue

                depth = float(sum(p[2] for p in poly_view) / 4.0)
                draw_items.append((depth, poly_screen, hex_to_rgb(color)))

        draw_items.sort(key=lambda x: x[0])
        for _, poly, color in draw_items:
            pygame.draw.polygon(self.screen, color, poly)
            pygame.draw.polygon(self.screen, LINE, poly, 2)
        return len(draw_items)

    def _draw_buttons(self):
        for rect, label in (
            (self.scramble_btn, "Scramble"),
            (self.reset_btn, "Reset"),
            (self.snap_btn, "Snap"),
        ):
            pygame.draw.rect(self.screen, BUTTON, rect, border_radius=8)
            pygame.draw.rect(self.screen, BUTTON_BORDER, rect, width=2, border_radius=8)
            txt = self.font.render(label, True, TEXT)
            self.screen.blit(txt, (rect.centerx - txt.get_width() // 2, rect.centery - txt.get_height() // 2))

    def _draw_hud(self):
        header = self.font.render(
            f"HTTP {self.server.host}:{self.server.port} | turns={self.simulator.turn_count} | "
            f"solved={self.simulator.is_solved()}",
            True,
            TEXT,
        )
        keys = "/".join(k.upper() for k in KEY_BINDINGS)
        controls = self.small_font.render(
            f"Drag with mouse to rotate view | Keys: {keys} | Scramble/Reset/Snap | ESC",
            True,
            TEXT,
        )

        self.screen.blit(header, (24, 18))
        self.screen.blit(controls, (24, 48))

        y = 84
        for key, action in KEY_BINDINGS.items():
            txt = self.small_font.render(f"{key.upper()}: {ACTION_NAMES[action]}", True, TEXT)
            self.screen.blit(txt, (24 + (action % 4) * 120, y + (action // 4) * 20))

        if self.last_error:
            err = self.small_font.render(self.last_error, True, (240, 120, 120))
            self.screen.blit(err, (24, 530))

    def handle_key(self, key_name: str) -> bool:
        """Apply the turn bound to ``key_name``; return True if the cube changed."""
        command = decode_turn(key_name)
        if command is None:
            return False
        try:
            self.simulator.apply(command)
        except (LayerSelectionError, StateValidationError) as exc:
            self.last_error = str(exc)
            print(f"turn_rejected key={key_name} error={exc}", flush=True)
            return False
        self.last_error = None
        return True

    def run(self):
        self.server.start_background(daemon=True)
        running = True

        while running:
            self.clock.tick(60)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False

                elif event.type == pygame.KEYDOWN:
                    if event.key in (pygame.K_ESCAPE, pygame.K_q):
                        running = False
                    else:
                        self.handle_key(pygame.key.name(event.key))

                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    if self.scramble_btn.collidepoint(event.pos):
                        _, actions = self.simulator.scramble(self.scramble_steps)
                        print(f"scramble steps={len(actions)}", flush=True)
                    elif self.reset_btn.collidepoint(event.pos):
                        self.simulator.reset()
                        self.last_error = None
                    elif self.snap_btn.collidepoint(event.pos):
                        try:
                            self.simulator.snap()
                        except StateValidationError as exc:
                            self.last_error = str(exc)
                    else:
                        self.dragging = True
                        self.last_mouse = event.pos

                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    self.dragging = False

                elif event.type == pygame.MOUSEMOTION and self.dragging:
                    dx = event.pos[0] - self.last_mouse[0]
                    dy = event.pos[1] - self.last_mouse[1]
                    self.last_mouse = event.pos
                    self.yaw += dx * 0.01
                    self.pitch += dy * 0.01
                    self.pitch = max(-1.2, min(1.2, self.pitch))

            self.screen.fill(BG)
            self._draw_hud()
            self._draw_cube()
            self._draw_buttons()
            pygame.display.flip()

        self.server.shutdown()
        pygame.quit()
