# src/game/simulation.py
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Optional

import pygame

from .config import (
    WIDTH, HEIGHT, GRAVITY, GROUND_FRICTION, AIR_RESISTANCE,
    SLOPE_PULL, MOMENTUM_PUSH, MOMENTUM_STEP, MOMENTUM_MAX, MOMENTUM_SLOPE,
    STALL_SLOPE, STALL_SPEED, SLIDE_BACK,
    LAUNCH_LOOKAHEAD, LAUNCH_CREST, LAUNCH_CREST_SPEED, LAUNCH_RAMP, LAUNCH_RAMP_SPEED, LAUNCH_KICK,
    HARD_LANDING_VY, SCORE_PER_SPEED, HOLE_KILL_MARGIN,
    LODGE_X, LODGE_W, LODGE_H, LODGE_REACH_X, LODGE_REACH_Y, LODGE_BONUS,
    LR_DEFAULT, LR_MIN, LR_MAX, FRAME_DT, MAX_STEPS_PER_ADVANCE,
    COLOR_SKY, COLOR_LODGE, COLOR_ROOF
)
from .terrain import Terrain
from .rider import Rider


def clamp_learning_rate(value: float) -> float:
    return max(LR_MIN, min(LR_MAX, float(value)))


def parse_learning_rate(text) -> float:
    """Input-side parsing for the control. Raises ValueError on non-numeric text."""
    value = float(text)
    if math.isnan(value):
        raise ValueError(f"not a number: {text!r}")
    return clamp_learning_rate(value)


@dataclass
class GameState:
    score: float = 0.0
    game_over: bool = False
    won: bool = False
    end_cause: Optional[str] = None   # "hole" | "bounds" | None

    @property
    def finished(self) -> bool:
        return self.game_over or self.won

    def reset(self):
        self.score = 0.0
        self.game_over = False
        self.won = False
        self.end_cause = None


@dataclass(frozen=True)
class Lodge:
    x: float = LODGE_X
    width: int = LODGE_W
    height: int = LODGE_H

    def y(self, terrain: Terrain) -> float:
        """Top of the lodge, sitting on the snow at x."""
        return terrain.height(self.x) - self.height

    def draw(self, surf: pygame.Surface, terrain: Terrain):
        top = self.y(terrain)
        body = pygame.Rect(int(self.x), int(top + self.height * 0.4),
                           self.width, int(self.height * 0.6))
        pygame.draw.rect(surf, COLOR_LODGE, body)
        roof = ((body.left - 6, body.top), (body.right + 6, body.top), (body.centerx, int(top)))
        pygame.draw.polygon(surf, COLOR_ROOF, roof)


@dataclass
class HudStatus:
    speed: float
    on_ground: bool
    score: int
    learning_rate: float

    def lines(self) -> List[str]:
        mode = "GROUND" if self.on_ground else "AIR"
        return [
            f"Speed: {self.speed:.2f} {mode}",
            f"Score: {self.score}",
            f"Learning rate: {self.learning_rate:.2f}",
        ]


@dataclass
class Simulation:
    """
    One self-contained run: terrain + rider + flags + control value.
    `step()` advances exactly one frame; `advance(dt)` turns wall time into frames.
    """
    terrain: Terrain = field(default_factory=Terrain)
    lodge: Lodge = field(default_factory=Lodge)
    learning_rate: float = LR_DEFAULT
    width: float = WIDTH
    height: float = HEIGHT
    gravity: float = GRAVITY
    rider: Rider = field(default_factory=Rider.spawn)
    state: GameState = field(default_factory=GameState)
    _accum: float = field(default=0.0, repr=False)

    # -------------------- Frame step --------------------

    def step(self):
        if self.state.game_over or self.state.won:
            return

        r = self.rider
        terrain_y = self.terrain.height(r.x)
        gradient = self.terrain.gradient(r.x)

        if r.on_ground:
            self._step_grounded(terrain_y, gradient)
        else:
            self._step_airborne(terrain_y)

        r.x += r.vx
        r.y += r.vy

        self._check_holes()
        r.push_trail()
        self._check_bounds()
        self._check_lodge()

        self.state.score += max(r.vx * SCORE_PER_SPEED, 0.0)

    def _step_grounded(self, terrain_y: float, gradient: float):
        r = self.rider

        # momentum charges on positive gradient, drains on negative
        if gradient > MOMENTUM_SLOPE:
            r.momentum = min(r.momentum + MOMENTUM_STEP, MOMENTUM_MAX)
        elif gradient < -MOMENTUM_SLOPE:
            r.momentum = max(r.momentum - MOMENTUM_STEP, 0.0)

        r.vx = self.learning_rate * (gradient * SLOPE_PULL + r.momentum * MOMENTUM_PUSH)
        r.vx *= GROUND_FRICTION

        # too slow on a steep climb: slide back
        if gradient < STALL_SLOPE and r.vx < STALL_SPEED:
            r.vx = gradient * SLIDE_BACK

        next_gradient = self.terrain.gradient(r.x + LAUNCH_LOOKAHEAD)
        gradient_change = gradient - next_gradient

        if (gradient_change > LAUNCH_CREST and r.vx > LAUNCH_CREST_SPEED) or \
           (gradient < LAUNCH_RAMP and r.vx > LAUNCH_RAMP_SPEED):
            r.vy = -abs(gradient * r.vx * LAUNCH_KICK)
            r.on_ground = False
        else:
            r.y = terrain_y - r.half_height
            r.vy = 0.0

        self._check_holes_grounded()

    def _step_airborne(self, terrain_y: float):
        r = self.rider
        r.vy += self.gravity
        r.vx *= AIR_RESISTANCE

        if r.y + r.half_height >= terrain_y:
            r.on_ground = True
            r.y = terrain_y - r.half_height
            if r.vy > HARD_LANDING_VY:
                r.momentum *= 0.5

    # -------------------- Collisions / outcome --------------------

    def _crash(self, cause: str):
        self.state.game_over = True
        if self.state.end_cause is None:
            self.state.end_cause = cause

    def _check_holes_grounded(self):
        for hole in self.terrain.holes:
            if abs(self.rider.x - hole.x) < hole.radius - HOLE_KILL_MARGIN:
                self._crash("hole")

    def _check_holes(self):
        r = self.rider
        for hole in self.terrain.holes:
            hx, hy = self.terrain.hole_center(hole)
            dist = math.hypot(r.x - hx, r.y - hy)
            if dist < hole.radius - HOLE_KILL_MARGIN:
                self._crash("hole")

    def _check_bounds(self):
        r = self.rider
        if r.x < 0 or r.x > self.width or r.y > self.height:
            self._crash("bounds")

    def _check_lodge(self):
        # a crash on this frame wins over reaching the lodge
        if self.state.game_over:
            return
        r = self.rider
        if abs(r.x - self.lodge.x) < LODGE_REACH_X and \
           abs(r.y - self.lodge.y(self.terrain)) < LODGE_REACH_Y:
            self.state.won = True
            self.state.score += LODGE_BONUS

    # -------------------- Lifecycle --------------------

    def reset(self):
        """Fresh rider and flags. Terrain, lodge and learning_rate are kept."""
        self.rider.reset()
        self.state.reset()
        self._accum = 0.0

    def advance(self, dt: float) -> int:
        """
        Tick driver: accumulate wall time, run whole FRAME_DT steps.
        Backlog beyond MAX_STEPS_PER_ADVANCE frames is dropped. Returns steps run.
        """
        if dt <= 0:
            return 0
        self._accum += dt
        steps = 0
        while self._accum >= FRAME_DT and steps < MAX_STEPS_PER_ADVANCE:
            self._accum -= FRAME_DT
            self.step()
            steps += 1
        if steps == MAX_STEPS_PER_ADVANCE:
            self._accum = min(self._accum, FRAME_DT)
        return steps

    # -------------------- Read-only views --------------------

    def status(self) -> HudStatus:
        return HudStatus(
            speed=abs(self.rider.vx),
            on_ground=self.rider.on_ground,
            score=int(math.floor(self.state.score)),
            learning_rate=self.learning_rate,
        )

    def rider_angle(self) -> float:
        return self.rider.angle(self.terrain.gradient(self.rider.x))

    def draw(self, surf: pygame.Surface, sprite: Optional[pygame.Surface] = None):
        surf.fill(COLOR_SKY)
        self.terrain.draw(surf)
        self.lodge.draw(surf, self.terrain)
        self.rider.draw_trail(surf)
        self.rider.draw(surf, self.rider_angle(), sprite)
