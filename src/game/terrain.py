# src/game/terrain.py
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
import pygame

from .config import (
    HEIGHT, TERRAIN_BASE_FRAC, TERRAIN_WAVES, TERRAIN_DRIFT, TERRAIN_FLOOR_MARGIN,
    GRADIENT_STEP, BUMP_LEAD, BUMP_HALF_WIDTH, BUMP_HEIGHT,
    HOLES, HOLE_SURFACE_OFFSET, COLOR_SNOW, COLOR_HOLE
)


@dataclass(frozen=True)
class Hole:
    x: float
    radius: float

    def __post_init__(self):
        if self.radius < 0:
            raise ValueError(f"hole radius must be >= 0, got {self.radius}")


def default_holes() -> Tuple[Hole, ...]:
    return tuple(Hole(x=float(x), radius=float(r)) for x, r in HOLES)


def smooth_bump(x: float, center: float, width: float, height: float) -> float:
    """Raised cosine: `height` at `center`, fading to 0 at `center ± width`."""
    dist = abs(x - center)
    if dist > width:
        return 0.0
    return height * (1.0 + math.cos(math.pi * dist / width)) / 2.0


@dataclass(frozen=True)
class Terrain:
    """
    Static snow slope, y = f(x) in screen coordinates (y grows downward).
    Two sine waves on a linear drift, with a ramp lip carved BUMP_LEAD px
    before every hole. Never mutated once built.
    """
    holes: Tuple[Hole, ...] = field(default_factory=default_holes)
    canvas_height: float = HEIGHT
    base_frac: float = TERRAIN_BASE_FRAC
    waves: Tuple[Tuple[float, float], ...] = TERRAIN_WAVES
    drift: float = TERRAIN_DRIFT
    floor_margin: float = TERRAIN_FLOOR_MARGIN
    bump_lead: float = BUMP_LEAD
    bump_half_width: float = BUMP_HALF_WIDTH
    bump_height: float = BUMP_HEIGHT
    gradient_step: float = GRADIENT_STEP

    def __post_init__(self):
        # accept any iterable of holes, store a tuple so the config stays hashable
        object.__setattr__(self, "holes", tuple(self.holes))
        if self.gradient_step <= 0:
            raise ValueError("gradient_step must be > 0")

    @property
    def floor_y(self) -> float:
        return self.canvas_height - self.floor_margin

    def height(self, x: float) -> float:
        """Surface y at x. Defined for every real x (lookahead may leave the screen)."""
        y = self.canvas_height * self.base_frac
        for freq, amp in self.waves:
            y += math.sin(x * freq) * amp
        y -= x * self.drift

        for hole in self.holes:
            y -= smooth_bump(x, hole.x - self.bump_lead, self.bump_half_width, self.bump_height)

        return min(y, self.floor_y)

    def gradient(self, x: float) -> float:
        """Centered finite difference dy/dx. Positive = surface goes down the screen."""
        h = self.gradient_step
        return (self.height(x + h) - self.height(x - h)) / (2.0 * h)

    def profile(self, width: int) -> np.ndarray:
        """Heights for every pixel column 0..width (inclusive), vectorised."""
        xs = np.arange(0, int(width) + 1, dtype=np.float64)
        ys = np.full_like(xs, self.canvas_height * self.base_frac)
        for freq, amp in self.waves:
            ys += np.sin(xs * freq) * amp
        ys -= xs * self.drift

        w = self.bump_half_width
        for hole in self.holes:
            dist = np.abs(xs - (hole.x - self.bump_lead))
            bump = self.bump_height * (1.0 + np.cos(np.pi * dist / w)) / 2.0
            ys -= np.where(dist <= w, bump, 0.0)

        return np.minimum(ys, self.floor_y)

    def hole_center(self, hole: Hole) -> Tuple[float, float]:
        return hole.x, self.height(hole.x) + HOLE_SURFACE_OFFSET

    def hole_markers(self) -> List[Tuple[float, float, float]]:
        """(x, y, radius) per hole, as drawn and as used for collisions."""
        return [(*self.hole_center(h), h.radius) for h in self.holes]

    def draw(self, surf: pygame.Surface, color=COLOR_SNOW, hole_color=COLOR_HOLE):
        """Fill the snow under the curve, then the holes on top."""
        w, h = surf.get_size()
        ys = self.profile(w)
        points = [(0, h)] + [(x, float(y)) for x, y in enumerate(ys)] + [(w, h)]
        pygame.draw.polygon(surf, color, points)

        for hx, hy, r in self.hole_markers():
            pygame.draw.circle(surf, hole_color, (int(hx), int(hy)), int(r))
