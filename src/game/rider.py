# src/game/rider.py
from __future__ import annotations
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional, Tuple

import pygame

from .config import (
    RIDER_START_X, RIDER_START_Y, RIDER_W, RIDER_H, TRAIL_LEN,
    COLOR_RIDER, COLOR_TRAIL_GROUND, COLOR_TRAIL_AIR
)


def _new_trail() -> Deque[Tuple[float, float]]:
    return deque(maxlen=TRAIL_LEN)


@dataclass
class Rider:
    """
    Snowboarder state. (x, y) is the CENTER of the sprite.
    - on_ground toggles between the grounded and airborne branches of the step
    - momentum is a downhill charge kept in [0, MOMENTUM_MAX]
    - trail keeps the last TRAIL_LEN positions, oldest dropped first
    """
    x: float = RIDER_START_X
    y: float = RIDER_START_Y
    vx: float = 0.0
    vy: float = 0.0
    on_ground: bool = True
    momentum: float = 0.0
    trail: Deque[Tuple[float, float]] = field(default_factory=_new_trail)
    width: int = RIDER_W
    height: int = RIDER_H

    @classmethod
    def spawn(cls) -> "Rider":
        return cls()

    def reset(self):
        self.x = RIDER_START_X
        self.y = RIDER_START_Y
        self.vx = 0.0
        self.vy = 0.0
        self.on_ground = True
        self.momentum = 0.0
        self.trail = _new_trail()

    @property
    def half_height(self) -> float:
        return self.height / 2

    @property
    def rect(self) -> pygame.Rect:
        r = pygame.Rect(0, 0, self.width, self.height)
        r.center = (int(self.x), int(self.y))
        return r

    def push_trail(self):
        self.trail.append((self.x, self.y))

    def angle(self, gradient: float) -> float:
        """Board angle in radians: follows the slope on the ground, the velocity in the air."""
        if self.on_ground:
            return math.atan(gradient)
        return math.atan2(self.vy, self.vx)

    # --- drawing ---

    def _corners(self, angle: float):
        c, s = math.cos(angle), math.sin(angle)
        hw, hh = self.width / 2, self.height / 2
        pts = []
        for dx, dy in ((-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)):
            pts.append((self.x + dx * c - dy * s, self.y + dx * s + dy * c))
        return pts

    def draw(self, surf: pygame.Surface, angle: float, sprite: Optional[pygame.Surface] = None):
        if sprite is not None:
            img = pygame.transform.smoothscale(sprite, (self.width, self.height))
            # pygame rotates counter-clockwise in degrees, screen y is flipped
            img = pygame.transform.rotate(img, -math.degrees(angle))
            surf.blit(img, img.get_rect(center=(int(self.x), int(self.y))))
        else:
            pygame.draw.polygon(surf, COLOR_RIDER, self._corners(angle))

    def draw_trail(self, surf: pygame.Surface):
        if len(self.trail) < 2:
            return
        color = COLOR_TRAIL_GROUND if self.on_ground else COLOR_TRAIL_AIR
        pygame.draw.lines(surf, color, False, list(self.trail), 2)
