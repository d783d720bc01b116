# src/env/observations.py
from __future__ import annotations
from typing import Tuple
import numpy as np

from src.game.config import (
    WIDTH, HEIGHT, MAX_VX, MAX_VY, MOMENTUM_MAX, SLOPE_LOOKAHEAD_OFFSETS
)

# [x, y, vx, vy, on_ground, momentum, slope@+0/+40/+80/+120, next_hole_dx, lodge_dx]
OBS_SIZE = 6 + len(SLOPE_LOOKAHEAD_OFFSETS) + 2
OBS_LOW = np.array([0.0, 0.0, -1.0, -1.0, 0.0, 0.0]
                   + [-1.0] * len(SLOPE_LOOKAHEAD_OFFSETS) + [0.0, -1.0], dtype=np.float32)
OBS_HIGH = np.array([1.0, 1.0, 1.0, 1.0, 1.0, 1.0]
                    + [1.0] * len(SLOPE_LOOKAHEAD_OFFSETS) + [1.0, 1.0], dtype=np.float32)


def _clip(v: float, lo: float, hi: float) -> float:
    return lo if v < lo else (hi if v > hi else v)


def _next_hole_dx(sim) -> float:
    """Distance to the nearest hole ahead of the rider, in screen widths (1.0 = none)."""
    ahead = [h.x - sim.rider.x for h in sim.terrain.holes if h.x >= sim.rider.x]
    if not ahead:
        return 1.0
    return _clip(min(ahead) / WIDTH, 0.0, 1.0)


def build_observation(sim, lookahead_offsets: Tuple[int, ...] = SLOPE_LOOKAHEAD_OFFSETS) -> np.ndarray:
    """
    Returns a fixed (OBS_SIZE,) float32 vector, every entry inside [OBS_LOW, OBS_HIGH]:
      [ x_norm, y_norm, vx_norm, vy_norm, on_ground, momentum_norm,
        slope@+0, slope@+40, slope@+80, slope@+120,
        next_hole_dx_norm, lodge_dx_norm ]
    - slopes are raw terrain gradients clipped to [-1,1] (the terrain rarely exceeds ±0.7)
    - next_hole_dx_norm = 1.0 when no hole is left ahead
    """
    r = sim.rider
    feats = [
        _clip(r.x / WIDTH, 0.0, 1.0),
        _clip(r.y / HEIGHT, 0.0, 1.0),
        _clip(r.vx / MAX_VX, -1.0, 1.0),
        _clip(r.vy / MAX_VY, -1.0, 1.0),
        1.0 if r.on_ground else 0.0,
        _clip(r.momentum / MOMENTUM_MAX, 0.0, 1.0),
    ]
    for dx in lookahead_offsets:
        feats.append(_clip(sim.terrain.gradient(r.x + dx), -1.0, 1.0))

    feats.append(_next_hole_dx(sim))
    feats.append(_clip((sim.lodge.x - r.x) / WIDTH, -1.0, 1.0))

    return np.asarray(feats, dtype=np.float32)
