# src/tests/test_terrain.py
"""
Terrain checks: bounds, continuity, bump shape, render profile.

Usage (from repo root):
  pytest src/tests/test_terrain.py
  python -m src.tests.test_terrain
"""

from __future__ import annotations
import math

import numpy as np
import pytest

from src.game.config import HEIGHT, WIDTH, HOLE_SURFACE_OFFSET
from src.game.terrain import Terrain, Hole, smooth_bump


def test_height_never_below_floor():
    t = Terrain()
    for x in np.linspace(-5000.0, 5000.0, 20001):
        assert t.height(float(x)) <= HEIGHT - 50
    assert float(t.profile(WIDTH).max()) <= HEIGHT - 50


def test_height_is_total_far_off_screen():
    t = Terrain()
    assert math.isfinite(t.height(1e9))
    # drift term pushes y down the screen on the far left, so the floor clamp wins
    assert t.height(-1e9) == HEIGHT - 50
    assert math.isfinite(t.gradient(-1e6))


def test_height_is_continuous():
    t = Terrain()
    eps = 1e-7
    # includes the bump edges around 160/280 and 360/480
    for x in np.linspace(-1000.0, 2000.0, 3001):
        x = float(x)
        assert abs(t.height(x + eps) - t.height(x)) < 1e-5, f"jump at x={x}"


def test_height_is_deterministic():
    a, b = Terrain(), Terrain()
    for x in (0.0, 123.4, 299.9, 777.7):
        assert a.height(x) == b.height(x)


def test_smooth_bump_shape():
    assert smooth_bump(100.0, 100.0, 60.0, 25.0) == pytest.approx(25.0)
    assert smooth_bump(130.0, 100.0, 60.0, 25.0) == pytest.approx(12.5)
    assert smooth_bump(160.0, 100.0, 60.0, 25.0) == pytest.approx(0.0, abs=1e-12)
    assert smooth_bump(40.0, 100.0, 60.0, 25.0) == pytest.approx(0.0, abs=1e-12)
    assert smooth_bump(161.0, 100.0, 60.0, 25.0) == 0.0


def test_ramp_lip_sits_before_each_hole():
    flat = Terrain(holes=())
    t = Terrain()
    # bump of the hole at 300 is centred at 220
    assert flat.height(220.0) - t.height(220.0) == pytest.approx(25.0)
    # no lip beyond the bump half-width
    assert flat.height(150.0) == pytest.approx(t.height(150.0))
    assert flat.height(300.0) == pytest.approx(t.height(300.0))


def test_gradient_is_centered_difference():
    t = Terrain()
    for x in (50.0, 190.0, 265.0, 640.0):
        expected = (t.height(x + 8) - t.height(x - 8)) / 16
        assert t.gradient(x) == pytest.approx(expected)


def test_gradient_sign_on_ramp_lip():
    t = Terrain()
    # surface rises on screen (y shrinks) approaching the bump centre, falls after it
    assert t.gradient(190.0) < -0.1
    assert t.gradient(250.0) > 0.1


def test_profile_matches_height():
    t = Terrain()
    ys = t.profile(WIDTH)
    assert ys.shape == (WIDTH + 1,)
    expected = np.array([t.height(float(x)) for x in range(WIDTH + 1)])
    assert np.allclose(ys, expected)


def test_hole_markers_sit_below_surface():
    t = Terrain(holes=[Hole(300.0, 25.0)])
    assert isinstance(t.holes, tuple)
    (x, y, r), = t.hole_markers()
    assert x == 300.0 and r == 25.0
    assert y == pytest.approx(t.height(300.0) + HOLE_SURFACE_OFFSET)


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        Hole(100.0, -1.0)
    with pytest.raises(ValueError):
        Terrain(gradient_step=0.0)


def main():
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]
    for fn in tests:
        fn()
        print(f"✓ {fn.__name__}")
    print("🎉 Terrain tests passed")


if __name__ == "__main__":
    main()
