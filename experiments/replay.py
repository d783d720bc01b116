# experiments/replay.py
"""
Replay tool for SlopeEnv: quick command cheat sheet

# Typical usage (run from REPO ROOT so `src/...` imports work)

# Replay a trace written by sanity_rollout (experiments/runs/traces/<tag>_actions.npy)
python -m experiments.replay --tag fixed_0.100

# Replay by pointing directly to an actions file
python -m experiments.replay --trace experiments/runs/traces/random_105_actions.npy --frame-skip 4

# Slow the display to ~decision rate (~15 fps) for readability
python -m experiments.replay --tag random_105 --slow

# Controls during replay
SPACE = pause/resume
N     = single step (when paused)
R     = restart episode
ESC   = quit

# Notes
- Deterministic: the terrain is fixed, so frame_skip + action sequence reproduce the run exactly.
- If you pass --trace, the script does not read meta; supply --frame-skip if different from 4.
"""

from __future__ import annotations
import argparse
from pathlib import Path
from typing import Optional, List

import numpy as np
import pygame

from src.env.slope_env import SlopeEnv
from src.env.observations import build_observation
from src.game.config import SLOPE_LOOKAHEAD_OFFSETS, HEIGHT

DEFAULT_OUT_DIR = "experiments/runs"

def _find_trace(out_dir: Path, tag: str) -> Path:
    p = out_dir / "traces" / f"{tag}_actions.npy"
    if not p.exists():
        raise FileNotFoundError(f"Trace not found: {p}")
    return p

def _read_meta(out_dir: Path, tag: str) -> dict:
    meta_path = out_dir / "traces" / f"{tag}_meta.txt"
    meta = {}
    if meta_path.exists():
        for line in meta_path.read_text(encoding="utf-8").splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                meta[k.strip()] = v.strip()
    return meta

def _draw_overlay(env: SlopeEnv, step_idx: int, action: Optional[float]):
    surf = pygame.display.get_surface()
    if surf is None or env.sim is None:
        return
    font = pygame.font.SysFont("jetbrainsmono", 16)
    obs = build_observation(env.sim)

    # Slope lookahead guide lines
    for dx in SLOPE_LOOKAHEAD_OFFSETS:
        x = int(env.sim.rider.x + dx)
        pygame.draw.line(surf, (90, 180, 255), (x, 0), (x, HEIGHT), 1)

    state = env.sim.state
    lines: List[str] = [
        f"Step={step_idx}  LR={'-' if action is None else f'{action:.3f}'}",
        f"Score={state.score:.1f}  Cause={state.end_cause or '-'}  Won={state.won}",
        f"x={obs[0]:.2f} y={obs[1]:.2f} vx={obs[2]:+.2f} vy={obs[3]:+.2f} m={obs[5]:.2f}",
        "slopes: " + " ".join(f"{v:+.2f}" for v in obs[6:6 + len(SLOPE_LOOKAHEAD_OFFSETS)]),
    ]

    panel = pygame.Surface((360, 20 * (len(lines) + 1)), pygame.SRCALPHA)
    panel.fill((10, 20, 35, 160))
    surf.blit(panel, (12, 12))
    for i, txt in enumerate(lines):
        surf.blit(font.render(txt, True, (210, 230, 255)), (20, 18 + i * 20))

    pygame.display.flip()

def replay_episode(actions: np.ndarray, frame_skip: int, slow: bool = False):
    """
    Replays an episode deterministically with on-screen overlay.
    Controls:
      SPACE: pause/resume   N: single-step when paused
      R: restart episode    ESC: quit
    """
    env = SlopeEnv(render_mode="human", frame_skip=frame_skip)
    env.reset()

    paused = False
    single = False
    step_idx = 0
    action: Optional[float] = None
    clock = pygame.time.Clock()

    try:
        running = True
        while running and step_idx < len(actions):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        paused = not paused
                    elif event.key == pygame.K_n and paused:
                        single = True
                    elif event.key == pygame.K_r:
                        env.reset()
                        step_idx = 0
                        paused = False

            if paused and not single:
                env.render()
                _draw_overlay(env, step_idx, action=None)
                clock.tick(60)
                continue
            single = False

            action = float(actions[step_idx])
            obs, r, term, trunc, info = env.step(np.array([action], dtype=np.float32))
            _draw_overlay(env, step_idx, action)
            step_idx += 1

            clock.tick(15 if slow else 60)

            if term or trunc:
                pygame.time.delay(600)
                break
    finally:
        env.close()

def main():
    ap = argparse.ArgumentParser(description="Replay a recorded SlopeEnv episode with overlay.")
    ap.add_argument("--tag", type=str, default="", help="Trace tag, e.g. fixed_0.100 or random_105")
    ap.add_argument("--trace", type=str, default="",
                    help="Optional explicit path to a .npy action file")
    ap.add_argument("--out-dir", type=str, default=DEFAULT_OUT_DIR,
                    help="Base directory where experiments/runs live")
    ap.add_argument("--frame-skip", type=int, default=-1,
                    help="Override frame_skip. If <0, use meta or default=4")
    ap.add_argument("--slow", action="store_true", help="Slow display (~15 fps) for readability")
    args = ap.parse_args()

    out_dir = Path(args.out_dir)

    if args.trace:
        trace_path = Path(args.trace)
        if not trace_path.exists():
            raise FileNotFoundError(f"Trace file not found: {trace_path}")
    else:
        if not args.tag:
            raise SystemExit("Please provide --tag or --trace")
        trace_path = _find_trace(out_dir, args.tag)

    actions = np.load(trace_path)
    if actions.ndim != 1:
        raise ValueError(f"Expected 1D action array, got shape {actions.shape}")

    fs = args.frame_skip
    if fs < 0:
        fs = 4
        if not args.trace:
            meta = _read_meta(out_dir, args.tag)
            if "frame_skip" in meta:
                fs = int(meta["frame_skip"])

    print(f"Replaying {trace_path.name}  steps={len(actions)}  frame_skip={fs}")
    print("Controls: SPACE pause/resume | N step (when paused) | R restart | ESC quit")

    replay_episode(actions=actions, frame_skip=fs, slow=args.slow)

if __name__ == "__main__":
    main()
