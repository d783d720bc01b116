# /experiments/sanity_rollout.py
"""
Sanity rollouts for SlopeEnv:
- Runs FIXED (constant learning rate) and/or RANDOM policies
- Writes an episodes CSV for notebook analysis
- Saves per-episode action sequences for exact replay

Usage examples (from repo root):
  # Sweep the default learning rates and 10 random seeds, save traces:
  python -m experiments.sanity_rollout --policies both --save-traces

  # Only fixed policies at chosen learning rates:
  python -m experiments.sanity_rollout --policies fixed --rates 0.05,0.1,0.2

  # Quick random-only smoke with fewer steps:
  python -m experiments.sanity_rollout --policies random --steps 300 --out-dir /tmp/sanity
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import Callable, List, Tuple, Optional

import numpy as np

from src.env.slope_env import SlopeEnv
from src.game.config import LR_MIN, LR_MAX


# ------------------------ Policies ------------------------

def fixed_policy_init(rate: float) -> Callable[[np.ndarray], np.ndarray]:
    action = np.array([rate], dtype=np.float32)
    def act(_obs: np.ndarray) -> np.ndarray:
        return action
    return act

def random_policy_init(action_seed: int) -> Callable[[np.ndarray], np.ndarray]:
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> np.ndarray:
        return np.array([rng.uniform(LR_MIN, LR_MAX)], dtype=np.float32)
    return act


# ------------------------ Rollout core ------------------------

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy: Callable[[np.ndarray], np.ndarray],
                    tag: str,
                    frame_skip: int,
                    steps_limit: int,
                    save_traces: bool,
                    out_dir: Path) -> Tuple[int, float, float, float, bool, bool, Optional[str], float]:
    """
    Returns: (ep_len, ret_sum, score, final_x, won, truncated, end_cause, airborne_ratio)
    Also writes the action trace to disk if requested.
    """
    env = SlopeEnv(frame_skip=frame_skip)

    actions: List[float] = []
    ret_sum = 0.0
    airborne_count = 0
    ep_len = 0
    term = trunc = False
    info = {}

    try:
        obs, info = env.reset()
        for t in range(steps_limit):
            a = policy(obs)
            actions.append(float(a[0]))

            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            ep_len += 1
            airborne_count += int(not info.get("on_ground", True))

            if term or trunc:
                break
    finally:
        env.close()

    if save_traces:
        trace_dir = out_dir / "traces"
        ensure_dir(trace_dir)
        np.save(trace_dir / f"{tag}_actions.npy", np.asarray(actions, dtype=np.float32))
        meta_lines = [
            f"tag={tag}",
            f"frame_skip={frame_skip}",
            f"steps_limit={steps_limit}",
        ]
        (trace_dir / f"{tag}_meta.txt").write_text("\n".join(meta_lines), encoding="utf-8")

    return (ep_len, ret_sum, float(info.get("score", 0.0)), float(info.get("x", 0.0)),
            bool(info.get("won", False)), bool(trunc), info.get("end_cause"),
            airborne_count / max(1, ep_len))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["fixed", "random", "both"],
                    help="Which policy family to run")
    ap.add_argument("--rates", type=str, default="0.02,0.05,0.1,0.15,0.2,0.3,0.5",
                    help="Comma-separated learning rates for the fixed policy")
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated action seeds for the random policy. Default: 101..110")
    ap.add_argument("--frame-skip", type=int, default=4,
                    help="Sim frames per decision step")
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--out-dir", type=str, default="experiments/runs",
                    help="Directory to store episodes.csv and traces/")
    ap.add_argument("--save-traces", action="store_true",
                    help="Save action sequences for replay")
    args = ap.parse_args()

    out_dir = Path(args.out_dir)
    ensure_dir(out_dir)

    rates = [float(s) for s in args.rates.split(",") if s.strip()]
    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 111))

    runs: List[Tuple[str, str, Callable]] = []
    if args.policies in ("fixed", "both"):
        runs += [("fixed", f"fixed_{lr:.3f}", fixed_policy_init(lr)) for lr in rates]
    if args.policies in ("random", "both"):
        runs += [("random", f"random_{s}", random_policy_init(10_000 + s)) for s in seeds]

    episodes_csv = out_dir / "episodes.csv"
    header = [
        "env_name", "policy_name", "tag", "frame_skip",
        "episode_len_decisions", "return_sum", "score", "final_x",
        "won", "truncated", "end_cause", "airborne_ratio"
    ]

    print(f"Running {len(runs)} episodes (frame_skip={args.frame_skip})")
    print(f"Writing summaries to {episodes_csv} and traces under {out_dir}/traces/")

    for policy_name, tag, policy in runs:
        ep_len, ret_sum, score, final_x, won, truncated, end_cause, air_ratio = run_one_episode(
            policy=policy,
            tag=tag,
            frame_skip=args.frame_skip,
            steps_limit=args.steps,
            save_traces=args.save_traces,
            out_dir=out_dir
        )

        row = [
            "SlopeEnv", policy_name, tag, args.frame_skip,
            ep_len, f"{ret_sum:.1f}", f"{score:.1f}", f"{final_x:.1f}",
            int(won), int(truncated), (end_cause or ""), f"{air_ratio:.3f}",
        ]
        write_episode_row(episodes_csv, header, row)

        print(f"[{tag}] len={ep_len}  x={final_x:.1f}  score={score:.1f}  "
              f"won={won} trunc={truncated}  cause={end_cause}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
