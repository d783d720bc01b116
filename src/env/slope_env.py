# src/env/slope_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from src.game.config import (
    WIDTH, HEIGHT, FPS, LR_MIN, LR_MAX, CRASH_PENALTY
)
from src.game.simulation import Simulation, clamp_learning_rate
from src.game.terrain import Terrain
from src.env.observations import build_observation, OBS_LOW, OBS_HIGH


class SlopeEnv(gym.Env):
    """
    Snowboard descent as a Gymnasium environment (vector observations).
    - Physics runs one frame per sim step (60 Hz reference).
    - The agent picks the learning rate every `frame_skip` frames.
    - Observation: shape (12,), float32 (see src/env/observations.py).
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": FPS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 30.0,
                 terrain: Optional[Terrain] = None):
        super().__init__()
        if frame_skip < 1:
            raise ValueError("frame_skip must be >= 1")
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.sim_fps = FPS

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        # --- Gym spaces ---
        # Action: learning rate applied for the next decision step
        self.action_space = gym.spaces.Box(
            low=np.array([LR_MIN], dtype=np.float32),
            high=np.array([LR_MAX], dtype=np.float32),
            dtype=np.float32,
        )
        self.observation_space = gym.spaces.Box(low=OBS_LOW, high=OBS_HIGH, dtype=np.float32)

        # --- Runtime state ---
        self._terrain = terrain if terrain is not None else Terrain()
        self.sim: Optional[Simulation] = None
        self.timestep: int = 0

        # Rendering
        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # Terrain is fixed, so every episode starts from the same state
        self.sim = Simulation(terrain=self._terrain)
        self.timestep = 0

        obs = build_observation(self.sim)
        info = {"score": 0.0, "x": self.sim.rider.x}
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action):
        assert self.sim is not None, "call reset() before step()"
        act = np.asarray(action, dtype=np.float32).reshape(-1)
        assert act.shape == (1,), f"Invalid action {action}"

        self.sim.learning_rate = clamp_learning_rate(float(act[0]))

        was_finished = self.sim.state.finished
        score_before = self.sim.state.score
        for _ in range(self.frame_skip):
            self.sim.step()
            if self.sim.state.finished:
                break

        state = self.sim.state
        reward = float(state.score - score_before)
        if state.game_over and not was_finished:
            reward -= CRASH_PENALTY

        self.timestep += 1
        terminated = state.finished
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = build_observation(self.sim)
        info = {
            "score": state.score,
            "x": self.sim.rider.x,
            "on_ground": self.sim.rider.on_ground,
            "won": state.won,
            "end_cause": state.end_cause,
            "timestep": self.timestep,
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.sim is None:
            return None

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Snowboard Descent - Gym Env")
                self.clock = pygame.time.Clock()
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))

        self.sim.draw(self.screen)

        if self.render_mode == "human":
            # Pump events so the OS doesn't think we're hung
            pygame.event.pump()
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        # (H, W, 3) uint8
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
