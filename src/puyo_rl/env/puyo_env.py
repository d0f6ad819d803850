from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from puyo_rl.game import Color, Command, GameConfig, PuyoGame, ScoringRules, is_valid_placement


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    DOWN = 2
    ROTATE_LEFT = 3
    ROTATE_RIGHT = 4
    HOLD = 5
    NONE = 6


ACTION_TO_COMMAND: Dict[Action, Command] = {
    Action.LEFT: Command.MOVE_LEFT,
    Action.RIGHT: Command.MOVE_RIGHT,
    Action.DOWN: Command.MOVE_DOWN,
    Action.ROTATE_LEFT: Command.ROTATE_LEFT,
    Action.ROTATE_RIGHT: Command.ROTATE_RIGHT,
    Action.HOLD: Command.HOLD,
}

_RGB = {
    Color.EMPTY: (30, 30, 36),
    Color.RED: (239, 68, 68),
    Color.GREEN: (16, 185, 129),
    Color.BLUE: (59, 130, 246),
    Color.YELLOW: (245, 158, 11),
    Color.PURPLE: (147, 51, 234),
}


def _compute_action_mask(game: PuyoGame) -> np.ndarray:
    mask = np.zeros((len(Action),), dtype=np.bool_)
    mask[Action.NONE] = True
    piece = game.current_piece
    if not game.accepts_input or piece is None:
        return mask
    mask[Action.LEFT] = is_valid_placement(game.grid, piece.moved(-1, 0))
    mask[Action.RIGHT] = is_valid_placement(game.grid, piece.moved(1, 0))
    # Down either moves or locks, so it always does something
    mask[Action.DOWN] = True
    mask[Action.ROTATE_LEFT] = is_valid_placement(game.grid, piece.rotated(-1))
    mask[Action.ROTATE_RIGHT] = is_valid_placement(game.grid, piece.rotated(1))
    mask[Action.HOLD] = game.can_hold
    return mask


class PuyoEnv(gym.Env):
    """Single-player Puyo session driven one command per step.

    Chains resolve within the step that locks a piece. Every
    ``auto_drop_every`` steps the piece also falls one row, standing in for
    the fall timer (0 disables it).
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 rules: Optional[ScoringRules] = None,
                 auto_drop_every: int = 5,
                 max_episode_steps: int = 5000,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        self.game = PuyoGame(config, rules)
        self.render_mode = render_mode
        self.auto_drop_every = int(auto_drop_every)
        self.max_episode_steps = int(max_episode_steps)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)

        cfg = self.game.config
        n_colors = cfg.num_colors
        self.observation_space = spaces.Dict(
            {
                # Active pair is overlaid with negative color values
                "grid": spaces.Box(low=-n_colors, high=n_colors, shape=(cfg.rows, cfg.cols), dtype=np.int8),
                "queue": spaces.Box(low=0, high=n_colors, shape=(cfg.preview_count, 2), dtype=np.int8),
                "held": spaces.Box(low=0, high=n_colors, shape=(2,), dtype=np.int8),
                "can_hold": spaces.Discrete(2),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        game = self.game
        queue = np.zeros((game.config.preview_count, 2), dtype=np.int8)
        for i, piece in enumerate(list(game.queue)[: game.config.preview_count]):
            queue[i] = piece.colors
        held = np.zeros((2,), dtype=np.int8)
        if game.held_piece is not None:
            held[:] = game.held_piece.colors
        return {
            "grid": game.get_state().astype(np.int8),
            "queue": queue,
            "held": held,
            "can_hold": int(game.can_hold),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "chain": self.game.chain_counter,
            "pieces_locked": self.game.pieces_locked,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.start()
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def _settle(self) -> int:
        result = self.game.resolve_all()
        return result.chain_count if result is not None else 0

    def step(self, action: int):
        action = Action(int(action))
        score_before = self.game.score
        chain = 0

        if action != Action.NONE:
            self.game.handle(ACTION_TO_COMMAND[action])
            chain = max(chain, self._settle())
        self._steps += 1
        if self.auto_drop_every > 0 and self._steps % self.auto_drop_every == 0:
            self.game.tick()
            chain = max(chain, self._settle())

        terminated = bool(self.game.game_over)
        truncated = not terminated and self._steps >= self.max_episode_steps

        reward_components: Dict[str, float] = {
            "score": float(self.game.score - score_before),
            "step": self.step_penalty,
        }
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["step_chain"] = chain
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.game.get_state()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = _RGB[Color(abs(int(grid[y, x])))]
            return img
        return None

    def close(self) -> None:
        pass
