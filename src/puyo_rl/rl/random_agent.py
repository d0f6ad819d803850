from __future__ import annotations

import argparse
import logging

import numpy as np
import gymnasium as gym

import puyo_rl.env  # noqa: F401
from puyo_rl.env.wrappers import ResampleInvalidActionWrapper


logger = logging.getLogger(__name__)


def run_random(steps: int = 200, seed: int | None = None) -> float:
    env = ResampleInvalidActionWrapper(gym.make("Puyo-12x6-v0"))
    rng = np.random.default_rng(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    best_chain = 0
    for _ in range(steps):
        # Prefer valid actions if available
        valid = np.flatnonzero(info["action_mask"])
        action = int(rng.choice(valid)) if valid.size else env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        best_chain = max(best_chain, int(info["step_chain"]))
        if terminated or truncated:
            logger.info("episode ended with score %d", info["score"])
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}  best chain: {best_chain}")
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_random(args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
