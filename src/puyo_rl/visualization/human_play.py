from __future__ import annotations

import argparse
import logging
import os

import pygame

from puyo_rl.game import GameConfig, GameDriver, JsonScoreStore, Phase, PuyoGame
from .audio import ToneCues
from .controls import KeyBindings
from .renderer import Renderer


logger = logging.getLogger(__name__)

DEFAULT_SCORE_FILE = os.path.join(os.path.expanduser("~"), ".puyo_rl", "best_score.json")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Puyo with the keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--volume", type=int, default=50, help="cue volume 0-100")
    p.add_argument("--score-file", type=str, default=DEFAULT_SCORE_FILE)
    p.add_argument("--chain-reset-ms", type=float, default=5000.0)
    p.add_argument("--cell-size", type=int, default=32)
    p.add_argument("--verbose", action="store_true")
    return p


def run(args: argparse.Namespace) -> None:
    pygame.init()
    try:
        config = GameConfig(random_seed=args.seed, chain_reset_delay_ms=args.chain_reset_ms)
        game = PuyoGame(config, store=JsonScoreStore(args.score_file))
        driver = GameDriver(game)
        bindings = KeyBindings()
        game.subscribe(ToneCues(args.volume))
        renderer = Renderer(config.rows, config.cols, cell_size=args.cell_size)
        help_lines = [f"{name.lower()}: {', '.join(keys)}" for name, keys in bindings.describe().items()]

        screen = pygame.display.set_mode(renderer.size)
        pygame.display.set_caption("Puyo - Human Play")
        clock = pygame.time.Clock()

        running = True
        while running:
            elapsed = clock.tick(60)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if game.phase in (Phase.TITLE, Phase.OVER):
                        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                            driver.start()
                        elif event.key == pygame.K_ESCAPE:
                            running = False
                        continue
                    command = bindings.command_for(event.key)
                    if command is not None:
                        driver.send(command)

            driver.update(elapsed)
            renderer.draw(screen, game.snapshot(), help_lines)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run(args)


if __name__ == "__main__":  # pragma: no cover
    main()
