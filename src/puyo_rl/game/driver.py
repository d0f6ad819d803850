from __future__ import annotations

import logging
from typing import Optional

from .core import Command, Phase, PuyoGame


logger = logging.getLogger(__name__)


class GameDriver:
    """Feeds elapsed time and input commands into a ``PuyoGame``.

    Four timers run off ``update(elapsed_ms)``:

    - fall: one implicit move down per ``game.fall_interval_ms`` while the
      player has control;
    - speed-up: every ``speed_up_period_ms`` while active and unpaused;
    - resolver steps: after a lock, the first clear is applied at once and
      each later one after ``clear_step_delay_ms``; pausing does not stop it;
    - chain reset: clears the chain counter ``chain_reset_delay_ms`` after a
      resolution that chained, unless a newer chain starts first.
    """

    def __init__(self, game: PuyoGame) -> None:
        self.game = game
        self._fall_acc = 0.0
        self._speed_acc = 0.0
        self._step_acc = 0.0
        self._stepping = False
        self._chain_reset_acc: Optional[float] = None

    def start(self) -> None:
        self._fall_acc = 0.0
        self._speed_acc = 0.0
        self._step_acc = 0.0
        self._stepping = False
        self._chain_reset_acc = None
        self.game.start()

    def send(self, command: Command) -> bool:
        changed = self.game.handle(command)
        self._after_transition()
        return changed

    @property
    def chain_reset_scheduled(self) -> bool:
        return self._chain_reset_acc is not None

    def _after_transition(self) -> None:
        if self.game.resolving and not self._stepping:
            self._stepping = True
            self._step_acc = 0.0
            self._fall_acc = 0.0
            self._advance_resolution()

    def _advance_resolution(self) -> None:
        step = self.game.step_resolution()
        if step is not None:
            self._chain_reset_acc = None
            return
        self._stepping = False
        self._fall_acc = 0.0
        # a lock that clears nothing must not postpone a running reset
        if self.game.chain_reset_pending and self._chain_reset_acc is None:
            self._chain_reset_acc = 0.0

    def update(self, elapsed_ms: float) -> None:
        game = self.game
        cfg = game.config

        if game.phase == Phase.ACTIVE:
            self._speed_acc += elapsed_ms
            while self._speed_acc >= cfg.speed_up_period_ms:
                self._speed_acc -= cfg.speed_up_period_ms
                game.speed_up()
                logger.debug("fall interval now %.1f ms", game.fall_interval_ms)

        # a reset scheduled during this update starts counting on the next one
        if self._chain_reset_acc is not None:
            self._chain_reset_acc += elapsed_ms
            if self._chain_reset_acc >= cfg.chain_reset_delay_ms:
                self._chain_reset_acc = None
                game.reset_chain_counter()

        if self._stepping:
            self._step_acc += elapsed_ms
            while self._stepping and self._step_acc >= cfg.clear_step_delay_ms:
                self._step_acc -= cfg.clear_step_delay_ms
                self._advance_resolution()
        elif game.accepts_input:
            self._fall_acc += elapsed_ms
            if self._fall_acc >= game.fall_interval_ms:
                self._fall_acc = 0.0
                game.tick()
                self._after_transition()
