from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Deque, FrozenSet, Iterator, List, Optional, Tuple

import numpy as np

from .chain import ChainResolver, ChainResult, ChainStep
from .grid import Color, Coordinate, PUYO_COLORS, PuyoGrid
from .pieces import Piece, PieceGenerator
from .rules import ScoringRules
from .storage import MemoryScoreStore, ScoreStore
from .validator import is_valid_placement


logger = logging.getLogger(__name__)


class Phase(str, Enum):
    TITLE = "title"
    ACTIVE = "active"
    PAUSED = "paused"
    OVER = "over"


class Command(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    MOVE_DOWN = 2
    ROTATE_LEFT = 3
    ROTATE_RIGHT = 4
    HOLD = 5
    TOGGLE_PAUSE = 6


class GameEvent(str, Enum):
    START = "start"
    MOVE = "move"
    DROP = "drop"
    ROTATE = "rotate"
    HOLD = "hold"
    LOCK = "lock"
    CHAIN_CLEAR = "chain_clear"
    GAME_OVER = "game_over"
    PAUSE = "pause"
    RESUME = "resume"


Listener = Callable[[GameEvent], None]


@dataclass
class GameConfig:
    rows: int = 12
    cols: int = 6
    num_colors: int = 5
    spawn_col: int = 2
    preview_count: int = 3
    min_group_size: int = 4
    game_over_row: int = 1
    base_fall_interval_ms: float = 1000.0
    min_fall_interval_ms: float = 50.0
    speed_up_period_ms: float = 10000.0
    speed_up_factor: float = 1.1
    clear_step_delay_ms: float = 250.0
    chain_reset_delay_ms: float = 5000.0
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.rows < 2 or self.cols < 1:
            raise ValueError(f"grid must be at least 1x2, got {self.cols}x{self.rows}")
        if not 1 <= self.num_colors <= len(PUYO_COLORS):
            raise ValueError(f"num_colors must be in 1..{len(PUYO_COLORS)}")
        if not 0 <= self.spawn_col < self.cols:
            raise ValueError("spawn_col outside the grid")
        if self.preview_count < 1:
            raise ValueError("preview_count must be at least 1")
        if self.min_group_size < 1:
            raise ValueError("min_group_size must be positive")
        if not 1 <= self.game_over_row < self.rows:
            raise ValueError("game_over_row must be below the spawn row and inside the grid")
        if self.speed_up_factor <= 1.0:
            raise ValueError("speed_up_factor must be greater than 1")
        if self.base_fall_interval_ms <= 0 or self.min_fall_interval_ms <= 0:
            raise ValueError("fall intervals must be positive")

    @property
    def colors(self) -> Tuple[Color, ...]:
        return PUYO_COLORS[: self.num_colors]


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view handed to renderers after each transition."""

    phase: Phase
    grid: np.ndarray
    active: Optional[Piece]
    held: Optional[Piece]
    queue: Tuple[Piece, ...]
    score: int
    best_score: int
    chain: int
    paused: bool
    animating: bool
    can_hold: bool
    fall_interval_ms: float
    clearing: FrozenSet[Coordinate] = field(default_factory=frozenset)


class PuyoGame:
    """One play session: grid, pieces, score and the phase machine.

    The game has no notion of wall-clock time. ``GameDriver`` feeds it ticks
    and pulls chain steps; headless callers can use ``resolve_all``.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[ScoreStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.store: ScoreStore = store if store is not None else MemoryScoreStore()
        self.rng = random.Random(self.config.random_seed)
        self.generator = PieceGenerator(self.rng, self.config.colors, self.config.spawn_col)
        self.resolver = ChainResolver(self.rules, self.config.min_group_size)
        self.grid = PuyoGrid(self.config.cols, self.config.rows)

        self._phase = Phase.TITLE
        self.paused = False
        self.animating = False
        self.current_piece: Optional[Piece] = None
        self.queue: Deque[Piece] = deque()
        self.held_piece: Optional[Piece] = None
        self.can_hold = True
        self.score = 0
        self.chain_counter = 0
        self.chain_reset_pending = False
        self.fall_interval_ms = self.config.base_fall_interval_ms
        self.clearing: FrozenSet[Coordinate] = frozenset()
        self.pieces_locked = 0
        self.last_result: Optional[ChainResult] = None
        self._resolution: Optional[Iterator[ChainStep]] = None
        self._pending_result: Optional[ChainResult] = None
        self._listeners: List[Listener] = []

        self.best_score = int(self.store.load_best())

    # ---------- Observers ----------
    def subscribe(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ---------- Phase ----------
    @property
    def phase(self) -> Phase:
        if self._phase == Phase.ACTIVE and self.paused:
            return Phase.PAUSED
        return self._phase

    @property
    def game_over(self) -> bool:
        return self._phase == Phase.OVER

    @property
    def accepts_input(self) -> bool:
        return (
            self._phase == Phase.ACTIVE
            and not self.paused
            and not self.animating
            and self.current_piece is not None
        )

    def start(self) -> None:
        """Start a new game from the title screen or after game over."""
        self.grid.reset()
        self.score = 0
        self.chain_counter = 0
        self.chain_reset_pending = False
        self.fall_interval_ms = self.config.base_fall_interval_ms
        self.held_piece = None
        self.can_hold = True
        self.paused = False
        self.animating = False
        self.clearing = frozenset()
        self.pieces_locked = 0
        self.last_result = None
        self._resolution = None
        self._pending_result = None
        self.queue = deque(self.generator.next_piece() for _ in range(self.config.preview_count + 1))
        self._phase = Phase.ACTIVE
        self.current_piece = None
        logger.debug("session started, best score %d", self.best_score)
        self._emit(GameEvent.START)
        self._spawn_next()

    restart = start

    def toggle_pause(self) -> bool:
        if self._phase != Phase.ACTIVE:
            return False
        self.paused = not self.paused
        self._emit(GameEvent.PAUSE if self.paused else GameEvent.RESUME)
        return True

    # ---------- Commands ----------
    def handle(self, command: Command) -> bool:
        """Apply an input command. Returns True if the state changed."""
        if command == Command.TOGGLE_PAUSE:
            return self.toggle_pause()
        if not self.accepts_input:
            logger.debug("ignoring %s in phase %s", command.name, self.phase.value)
            return False
        if command == Command.MOVE_LEFT:
            return self.move(-1)
        if command == Command.MOVE_RIGHT:
            return self.move(1)
        if command == Command.MOVE_DOWN:
            return self.move_down()
        if command == Command.ROTATE_LEFT:
            return self.rotate(-1)
        if command == Command.ROTATE_RIGHT:
            return self.rotate(1)
        if command == Command.HOLD:
            return self.hold()
        raise ValueError(f"unknown command {command!r}")

    def _commit(self, candidate: Piece) -> bool:
        if is_valid_placement(self.grid, candidate):
            self.current_piece = candidate
            return True
        return False

    def move(self, dx: int) -> bool:
        if not self.accepts_input:
            return False
        assert self.current_piece is not None
        if self._commit(self.current_piece.moved(dx, 0)):
            self._emit(GameEvent.MOVE)
            return True
        return False

    def rotate(self, delta: int) -> bool:
        if not self.accepts_input:
            return False
        assert self.current_piece is not None
        if self._commit(self.current_piece.rotated(delta)):
            self._emit(GameEvent.ROTATE)
            return True
        return False

    def _descend(self) -> bool:
        """Drop one row, or lock the piece when blocked below.

        Returns True if the piece moved, False if it locked.
        """
        assert self.current_piece is not None
        if self._commit(self.current_piece.moved(0, 1)):
            return True
        self._lock()
        return False

    def move_down(self) -> bool:
        if not self.accepts_input:
            return False
        if self._descend():
            self._emit(GameEvent.DROP)
        return True

    def tick(self) -> bool:
        """Fall-timer tick: an implicit move down."""
        if not self.accepts_input:
            return False
        self._descend()
        return True

    def speed_up(self) -> bool:
        if self._phase != Phase.ACTIVE or self.paused:
            return False
        self.fall_interval_ms = max(
            self.config.min_fall_interval_ms,
            self.fall_interval_ms / self.config.speed_up_factor,
        )
        return True

    def hold(self) -> bool:
        if not self.accepts_input or not self.can_hold:
            return False
        assert self.current_piece is not None
        stripped = self.current_piece.at_spawn(self.config.spawn_col)
        if self.held_piece is None:
            self.held_piece = stripped
            self.current_piece = self._pop_queue()
        else:
            self.current_piece, self.held_piece = self.held_piece.at_spawn(self.config.spawn_col), stripped
        self.can_hold = False
        logger.debug("held %s", self.held_piece.colors)
        self._emit(GameEvent.HOLD)
        return True

    # ---------- Lock and resolution ----------
    def _pop_queue(self) -> Piece:
        piece = self.queue.popleft()
        self.queue.append(self.generator.next_piece())
        return piece

    def _lock(self) -> None:
        assert self.current_piece is not None
        for col, row, color in self.current_piece.cells():
            self.grid.set(col, row, color)
        logger.debug("locked %s at %s", self.current_piece.colors, self.current_piece.positions())
        self.current_piece = None
        self.pieces_locked += 1
        self.animating = True
        self._resolution = self.resolver.steps(self.grid)
        self._pending_result = ChainResult()
        self._emit(GameEvent.LOCK)

    @property
    def resolving(self) -> bool:
        return self._resolution is not None

    def step_resolution(self) -> Optional[ChainStep]:
        """Advance the running resolution by one clear.

        Returns the step just applied, or None once the resolution has
        finished (the next piece is then already in play).
        """
        if self._resolution is None:
            return None
        step = next(self._resolution, None)
        if step is None:
            self._finish_resolution()
            return None
        assert self._pending_result is not None
        self._pending_result.chain_count = step.chain
        self._pending_result.score += step.score
        self._pending_result.cleared_total += step.cleared_count
        self._pending_result.steps.append(step)
        self.chain_counter = step.chain
        self.chain_reset_pending = False
        self.clearing = frozenset(step.cleared)
        self._add_score(step.score)
        self._emit(GameEvent.CHAIN_CLEAR)
        return step

    def resolve_all(self) -> Optional[ChainResult]:
        """Run the current resolution to completion without pauses."""
        if self._resolution is None:
            return None
        while self.step_resolution() is not None:
            pass
        return self.last_result

    def _finish_resolution(self) -> None:
        self._resolution = None
        self.animating = False
        self.clearing = frozenset()
        self.last_result = self._pending_result
        self._pending_result = None
        # only a resolution that chained schedules a reset; a pending one is left alone
        if self.last_result is not None and self.last_result.chain_count > 0:
            self.chain_reset_pending = True
        if self.grid.row_occupied(self.config.game_over_row):
            self._end_game()
            return
        self.can_hold = True
        self._spawn_next()

    def _spawn_next(self) -> None:
        piece = self._pop_queue()
        # the partner of a fresh pair starts above the field
        anchor_free = self.grid.is_empty(piece.col, piece.row)
        col2, row2 = piece.second_cell()
        partner_free = row2 < 0 or self.grid.is_empty(col2, row2)
        if not (anchor_free and partner_free):
            self.current_piece = None
            self._end_game()
            return
        self.current_piece = piece

    def _end_game(self) -> None:
        self._phase = Phase.OVER
        self.paused = False
        self.current_piece = None
        logger.info("game over with score %d (best %d)", self.score, self.best_score)
        self._emit(GameEvent.GAME_OVER)

    def reset_chain_counter(self) -> None:
        self.chain_counter = 0
        self.chain_reset_pending = False

    def _add_score(self, points: int) -> None:
        self.score += points
        if self.score > self.best_score:
            self.best_score = self.score
            self.store.save_best(self.score)
            logger.info("new best score %d", self.score)

    # ---------- Views ----------
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            grid=self.grid.clone_state(),
            active=self.current_piece,
            held=self.held_piece,
            queue=tuple(self.queue),
            score=self.score,
            best_score=self.best_score,
            chain=self.chain_counter,
            paused=self.paused,
            animating=self.animating,
            can_hold=self.can_hold,
            fall_interval_ms=self.fall_interval_ms,
            clearing=self.clearing,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and not self.game_over:
            for x, y, color in self.current_piece.cells():
                if self.grid.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(color)
        return state
