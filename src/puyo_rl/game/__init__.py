"""Game module for Puyo RL.

Exports the core game engine and supporting classes:
- PuyoGrid: Cell matrix, flood-fill regions and gravity
- Piece: Falling pair with orientation-based partner offset
- ChainResolver: Match, clear and settle loop with chain scoring
- ScoringRules: Chain scoring configuration and helpers
- PuyoGame: Session state machine (phases, hold, lock, resolution)
- GameDriver: Fall, speed-up, resolver-step and chain-reset timers
"""

from .grid import Color, PUYO_COLORS, PuyoGrid, PuyoError, OutOfBoundsError
from .pieces import Piece, PieceGenerator, second_cell_offset
from .validator import is_valid_placement
from .rules import ScoringRules
from .chain import ChainResolver, ChainResult, ChainStep
from .storage import ScoreStore, MemoryScoreStore, JsonScoreStore
from .core import PuyoGame, GameConfig, Command, GameEvent, Phase, SessionSnapshot
from .driver import GameDriver

__all__ = [
    "Color",
    "PUYO_COLORS",
    "PuyoGrid",
    "PuyoError",
    "OutOfBoundsError",
    "Piece",
    "PieceGenerator",
    "second_cell_offset",
    "is_valid_placement",
    "ScoringRules",
    "ChainResolver",
    "ChainResult",
    "ChainStep",
    "ScoreStore",
    "MemoryScoreStore",
    "JsonScoreStore",
    "PuyoGame",
    "GameConfig",
    "Command",
    "GameEvent",
    "Phase",
    "SessionSnapshot",
    "GameDriver",
]
