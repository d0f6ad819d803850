from __future__ import annotations

from .grid import PuyoGrid
from .pieces import Piece


def is_valid_placement(grid: PuyoGrid, piece: Piece) -> bool:
    """True iff both cells of ``piece`` are inside ``grid`` and empty."""
    return grid.can_place(piece.positions())
