from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple

from .grid import Color, Coordinate, PUYO_COLORS


# (col, row) delta of the second cell for each orientation: up, right, down, left
SECOND_CELL_OFFSETS: Dict[int, Coordinate] = {
    0: (0, -1),
    1: (1, 0),
    2: (0, 1),
    3: (-1, 0),
}


def second_cell_offset(orientation: int) -> Coordinate:
    return SECOND_CELL_OFFSETS[orientation % 4]


@dataclass(frozen=True)
class Piece:
    """A falling pair. ``col``/``row`` anchor ``color1``; ``color2`` sits at the
    orientation's offset from it."""

    color1: Color
    color2: Color
    col: int = 2
    row: int = 0
    rotation: int = 0  # 0..3

    def second_cell(self) -> Coordinate:
        dx, dy = second_cell_offset(self.rotation)
        return self.col + dx, self.row + dy

    def cells(self) -> List[Tuple[int, int, Color]]:
        col2, row2 = self.second_cell()
        return [(self.col, self.row, self.color1), (col2, row2, self.color2)]

    def positions(self) -> List[Coordinate]:
        return [(x, y) for x, y, _ in self.cells()]

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, col=self.col + dx, row=self.row + dy)

    def rotated(self, delta: int) -> "Piece":
        return replace(self, rotation=(self.rotation + delta) % 4)

    def at_spawn(self, spawn_col: int) -> "Piece":
        return replace(self, col=spawn_col, row=0, rotation=0)

    @property
    def colors(self) -> Tuple[Color, Color]:
        return self.color1, self.color2


class PieceGenerator:
    """Draws pairs with each cell's color chosen uniformly and independently."""

    def __init__(self, rng: random.Random, colors: Sequence[Color] = PUYO_COLORS, spawn_col: int = 2) -> None:
        if not colors:
            raise ValueError("at least one color is required")
        self.rng = rng
        self.colors = tuple(colors)
        self.spawn_col = spawn_col

    def next_piece(self) -> Piece:
        return Piece(
            color1=self.rng.choice(self.colors),
            color2=self.rng.choice(self.colors),
            col=self.spawn_col,
        )
