from __future__ import annotations

from enum import IntEnum
from typing import Iterable, List, Sequence, Set, Tuple

import numpy as np


Coordinate = Tuple[int, int]

NEIGHBOURS: Tuple[Coordinate, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


class Color(IntEnum):
    EMPTY = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    PURPLE = 5


PUYO_COLORS: Tuple[Color, ...] = tuple(c for c in Color if c != Color.EMPTY)


class PuyoError(Exception):
    """Base class for engine errors."""


class OutOfBoundsError(PuyoError, IndexError):
    def __init__(self, col: int, row: int, width: int, height: int) -> None:
        super().__init__(f"cell ({col}, {row}) outside {width}x{height} grid")
        self.col = col
        self.row = row


class PuyoGrid:
    """Fixed-size matrix of colored cells.

    Cells are addressed as ``(col, row)``; row 0 is the spawn row and rows grow
    downward. The backing array is indexed ``[row, col]`` and holds ``Color``
    values, with 0 for empty cells.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "PuyoGrid":
        """Build a grid from a top-to-bottom list of rows."""
        arr = np.asarray(rows, dtype=np.int8)
        if arr.ndim != 2:
            raise ValueError("rows must describe a 2D grid")
        g = cls(arr.shape[1], arr.shape[0])
        g.grid[:, :] = arr
        return g

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def _check(self, col: int, row: int) -> None:
        if not self.is_inside(col, row):
            raise OutOfBoundsError(col, row, self.width, self.height)

    def is_empty(self, col: int, row: int) -> bool:
        return self.is_inside(col, row) and self.grid[row, col] == Color.EMPTY

    def get(self, col: int, row: int) -> Color:
        self._check(col, row)
        return Color(int(self.grid[row, col]))

    def set(self, col: int, row: int, color: int) -> None:
        self._check(col, row)
        self.grid[row, col] = int(color)

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        return all(self.is_empty(col, row) for col, row in cells)

    def connected_region(self, col: int, row: int) -> Set[Coordinate]:
        """Coordinates 4-connected to ``(col, row)`` through its color.

        Uses an explicit worklist so large regions never hit the recursion
        limit. An empty start cell yields an empty set.
        """
        if not self.is_inside(col, row):
            return set()
        color = self.grid[row, col]
        if color == Color.EMPTY:
            return set()
        visited: Set[Coordinate] = {(col, row)}
        stack: List[Coordinate] = [(col, row)]
        while stack:
            x, y = stack.pop()
            for dx, dy in NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if (nx, ny) in visited or not self.is_inside(nx, ny):
                    continue
                if self.grid[ny, nx] == color:
                    visited.add((nx, ny))
                    stack.append((nx, ny))
        return visited

    def apply_gravity(self) -> bool:
        """Compact every column downward. Returns True if any cell moved."""
        moved = False
        for x in range(self.width):
            column = self.grid[:, x]
            filled = column[column != Color.EMPTY]
            settled = np.zeros(self.height, dtype=np.int8)
            if filled.size:
                settled[-filled.size :] = filled
            if not np.array_equal(settled, column):
                moved = True
                self.grid[:, x] = settled
        return moved

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def occupied_cells(self) -> List[Coordinate]:
        rows, cols = np.nonzero(self.grid)
        return [(int(c), int(r)) for r, c in zip(rows, cols)]

    def row_occupied(self, row: int) -> bool:
        self._check(0, row)
        return bool(np.any(self.grid[row, :] != Color.EMPTY))

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()

    def copy(self) -> "PuyoGrid":
        new_grid = PuyoGrid(self.width, self.height)
        new_grid.grid = self.grid.copy()
        return new_grid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PuyoGrid):
            return NotImplemented
        return np.array_equal(self.grid, other.grid)

    def __repr__(self) -> str:
        return f"PuyoGrid({self.width}x{self.height}, occupied={self.occupied_count()})"
