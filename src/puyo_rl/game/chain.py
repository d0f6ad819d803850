from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set

import numpy as np

from .grid import Coordinate, PuyoGrid
from .rules import ScoringRules


logger = logging.getLogger(__name__)


@dataclass
class ChainStep:
    """One clear within a resolution: the frame shown before the next settle."""

    chain: int
    cleared: Set[Coordinate]
    score: int
    grid: np.ndarray

    @property
    def cleared_count(self) -> int:
        return len(self.cleared)


@dataclass
class ChainResult:
    chain_count: int = 0
    score: int = 0
    cleared_total: int = 0
    steps: List[ChainStep] = field(default_factory=list)


class ChainResolver:
    """Match-detect, clear, settle and rescan until nothing clears.

    ``steps`` is a generator so a presentation layer can pause between clears;
    ``resolve`` drains it for callers that only need the outcome.
    """

    def __init__(self, rules: Optional[ScoringRules] = None, min_group_size: int = 4) -> None:
        self.rules = rules or ScoringRules()
        self.min_group_size = int(min_group_size)

    def find_matches(self, grid: PuyoGrid) -> Set[Coordinate]:
        """All cells belonging to regions of at least ``min_group_size``."""
        marked: Set[Coordinate] = set()
        visited: Set[Coordinate] = set()
        for col, row in grid.occupied_cells():
            if (col, row) in visited:
                continue
            region = grid.connected_region(col, row)
            visited |= region
            if len(region) >= self.min_group_size:
                marked |= region
        return marked

    def steps(self, grid: PuyoGrid) -> Iterator[ChainStep]:
        chain = 0
        while True:
            grid.apply_gravity()
            marked = self.find_matches(grid)
            if not marked:
                return
            chain += 1
            before = grid.occupied_count()
            for col, row in marked:
                grid.set(col, row, 0)
            # each step must strictly shrink the field or the loop cannot end
            assert grid.occupied_count() < before
            score = self.rules.score_for_clear(len(marked), chain)
            logger.debug("chain %d cleared %d cells for %d points", chain, len(marked), score)
            yield ChainStep(chain=chain, cleared=marked, score=score, grid=grid.clone_state())

    def resolve(self, grid: PuyoGrid) -> ChainResult:
        result = ChainResult()
        for step in self.steps(grid):
            result.chain_count = step.chain
            result.score += step.score
            result.cleared_total += step.cleared_count
            result.steps.append(step)
        return result
