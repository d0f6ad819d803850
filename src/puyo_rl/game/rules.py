from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    points_per_cell: int = 10
    chain_base: int = 2
    group_bonus_threshold: int = 4
    group_bonus_per_cell: int = 5

    def chain_multiplier(self, chain_step: int) -> int:
        if chain_step <= 0:
            return 0
        return self.chain_base ** (chain_step - 1)

    def score_for_clear(self, cleared: int, chain_step: int) -> int:
        if cleared <= 0 or chain_step <= 0:
            return 0
        base = cleared * self.points_per_cell * self.chain_multiplier(chain_step)
        bonus = max(0, cleared - self.group_bonus_threshold) * self.group_bonus_per_cell
        return base + bonus
