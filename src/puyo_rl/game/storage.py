"""Best-score persistence.

The session reads the best score once at startup and writes it back whenever
the running score beats it. Any object with ``load_best``/``save_best`` works.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Protocol


logger = logging.getLogger(__name__)


class ScoreStore(Protocol):
    def load_best(self) -> int:
        ...

    def save_best(self, score: int) -> None:
        ...


class MemoryScoreStore:
    def __init__(self, best: int = 0) -> None:
        self.best = int(best)
        self.saves = 0

    def load_best(self) -> int:
        return self.best

    def save_best(self, score: int) -> None:
        self.best = int(score)
        self.saves += 1


class JsonScoreStore:
    """Keeps ``{"best_score": N}`` in a small JSON file."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load_best(self) -> int:
        if not os.path.exists(self.path):
            return 0
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return max(0, int(data.get("best_score", 0)))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not read best score from %s: %s", self.path, e)
            return 0

    def save_best(self, score: int) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump({"best_score": int(score)}, f)
        os.replace(tmp, self.path)
