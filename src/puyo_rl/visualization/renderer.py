from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import pygame

from puyo_rl.game import Color, Phase, Piece, SessionSnapshot


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        Color.EMPTY: (243, 244, 246),
        Color.RED: (239, 68, 68),
        Color.GREEN: (16, 185, 129),
        Color.BLUE: (59, 130, 246),
        Color.YELLOW: (245, 158, 11),
        Color.PURPLE: (147, 51, 234),
    }
    return palette.get(abs(v), (200, 200, 200))


class Renderer:
    """Draws a ``SessionSnapshot``: hold panel, field, next queue and score."""

    def __init__(self, rows: int, cols: int, cell_size: int = 32, margin: int = 20) -> None:
        self.rows = rows
        self.cols = cols
        self.cell_size = cell_size
        self.margin = margin
        self.panel_w = 3 * cell_size
        self.font: Optional[pygame.font.Font] = None
        self.big_font: Optional[pygame.font.Font] = None

    @property
    def size(self) -> Tuple[int, int]:
        width = self.margin * 4 + self.panel_w * 2 + self.cols * self.cell_size
        height = self.margin * 3 + self.rows * self.cell_size + 60
        return width, height

    @property
    def field_origin(self) -> Tuple[int, int]:
        return self.margin * 2 + self.panel_w, self.margin + 60

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self.font is None or self.big_font is None:
            self.font = pygame.font.SysFont(None, 26)
            self.big_font = pygame.font.SysFont(None, 44)
        return self.font, self.big_font

    def _cell(self, surf: pygame.Surface, x: int, y: int, value: int, outline: bool = False) -> None:
        rect = pygame.Rect(x, y, self.cell_size - 1, self.cell_size - 1)
        pygame.draw.rect(surf, _color_for_value(value), rect)
        if outline:
            pygame.draw.rect(surf, (255, 255, 255), rect, 3)

    def _pair(self, surf: pygame.Surface, piece: Piece, x: int, y: int) -> None:
        # Preview pairs stand upright: color2 on top of color1
        self._cell(surf, x, y, int(piece.color2))
        self._cell(surf, x, y + self.cell_size, int(piece.color1))

    def _field(self, surf: pygame.Surface, snap: SessionSnapshot) -> None:
        ox, oy = self.field_origin
        border = pygame.Rect(ox - 2, oy - 2, self.cols * self.cell_size + 3, self.rows * self.cell_size + 3)
        pygame.draw.rect(surf, (156, 163, 175), border, 2)
        grid = snap.grid
        for y in range(self.rows):
            for x in range(self.cols):
                self._cell(surf, ox + x * self.cell_size, oy + y * self.cell_size, int(grid[y, x]))
        for x, y in snap.clearing:
            self._cell(surf, ox + x * self.cell_size, oy + y * self.cell_size, Color.EMPTY, outline=True)
        if snap.active is not None and not snap.animating:
            for x, y, color in snap.active.cells():
                if 0 <= y < self.rows and 0 <= x < self.cols:
                    self._cell(surf, ox + x * self.cell_size, oy + y * self.cell_size, int(color))

    def _text(self, surf: pygame.Surface, lines: Iterable[str], x: int, y: int, big: bool = False) -> None:
        font, big_font = self._fonts()
        f = big_font if big else font
        for i, txt in enumerate(lines):
            img = f.render(txt, True, (17, 24, 39))
            surf.blit(img, (x, y + i * (f.get_linesize() + 2)))

    def draw(self, screen: pygame.Surface, snap: SessionSnapshot, help_lines: Optional[List[str]] = None) -> None:
        screen.fill((229, 231, 235))
        if snap.phase == Phase.TITLE:
            self._text(screen, ["Puyo"], self.margin, self.margin, big=True)
            self._text(screen, [f"Best score: {snap.best_score}", "Press Enter to start"] + (help_lines or []),
                       self.margin, self.margin + 60)
            pygame.display.flip()
            return

        self._text(screen, [f"Score: {snap.score}", f"{snap.chain} chain"], self.margin, self.margin)
        ox, oy = self.field_origin
        self._text(screen, ["Hold"], self.margin, oy)
        if snap.held is not None:
            self._pair(screen, snap.held, self.margin + self.cell_size, oy + 30)
        self._field(screen, snap)
        nx = ox + self.cols * self.cell_size + self.margin
        self._text(screen, ["Next"], nx, oy)
        for i, piece in enumerate(snap.queue):
            self._pair(screen, piece, nx + self.cell_size, oy + 30 + i * (self.cell_size * 2 + 10))

        if snap.phase == Phase.OVER:
            self._text(screen, ["Game Over"], self.margin, oy + self.rows * self.cell_size // 2, big=True)
            self._text(screen, [f"Final score: {snap.score}", f"Best score: {snap.best_score}",
                                "Press Enter to play again"],
                       self.margin, oy + self.rows * self.cell_size // 2 + 50)
        elif snap.paused:
            overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            overlay.fill((0, 0, 0, 128))
            screen.blit(overlay, (0, 0))
            self._text(screen, ["Paused"], ox, oy + self.rows * self.cell_size // 2, big=True)
        pygame.display.flip()
