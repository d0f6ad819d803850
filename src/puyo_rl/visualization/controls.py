from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import pygame

from puyo_rl.game import Command


MAX_BINDINGS = 3

DEFAULT_BINDINGS: Dict[Command, List[int]] = {
    Command.MOVE_LEFT: [pygame.K_a, pygame.K_LEFT],
    Command.MOVE_RIGHT: [pygame.K_d, pygame.K_RIGHT],
    Command.MOVE_DOWN: [pygame.K_s, pygame.K_DOWN],
    Command.ROTATE_LEFT: [pygame.K_o],
    Command.ROTATE_RIGHT: [pygame.K_p],
    Command.HOLD: [pygame.K_q, pygame.K_SPACE],
    Command.TOGGLE_PAUSE: [pygame.K_ESCAPE],
}


class KeyBindings:
    """Key-to-command table with up to ``MAX_BINDINGS`` keys per command."""

    def __init__(self, bindings: Optional[Dict[Command, Iterable[int]]] = None) -> None:
        self._bindings: Dict[Command, List[int]] = {c: [] for c in Command}
        for command, keys in (bindings or DEFAULT_BINDINGS).items():
            for key in keys:
                self.bind(command, key)

    def bind(self, command: Command, key: int, slot: Optional[int] = None) -> None:
        """Bind ``key`` to ``command``, stealing it from any other command."""
        for other in self._bindings.values():
            if key in other:
                other.remove(key)
        keys = self._bindings[command]
        if slot is None:
            if len(keys) >= MAX_BINDINGS:
                raise ValueError(f"{command.name} already has {MAX_BINDINGS} bindings")
            keys.append(key)
        elif 0 <= slot < MAX_BINDINGS:
            if slot < len(keys):
                keys[slot] = key
            else:
                keys.append(key)
        else:
            raise ValueError(f"slot must be in 0..{MAX_BINDINGS - 1}")

    def unbind(self, command: Command, key: int) -> None:
        if key in self._bindings[command]:
            self._bindings[command].remove(key)

    def keys_for(self, command: Command) -> List[int]:
        return list(self._bindings[command])

    def command_for(self, key: int) -> Optional[Command]:
        for command, keys in self._bindings.items():
            if key in keys:
                return command
        return None

    def describe(self) -> Dict[str, List[str]]:
        return {c.name: [pygame.key.name(k) for k in keys] for c, keys in self._bindings.items()}
