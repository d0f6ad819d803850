from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import numpy as np
import pygame

from puyo_rl.game import GameEvent


logger = logging.getLogger(__name__)

# (frequency Hz, duration s)
TONES: Dict[GameEvent, Tuple[float, float]] = {
    GameEvent.MOVE: (300.0, 0.1),
    GameEvent.DROP: (200.0, 0.1),
    GameEvent.ROTATE: (400.0, 0.1),
    GameEvent.HOLD: (500.0, 0.1),
    GameEvent.CHAIN_CLEAR: (500.0, 0.2),
}


def tone_samples(frequency: float, duration: float, sample_rate: int, channels: int, amplitude: float) -> np.ndarray:
    """Sine burst as int16 samples shaped for ``pygame.sndarray``."""
    n = max(1, int(sample_rate * duration))
    t = np.arange(n, dtype=np.float32) / float(sample_rate)
    wave = np.sin(2.0 * np.pi * frequency * t)
    # fade out over the last 10 ms
    fade = min(n, int(sample_rate * 0.01))
    if fade > 0:
        wave[-fade:] *= np.linspace(1.0, 0.0, fade, dtype=np.float32)
    samples = (wave * amplitude * 32767).astype(np.int16)
    if channels > 1:
        samples = np.repeat(samples[:, None], channels, axis=1)
    return np.ascontiguousarray(samples)


class ToneCues:
    """Game listener that plays a short tone per event.

    Volume is 0..100. Missing audio hardware only disables the cues.
    """

    def __init__(self, volume: int = 50) -> None:
        self.volume = max(0, min(100, int(volume)))
        self._sounds: Dict[GameEvent, pygame.mixer.Sound] = {}
        self.enabled = self._init_mixer()

    def _init_mixer(self) -> bool:
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init()
        except pygame.error as e:
            logger.warning("audio disabled: %s", e)
            return False
        return True

    def _sound_for(self, event: GameEvent) -> Optional[pygame.mixer.Sound]:
        if event not in TONES:
            return None
        if event not in self._sounds:
            sample_rate, _, channels = pygame.mixer.get_init()
            frequency, duration = TONES[event]
            samples = tone_samples(frequency, duration, sample_rate, channels, amplitude=0.1)
            self._sounds[event] = pygame.sndarray.make_sound(samples)
        return self._sounds[event]

    def __call__(self, event: GameEvent) -> None:
        if not self.enabled or self.volume == 0:
            return
        sound = self._sound_for(event)
        if sound is None:
            return
        sound.set_volume(self.volume / 100.0)
        sound.play()
