"""
Explosion effect: a sound plus a short window in which the renderer swaps the
skeleton for red markers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

from pose_burst.consts import DEFAULT_SOUND_PATH, EXPLOSION_COOLDOWN, EXPLOSION_VOLUME
from pose_burst.logger import get_logger
from pose_burst.session import Session
from pose_burst.timers import TimerHandle

logger = get_logger("effects")


class SoundPlayer(ABC):
    """Plays a sound file without blocking the frame loop."""

    @abstractmethod
    def play(self, path: str, volume: float = 1.0) -> bool: ...

    def close(self) -> None:
        pass


class SilentSoundPlayer(SoundPlayer):
    """Records what would have been played. Used headless and in tests."""

    def __init__(self):
        self.played = []

    def play(self, path: str, volume: float = 1.0) -> bool:
        self.played.append((path, volume))
        return True


class PygameSoundPlayer(SoundPlayer):
    """
    pygame.mixer backed player.

    Every play() grabs its own channel so overlapping explosions do not cut
    each other off.
    """

    def __init__(self):
        self._pygame = None
        self._sounds: Dict[str, object] = {}

    def _ensure(self):
        if self._pygame is None:
            import pygame  # type: ignore

            pygame.mixer.pre_init(44100, -16, 2, 512)
            pygame.mixer.init()
            self._pygame = pygame
        return self._pygame

    def play(self, path: str, volume: float = 1.0) -> bool:
        try:
            pygame = self._ensure()
            snd = self._sounds.get(path)
            if snd is None:
                snd = pygame.mixer.Sound(path)
                self._sounds[path] = snd

            channel = pygame.mixer.find_channel(True)
            channel.set_volume(max(0.0, min(1.0, float(volume))))
            channel.play(snd)
            return True
        except Exception as e:
            logger.warning(f"Sound error: {e}")
            return False

    def close(self) -> None:
        if self._pygame is not None:
            self._pygame.mixer.quit()
            self._pygame = None
            self._sounds.clear()


class ExplosionEffect:
    """Turns the session's effect flag on for EXPLOSION_COOLDOWN seconds and plays the sound."""

    def __init__(
        self,
        session: Session,
        player: Optional[SoundPlayer] = None,
        sound_path: str = DEFAULT_SOUND_PATH,
        duration: float = EXPLOSION_COOLDOWN,
    ):
        self.session = session
        self.player = player or SilentSoundPlayer()
        self.sound_path = sound_path
        self.duration = duration
        self.reset_handle: Optional[TimerHandle] = None
        self.fired = 0

    @property
    def active(self) -> bool:
        return self.session.effect.active

    def trigger(self) -> None:
        self.session.effect.active = True
        self.fired += 1
        # reset is queued first so a failing player cannot leave the flag on
        self.reset_handle = self.session.timers.call_later(
            self.duration, self._finish, name="explosion_cooldown"
        )
        try:
            self.player.play(self.sound_path, EXPLOSION_VOLUME)
        except Exception as e:
            logger.warning(f"Sound error: {e}")

    def _finish(self) -> None:
        self.session.effect.active = False
