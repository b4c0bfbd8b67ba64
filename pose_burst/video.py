"""
Instruction video player. Its ``current_time`` is the playback clock the
pose windows are measured against.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

import cv2
import numpy as np

from pose_burst.consts import DEFAULT_VIDEO_PATH, VIDEO_VOLUME
from pose_burst.logger import get_logger

logger = get_logger("video")


class InstructionVideo:
    """
    Wall-clock driven player: position advances in real time while playing and
    frames are read from the file at that position.
    """

    def __init__(self, path: str = DEFAULT_VIDEO_PATH, clock: Callable[[], float] = time.monotonic):
        self.path = path
        self.volume = VIDEO_VOLUME  # OpenCV decodes no audio; kept for parity with the page
        self._clock = clock
        self._offset = 0.0
        self._started_at: Optional[float] = None
        self._cap = None
        self._fps = 0.0
        self._duration: Optional[float] = None
        self._next_frame = 0
        self._last_frame: Optional[np.ndarray] = None

    @property
    def playing(self) -> bool:
        return self._started_at is not None

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def current_time(self) -> float:
        t = self._offset
        if self._started_at is not None:
            t += self._clock() - self._started_at
        if self._duration is not None:
            t = min(t, self._duration)
        return t

    def _open(self) -> None:
        if self._cap is not None:
            return
        cap = cv2.VideoCapture(self.path)
        if not cap.isOpened():
            logger.error(f"Could not open video file: {self.path}")
            return
        self._cap = cap
        self._fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
        total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        if self._fps > 0 and total_frames > 0:
            self._duration = total_frames / self._fps
        logger.info(f"Video {self.path}: {self._fps:.1f} FPS, "
                    f"{self._duration or 0:.1f}s")

    def play(self) -> None:
        self._open()
        if not self.playing:
            self._started_at = self._clock()

    def pause(self) -> None:
        if self.playing:
            self._offset = self.current_time
            self._started_at = None

    def seek(self, seconds: float) -> None:
        self._offset = max(0.0, float(seconds))
        if self.playing:
            self._started_at = self._clock()

    def stop(self) -> None:
        self.pause()
        self.seek(0.0)

    def read_frame(self) -> Optional[np.ndarray]:
        """Frame at the current position, or the last one if nothing new is due."""
        if self._cap is None or self._fps <= 0:
            return self._last_frame
        target = int(self.current_time * self._fps)
        if target < self._next_frame - 1 or target > self._next_frame + 1:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, target)
            self._next_frame = target
        if target < self._next_frame and self._last_frame is not None:
            return self._last_frame
        success, frame = self._cap.read()
        if success:
            self._next_frame += 1
            self._last_frame = frame
        return self._last_frame

    def close(self) -> None:
        self.pause()
        if self._cap is not None:
            self._cap.release()
            self._cap = None
