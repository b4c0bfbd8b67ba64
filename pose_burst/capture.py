from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from pose_burst.consts import WEBCAM_FLIP, WEBCAM_HEIGHT, WEBCAM_WIDTH
from pose_burst.errors import InitializationFailure
from pose_burst.logger import get_logger

logger = get_logger("capture")


def fit_square(frame: np.ndarray, width: int, height: int, flip: bool) -> np.ndarray:
    """Center-crop to the target aspect ratio, scale to size and optionally mirror."""
    h, w = frame.shape[:2]
    target_ratio = width / height
    if w / h > target_ratio:
        new_w = int(round(h * target_ratio))
        x0 = (w - new_w) // 2
        frame = frame[:, x0:x0 + new_w]
    else:
        new_h = int(round(w / target_ratio))
        y0 = (h - new_h) // 2
        frame = frame[y0:y0 + new_h, :]
    frame = cv2.resize(frame, (width, height))
    if flip:
        frame = cv2.flip(frame, 1)
    return frame


class Webcam:
    """Fixed-size, optionally mirrored camera feed. ``canvas`` holds the latest frame."""

    def __init__(self, width: int = WEBCAM_WIDTH, height: int = WEBCAM_HEIGHT,
                 flip: bool = WEBCAM_FLIP, device: int = 0):
        self.width = width
        self.height = height
        self.flip = flip
        self.device = device
        self.canvas: Optional[np.ndarray] = None
        self._cap = None

    @property
    def running(self) -> bool:
        return self._cap is not None

    def setup(self) -> None:
        cap = cv2.VideoCapture(self.device)
        if not cap.isOpened():
            cap.release()
            raise InitializationFailure(f"Could not open camera {self.device}")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        # Test read
        success, frame = cap.read()
        if not success:
            cap.release()
            raise InitializationFailure(f"Could not read first frame from camera {self.device}")

        self._cap = cap
        self.canvas = fit_square(frame, self.width, self.height, self.flip)
        logger.info(f"Camera {self.device} opened ({frame.shape[1]}x{frame.shape[0]} -> "
                    f"{self.width}x{self.height}, flip={self.flip})")

    def update(self) -> bool:
        """Grab the next frame into ``canvas``. Returns False if no new frame was read."""
        if self._cap is None:
            return False
        success, frame = self._cap.read()
        if not success:
            logger.warning("Failed to read camera frame")
            return False
        self.canvas = fit_square(frame, self.width, self.height, self.flip)
        return True

    def stop(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self.canvas = None
