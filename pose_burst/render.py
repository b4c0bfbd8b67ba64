"""
Canvas drawing: the webcam frame, then either the skeleton or the explosion
markers, then the prediction and video-time text.
"""

from __future__ import annotations

from typing import Optional, Sequence

import cv2
import numpy as np

from pose_burst.consts import (
    EXPLOSION_COLOR,
    HUD_COLOR,
    KEYPOINT_COLOR,
    KEYPOINT_RADIUS,
    MARKER_BASE_RADIUS,
    MARKER_SCALE,
    MIN_PART_CONFIDENCE,
    SKELETON_COLOR,
    SKELETON_THICKNESS,
    WEBCAM_HEIGHT,
    WEBCAM_WIDTH,
)
from pose_burst.types import Prediction, Skeleton


def format_video_time(seconds: float) -> str:
    """Format a playback position as ``Time: m:ss``."""
    seconds = max(0.0, float(seconds))
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"Time: {minutes}:{secs:02d}"


def _pt(kp):
    return int(round(kp.x)), int(round(kp.y))


class Renderer:
    """Draws into a canvas of fixed size, like a 2D canvas element."""

    def __init__(self, width: int = WEBCAM_WIDTH, height: int = WEBCAM_HEIGHT,
                 min_part_confidence: float = MIN_PART_CONFIDENCE):
        self.width = width
        self.height = height
        self.min_part_confidence = min_part_confidence
        self.canvas = np.zeros((height, width, 3), dtype=np.uint8)

    @property
    def marker_radius(self) -> int:
        return MARKER_BASE_RADIUS * MARKER_SCALE

    def render(self, frame: Optional[np.ndarray], skeleton: Optional[Skeleton],
               effect_active: bool) -> Optional[np.ndarray]:
        """
        Draw one frame.

        Args:
            frame: BGR camera frame, or None before capture has started
            skeleton: Pose for this frame, if one was found
            effect_active: Draw explosion markers instead of the skeleton

        Returns:
            The canvas, or None if there was nothing to draw
        """
        if frame is None:
            return None

        self._blit(frame)

        if skeleton is not None:
            if effect_active:
                self.draw_explosion(skeleton)
            else:
                self.draw_keypoints(skeleton)
                self.draw_skeleton(skeleton)

        return self.canvas

    def _blit(self, frame: np.ndarray) -> None:
        # drawImage at (0, 0): copy what fits, leave the rest as it was
        h = min(self.height, frame.shape[0])
        w = min(self.width, frame.shape[1])
        self.canvas[:h, :w] = frame[:h, :w]

    def draw_explosion(self, skeleton: Skeleton) -> None:
        for kp in skeleton.confident(self.min_part_confidence):
            cv2.circle(self.canvas, _pt(kp), self.marker_radius, EXPLOSION_COLOR, -1)

    def draw_keypoints(self, skeleton: Skeleton) -> None:
        for kp in skeleton.confident(self.min_part_confidence):
            cv2.circle(self.canvas, _pt(kp), KEYPOINT_RADIUS, KEYPOINT_COLOR, -1)

    def draw_skeleton(self, skeleton: Skeleton) -> None:
        kps = skeleton.keypoints
        for a, b in skeleton.bones:
            if a >= len(kps) or b >= len(kps):
                continue
            if kps[a].score > self.min_part_confidence and kps[b].score > self.min_part_confidence:
                cv2.line(self.canvas, _pt(kps[a]), _pt(kps[b]), SKELETON_COLOR, SKELETON_THICKNESS)

    def draw_labels(self, predictions: Sequence[Prediction]) -> None:
        y_offset = 30
        for prediction in predictions:
            cv2.putText(
                self.canvas,
                prediction.describe(),
                (10, y_offset),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.7,
                HUD_COLOR,
                2
            )
            y_offset += 30

    def draw_video_time(self, seconds: float) -> None:
        cv2.putText(
            self.canvas,
            format_video_time(seconds),
            (10, self.height - 20),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            HUD_COLOR,
            2
        )

    def clear(self) -> None:
        self.canvas[:] = 0
