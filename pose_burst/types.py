from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


COCO17_NAMES = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)

# Bones as index pairs into COCO17_NAMES
COCO17_BONES = (
    (0, 1), (0, 2), (1, 3), (2, 4),             # head
    (5, 6), (5, 7), (7, 9), (6, 8), (8, 10),    # arms
    (5, 11), (6, 12), (11, 12),                 # torso
    (11, 13), (13, 15), (12, 14), (14, 16),     # legs
)


@dataclass(frozen=True)
class Prediction:
    """One classifier output: a class name and its probability (0-1)."""
    class_name: str
    probability: float

    def describe(self) -> str:
        return f"{self.class_name}: {self.probability:.2f}"


@dataclass(frozen=True)
class Keypoint:
    """
    A single 2D keypoint in pixel coordinates.
    """

    name: str
    x: float
    y: float
    score: float  # confidence/visibility [0..1]


@dataclass(frozen=True)
class Skeleton:
    keypoints: Tuple[Keypoint, ...]
    bones: Tuple[Tuple[int, int], ...] = COCO17_BONES

    def confident(self, min_score: float):
        return [kp for kp in self.keypoints if kp.score > min_score]


@dataclass(frozen=True)
class FrameResult:
    """Everything the classification source produced for one frame."""
    predictions: Tuple[Prediction, ...] = field(default_factory=tuple)
    skeleton: Optional[Skeleton] = None
