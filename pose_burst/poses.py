"""
Pose identifiers, their time windows and class-name parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Mapping, Optional, Tuple

from pose_burst.consts import POSE_TIME_WINDOWS
from pose_burst.errors import PoseLabelError, PoseOutOfRange

_NON_DIGITS = re.compile(r"[^0-9]")


class PoseId(IntEnum):
    POSE_1 = 1
    POSE_2 = 2
    POSE_3 = 3
    POSE_4 = 4
    POSE_5 = 5
    POSE_6 = 6

    @property
    def label(self) -> str:
        return f"pose{self.value}"

    @classmethod
    def coerce(cls, value) -> Optional["PoseId"]:
        """Return the PoseId for ``value`` or None if it names no pose."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class PoseWindow:
    """Closed interval of video playback time (seconds) in which a pose may fire."""
    start: float
    end: float

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"window end {self.end} before start {self.start}")

    def contains(self, t: float) -> bool:
        return self.start <= t <= self.end


def build_windows(table: Mapping[int, Tuple[float, float]]) -> Dict[PoseId, PoseWindow]:
    """Turn a ``{pose number: (start, end)}`` table into a PoseWindow lookup."""
    windows: Dict[PoseId, PoseWindow] = {}
    for number, (start, end) in table.items():
        pose_id = PoseId.coerce(number)
        if pose_id is None:
            raise ValueError(f"no pose with number {number!r}")
        windows[pose_id] = PoseWindow(float(start), float(end))
    return windows


DEFAULT_WINDOWS: Dict[PoseId, PoseWindow] = build_windows(POSE_TIME_WINDOWS)


def parse_pose_label(class_name: str) -> PoseId:
    """
    Map a classifier class name to a PoseId.

    The name must contain "pose" (any case). Every digit in it is joined into
    one number, so "Pose 3" is pose 3 and "pose12" is pose 12. A zero-padded
    number such as "pose05" names no pose.

    Raises:
        PoseLabelError: the name is not a pose label, holds no digits or pads
            the number with zeros
        PoseOutOfRange: the number is not one of the known poses
    """
    lowered = class_name.lower()
    if "pose" not in lowered:
        raise PoseLabelError(class_name)

    digits = _NON_DIGITS.sub("", lowered)
    if not digits:
        raise PoseLabelError(class_name, "no pose number")

    number = int(digits)
    if digits != str(number):
        raise PoseLabelError(class_name, "zero-padded pose number")
    pose_id = PoseId.coerce(number)
    if pose_id is None:
        raise PoseOutOfRange(class_name, number)
    return pose_id
