"""
Per-session state: one PoseState per pose seen so far, the effect flag and
the timers that clear it. Each app instance (and each test) owns its own.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from pose_burst.poses import PoseId
from pose_burst.timers import TimerQueue


@dataclass
class PoseState:
    triggered: bool = False


@dataclass
class EffectState:
    active: bool = False


@dataclass
class Session:
    timers: TimerQueue = field(default_factory=TimerQueue)
    effect: EffectState = field(default_factory=EffectState)
    pose_states: Dict[PoseId, PoseState] = field(default_factory=dict)

    @classmethod
    def with_clock(cls, clock: Callable[[], float] = time.monotonic) -> "Session":
        return cls(timers=TimerQueue(clock=clock))

    def pose_state(self, pose_id: PoseId) -> PoseState:
        """Return the state for ``pose_id``, creating it on first use."""
        if pose_id not in self.pose_states:
            self.pose_states[pose_id] = PoseState()
        return self.pose_states[pose_id]

    def peek(self, pose_id: PoseId) -> Optional[PoseState]:
        return self.pose_states.get(pose_id)

    def reset(self) -> None:
        """Forget all pose states and end any active effect."""
        self.timers.cancel_all()
        self.pose_states.clear()
        self.effect.active = False
