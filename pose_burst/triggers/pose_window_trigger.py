from typing import Dict, Optional

from pose_burst.errors import PoseLabelError
from pose_burst.logger import get_logger
from pose_burst.poses import DEFAULT_WINDOWS, PoseId, PoseWindow, parse_pose_label
from pose_burst.session import Session

from .base import EventTrigger, TriggerEvent

logger = get_logger("triggers")


class PoseWindowTrigger(EventTrigger):
    """
    Fires once per visit to a pose's time window.

    Each pose is Idle outside its window, Armed inside it, and Fired once a
    confident frame arrived inside it. Leaving the window is the only way back
    from Fired to Armed; the effect cooldown blocks every pose while it runs.
    """

    def __init__(self, session: Session, windows: Dict[PoseId, PoseWindow] = None, **kwargs):
        super().__init__("pose_window", session, **kwargs)
        self.windows = DEFAULT_WINDOWS if windows is None else windows

    def evaluate(self, pose_id, current_time: float, confidence: float) -> Optional[TriggerEvent]:
        pose = PoseId.coerce(pose_id)
        if pose is None:
            return None

        window = self.windows.get(pose)
        if window is None:
            return None

        state = self.session.pose_state(pose)

        # Re-arm as soon as playback is outside the window
        if not window.contains(current_time):
            state.triggered = False
            return None

        if state.triggered or not self.is_confident(confidence) or not self.can_trigger():
            return None

        state.triggered = True
        return TriggerEvent(
            name=pose.label,
            pose=int(pose),
            video_time=current_time,
            confidence=confidence,
            metadata={"window": (window.start, window.end)},
        )

    def check_prediction(self, prediction, current_time: float) -> Optional[TriggerEvent]:
        """Evaluate one classifier prediction; labels that name no pose are ignored."""
        try:
            pose = parse_pose_label(prediction.class_name)
        except PoseLabelError as e:
            logger.debug(f"Ignoring prediction {e}")
            return None
        return self.evaluate(pose, current_time, prediction.probability)
