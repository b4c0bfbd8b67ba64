from .base import EventTrigger, TriggerEvent
from .pose_window_trigger import PoseWindowTrigger

__all__ = ["EventTrigger", "TriggerEvent", "PoseWindowTrigger"]
