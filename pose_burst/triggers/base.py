from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pose_burst.consts import CONFIDENCE_THRESHOLD
from pose_burst.session import Session


@dataclass
class TriggerEvent:
    """Represents a fired trigger."""
    name: str
    pose: int
    video_time: float  # Playback position when the trigger fired
    confidence: float
    metadata: dict = None


class EventTrigger(ABC):
    """Base class for all triggers."""

    def __init__(self, name: str, session: Session, threshold: float = CONFIDENCE_THRESHOLD):
        """
        Initialize trigger.

        Args:
            name: Name of the trigger
            session: Session holding pose states and the shared effect flag
            threshold: Confidence must be strictly above this to fire
        """
        self.name = name
        self.session = session
        self.threshold = threshold

    @abstractmethod
    def evaluate(self, pose_id, current_time: float, confidence: float) -> Optional[TriggerEvent]:
        """
        Decide whether this frame's classification fires the effect.

        Args:
            pose_id: Pose the confidence belongs to
            current_time: Playback clock position in seconds
            confidence: Classifier probability for the pose (0-1)

        Returns:
            TriggerEvent if the trigger fires, None otherwise
        """
        pass

    def can_trigger(self) -> bool:
        """Check that no effect is playing (one effect at a time across all poses)."""
        return not self.session.effect.active

    def is_confident(self, confidence: float) -> bool:
        return confidence > self.threshold
