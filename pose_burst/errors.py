"""Exceptions raised by the demo."""


class PoseBurstError(Exception):
    """Base class for all demo errors."""


class InitializationFailure(PoseBurstError):
    """Model load or capture setup failed. The app stays up but is not ready."""


class PerFrameFailure(PoseBurstError):
    """Pose estimation or classification raised while processing one frame."""


class PoseLabelError(PoseBurstError, ValueError):
    """A class name does not name a pose."""

    def __init__(self, class_name: str, reason: str = "not a pose label"):
        super().__init__(f"{class_name!r}: {reason}")
        self.class_name = class_name


class PoseOutOfRange(PoseLabelError):
    """A class name names a pose number with no known pose (e.g. pose7)."""

    def __init__(self, class_name: str, number: int):
        super().__init__(class_name, f"pose number {number} out of range")
        self.number = number
