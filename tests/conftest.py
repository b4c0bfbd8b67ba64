from typing import List, Optional

import numpy as np
import pytest

from pose_burst.classifier import ClassificationSource
from pose_burst.config import DemoConfig
from pose_burst.effects import ExplosionEffect, SilentSoundPlayer
from pose_burst.session import Session
from pose_burst.triggers import PoseWindowTrigger
from pose_burst.types import FrameResult, Keypoint, Prediction, Skeleton


class FakeClock:
    def __init__(self, t: float = 100.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


class FakeSource(ClassificationSource):
    """Replays queued FrameResults; an Exception in the queue is raised instead."""

    def __init__(self, labels=("Pose1", "Pose2", "Pose3", "Pose4", "Pose5", "Pose6", "Neutral")):
        self._labels = list(labels)
        self.queue: List[object] = []
        self.closed = False
        self.frames_seen = 0

    @property
    def labels(self):
        return self._labels

    def push(self, item) -> None:
        self.queue.append(item)

    def push_probs(self, probs: dict, skeleton: Optional[Skeleton] = None) -> None:
        self.push(FrameResult(
            predictions=tuple(Prediction(label, probs.get(label, 0.0)) for label in self._labels),
            skeleton=skeleton,
        ))

    def predict(self, frame):
        self.frames_seen += 1
        item = self.queue.pop(0) if self.queue else FrameResult(
            predictions=tuple(Prediction(label, 0.0) for label in self._labels))
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class FakeWebcam:
    def __init__(self, width=600, height=600, fail=False):
        self.width = width
        self.height = height
        self.fail = fail
        self.canvas = None
        self.updates = 0

    def setup(self):
        from pose_burst.errors import InitializationFailure
        if self.fail:
            raise InitializationFailure("Could not open camera 0")
        self.canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def update(self):
        self.updates += 1
        return self.canvas is not None

    def stop(self):
        self.canvas = None


class FakeVideo:
    def __init__(self, path="vid.mp4"):
        self.path = path
        self.current_time = 0.0
        self.playing = False

    def play(self):
        self.playing = True

    def stop(self):
        self.playing = False
        self.current_time = 0.0

    def read_frame(self):
        return None

    def close(self):
        self.playing = False


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return Session.with_clock(clock)


@pytest.fixture
def trigger(session):
    return PoseWindowTrigger(session)


@pytest.fixture
def player():
    return SilentSoundPlayer()


@pytest.fixture
def effect(session, player):
    return ExplosionEffect(session, player=player, sound_path="explsn.mp3")


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def webcam():
    return FakeWebcam()


@pytest.fixture
def video():
    return FakeVideo()


@pytest.fixture
def make_app(session, source, webcam, video, player):
    from pose_burst.app import PoseBurstApp

    def _make(loader=None, **config_overrides):
        config = DemoConfig(show_window=False, **config_overrides)
        return PoseBurstApp(
            config=config,
            session=session,
            source_loader=loader or (lambda url: source),
            webcam=webcam,
            video=video,
            player=player,
        )

    return _make


def skeleton_of(*points) -> Skeleton:
    """Skeleton from (x, y, score) tuples, bones between consecutive points."""
    keypoints = tuple(Keypoint(f"kp{i}", x, y, s) for i, (x, y, s) in enumerate(points))
    bones = tuple((i, i + 1) for i in range(len(points) - 1))
    return Skeleton(keypoints, bones)


@pytest.fixture
def make_skeleton():
    return skeleton_of
