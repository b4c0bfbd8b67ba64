"""
Classification sources.

A source turns one camera frame into a FrameResult: one Prediction per known
class plus the skeleton it found. The app only depends on the
ClassificationSource interface, so the model stack can be swapped (or faked
in tests) without touching the frame loop.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import cv2
import numpy as np
import requests

from pose_burst.consts import METADATA_FILENAME, MODEL_FILENAME
from pose_burst.errors import InitializationFailure
from pose_burst.logger import get_logger
from pose_burst.types import COCO17_NAMES, FrameResult, Keypoint, Prediction, Skeleton

logger = get_logger("classifier")


def normalize_base_url(base_url: str) -> str:
    return base_url if base_url.endswith("/") else base_url + "/"


def is_remote(base_url: str) -> bool:
    return base_url.startswith("http://") or base_url.startswith("https://")


class ClassificationSource(ABC):
    """
    Model adapter interface.

    Implementations take a BGR frame (H,W,3 uint8) and return a FrameResult
    with exactly ``total_classes`` predictions, in class order.
    """

    @property
    @abstractmethod
    def labels(self) -> Sequence[str]: ...

    @property
    def total_classes(self) -> int:
        return len(self.labels)

    @abstractmethod
    def predict(self, frame: np.ndarray) -> FrameResult: ...

    def close(self) -> None:
        pass


class ModelAssets:
    """Local copies of the topology and metadata files under a base URL."""

    def __init__(self, base_url: str):
        self.base_url = normalize_base_url(base_url)
        self._tmpdir: Optional[str] = None

    def _download(self, name: str) -> str:
        if self._tmpdir is None:
            self._tmpdir = tempfile.mkdtemp(prefix="pose_burst_model_")
        url = self.base_url + name
        dest = os.path.join(self._tmpdir, name)
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        logger.info(f"Fetching {url}")
        response = requests.get(url)
        response.raise_for_status()
        with open(dest, "wb") as f:
            f.write(response.content)
        return dest

    def fetch(self, name: str) -> str:
        """Return a local path for asset ``name``."""
        if is_remote(self.base_url):
            return self._download(name)
        path = os.path.join(self.base_url, name)
        if not os.path.isfile(path):
            raise FileNotFoundError(path)
        return path

    def fetch_model(self) -> str:
        model_path = self.fetch(MODEL_FILENAME)
        # Weight shards must sit next to the topology file
        with open(model_path, encoding="utf-8") as f:
            topology = json.load(f)
        for group in topology.get("weightsManifest", []):
            for shard in group.get("paths", []):
                self.fetch(shard)
        return model_path

    def fetch_labels(self) -> List[str]:
        with open(self.fetch(METADATA_FILENAME), encoding="utf-8") as f:
            metadata = json.load(f)
        labels = metadata.get("labels")
        if not labels:
            raise ValueError(f"{METADATA_FILENAME} has no labels")
        return [str(label) for label in labels]

    def cleanup(self) -> None:
        if self._tmpdir is not None:
            shutil.rmtree(self._tmpdir, ignore_errors=True)
            self._tmpdir = None


class TeachableModelSource(ClassificationSource):
    """
    MediaPipe Pose for the skeleton, a tfjs layers model for the classes.

    The classifier reads the 33 MediaPipe landmarks flattened to
    [x, y, z, visibility] * 33. Frames without a person yield zero
    probability for every class.
    """

    # MediaPipe PoseLandmark index for each COCO17 name
    _COCO17_FROM_MEDIAPIPE = (0, 2, 5, 7, 8, 11, 12, 13, 14, 15, 16, 23, 24, 25, 26, 27, 28)

    def __init__(self, model, labels: Sequence[str], pose_estimator):
        self._model = model
        self._labels = list(labels)
        self._pose = pose_estimator

    @classmethod
    def load(
        cls,
        base_url: str,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ) -> "TeachableModelSource":
        try:
            import mediapipe as mp  # type: ignore
            from tensorflowjs.converters import load_keras_model  # type: ignore
        except ImportError as e:
            raise InitializationFailure(
                "Model libraries are not installed. Install with: pip install 'pose-burst[model]'"
            ) from e

        assets = ModelAssets(base_url)
        try:
            labels = assets.fetch_labels()
            model = load_keras_model(assets.fetch_model())
        except Exception as e:
            raise InitializationFailure(f"Could not load model from {assets.base_url}: {e}") from e
        finally:
            assets.cleanup()

        pose = mp.solutions.pose.Pose(
            static_image_mode=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        logger.info(f"Loaded model with {len(labels)} classes: {', '.join(labels)}")
        return cls(model, labels, pose)

    @property
    def labels(self) -> Sequence[str]:
        return self._labels

    def predict(self, frame: np.ndarray) -> FrameResult:
        image = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        image.flags.writeable = False
        results = self._pose.process(image)

        if not results.pose_landmarks:
            return FrameResult(
                predictions=tuple(Prediction(label, 0.0) for label in self._labels),
                skeleton=None,
            )

        landmarks = results.pose_landmarks.landmark
        h, w = frame.shape[0], frame.shape[1]
        skeleton = self._to_skeleton(landmarks, w, h)

        features = np.array(
            [[lm.x, lm.y, lm.z, lm.visibility] for lm in landmarks], dtype=np.float32
        ).reshape(1, -1)
        probabilities = self._model.predict(features, verbose=0)[0]

        return FrameResult(
            predictions=tuple(
                Prediction(label, float(p)) for label, p in zip(self._labels, probabilities)
            ),
            skeleton=skeleton,
        )

    def _to_skeleton(self, landmarks, width: int, height: int) -> Skeleton:
        keypoints = []
        for name, idx in zip(COCO17_NAMES, self._COCO17_FROM_MEDIAPIPE):
            lm = landmarks[idx]
            keypoints.append(Keypoint(
                name=name,
                x=float(lm.x) * width,
                y=float(lm.y) * height,
                score=float(getattr(lm, "visibility", 0.0) or 0.0),
            ))
        return Skeleton(tuple(keypoints))

    def close(self) -> None:
        self._pose.close()
