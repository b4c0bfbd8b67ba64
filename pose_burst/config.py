"""
Run configuration for the demo.

Only the model base URL and the asset paths are meant to change; thresholds
and time windows live in ``pose_burst.consts``.
"""

from __future__ import annotations

from dataclasses import dataclass

from pose_burst.consts import DEFAULT_MODEL_URL, DEFAULT_SOUND_PATH, DEFAULT_VIDEO_PATH


@dataclass
class DemoConfig:
    model_url: str = DEFAULT_MODEL_URL
    video_path: str = DEFAULT_VIDEO_PATH
    sound_path: str = DEFAULT_SOUND_PATH
    camera_index: int = 0
    show_window: bool = True
    autoplay_video: bool = False
    # False: a failing frame is logged and the loop carries on
    stop_on_frame_error: bool = False
    debug: bool = False
