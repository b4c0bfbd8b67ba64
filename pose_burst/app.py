"""
Pose-triggered explosion demo.

Shows the mirrored webcam with a skeleton overlay next to an instruction
video. Holding the right pose inside its time window of the video plays an
explosion sound and swaps the skeleton for red markers for a moment.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Callable, List, Optional

import cv2
import numpy as np

from pose_burst.classifier import ClassificationSource, TeachableModelSource
from pose_burst.capture import Webcam
from pose_burst.config import DemoConfig
from pose_burst.consts import WINDOW_TITLE
from pose_burst.effects import ExplosionEffect, PygameSoundPlayer, SoundPlayer
from pose_burst.errors import InitializationFailure, PerFrameFailure
from pose_burst.logger import get_logger, setup_logger
from pose_burst.render import Renderer
from pose_burst.session import Session
from pose_burst.triggers import PoseWindowTrigger, TriggerEvent
from pose_burst.types import FrameResult
from pose_burst.video import InstructionVideo

logger = get_logger()

VIDEO_WINDOW_TITLE = "Instruction Video"


class PoseBurstApp:
    """Main capture, classification and trigger loop."""

    def __init__(
        self,
        config: DemoConfig = None,
        session: Session = None,
        source_loader: Callable[[str], ClassificationSource] = None,
        webcam: Webcam = None,
        video: InstructionVideo = None,
        renderer: Renderer = None,
        player: SoundPlayer = None,
    ):
        """
        Initialize the app. Nothing is loaded or opened until init().

        Args:
            config: Run configuration (defaults to DemoConfig())
            session: Trigger state; a fresh one per app by default
            source_loader: Builds a ClassificationSource from the model base URL
            webcam, video, renderer, player: Collaborators, replaceable for tests
        """
        self.config = config or DemoConfig()
        self.session = session or Session()
        self.trigger = PoseWindowTrigger(self.session)
        self.effect = ExplosionEffect(
            self.session,
            player=player or PygameSoundPlayer(),
            sound_path=self.config.sound_path,
        )
        self.source_loader = source_loader or TeachableModelSource.load
        self.source: Optional[ClassificationSource] = None
        self.webcam = webcam or Webcam(device=self.config.camera_index)
        self.video = video or InstructionVideo(self.config.video_path)
        self.renderer = renderer or Renderer(self.webcam.width, self.webcam.height)

        self.ready = False
        self.running = False
        self.frame_count = 0
        self.failed_frames = 0
        self.last_result: Optional[FrameResult] = None
        self.event_history: List[TriggerEvent] = []

    # -----------------------
    # Setup
    # -----------------------
    def init(self) -> bool:
        """Load the model, then start the camera. Returns False (and logs) on failure."""
        try:
            self.source = self.source_loader(self.config.model_url)
            self.webcam.setup()
        except InitializationFailure as e:
            logger.error(f"Error initializing: {e}")
            self.ready = False
            return False
        except Exception:
            logger.exception("Error initializing model")
            self.ready = False
            return False

        self.ready = True
        logger.info(f"Ready: {self.source.total_classes} classes, "
                    f"webcam {self.webcam.width}x{self.webcam.height}")
        return True

    def set_model_url(self, url: str) -> None:
        """Point at another model and start a fresh session (takes effect on next init())."""
        self.config.model_url = url
        self.session.reset()

    # -----------------------
    # Frame loop
    # -----------------------
    def tick(self) -> Optional[np.ndarray]:
        """
        Process one frame.

        Returns:
            The rendered canvas, or None if nothing was drawn
        """
        self.session.timers.run_due()
        try:
            return self._tick()
        except PerFrameFailure as e:
            self.failed_frames += 1
            logger.error(f"Error processing frame: {e}", exc_info=e.__cause__)
            if self.config.stop_on_frame_error:
                logger.error("Stopping frame loop after failed frame")
                self.running = False
            return None

    def _tick(self) -> Optional[np.ndarray]:
        if not self.ready:
            return None

        try:
            self.webcam.update()
            frame = self.webcam.canvas
            if frame is None:
                return None

            result = self.source.predict(frame)
            self.frame_count += 1
            self.last_result = result
            self.process_result(result, self.video.current_time)

            canvas = self.renderer.render(frame, result.skeleton, self.effect.active)
            if canvas is not None:
                self.renderer.draw_labels(result.predictions)
                self.renderer.draw_video_time(self.video.current_time)
            return canvas
        except Exception as e:
            raise PerFrameFailure(f"{type(e).__name__}: {e}") from e

    def process_result(self, result: FrameResult, video_time: float) -> List[TriggerEvent]:
        """Run every prediction through the trigger and fire the effect for each hit."""
        fired = []
        for prediction in result.predictions:
            event = self.trigger.check_prediction(prediction, video_time)
            if event is None:
                continue
            self.effect.trigger()
            fired.append(event)
            self.event_history.append(event)
            logger.info(f"[{event.name.upper()}] Triggered at {event.video_time:.2f}s "
                        f"(confidence: {event.confidence:.2f})")
        return fired

    # -----------------------
    # Controls
    # -----------------------
    def play_instruction_video(self) -> None:
        self.video.play()
        logger.info(f"Playing {self.video.path}")

    def stop_instruction_video(self) -> None:
        self.video.stop()
        logger.info("Instruction video stopped")

    def stop_webcam(self) -> None:
        self.webcam.stop()
        self.renderer.clear()
        logger.info("Webcam stopped")

    def handle_key(self, key: int) -> bool:
        """Apply a keyboard command. Returns True if the key was recognised."""
        if key == ord('q'):
            self.running = False
        elif key == ord('p'):
            self.play_instruction_video()
        elif key == ord('s'):
            self.stop_instruction_video()
        elif key == ord('w'):
            self.stop_webcam()
        else:
            return False
        return True

    def run(self) -> None:
        """Initialize and run the frame loop until 'q', Ctrl+C or a strict-mode failure."""
        logger.info("=" * 50)
        logger.info("Starting pose burst demo...")
        logger.info("=" * 50)
        logger.info(f"Model: {self.config.model_url}")
        logger.info(f"Video: {self.config.video_path}")
        logger.info("Keys: p = play video, s = stop video, w = stop webcam, q = quit")

        if not self.init():
            self.close()
            return

        if self.config.autoplay_video:
            self.play_instruction_video()

        start_time = time.time()
        self.running = True
        try:
            while self.running:
                canvas = self.tick()

                if self.config.show_window:
                    if canvas is not None:
                        cv2.imshow(WINDOW_TITLE, canvas)
                    video_frame = self.video.read_frame()
                    if video_frame is not None:
                        cv2.imshow(VIDEO_WINDOW_TITLE, video_frame)
                    key = cv2.waitKey(1) & 0xFF
                    if key != 0xFF:
                        self.handle_key(key)

                if self.frame_count and self.frame_count % 30 == 0 and self.config.debug:
                    elapsed = max(time.time() - start_time, 1e-6)
                    logger.debug(f"Running at {self.frame_count / elapsed:.1f} FPS | "
                                 f"video {self.video.current_time:.2f}s")

        except KeyboardInterrupt:
            logger.info("Stopping...")
        finally:
            self.close()
            self.log_summary(time.time() - start_time)

    def close(self) -> None:
        if self.source is not None:
            self.source.close()
            self.source = None
        self.webcam.stop()
        self.video.close()
        self.effect.player.close()
        self.ready = False
        if self.config.show_window:
            cv2.destroyAllWindows()

    def log_summary(self, runtime: float) -> None:
        logger.info("=" * 50)
        logger.info("Trigger Summary")
        logger.info("=" * 50)
        logger.info(f"Total runtime: {runtime:.1f}s")
        logger.info(f"Total frames: {self.frame_count} ({self.failed_frames} failed)")
        logger.info(f"Total triggers: {len(self.event_history)}")

        if self.event_history:
            counts = {}
            for event in self.event_history:
                counts[event.name] = counts.get(event.name, 0) + 1
            for name, count in sorted(counts.items()):
                logger.info(f"  {name}: {count}")
        else:
            logger.info("No triggers fired.")


def parse_args(argv: List[str]) -> DemoConfig:
    """Build a DemoConfig from a command line (argv without the program name)."""
    config = DemoConfig()
    flags_with_value = {'--video', '--sound', '--camera'}

    if argv and not argv[0].startswith('--'):
        config.model_url = argv[0]

    def value_of(flag: str) -> Optional[str]:
        if flag not in argv:
            return None
        idx = argv.index(flag)
        if idx + 1 < len(argv) and argv[idx + 1] not in flags_with_value:
            return argv[idx + 1]
        return None

    video = value_of('--video')
    if video:
        config.video_path = video
    sound = value_of('--sound')
    if sound:
        config.sound_path = sound
    camera = value_of('--camera')
    if camera is not None:
        try:
            config.camera_index = int(camera)
        except ValueError:
            logger.warning(f"Ignoring camera index {camera!r}, using {config.camera_index}")

    config.stop_on_frame_error = '--strict' in argv
    config.debug = '--debug' in argv
    config.autoplay_video = '--play' in argv
    config.show_window = '--headless' not in argv
    return config


def main():
    """Main entry point."""
    argv = sys.argv[1:]
    config = parse_args(argv)
    setup_logger(logging.DEBUG if config.debug else logging.INFO)

    if not argv:
        prog = sys.argv[0]
        print("Usage:")
        print(f"  {prog}                                   # Default model, vid.mp4, camera 0")
        print(f"  {prog} https://.../models/abc/           # Model base URL (or local directory)")
        print(f"  {prog} URL --video clip.mp4 --sound boom.mp3")
        print(f"  {prog} URL --camera 1 --play             # Camera 1, start the video right away")
        print(f"  {prog} URL --strict                      # Stop on the first failed frame")
        print(f"  {prog} URL --headless --play --debug     # No windows, debug logging")
        print()

    PoseBurstApp(config).run()


if __name__ == "__main__":
    main()
