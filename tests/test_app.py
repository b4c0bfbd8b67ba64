import numpy as np
import pytest

from pose_burst import app as app_module
from pose_burst.app import VIDEO_WINDOW_TITLE, parse_args
from pose_burst.consts import WINDOW_TITLE
from pose_burst.errors import InitializationFailure
from pose_burst.poses import PoseId, PoseWindow
from pose_burst.types import FrameResult, Prediction


def test_init_loads_model_then_webcam(make_app, source, webcam):
    urls = []

    def loader(url):
        urls.append(url)
        return source

    app = make_app(loader=loader, model_url="https://example.test/models/abc/")
    assert app.init() is True
    assert app.ready
    assert urls == ["https://example.test/models/abc/"]
    assert webcam.canvas is not None


def test_model_load_failure_leaves_app_not_ready(make_app, webcam):
    def loader(url):
        raise InitializationFailure("Could not load model")

    app = make_app(loader=loader)
    assert app.init() is False
    assert not app.ready
    # capture is never started after a failed load
    assert webcam.canvas is None
    # ticking a non-ready app is harmless
    assert app.tick() is None


def test_unexpected_loader_error_is_contained(make_app):
    def loader(url):
        raise OSError("network down")

    app = make_app(loader=loader)
    assert app.init() is False
    assert not app.ready


def test_capture_failure_leaves_app_not_ready(make_app, webcam):
    webcam.fail = True
    app = make_app()
    assert app.init() is False
    assert not app.ready


def test_tick_fires_effect_inside_window(make_app, source, video, player, session):
    app = make_app()
    app.init()
    video.current_time = 33.5
    source.push_probs({"Pose3": 0.85, "Neutral": 0.15})

    canvas = app.tick()

    assert canvas is not None
    assert session.effect.active
    assert len(player.played) == 1
    assert [e.name for e in app.event_history] == ["pose3"]
    assert session.pose_state(PoseId.POSE_3).triggered


def test_tick_outside_window_does_nothing(make_app, source, video, player, session):
    app = make_app()
    app.init()
    video.current_time = 30.0
    source.push_probs({"Pose3": 0.99})

    app.tick()

    assert not session.effect.active
    assert player.played == []


def test_one_effect_per_frame_across_poses(make_app, player):
    app = make_app()
    app.init()
    # give pose 1 the same window as pose 3
    app.trigger.windows = dict(app.trigger.windows)
    app.trigger.windows[PoseId.POSE_1] = PoseWindow(33.0, 34.0)

    fired = app.process_result(
        FrameResult(predictions=(Prediction("Pose1", 0.9), Prediction("Pose3", 0.9))), 33.5)

    assert [e.pose for e in fired] == [1]
    assert len(player.played) == 1


def test_cooldown_clears_on_later_tick(make_app, source, video, session, clock):
    app = make_app()
    app.init()
    video.current_time = 33.5
    source.push_probs({"Pose3": 0.9})
    app.tick()
    assert session.effect.active

    clock.advance(0.31)
    app.tick()
    assert not session.effect.active


def test_renders_explosion_while_effect_active(make_app, source, video, make_skeleton):
    from pose_burst.consts import EXPLOSION_COLOR

    app = make_app()
    app.init()
    video.current_time = 58.5
    skeleton = make_skeleton((300, 300, 0.9))
    source.push_probs({"Pose6": 0.95}, skeleton=skeleton)

    canvas = app.tick()

    assert tuple(int(c) for c in canvas[300, 300]) == EXPLOSION_COLOR


def test_failed_frame_is_skipped_and_loop_continues(make_app, source, video, session):
    app = make_app()
    app.init()
    app.running = True
    video.current_time = 33.5
    source.push(RuntimeError("estimator blew up"))
    source.push_probs({"Pose3": 0.9})

    assert app.tick() is None
    assert app.failed_frames == 1
    assert app.running

    assert app.tick() is not None
    assert session.effect.active


def test_strict_mode_stops_after_failed_frame(make_app, source):
    app = make_app(stop_on_frame_error=True)
    app.init()
    app.running = True
    source.push(ValueError("bad tensor"))

    app.tick()

    assert app.failed_frames == 1
    assert not app.running


def test_render_failure_is_skipped_and_loop_continues(make_app, source, video, make_skeleton):
    app = make_app()
    app.init()
    app.running = True
    video.current_time = 30.0
    source.push_probs({"Neutral": 0.9}, skeleton=make_skeleton((float("nan"), 5.0, 0.9)))
    source.push_probs({"Neutral": 0.9}, skeleton=make_skeleton((300, 300, 0.9)))

    assert app.tick() is None
    assert app.failed_frames == 1
    assert app.running

    assert app.tick() is not None
    assert app.failed_frames == 1


def test_webcam_failure_is_skipped(make_app, webcam, monkeypatch):
    app = make_app()
    app.init()
    app.running = True

    def broken_update():
        raise OSError("camera unplugged")

    monkeypatch.setattr(webcam, "update", broken_update)

    assert app.tick() is None
    assert app.failed_frames == 1
    assert app.running


def test_strict_mode_stops_after_render_failure(make_app, source, make_skeleton):
    app = make_app(stop_on_frame_error=True)
    app.init()
    app.running = True
    source.push_probs({"Neutral": 0.9}, skeleton=make_skeleton((float("nan"), 5.0, 0.9)))

    app.tick()

    assert app.failed_frames == 1
    assert not app.running


def test_set_model_url_resets_session(make_app, source, video, session):
    app = make_app()
    app.init()
    video.current_time = 33.5
    source.push_probs({"Pose3": 0.9})
    app.tick()
    assert session.effect.active

    app.set_model_url("https://example.test/models/other/")

    assert app.config.model_url == "https://example.test/models/other/"
    assert not session.effect.active
    assert session.pose_states == {}
    assert len(session.timers) == 0


def test_keys(make_app, video, webcam):
    app = make_app()
    app.init()
    app.running = True

    assert app.handle_key(ord('p'))
    assert video.playing
    video.current_time = 12.0
    assert app.handle_key(ord('s'))
    assert not video.playing and video.current_time == 0.0

    assert app.handle_key(ord('w'))
    assert webcam.canvas is None
    assert not app.renderer.canvas.any()
    assert app.tick() is None

    assert not app.handle_key(ord('x'))
    assert app.handle_key(ord('q'))
    assert not app.running


def test_close_releases_source(make_app, source):
    app = make_app()
    app.init()
    app.close()
    assert source.closed
    assert not app.ready


class TestParseArgs:
    def test_defaults(self):
        config = parse_args([])
        assert config.model_url.startswith("https://teachablemachine.withgoogle.com/models/")
        assert config.video_path == "vid.mp4"
        assert config.sound_path == "explsn.mp3"
        assert config.camera_index == 0
        assert config.show_window
        assert not config.stop_on_frame_error

    def test_all_options(self):
        config = parse_args([
            "./models/mine", "--video", "clip.mp4", "--sound", "boom.wav",
            "--camera", "2", "--strict", "--play", "--headless", "--debug",
        ])
        assert config.model_url == "./models/mine"
        assert config.video_path == "clip.mp4"
        assert config.sound_path == "boom.wav"
        assert config.camera_index == 2
        assert config.stop_on_frame_error
        assert config.autoplay_video
        assert not config.show_window
        assert config.debug

    @pytest.mark.parametrize("argv", [["--camera", "front"], ["--camera"]])
    def test_bad_camera_keeps_default(self, argv):
        assert parse_args(argv).camera_index == 0


class TestRun:
    def test_windowed_run_until_quit_key(self, make_app, source, video, webcam, monkeypatch):
        app = make_app(autoplay_video=True, debug=True)
        app.config.show_window = True
        video.current_time = 33.5
        video.read_frame = lambda: np.zeros((10, 10, 3), dtype=np.uint8)
        source.push_probs({"Pose3": 0.9})

        shown = []
        keys = []
        destroyed = []
        debug_lines = []

        def wait_key(delay):
            keys.append(delay)
            return ord('q') if len(keys) == 30 else -1

        monkeypatch.setattr(app_module.cv2, "imshow", lambda title, image: shown.append(title))
        monkeypatch.setattr(app_module.cv2, "waitKey", wait_key)
        monkeypatch.setattr(app_module.cv2, "destroyAllWindows", lambda: destroyed.append(True))
        monkeypatch.setattr(app_module.logger, "debug", lambda msg: debug_lines.append(msg))

        app.run()

        assert app.frame_count == 30
        assert len(keys) == 30
        assert not app.running
        assert video.playing is False  # closed on exit
        assert shown.count(WINDOW_TITLE) == 30
        assert shown.count(VIDEO_WINDOW_TITLE) == 30
        assert [e.name for e in app.event_history] == ["pose3"]
        assert any("FPS" in line for line in debug_lines)
        assert source.closed
        assert webcam.canvas is None
        assert destroyed == [True]

    def test_autoplay_starts_video(self, make_app, source, video, monkeypatch):
        app = make_app(autoplay_video=True)
        played = []
        original_predict = source.predict

        def predict(frame):
            played.append(video.playing)
            app.running = False
            return original_predict(frame)

        monkeypatch.setattr(source, "predict", predict)

        app.run()

        assert played == [True]

    def test_headless_run_survives_failed_frame(self, make_app, source, monkeypatch):
        app = make_app()
        source.push(RuntimeError("estimator blew up"))
        original_predict = source.predict

        def predict(frame):
            if source.frames_seen == 4:
                app.running = False
            return original_predict(frame)

        monkeypatch.setattr(source, "predict", predict)

        app.run()

        assert source.frames_seen == 5
        assert app.failed_frames == 1
        assert app.frame_count == 4
        assert source.closed

    def test_keyboard_interrupt_closes_cleanly(self, make_app, source, monkeypatch):
        app = make_app()

        def predict(frame):
            raise KeyboardInterrupt

        monkeypatch.setattr(source, "predict", predict)

        app.run()

        assert source.closed
        assert not app.ready
        assert app.failed_frames == 0

    def test_init_failure_returns_without_looping(self, make_app, webcam):
        webcam.fail = True
        app = make_app()

        app.run()

        assert not app.ready
        assert app.frame_count == 0
        assert webcam.updates == 0
