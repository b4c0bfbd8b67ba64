import pytest

from pose_burst.video import InstructionVideo


@pytest.fixture
def player(clock):
    # missing file: the clock still runs, there are just no frames
    return InstructionVideo("does-not-exist.mp4", clock=clock)


def test_clock_advances_only_while_playing(player, clock):
    assert player.current_time == 0.0
    clock.advance(5.0)
    assert player.current_time == 0.0

    player.play()
    clock.advance(2.5)
    assert player.current_time == pytest.approx(2.5)

    player.pause()
    clock.advance(10.0)
    assert player.current_time == pytest.approx(2.5)


def test_seek_while_playing(player, clock):
    player.play()
    clock.advance(1.0)
    player.seek(33.0)
    clock.advance(0.5)
    assert player.current_time == pytest.approx(33.5)


def test_stop_rewinds(player, clock):
    player.play()
    clock.advance(40.0)
    player.stop()
    assert not player.playing
    assert player.current_time == 0.0


def test_no_frames_without_file(player):
    player.play()
    assert player.read_frame() is None
    player.close()
