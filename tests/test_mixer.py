from collections import deque

import pytest

from freikino.audio_frame import AudioFrame, AudioFrameSource
from freikino.mixer import AudioMixer, position_to_ns


class ListSource(AudioFrameSource):
    def __init__(self, frames):
        self.frames = deque(frames)

    def try_acquire_audio_frame(self):
        return self.frames.popleft() if self.frames else None


def make_frame(samples, channels=2, pts_ns=0):
    return AudioFrame(
        samples=list(samples),
        frame_count=len(samples) // channels,
        channel_count=channels,
        sample_rate=48000,
        pts_ns=pts_ns,
    )


def test_position_to_ns_one_second():
    assert position_to_ns(48000, 48000) == 1_000_000_000


def test_position_to_ns_rejects_zero_frequency():
    with pytest.raises(ValueError):
        position_to_ns(10, 0)


def test_position_to_ns_monotonic():
    values = [position_to_ns(p, 44100) for p in range(0, 100000, 777)]
    assert values == sorted(values)


def test_invalid_channel_count():
    with pytest.raises(ValueError):
        AudioMixer(0)


def test_set_volume_clamps_to_range():
    m = AudioMixer(2)
    m.set_volume(5.0)
    assert m.volume() == 2.0
    assert m.muted() is False
    m.set_volume(-1.0)
    assert m.volume() == 0.0
    assert m.muted() is True


def test_toggle_mute_round_trip():
    m = AudioMixer(2)
    m.set_volume(0.5)
    m.toggle_mute()
    assert m.muted() is True
    assert m.volume() == 0.0
    m.toggle_mute()
    assert m.muted() is False
    assert m.volume() == 0.5


def test_unmute_after_zero_volume_restores_previous_level():
    m = AudioMixer(2)
    m.set_volume(0.75)
    m.set_volume(0.0)
    m.toggle_mute()
    assert m.volume() == 0.75


def test_now_ns_before_anchor_is_zero():
    m = AudioMixer(2)
    assert m.now_ns(123456) == 0


def test_now_ns_holds_at_anchor_until_reseed():
    m = AudioMixer(2)
    m.set_start_pts(5_000)
    assert m.needs_reseed() is True
    assert m.now_ns(999_999) == 5_000


def test_first_frame_reseeds_timeline():
    m = AudioMixer(2)
    m.set_frame_source(ListSource([make_frame([0.1, 0.2], pts_ns=10_000_000)]))
    m.fill(1, device_position_ns=4_000_000)
    assert m.needs_reseed() is False
    assert m.now_ns(4_000_000) == 10_000_000
    assert m.now_ns(None) == 10_000_000 - 4_000_000


def test_fill_passes_samples_through_at_unity_gain():
    m = AudioMixer(2)
    samples = [0.1, -0.2, 0.3, -0.4]
    m.set_frame_source(ListSource([make_frame(samples)]))
    assert m.fill(2) == samples


def test_fill_carries_residual_to_next_call():
    m = AudioMixer(2)
    samples = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6]
    m.set_frame_source(ListSource([make_frame(samples)]))
    first = m.fill(2)
    second = m.fill(1)
    assert first + second == samples


def test_fill_pads_underrun_with_silence():
    m = AudioMixer(2)
    m.set_frame_source(ListSource([make_frame([0.5, 0.5])]))
    out = m.fill(3)
    assert len(out) == 6
    assert out[:2] == [0.5, 0.5]
    assert all(s == 0.0 for s in out[2:])


def test_fill_skips_empty_frames():
    m = AudioMixer(1)
    m.set_frame_source(ListSource([make_frame([], channels=1), make_frame([0.25], channels=1)]))
    assert m.fill(1) == [0.25]


def test_seeking_writes_silence_and_leaves_source():
    m = AudioMixer(2)
    source = ListSource([make_frame([0.5, 0.5])])
    m.set_frame_source(source)
    m.set_seeking(True)
    out = m.fill(4)
    assert len(out) == 8
    assert all(s == 0.0 for s in out)
    assert len(source.frames) == 1
    m.set_seeking(False)
    assert m.fill(1) == [0.5, 0.5]


def test_muted_fill_is_silent():
    m = AudioMixer(2)
    m.set_frame_source(ListSource([make_frame([0.5, -0.5])]))
    m.toggle_mute()
    assert all(s == 0.0 for s in m.fill(1))


def test_gain_scales_each_sample():
    m = AudioMixer(1)
    samples = [0.25, -0.5]
    m.set_frame_source(ListSource([make_frame(samples, channels=1)]))
    m.set_volume(2.0)
    out = m.fill(2)
    assert out == [0.5, -1.0]


def test_reset_timeline_drops_residual_and_anchor():
    m = AudioMixer(1)
    m.set_frame_source(ListSource([make_frame([0.1, 0.2, 0.3], channels=1, pts_ns=7)]))
    m.fill(1)
    m.reset_timeline()
    assert m.needs_reseed() is True
    assert m.now_ns(100) == 0
    assert m.fill(2) == [0.0, 0.0]


def test_tap_capacity():
    assert AudioMixer(2).tap_capacity() == 8192


def test_tap_snapshot_pads_front_with_zeros():
    m = AudioMixer(1)
    m.set_frame_source(ListSource([make_frame([0.25, 0.5], channels=1)]))
    m.fill(2)
    snap = m.read_tap_snapshot(4)
    assert snap == [0.0, 0.0, 0.25, 0.5]


def test_tap_snapshot_downmixes_to_mono():
    m = AudioMixer(2)
    m.set_frame_source(ListSource([make_frame([0.5, 0.5, -0.25, -0.25])]))
    m.fill(2)
    assert m.read_tap_snapshot(2) == [0.5, -0.25]


def test_tap_snapshot_clamps_to_capacity_and_wraps():
    m = AudioMixer(1)
    m.fill(m.tap_capacity() + 10)
    snap = m.read_tap_snapshot(m.tap_capacity() * 2)
    assert len(snap) == m.tap_capacity()
    assert m.read_tap_snapshot(0) == []