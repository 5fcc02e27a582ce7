from collections import deque

import pytest

from freikino.audio_frame import AudioFrame, AudioFrameSource


def test_frame_with_samples_is_valid():
    frame = AudioFrame(samples=[0.1, -0.1], frame_count=1, channel_count=2, sample_rate=48000)
    assert frame.valid() is True


def test_default_frame_is_invalid():
    assert AudioFrame().valid() is False


def test_zero_frame_count_is_invalid():
    assert AudioFrame(samples=[0.5], frame_count=0).valid() is False


def test_empty_samples_are_invalid():
    assert AudioFrame(samples=[], frame_count=4).valid() is False


def test_defaults_do_not_share_sample_lists():
    a = AudioFrame()
    b = AudioFrame()
    a.samples.append(1.0)
    assert b.samples == []


def test_source_is_abstract():
    with pytest.raises(TypeError):
        AudioFrameSource()


def test_concrete_source_hands_out_frames_then_none():
    class ListSource(AudioFrameSource):
        def __init__(self, frames):
            self._frames = deque(frames)

        def try_acquire_audio_frame(self):
            return self._frames.popleft() if self._frames else None

    first = AudioFrame(samples=[0.0, 0.0], frame_count=1, channel_count=2, pts_ns=10)
    source = ListSource([first])
    assert source.try_acquire_audio_frame() is first
    assert source.try_acquire_audio_frame() is None