"""Software mixing for the audio output: gain, mute, clock anchoring and a tap.

The mixer owns everything the output pump does to samples. It does not
talk to a device: the caller passes in how far the device clock has
advanced, and receives the interleaved float buffer to hand to the device.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from freikino.audio_frame import AudioFrameSource

_NS_PER_SECOND = 1_000_000_000
_TAP_CAPACITY = 8192
_MAX_VOLUME = 2.0


def position_to_ns(position: int, frequency: int) -> int:
    """Convert a device clock position in ticks of ``frequency`` Hz to nanoseconds."""
    if frequency <= 0:
        raise ValueError("clock frequency must be positive")
    seconds, remain = divmod(position, frequency)
    return seconds * _NS_PER_SECOND + (remain * _NS_PER_SECOND) // frequency


class AudioMixer:
    """Pulls decoded frames from a source and builds device buffers.

    Also keeps the playback timeline anchor: the pts of the first real
    sample minus the device position at which it was written, so that
    ``now_ns`` reports what the listener actually hears.
    """

    def __init__(self, channels: int) -> None:
        if channels < 1:
            raise ValueError("channel count must be >= 1")
        self._channels = channels
        self._lock = threading.Lock()
        self._source: Optional[AudioFrameSource] = None

        self._start_pts_ns: Optional[int] = None
        self._needs_reseed = True
        self._seeking = False

        self._residual: List[float] = []

        self._volume = 1.0
        self._saved_volume = 1.0
        self._muted = False

        self._tap_ring: List[float] = [0.0] * _TAP_CAPACITY
        self._tap_write_idx = 0

    @property
    def channels(self) -> int:
        return self._channels

    def set_frame_source(self, source: Optional[AudioFrameSource]) -> None:
        """Attach a producer, or detach with None."""
        with self._lock:
            self._source = source

    # -- volume -----------------------------------------------------------

    def set_volume(self, v: float) -> None:
        """Set the gain, clamped to [0.0, 2.0]; zero counts as muted."""
        v = min(max(float(v), 0.0), _MAX_VOLUME)
        with self._lock:
            self._volume = v
            if v > 0.0:
                self._saved_volume = v
                self._muted = False
            else:
                self._muted = True

    def toggle_mute(self) -> None:
        """Mute, remembering the level, or restore the remembered level."""
        with self._lock:
            if self._muted:
                restore = self._saved_volume
                if restore <= 0.0:
                    restore = 1.0
                self._volume = restore
                self._muted = False
            else:
                self._saved_volume = self._volume
                self._volume = 0.0
                self._muted = True

    def volume(self) -> float:
        return self._volume

    def muted(self) -> bool:
        return self._muted

    # -- timeline ---------------------------------------------------------

    def set_seeking(self, seeking: bool) -> None:
        """While seeking, fills are silent and the source is left untouched."""
        with self._lock:
            self._seeking = bool(seeking)

    def seeking(self) -> bool:
        return self._seeking

    def set_start_pts(self, pts_ns: int) -> None:
        """Anchor the timeline at ``pts_ns`` by hand (used while seeking)."""
        with self._lock:
            self._start_pts_ns = pts_ns

    def reset_timeline(self) -> None:
        """Forget the anchor and leftover samples; the next real frame re-anchors."""
        with self._lock:
            self._start_pts_ns = None
            self._needs_reseed = True
            self._residual = []

    def needs_reseed(self) -> bool:
        return self._needs_reseed

    def now_ns(self, device_position_ns: Optional[int]) -> int:
        """Current playback time given how far the device clock has run.

        Returns 0 before any anchor exists, and holds at the anchor until
        the first real sample has been written or when the device position
        is unavailable (None).
        """
        with self._lock:
            start = self._start_pts_ns
            if start is None:
                return 0
            if self._needs_reseed or device_position_ns is None:
                return start
            return start + device_position_ns

    # -- buffers ----------------------------------------------------------

    def fill(self, frame_count: int, device_position_ns: Optional[int] = None) -> List[float]:
        """Build ``frame_count`` interleaved frames for the device.

        ``device_position_ns`` is the device clock at this moment; it is used
        to re-anchor the timeline when the first real frame arrives after a
        start or seek. Underruns are padded with silence.
        """
        if frame_count < 0:
            raise ValueError("frame count must not be negative")
        channels = self._channels
        needed = frame_count * channels

        with self._lock:
            if self._seeking:
                return [0.0] * needed

            out: List[float] = []
            if self._residual:
                out.extend(self._residual[:needed])
                self._residual = self._residual[needed:]

            while len(out) < needed and self._source is not None:
                frame = self._source.try_acquire_audio_frame()
                if frame is None:
                    break
                if not frame.samples:
                    continue
                if self._needs_reseed:
                    pos_ns = device_position_ns if device_position_ns is not None else 0
                    self._start_pts_ns = frame.pts_ns - pos_ns
                    self._needs_reseed = False
                remaining = needed - len(out)
                samples = frame.samples
                if len(samples) <= remaining:
                    out.extend(samples)
                else:
                    out.extend(samples[:remaining])
                    self._residual = list(samples[remaining:])

            if len(out) < needed:
                out.extend([0.0] * (needed - len(out)))

            gain = self._volume
            if gain != 1.0:
                out = [s * gain for s in out]

            write_idx = self._tap_write_idx
            for f in range(frame_count):
                chunk = out[f * channels:(f + 1) * channels]
                self._tap_ring[(write_idx + f) % _TAP_CAPACITY] = sum(chunk) / channels
            self._tap_write_idx = write_idx + frame_count
            return out

    # -- visualiser tap ---------------------------------------------------

    def tap_capacity(self) -> int:
        return _TAP_CAPACITY

    def read_tap_snapshot(self, count: int) -> List[float]:
        """The most recent ``count`` mono samples, oldest first, zero-padded in front."""
        if count <= 0:
            return []
        count = min(count, _TAP_CAPACITY)
        with self._lock:
            write_idx = self._tap_write_idx
            if write_idx < count:
                return [0.0] * (count - write_idx) + self._tap_ring[:write_idx]
            start = write_idx - count
            return [self._tap_ring[(start + i) % _TAP_CAPACITY] for i in range(count)]