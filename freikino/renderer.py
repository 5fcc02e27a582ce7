"""Shared-mode audio output driven by a device endpoint.

The renderer opens the default render endpoint, checks that it mixes in
32-bit float, and runs a pump thread that keeps the device buffer filled
from an :class:`~freikino.audio_frame.AudioFrameSource`. It doubles as
the presentation clock: :meth:`AudioRenderer.now_ns` reports the stream
time the listener is hearing, derived from the device clock.
"""

from __future__ import annotations

import abc
import enum
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from freikino import log
from freikino.audio_frame import AudioFrameSource
from freikino.errors import E_NOTIMPL, E_UNEXPECTED, HResultError
from freikino.mixer import AudioMixer, position_to_ns

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_IEEE_FLOAT = 0x0003
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

KSDATAFORMAT_SUBTYPE_PCM = uuid.UUID("00000001-0000-0010-8000-00aa00389b71")
KSDATAFORMAT_SUBTYPE_IEEE_FLOAT = uuid.UUID("00000003-0000-0010-8000-00aa00389b71")

# Size of the extensible tail that follows the basic format header.
EXTENSIBLE_EXTRA_SIZE = 22

DEFAULT_BUFFER_DURATION_NS = 20_000_000  # 20 ms

_PUMP_WAIT_S = 0.2
_HEARTBEAT_S = 1.0
_PLACEHOLDER_CHANNELS = 2


class DataFlow(enum.Enum):
    """Direction of an endpoint."""

    RENDER = 0
    CAPTURE = 1
    ALL = 2


class Role(enum.Enum):
    """What a default endpoint is the default for."""

    CONSOLE = 0
    MULTIMEDIA = 1
    COMMUNICATIONS = 2


@dataclass(frozen=True)
class MixFormat:
    """The sample format the device mixes in."""

    format_tag: int
    channels: int
    samples_per_sec: int
    bits_per_sample: int
    block_align: int
    extra_size: int = 0
    sub_format: Optional[uuid.UUID] = None


def is_float32_mix(fmt: Optional[MixFormat]) -> bool:
    """True if ``fmt`` describes 32-bit IEEE float samples."""
    if fmt is None or fmt.bits_per_sample != 32:
        return False
    if fmt.format_tag == WAVE_FORMAT_IEEE_FLOAT:
        return True
    if fmt.format_tag == WAVE_FORMAT_EXTENSIBLE and fmt.extra_size >= EXTENSIBLE_EXTRA_SIZE:
        return fmt.sub_format == KSDATAFORMAT_SUBTYPE_IEEE_FLOAT
    return False


class AudioEndpoint(abc.ABC):
    """One opened render device. Failing calls raise :class:`HResultError`."""

    @abc.abstractmethod
    def friendly_name(self) -> str:
        """The user-facing device name."""

    @abc.abstractmethod
    def mix_format(self) -> MixFormat:
        """The format the device mixes in."""

    @abc.abstractmethod
    def initialize(self, buffer_duration_ns: int) -> None:
        """Open a shared-mode stream with the given buffer duration."""

    @abc.abstractmethod
    def set_event_handle(self, event: threading.Event) -> None:
        """Set ``event`` whenever the device wants more data."""

    @abc.abstractmethod
    def buffer_frames(self) -> int:
        """Size of the device buffer in frames."""

    @abc.abstractmethod
    def clock_frequency(self) -> int:
        """Ticks per second of :meth:`position`."""

    @abc.abstractmethod
    def position(self) -> int:
        """How far playback has advanced, in clock ticks."""

    @abc.abstractmethod
    def padding(self) -> int:
        """Frames queued in the device buffer and not yet played."""

    @abc.abstractmethod
    def write(self, samples: Sequence[float], frames: int, silent: bool = False) -> None:
        """Queue ``frames`` interleaved frames; ``silent`` marks them as silence."""

    @abc.abstractmethod
    def start(self) -> None:
        """Start the device clock and playback."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Stop playback, keeping the clock position."""

    @abc.abstractmethod
    def reset(self) -> None:
        """Drop queued data and rewind the clock to zero."""

    def close(self) -> None:
        """Release the device."""


EndpointFactory = Callable[[], AudioEndpoint]


def _read_friendly_name(endpoint: AudioEndpoint) -> str:
    try:
        return endpoint.friendly_name() or ""
    except Exception:
        return ""


class AudioRenderer:
    """Event-driven output on the default render endpoint.

    ``endpoint_factory`` opens whatever is currently the default render
    endpoint; it is called again by :meth:`reload_default_device`.
    """

    def __init__(self, endpoint_factory: EndpointFactory) -> None:
        self._factory = endpoint_factory
        self._endpoint: Optional[AudioEndpoint] = None
        self._mix_format: Optional[MixFormat] = None
        self._buffer_frames = 0
        self._clock_freq = 0
        self._device_name = ""

        self._event = threading.Event()
        self._mixer = AudioMixer(_PLACEHOLDER_CHANNELS)
        self._source: Optional[AudioFrameSource] = None
        self._pre_mute_volume = 1.0

        self._start_lock = threading.Lock()
        self._running = False
        self._stop_requested = False
        self._thread: Optional[threading.Thread] = None

        self._create_called = False
        self._notify: Optional[Callable[[], None]] = None

    def __enter__(self) -> "AudioRenderer":
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
        self._notify = None
        if self._endpoint is not None:
            self._endpoint.close()

    # -- device -----------------------------------------------------------

    def create(self) -> None:
        """Open the default endpoint; refuses devices that do not mix in float32."""
        if self._endpoint is not None:
            raise HResultError(E_UNEXPECTED)
        self._create_called = True
        endpoint = self._factory()
        fmt = endpoint.mix_format()
        if not is_float32_mix(fmt):
            log.error(
                "audio: mix format is not float32 (tag={} bps={}), "
                "refusing to open until format-conversion path lands",
                fmt.format_tag,
                fmt.bits_per_sample,
            )
            endpoint.close()
            raise HResultError(E_NOTIMPL)
        self._open(endpoint, fmt)
        buffer_ms = (
            self._buffer_frames * 1000 // fmt.samples_per_sec if fmt.samples_per_sec else 0
        )
        log.info(
            "audio: {} Hz, {} ch, buffer={} frames ({} ms), clock_freq={}, device='{}'",
            fmt.samples_per_sec,
            fmt.channels,
            self._buffer_frames,
            buffer_ms,
            self._clock_freq,
            self._device_name,
        )

    def _open(self, endpoint: AudioEndpoint, fmt: MixFormat) -> None:
        try:
            endpoint.initialize(DEFAULT_BUFFER_DURATION_NS)
            endpoint.set_event_handle(self._event)
            buffer_frames = endpoint.buffer_frames()
            clock_freq = endpoint.clock_frequency()
        except BaseException:
            endpoint.close()
            raise
        self._endpoint = endpoint
        self._mix_format = fmt
        self._buffer_frames = buffer_frames
        self._clock_freq = clock_freq
        self._device_name = _read_friendly_name(endpoint)
        self._adopt_channels(fmt.channels)

    def _adopt_channels(self, channels: int) -> None:
        old = self._mixer
        if old.channels == channels:
            return
        new = AudioMixer(channels)
        if old.muted():
            new.set_volume(self._pre_mute_volume)
            new.toggle_mute()
        else:
            new.set_volume(old.volume())
        new.set_frame_source(self._source)
        self._mixer = new

    def reload_default_device(self) -> None:
        """Reopen on the current default endpoint. Logs failures; never raises."""
        self.stop()
        old_format = self._mix_format

        if self._endpoint is not None:
            self._endpoint.close()
        self._endpoint = None
        self._mix_format = None
        self._buffer_frames = 0
        self._clock_freq = 0
        self._device_name = ""

        try:
            endpoint = self._factory()
            fmt = endpoint.mix_format()
            self._open(endpoint, fmt)
            log.info(
                "audio: reloaded default device -> '{}', {} Hz, {} ch",
                self._device_name,
                fmt.samples_per_sec,
                fmt.channels,
            )
            if old_format != fmt:
                log.warn(
                    "audio: mix format changed with new device; "
                    "reopen the current file for best quality"
                )
            # Keep a pump consuming frames, but match the caller's paused state.
            self.start()
            if self._endpoint is not None:
                self._endpoint.stop()
        except HResultError as exc:
            log.error("audio: reload_default_device failed 0x{:08X}", exc.code)
        except Exception as exc:
            log.error("audio: reload_default_device: {}", exc)

    def device_friendly_name(self) -> str:
        """Name of the bound endpoint, or an empty string."""
        return self._device_name

    def set_device_change_notify(self, callback: Optional[Callable[[], None]]) -> None:
        """Call ``callback`` when the default playback device changes; None unsubscribes."""
        if callback is None:
            self._notify = None
            return
        if not self._create_called:
            log.warn("audio: cannot subscribe to device changes before create()")
            return
        self._notify = callback

    def on_default_device_changed(self, flow: DataFlow, role: Role) -> bool:
        """Report a default-device change; returns True if the subscriber was told."""
        if flow is not DataFlow.RENDER or role not in (Role.CONSOLE, Role.MULTIMEDIA):
            return False
        callback = self._notify
        if callback is None:
            return False
        callback()
        return True

    def mix_format(self) -> Optional[MixFormat]:
        """The device mix format, or None before :meth:`create`."""
        return self._mix_format

    def set_frame_source(self, source: Optional[AudioFrameSource]) -> None:
        self._source = source
        self._mixer.set_frame_source(source)

    # -- transport --------------------------------------------------------

    def start(self) -> None:
        """Start the device and the pump thread. Does nothing if running."""
        with self._start_lock:
            if self._running:
                return
            endpoint = self._endpoint
            if endpoint is None:
                raise HResultError(E_UNEXPECTED)
            self._stop_requested = False

            # Pre-fill one buffer of silence so the clock has something to run on.
            frames = self._buffer_frames
            try:
                endpoint.write([0.0] * (frames * self._mixer.channels), frames, silent=True)
            except HResultError:
                pass

            endpoint.start()
            self._running = True
            self._thread = threading.Thread(
                target=self._render_loop, name="audio-pump", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        """Stop the pump and the device and forget the timeline. Idempotent."""
        self._stop_requested = True
        self._event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None
        endpoint = self._endpoint
        if endpoint is not None:
            try:
                endpoint.stop()
            except HResultError:
                pass
            # Without a reset the device clock would carry the previous
            # file's position into the next session.
            try:
                endpoint.reset()
            except HResultError:
                pass
        self._mixer.reset_timeline()
        self._mixer.set_seeking(False)
        self._running = False

    def pause(self) -> None:
        """Freeze output and the clock; the pump keeps running."""
        if self._endpoint is None:
            return
        try:
            self._endpoint.stop()
        except HResultError:
            pass

    def resume(self) -> None:
        """Unfreeze output and leave seek mode."""
        if self._endpoint is None:
            return
        self._mixer.set_seeking(False)
        try:
            self._endpoint.start()
        except HResultError:
            pass

    def reset_for_seek(self) -> None:
        """Silence the pump, clear the device buffer and the clock anchor."""
        if self._endpoint is None:
            return
        self._mixer.set_seeking(True)
        for step in (self._endpoint.stop, self._endpoint.reset):
            try:
                step()
            except HResultError:
                pass
        self._mixer.reset_timeline()

    def set_start_pts(self, pts_ns: int) -> None:
        self._mixer.set_start_pts(pts_ns)

    # -- volume -----------------------------------------------------------

    def set_volume(self, v: float) -> None:
        """Set the software gain, clamped to [0.0, 2.0]."""
        self._mixer.set_volume(v)
        if self._mixer.volume() > 0.0:
            self._pre_mute_volume = self._mixer.volume()

    def toggle_mute(self) -> None:
        if not self._mixer.muted():
            self._pre_mute_volume = self._mixer.volume()
        self._mixer.toggle_mute()

    def volume(self) -> float:
        return self._mixer.volume()

    def muted(self) -> bool:
        return self._mixer.muted()

    # -- clock ------------------------------------------------------------

    def _device_position_ns(self) -> Optional[int]:
        endpoint = self._endpoint
        if endpoint is None or self._clock_freq <= 0:
            return None
        try:
            return position_to_ns(endpoint.position(), self._clock_freq)
        except HResultError:
            return None

    def now_ns(self) -> int:
        """Stream time currently being heard, or 0 before the clock is anchored."""
        if self._endpoint is None or self._clock_freq <= 0:
            return 0
        if self._mixer.needs_reseed():
            return self._mixer.now_ns(None)
        return self._mixer.now_ns(self._device_position_ns())

    # -- pump -------------------------------------------------------------

    def _pump(self) -> Optional[int]:
        """One buffer top-up; returns frames written, or None if the write failed."""
        endpoint = self._endpoint
        if endpoint is None:
            return 0
        try:
            padding = endpoint.padding()
        except HResultError:
            return 0
        writable = self._buffer_frames - padding
        if writable <= 0:
            return 0
        samples = self._mixer.fill(writable, self._device_position_ns())
        try:
            endpoint.write(samples, writable)
        except HResultError:
            return None
        return writable

    def pump_once(self) -> int:
        """Top up the device buffer once; returns the number of frames written."""
        return self._pump() or 0

    def _render_loop(self) -> None:
        fills = frames_out = write_failures = 0
        last_beat = time.monotonic()
        try:
            while not self._stop_requested:
                now = time.monotonic()
                if now - last_beat >= _HEARTBEAT_S:
                    last_beat = now
                    log.info(
                        "audio hb: fills={} wrote={} gb_fail={} seeking={} pts_ns={}",
                        fills,
                        frames_out,
                        write_failures,
                        int(self._mixer.seeking()),
                        self.now_ns(),
                    )
                    fills = frames_out = write_failures = 0

                self._event.wait(_PUMP_WAIT_S)
                self._event.clear()
                if self._stop_requested:
                    break

                written = self._pump()
                if written is None:
                    write_failures += 1
                elif written > 0:
                    fills += 1
                    frames_out += written
        except Exception as exc:
            log.error("audio pump: {}", exc)

    # -- visualiser tap ---------------------------------------------------

    def tap_capacity(self) -> int:
        return self._mixer.tap_capacity()

    def read_tap_snapshot(self, count: int) -> List[float]:
        """The latest ``count`` post-gain mono samples, oldest first."""
        return self._mixer.read_tap_snapshot(count)