"""Input handling and auto-hide state of the bottom transport bar."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from freikino import log
from freikino.transport_layout import TransportLayout, compute_layout, position_on_bar

IDLE_HIDE_MS = 2500
_FADE_IN_MS = 180.0
_FADE_OUT_MS = 260.0
_DEFAULT_DT_MS = 16
VOLUME_HOVER_GRACE_MS = 350

# Only ask for a new thumbnail once the hover time has moved this far.
THUMB_REQUEST_MIN_DELTA_NS = 150_000_000

_INTERACTIVE_MIN_ALPHA = 0.05


class PlaybackState(enum.Enum):
    """What the playback controller is doing."""

    NO_SOURCE = "no_source"
    PLAYING = "playing"
    PAUSED = "paused"


class PressedButton(enum.Enum):
    """The button armed by the last mouse-down, if any."""

    NONE = "none"
    PLAY = "play"
    STOP = "stop"
    FULLSCREEN = "fullscreen"
    VOLUME = "volume"


@dataclass(frozen=True)
class ThumbnailFrame:
    """A decoded preview image; ``pixels`` is tightly packed BGRA8."""

    pixels: bytes = b""
    width: int = 0
    height: int = 0
    pts_ns: int = -1


class PlaybackController(Protocol):
    """What the transport bar needs from playback."""

    def state(self) -> PlaybackState: ...

    def duration_ns(self) -> int: ...

    def current_time_ns(self) -> int: ...

    def toggle_pause(self) -> None: ...

    def stop(self) -> None: ...

    def seek_to(self, target_ns: int) -> None: ...

    def set_volume(self, v: float) -> None: ...

    def volume(self) -> float: ...

    def toggle_mute(self) -> None: ...

    def muted(self) -> bool: ...


class ThumbnailProvider(Protocol):
    """An asynchronous preview decoder."""

    def request(self, pts_ns: int) -> None: ...

    def peek_latest(self) -> Optional[ThumbnailFrame]: ...

    def latest_pts(self) -> int: ...


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def _slider_fraction(y: float, layout: TransportLayout) -> Optional[float]:
    span = layout.volume_slider_y1 - layout.volume_slider_y0
    if span <= 0.0:
        return None
    t = (layout.volume_slider_y1 - float(y)) / span
    return min(max(t, 0.0), 1.0)


class TransportOverlay:
    """Play/pause, stop, scrub bar, volume popup and fullscreen button.

    Fades out after a spell of mouse inactivity unless paused or
    scrubbing. Buttons fire on release over the same button. ``clock``
    returns the current time in milliseconds. Not thread-safe.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock if clock is not None else _monotonic_ms
        self._playback: Optional[PlaybackController] = None
        self._fs_toggle: Optional[Callable[[], None]] = None
        self._thumbnail_source: Optional[ThumbnailProvider] = None

        self._mouse_x = -1
        self._mouse_y = -1
        self._hover_play = False
        self._hover_stop = False
        self._hover_fs = False
        self._hover_seek = False
        self._hover_volume = False
        self._volume_grace_start_ms: Optional[int] = None
        self._volume_dragging = False
        self._seek_dragging = False
        self._pressed = PressedButton.NONE
        self._drag_progress = 0.0

        self._last_thumb_request_ns: Optional[int] = None
        self._thumb: Optional[ThumbnailFrame] = None
        self._thumb_pts = -1

        self._alpha = 0.0
        self._last_activity_ms: Optional[int] = None
        self._last_tick_ms: Optional[int] = self._clock()

    # -- wiring -----------------------------------------------------------

    def set_playback(self, playback: Optional[PlaybackController]) -> None:
        self._playback = playback

    def set_fullscreen_toggle(self, callback: Optional[Callable[[], None]]) -> None:
        """Called with no arguments when the fullscreen button is clicked."""
        self._fs_toggle = callback

    def set_thumbnail_source(self, source: Optional[ThumbnailProvider]) -> None:
        """Preview provider for scrub hover; None disables previews."""
        self._thumbnail_source = source

    # -- read-only state for drawing ----------------------------------------

    @property
    def playback(self) -> Optional[PlaybackController]:
        return self._playback

    @property
    def mouse_x(self) -> int:
        return self._mouse_x

    @property
    def mouse_y(self) -> int:
        return self._mouse_y

    @property
    def hover_play(self) -> bool:
        return self._hover_play

    @property
    def hover_stop(self) -> bool:
        return self._hover_stop

    @property
    def hover_fs(self) -> bool:
        return self._hover_fs

    @property
    def hover_seek(self) -> bool:
        return self._hover_seek

    @property
    def hover_volume(self) -> bool:
        """True while over the speaker or its popup (sticky)."""
        return self._hover_volume

    @property
    def seek_dragging(self) -> bool:
        return self._seek_dragging

    @property
    def volume_dragging(self) -> bool:
        return self._volume_dragging

    @property
    def pressed(self) -> PressedButton:
        return self._pressed

    @property
    def drag_progress(self) -> float:
        return self._drag_progress

    def thumbnail(self) -> Optional[ThumbnailFrame]:
        """The newest delivered preview, refreshed only when its pts changes."""
        source = self._thumbnail_source
        if source is None:
            return self._thumb
        pts = source.latest_pts()
        if pts < 0 or pts == self._thumb_pts:
            return self._thumb
        frame = source.peek_latest()
        if frame is None or frame.width <= 0 or frame.height <= 0:
            return self._thumb
        self._thumb = frame
        self._thumb_pts = pts
        return frame

    # -- queries ------------------------------------------------------------

    def has_source(self) -> bool:
        return self._playback is not None and self._playback.state() is not PlaybackState.NO_SOURCE

    def is_paused(self) -> bool:
        return self._playback is not None and self._playback.state() is PlaybackState.PAUSED

    def current_progress(self) -> float:
        """Fraction 0..1 of the way through; the drag position while scrubbing."""
        if self._seek_dragging:
            return self._drag_progress
        if self._playback is None:
            return 0.0
        dur = self._playback.duration_ns()
        if dur <= 0:
            return 0.0
        cur = self._playback.current_time_ns()
        if cur <= 0:
            return 0.0
        if cur >= dur:
            return 1.0
        return cur / dur

    def wants_mouse_capture(self) -> bool:
        """True mid-drag or while a button is armed."""
        return self._seek_dragging or self._volume_dragging or self._pressed is not PressedButton.NONE

    def alpha(self) -> float:
        """Current opacity of the bar, 0..1."""
        return self._alpha

    # -- input --------------------------------------------------------------

    def on_mouse_move(self, x: int, y: int, width: int, height: int) -> None:
        self._mouse_x = x
        self._mouse_y = y
        self._last_activity_ms = self._clock()
        layout = compute_layout(width, height)
        self._hover_play = layout.play_button.contains(x, y)
        self._hover_stop = layout.stop_button.contains(x, y)
        self._hover_fs = layout.fs_button.contains(x, y)

        # The popup only counts once the speaker itself has been hovered,
        # and it survives a short excursion outside its hit region.
        on_speaker = layout.volume_button.contains(x, y)
        on_popup = layout.volume_popup_hit.contains(x, y)
        if not self._hover_volume:
            self._hover_volume = on_speaker
            if on_speaker:
                self._volume_grace_start_ms = None
        elif on_speaker or on_popup or self._volume_dragging:
            self._volume_grace_start_ms = None
        else:
            now = self._clock()
            if self._volume_grace_start_ms is None:
                self._volume_grace_start_ms = now
            if now - self._volume_grace_start_ms > VOLUME_HOVER_GRACE_MS:
                self._hover_volume = False
                self._volume_grace_start_ms = None

        self._hover_seek = layout.seek_hit.contains(x, y)
        if self._seek_dragging:
            self._drag_progress = position_on_bar(x, layout)
        if self._volume_dragging and self._playback is not None:
            t = _slider_fraction(y, layout)
            if t is not None:
                self._playback.set_volume(t)

        # Previews only; the real seek waits for mouse-up so the playback
        # decoder is not torn down at mouse-move rate.
        if (
            self._thumbnail_source is not None
            and self._playback is not None
            and (self._hover_seek or self._seek_dragging)
        ):
            dur = self._playback.duration_ns()
            if dur > 0:
                target = int(position_on_bar(x, layout) * dur)
                last = self._last_thumb_request_ns
                if last is None or abs(target - last) >= THUMB_REQUEST_MIN_DELTA_NS:
                    self._last_thumb_request_ns = target
                    self._thumbnail_source.request(target)

    def on_lbutton_down(self, x: int, y: int, width: int, height: int) -> None:
        self._last_activity_ms = self._clock()
        if not self.has_source():
            return
        layout = compute_layout(width, height)

        if layout.play_button.contains(x, y):
            self._pressed = PressedButton.PLAY
            return
        if layout.stop_button.contains(x, y):
            self._pressed = PressedButton.STOP
            return
        if layout.fs_button.contains(x, y):
            self._pressed = PressedButton.FULLSCREEN
            return

        if self._hover_volume and layout.volume_popup_panel.contains(x, y):
            self._volume_dragging = True
            if self._playback is not None:
                t = _slider_fraction(y, layout)
                if t is not None:
                    self._playback.set_volume(t)
            return

        if layout.volume_button.contains(x, y):
            self._pressed = PressedButton.VOLUME
            return

        if layout.seek_hit.contains(x, y):
            self._seek_dragging = True
            self._drag_progress = position_on_bar(x, layout)

    def on_lbutton_up(self, x: int, y: int, width: int, height: int) -> None:
        self._last_activity_ms = self._clock()
        layout = compute_layout(width, height)
        playback = self._playback

        pressed = self._pressed
        self._pressed = PressedButton.NONE
        if pressed is not PressedButton.NONE and playback is not None:
            try:
                if pressed is PressedButton.PLAY:
                    if layout.play_button.contains(x, y):
                        playback.toggle_pause()
                elif pressed is PressedButton.STOP:
                    if layout.stop_button.contains(x, y):
                        playback.stop()
                elif pressed is PressedButton.FULLSCREEN:
                    if layout.fs_button.contains(x, y) and self._fs_toggle is not None:
                        self._fs_toggle()
                elif pressed is PressedButton.VOLUME:
                    if layout.volume_button.contains(x, y):
                        playback.toggle_mute()
            except Exception as exc:
                log.error("transport button release: {}", exc)

        if self._seek_dragging and playback is not None:
            dur = playback.duration_ns()
            if dur > 0:
                target = int(position_on_bar(x, layout) * dur)
                try:
                    playback.seek_to(target)
                except Exception as exc:
                    log.error("transport seek: {}", exc)
        self._seek_dragging = False
        self._volume_dragging = False

    def on_mouse_leave(self) -> None:
        """Drop hover state, unless a drag or press is in progress."""
        if self.wants_mouse_capture():
            return
        self._mouse_x = -1
        self._mouse_y = -1
        self._hover_play = False
        self._hover_stop = False
        self._hover_fs = False
        self._hover_seek = False
        self._hover_volume = False
        self._volume_grace_start_ms = None

    def hit_interactive(self, x: int, y: int, width: int, height: int) -> bool:
        """True over a button, the scrub bar or the open volume popup while visible."""
        if self._alpha <= _INTERACTIVE_MIN_ALPHA:
            return False
        layout = compute_layout(width, height)
        if any(
            rect.contains(x, y)
            for rect in (
                layout.play_button,
                layout.stop_button,
                layout.fs_button,
                layout.volume_button,
            )
        ):
            return True
        if (self._hover_volume or self._volume_dragging) and layout.volume_popup_panel.contains(x, y):
            return True
        return layout.seek_hit.contains(x, y)

    def hit_volume_popup(self, x: int, y: int, width: int, height: int) -> bool:
        """True when the popup is open and (x, y) lies in its hit region."""
        if not self._hover_volume and not self._volume_dragging:
            return False
        return compute_layout(width, height).volume_popup_hit.contains(x, y)

    def bump_activity(self) -> None:
        """Keep the bar visible after non-mouse activity."""
        self._last_activity_ms = self._clock()

    # -- animation ----------------------------------------------------------

    def tick_animation(self) -> None:
        """Advance the fade towards shown or hidden."""
        now = self._clock()
        if self._last_tick_ms is None:
            dt = _DEFAULT_DT_MS
        else:
            dt = max(now - self._last_tick_ms, 0)
        self._last_tick_ms = now

        idle_fresh = self._last_activity_ms is not None and now - self._last_activity_ms < IDLE_HIDE_MS
        target_visible = self.has_source() and (idle_fresh or self.is_paused() or self._seek_dragging)
        if target_visible:
            self._alpha = min(1.0, self._alpha + dt / _FADE_IN_MS)
        else:
            self._alpha = max(0.0, self._alpha - dt / _FADE_OUT_MS)