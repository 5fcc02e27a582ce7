"""A small top-right pill showing the volume level after it changes."""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Union

from freikino.scene import DrawText, FillRect, Rect

_HOLD_MS = 800
_FADE_IN_MS = 90.0
_FADE_OUT_MS = 260.0
_DEFAULT_DT_MS = 16

PANEL_WIDTH = 220.0
PANEL_HEIGHT = 56.0
EDGE_GAP = 24.0
PAD_X = 14.0
BAR_HEIGHT = 6.0
LABEL_WIDTH = 72.0
MIN_PANEL_LEFT = 10.0
MIN_BAR_WIDTH = 8.0

FONT_SIZE = 14.0
BACKGROUND = (0.0, 0.0, 0.0, 0.62)
TRACK = (1.0, 1.0, 1.0, 0.22)
BAR = (1.0, 1.0, 1.0, 1.0)
TEXT_COLOR = (1.0, 1.0, 1.0, 1.0)

Command = Union[FillRect, DrawText]


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def volume_label(volume: float, muted: bool) -> str:
    """``Muted`` or the level as a rounded percentage, e.g. ``75%``."""
    if muted:
        return "Muted"
    return f"{int(volume * 100.0 + 0.5)}%"


class VolumeOsd:
    """Fades in on :meth:`show`, holds briefly, then fades out.

    ``volume`` ranges over 0.0 to 2.0; levels above 1.0 fill the bar and
    show in the label. ``clock`` returns the current time in milliseconds.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock if clock is not None else _monotonic_ms
        self._volume = 1.0
        self._muted = False
        self._shown_at_ms: Optional[int] = None
        self._alpha = 0.0
        self._last_tick_ms: Optional[int] = self._clock()

    @property
    def alpha(self) -> float:
        return self._alpha

    def show(self, volume: float, muted: bool) -> None:
        """Display ``volume`` (or "Muted") and restart the hold window."""
        self._volume = float(volume)
        self._muted = bool(muted)
        self._shown_at_ms = self._clock()

    def _tick(self) -> None:
        now = self._clock()
        if self._last_tick_ms is None:
            dt = _DEFAULT_DT_MS
        else:
            dt = max(now - self._last_tick_ms, 0)
        self._last_tick_ms = now

        shown = self._shown_at_ms
        holding = shown is not None and now >= shown and now - shown < _HOLD_MS
        if holding:
            self._alpha = min(1.0, self._alpha + dt / _FADE_IN_MS)
        else:
            self._alpha = max(0.0, self._alpha - dt / _FADE_OUT_MS)

    def draw(self, width: int, height: int) -> List[Command]:
        """Advance the fade and return this frame's commands (maybe none)."""
        del height
        self._tick()
        alpha = self._alpha
        if alpha <= 0.001:
            return []

        right = float(width) - EDGE_GAP
        panel = Rect(
            max(right - PANEL_WIDTH, MIN_PANEL_LEFT),
            EDGE_GAP,
            right,
            EDGE_GAP + PANEL_HEIGHT,
        )
        out: List[Command] = [FillRect(panel, BACKGROUND, alpha * 0.85)]

        bar_top = panel.top + (PANEL_HEIGHT - BAR_HEIGHT) * 0.5
        bar_area = Rect(
            panel.left + PAD_X,
            bar_top,
            panel.right - LABEL_WIDTH - 6.0,
            bar_top + BAR_HEIGHT,
        )
        if bar_area.width > MIN_BAR_WIDTH:
            out.append(FillRect(bar_area, TRACK, alpha))
            # Anything over full amplification is clipped to the bar end.
            level = 0.0 if self._muted else min(max(self._volume, 0.0), 1.0)
            fill = Rect(
                bar_area.left,
                bar_area.top,
                bar_area.left + bar_area.width * level,
                bar_area.bottom,
            )
            out.append(FillRect(fill, BAR, alpha))

        label_rect = Rect(
            panel.right - LABEL_WIDTH - PAD_X,
            panel.top,
            panel.right - PAD_X,
            panel.bottom,
        )
        out.append(
            DrawText(
                volume_label(self._volume, self._muted),
                label_rect,
                FONT_SIZE,
                "trailing",
                TEXT_COLOR,
                alpha,
            )
        )
        return out