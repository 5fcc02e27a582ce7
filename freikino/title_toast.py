"""A short-lived banner near the top of the window naming the current file."""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Union

from freikino.scene import DrawText, FillRect, Rect

_HOLD_MS = 1000
_FADE_IN_MS = 120.0
_FADE_OUT_MS = 300.0
_DEFAULT_DT_MS = 16

_TOP_MARGIN = 24.0
_PANEL_HEIGHT = 40.0
_PANEL_PAD_X = 18.0
_PANEL_SIDE_MARGIN = 40.0
_MIN_PANEL_WIDTH = 40.0

FONT_SIZE = 16.0
BACKGROUND = (0.0, 0.0, 0.0, 0.55)
TEXT_COLOR = (1.0, 1.0, 1.0, 1.0)

Command = Union[FillRect, DrawText]


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class TitleToast:
    """Fades in, holds for about a second, fades out. Purely passive.

    ``clock`` returns the current time in milliseconds; it defaults to a
    monotonic clock. :meth:`draw` advances the fade and returns the
    drawing commands for this frame.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock if clock is not None else _monotonic_ms
        self._text = ""
        self._shown_at_ms: Optional[int] = None
        self._alpha = 0.0
        self._last_tick_ms: Optional[int] = self._clock()

    def show(self, text: str) -> None:
        """Replace the text and restart the hold window from now."""
        self._text = text
        self._shown_at_ms = self._clock()

    def _tick(self) -> None:
        # Advance even while invisible so the fade-out plays after the hold.
        now = self._clock()
        if self._last_tick_ms is None:
            dt = _DEFAULT_DT_MS
        else:
            dt = max(now - self._last_tick_ms, 0)
        self._last_tick_ms = now

        shown = self._shown_at_ms
        within_hold = shown is not None and now >= shown and now - shown < _HOLD_MS
        if within_hold:
            self._alpha = min(1.0, self._alpha + dt / _FADE_IN_MS)
        else:
            self._alpha = max(0.0, self._alpha - dt / _FADE_OUT_MS)

    def draw(self, width: int, height: int) -> List[Command]:
        """Advance the animation and return this frame's commands (maybe none)."""
        del height
        self._tick()
        alpha = self._alpha
        if alpha <= 0.001 or not self._text:
            return []

        panel = Rect(
            _PANEL_SIDE_MARGIN,
            _TOP_MARGIN,
            float(width) - _PANEL_SIDE_MARGIN,
            _TOP_MARGIN + _PANEL_HEIGHT,
        )
        if panel.right <= panel.left + _MIN_PANEL_WIDTH:
            # A toast squeezed into a tiny window looks worse than none.
            return []

        text_rect = Rect(
            panel.left + _PANEL_PAD_X,
            panel.top,
            panel.right - _PANEL_PAD_X,
            panel.bottom,
        )
        return [
            FillRect(panel, BACKGROUND, alpha * 0.85),
            DrawText(self._text, text_rect, FONT_SIZE, "center", TEXT_COLOR, alpha),
        ]