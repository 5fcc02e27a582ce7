import pytest

from freikino.scene import DrawText, FillRect
from freikino.volume_osd import (
    EDGE_GAP,
    MIN_PANEL_LEFT,
    PANEL_HEIGHT,
    PANEL_WIDTH,
    VolumeOsd,
    volume_label,
)


class FakeClock:
    def __init__(self, now=5_000):
        self.now = now

    def __call__(self):
        return self.now


def shown(volume, muted, width=800):
    clock = FakeClock()
    osd = VolumeOsd(clock)
    osd.show(volume, muted)
    clock.now += 100
    return osd, clock, osd.draw(width, 600)


def test_label_muted_overrides_level():
    assert volume_label(0.8, True) == "Muted"


@pytest.mark.parametrize("volume,expected", [(0.5, "50%"), (1.0, "100%"), (0.0, "0%")])
def test_label_percentages(volume, expected):
    assert volume_label(volume, False) == expected


def test_label_shows_amplified_level():
    assert volume_label(2.0, False) == "200%"


def test_nothing_drawn_before_show():
    clock = FakeClock()
    osd = VolumeOsd(clock)
    clock.now += 500
    assert osd.draw(800, 600) == []


def test_panel_anchored_top_right():
    osd, _, cmds = shown(0.5, False)
    assert osd.alpha == 1.0
    panel = cmds[0]
    assert isinstance(panel, FillRect)
    assert panel.rect.right == 800 - EDGE_GAP
    assert panel.rect.width == PANEL_WIDTH
    assert panel.rect.top == EDGE_GAP
    assert panel.rect.height == PANEL_HEIGHT
    assert panel.opacity == pytest.approx(0.85)


def test_fill_proportional_to_volume():
    _, _, cmds = shown(0.5, False)
    fills = [c for c in cmds if isinstance(c, FillRect)]
    track, fill = fills[1], fills[2]
    assert fill.rect.left == track.rect.left
    assert fill.rect.width == pytest.approx(track.rect.width * 0.5)
    texts = [c for c in cmds if isinstance(c, DrawText)]
    assert texts[0].text == "50%"


def test_amplified_volume_clipped_to_bar():
    _, _, cmds = shown(1.5, False)
    fills = [c for c in cmds if isinstance(c, FillRect)]
    assert fills[2].rect.right == pytest.approx(fills[1].rect.right)
    assert [c.text for c in cmds if isinstance(c, DrawText)] == [volume_label(1.5, False)]


def test_muted_has_empty_fill_and_muted_label():
    _, _, cmds = shown(0.7, True)
    fills = [c for c in cmds if isinstance(c, FillRect)]
    assert fills[2].rect.width == 0.0
    assert [c.text for c in cmds if isinstance(c, DrawText)] == ["Muted"]


def test_narrow_window_clamps_panel_left():
    _, _, cmds = shown(0.5, False, width=100)
    assert cmds[0].rect.left == MIN_PANEL_LEFT
    assert any(isinstance(c, DrawText) for c in cmds)


def test_fades_out_after_hold():
    osd, clock, cmds = shown(0.5, False)
    assert cmds
    clock.now += 800
    osd.draw(800, 600)
    clock.now += 1000
    assert osd.draw(800, 600) == []
    assert osd.alpha == 0.0


def test_show_restarts_hold():
    osd, clock, _ = shown(0.5, False)
    clock.now += 700
    osd.show(0.6, False)
    clock.now += 500
    cmds = osd.draw(800, 600)
    assert osd.alpha == 1.0
    assert [c.text for c in cmds if isinstance(c, DrawText)] == ["60%"]