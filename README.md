# freikino

The platform-independent core of a video player, for use as a library. It has no dependencies outside the standard library.

## What is in it

- `freikino.frame_queue.SpscQueue` is a bounded ring queue for one producer thread and one consumer thread. The slot count must be a power of two and at least 2. It holds at most `slots - 1` items. `try_push` returns `False` when the queue is full, and `try_pop` returns `None` when it is empty.
- `freikino.audio_frame.AudioFrame` is a chunk of interleaved float samples with a `pts_ns` timestamp. `AudioFrameSource` is the abstract producer. Its `try_acquire_audio_frame()` returns a frame, or `None` if no frame is ready.
- `freikino.mixer.AudioMixer` fills output buffers from a frame source:
  - It keeps leftover samples between fills and pads underruns with silence.
  - It applies software gain. `set_volume` clamps the gain to 0.0–2.0, and `toggle_mute` mutes and later restores the previous level.
  - It writes silence while seeking.
  - It re-anchors the timeline on the first real frame after a reset, which `now_ns` then reports from.
  - It keeps an 8192-sample mono tap that `read_tap_snapshot` reads for visualisers.
  - `position_to_ns` converts a device clock position to nanoseconds.
- `freikino.renderer.AudioRenderer` drives the mixer against an `AudioEndpoint` that you supply through an endpoint factory:
  - `create` refuses any mix format that is not 32-bit float (`is_float32_mix`) and raises `HResultError`.
  - `start`, `stop`, `pause`, `resume` and `reset_for_seek` control playback.
  - `start` runs a background pump thread. `pump_once` tops up the device buffer by hand.
  - `now_ns` is the presentation clock.
  - `reload_default_device` reopens on the current default endpoint.
  - `set_device_change_notify` and `on_default_device_changed` pass default-device changes for the render direction, in the console and multimedia roles, to a callback.
  - The renderer can be used as a context manager.
- `freikino.transport.TransportOverlay` holds the state of the bottom transport bar:
  - hover and press-then-release on the play/pause, stop, fullscreen and speaker buttons;
  - scrub-bar dragging, with the seek issued on mouse-up;
  - a sticky volume popup with a short grace period;
  - thumbnail requests, throttled to changes of 150 ms of stream time;
  - auto-hide fading after 2.5 s without activity.

  The overlay talks to playback through the `PlaybackController` protocol and to previews through the `ThumbnailProvider` protocol.
- `freikino.transport_layout` gives the bar's geometry with `compute_layout` and `position_on_bar`. `format_time_ns` formats times as `m:ss` or `h:mm:ss`.
- `freikino.transport_scene.draw_transport`, `freikino.title_toast.TitleToast` and `freikino.volume_osd.VolumeOsd` do not paint anything. They return lists of drawing commands (`FillRect`, `FillRoundedRect`, `FillEllipse`, `FillPolygon`, `DrawLine`, `DrawText`, `DrawBitmap` from `freikino.scene`). Any graphics backend can render these commands. `volume_osd.volume_label` builds the OSD's label text.
- `freikino.errors` defines `HResultError` and the helpers `check_hr`, `check_bool`, `check_ptr`, `throw_hresult`, `throw_last_error` and `hresult_from_win32`.
- `freikino.strings` provides strict UTF-8 conversion. `utf8_to_wide` and `wide_to_utf8` raise `HResultError` on ill-formed input.
- `freikino.log` provides levelled logging (`trace`, `debug`, `info`, `warn`, `error`). Warnings and errors go to stderr and the other levels go to stdout.

The overlays, the toast and the OSD each take an optional `clock` callable that returns milliseconds. Without one they use a monotonic clock.

## What it does not do

This package does not decode media, does not open real audio hardware and does not render to a window. There is no command-line program.

- To hear sound, implement `AudioEndpoint` for your audio backend.
- To see the overlays, hand their commands to your own renderer.
- To get seek previews, supply a `ThumbnailProvider`.

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

## Examples

Mixing:

```python
from freikino.audio_frame import AudioFrame
from freikino.frame_queue import SpscQueue
from freikino.mixer import AudioMixer

queue = SpscQueue(8)
queue.try_push(AudioFrame(samples=[0.5, 0.5] * 4, frame_count=4,
                          channel_count=2, sample_rate=48000, pts_ns=0))

class QueueSource:
    def try_acquire_audio_frame(self):
        return queue.try_pop()

mixer = AudioMixer(channels=2)
mixer.set_frame_source(QueueSource())
mixer.set_volume(0.5)
samples = mixer.fill(4, device_position_ns=0)   # eight samples of 0.25
```

An overlay driven by a fake clock:

```python
from freikino.title_toast import TitleToast

now = [0]
toast = TitleToast(clock=lambda: now[0])
toast.show("movie.mkv")
now[0] = 60
commands = toast.draw(1280, 720)   # [FillRect(...), DrawText("movie.mkv", ...)]
```

## Tests

```
pytest
```