"""Decoded PCM chunks and the producer interface that hands them out."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AudioFrame:
    """Interleaved float samples; ``len(samples) == frame_count * channel_count``."""

    samples: List[float] = field(default_factory=list)
    frame_count: int = 0
    channel_count: int = 0
    sample_rate: int = 0
    pts_ns: int = 0

    def valid(self) -> bool:
        return self.frame_count > 0 and bool(self.samples)


class AudioFrameSource(abc.ABC):
    """A non-blocking producer of decoded audio."""

    @abc.abstractmethod
    def try_acquire_audio_frame(self) -> Optional[AudioFrame]:
        """Return the next frame, or None if none is ready."""