"""
safe_assistant/narration/alignment.py - Word timing estimation

Derives word-level start offsets for spoken narration when the synthesis
provider supplies none. Offsets are a best-effort approximation: either a
fixed 180 words-per-minute rate, or a linear spread across the true audio
duration once that is known. They are never exact timing and consumers doing
synchronized highlighting must treat them as estimates.

Also holds the WAV container helpers used to learn that true duration.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

WORDS_PER_MINUTE = 180

# Gemini TTS returns raw 16-bit little-endian mono PCM at 24 kHz
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_BITS_PER_SAMPLE = 16

WAV_HEADER_SIZE = 44


@dataclass(frozen=True)
class AlignmentData:
    """Ordered words with non-decreasing start offsets in milliseconds."""

    words: Tuple[str, ...]
    start_ms: Tuple[int, ...]
    estimated: bool = True

    def __post_init__(self):
        if len(self.words) != len(self.start_ms):
            raise ValueError("words and start_ms must have the same length")
        if any(b < a for a, b in zip(self.start_ms, self.start_ms[1:])):
            raise ValueError("start_ms must be non-decreasing")

    def rescaled(self, duration_ms: float) -> "AlignmentData":
        """Recompute offsets by spreading the same words across ``duration_ms``."""
        return AlignmentData(
            words=self.words,
            start_ms=_spread(len(self.words), duration_ms),
            estimated=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "words": list(self.words),
            "startMs": list(self.start_ms),
            "estimated": self.estimated,
        }


def _spread(count: int, duration_ms: float) -> Tuple[int, ...]:
    if count == 0:
        return ()
    per_word = max(duration_ms, 0) / count
    return tuple(int(round(i * per_word)) for i in range(count))


def split_words(text: str) -> Sequence[str]:
    return text.split()


def estimate_alignment(text: str, duration_ms: Optional[float] = None) -> AlignmentData:
    """
    Estimate word start offsets for ``text``.

    Args:
        text: Spoken text
        duration_ms: True audio duration, when known

    Returns:
        AlignmentData flagged as an estimate
    """
    words = tuple(split_words(text))
    if duration_ms is None:
        duration_ms = len(words) / WORDS_PER_MINUTE * 60_000
    return AlignmentData(words=words, start_ms=_spread(len(words), duration_ms))


# =============================================================================
# WAV helpers
# =============================================================================

def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    bits_per_sample: int = PCM_BITS_PER_SAMPLE,
) -> bytes:
    """Wrap raw linear PCM in a RIFF/WAVE container."""
    data_size = len(pcm)
    block_align = channels * (bits_per_sample // 8)
    byte_rate = sample_rate * block_align

    header = (
        b"RIFF"
        + struct.pack("<I", WAV_HEADER_SIZE + data_size - 8)
        + b"WAVE"
        + b"fmt "
        + struct.pack("<I", 16)               # fmt chunk size
        + struct.pack("<H", 1)                # PCM
        + struct.pack("<H", channels)
        + struct.pack("<I", sample_rate)
        + struct.pack("<I", byte_rate)
        + struct.pack("<H", block_align)
        + struct.pack("<H", bits_per_sample)
        + b"data"
        + struct.pack("<I", data_size)
    )
    return header + pcm


def pcm_duration_ms(
    pcm_size: int,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    bits_per_sample: int = PCM_BITS_PER_SAMPLE,
) -> float:
    byte_rate = sample_rate * channels * (bits_per_sample // 8)
    return pcm_size / byte_rate * 1000


def wav_duration_ms(audio: bytes) -> Optional[float]:
    """
    Read the playback duration of a canonical 44-byte-header WAV.

    Returns:
        Duration in milliseconds, or None if the bytes are not a WAV
    """
    if len(audio) < WAV_HEADER_SIZE or audio[0:4] != b"RIFF" or audio[8:12] != b"WAVE":
        return None

    byte_rate = struct.unpack("<I", audio[28:32])[0]
    data_size = struct.unpack("<I", audio[40:44])[0]
    if byte_rate == 0:
        return None
    data_size = min(data_size, len(audio) - WAV_HEADER_SIZE)
    return data_size / byte_rate * 1000
