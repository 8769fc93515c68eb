"""
Splitting of normalised audio into transcription sized chunks.

The recogniser accepts a bounded amount of audio per request, so long
recordings are cut into contiguous, fixed length pieces.  At 16 kHz a two
minute chunk is 1,920,000 samples, roughly 3.84 MB once encoded as 16‑bit
WAV.  The final chunk is simply shorter; it is never padded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from .config import DEFAULT_CHUNK_DURATION_S, TARGET_SAMPLE_RATE


@dataclass(frozen=True)
class Chunk:
    """A ``[start, end)`` slice of the parent sample array.

    ``samples`` is a view into the parent, not a copy.
    """

    index: int
    start: int
    end: int
    samples: np.ndarray

    def __len__(self) -> int:
        return self.end - self.start


def samples_per_chunk(sample_rate: int, chunk_duration_s: float) -> int:
    count = int(sample_rate * chunk_duration_s)
    if count <= 0:
        raise ValueError(f"Chunk duration must be positive, got {chunk_duration_s}s at {sample_rate} Hz")
    return count


def split(
    samples: np.ndarray,
    sample_rate: int = TARGET_SAMPLE_RATE,
    chunk_duration_s: float = DEFAULT_CHUNK_DURATION_S,
) -> List[Chunk]:
    """Partition ``samples`` into consecutive chunks of equal duration.

    Args:
        samples: Mono samples to split.
        sample_rate: Rate of ``samples`` in Hz.
        chunk_duration_s: Maximum duration of each chunk in seconds.

    Returns:
        The chunks in order.  Empty input yields an empty list; input no
        longer than one chunk yields a single chunk covering all of it.
    """
    step = samples_per_chunk(sample_rate, chunk_duration_s)
    length = len(samples)
    chunks: List[Chunk] = []
    for index, offset in enumerate(range(0, length, step)):
        end = min(offset + step, length)
        chunks.append(Chunk(index=index, start=offset, end=end, samples=samples[offset:end]))
    return chunks
