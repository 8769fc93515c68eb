"""
Audio decoding and normalisation utilities.

This module turns an uploaded audio file into the sample format expected by
the speech recogniser: a single channel of floating point samples at
16 kHz.  Decoding is performed locally using the `pydub` library which in
turn relies on `ffmpeg`, so any container ffmpeg understands is accepted.

Downmixing is a plain average of all channels and resampling is a linear
interpolation without an anti‑aliasing filter.  Both are intentionally
simple; their output must stay bit‑for‑bit stable because encoded chunks
are compared against recorded fixtures.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from .config import TARGET_SAMPLE_RATE
from .errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioSignal:
    """Decoded multi‑channel audio at its native sample rate.

    Attributes:
        channels: Array of shape ``(channel_count, sample_count)`` holding
            float32 samples nominally in ``[-1, 1]``.
        sample_rate: Native sample rate in Hz.
    """

    channels: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if self.channels.ndim != 2 or self.channels.shape[0] < 1:
            raise ValueError("AudioSignal needs a (channels, samples) matrix with at least one channel")

    @property
    def channel_count(self) -> int:
        return int(self.channels.shape[0])

    @property
    def length(self) -> int:
        return int(self.channels.shape[1])


Decoder = Callable[[bytes], AudioSignal]


def decode_audio(raw: bytes) -> AudioSignal:
    """Decode an audio byte stream into an :class:`AudioSignal`.

    Args:
        raw: The complete contents of an audio file in any format ffmpeg
            can read.

    Returns:
        The decoded samples scaled to ``[-1, 1]``.

    Raises:
        DecodeError: If the bytes are not decodable audio or ffmpeg is not
            available.
    """
    try:
        segment = AudioSegment.from_file(io.BytesIO(raw))
    except CouldntDecodeError as exc:
        raise DecodeError(f"Could not decode audio: {exc}") from exc
    except (IndexError, KeyError) as exc:
        # pydub indexes ffprobe's stream list without checking it
        raise DecodeError("Could not decode audio: no audio stream found") from exc
    except OSError as exc:
        raise DecodeError(f"Audio decoder unavailable: {exc}") from exc

    full_scale = float(1 << (8 * segment.sample_width - 1))
    interleaved = np.array(segment.get_array_of_samples(), dtype=np.float32)
    channels = interleaved.reshape(-1, segment.channels).T / full_scale
    logger.info(
        "Decoded %d channel(s), %d samples at %d Hz",
        segment.channels,
        channels.shape[1],
        segment.frame_rate,
    )
    return AudioSignal(channels=channels.astype(np.float32), sample_rate=segment.frame_rate)


def downmix(signal: AudioSignal) -> np.ndarray:
    """Average all channels into a single float32 channel."""
    count = signal.channel_count
    mono = np.zeros(signal.length, dtype=np.float32)
    for channel in signal.channels:
        mono += channel.astype(np.float32) / np.float32(count)
    return mono


def resample_linear(samples: np.ndarray, source_rate: int, target_rate: int = TARGET_SAMPLE_RATE) -> np.ndarray:
    """Resample ``samples`` by linear interpolation between neighbours.

    Output sample ``i`` is read from fractional source position
    ``i * source_rate / target_rate``; the upper neighbour is clamped to the
    last source sample.  Samples already at ``target_rate`` are returned
    unchanged.
    """
    if source_rate == target_rate:
        return samples
    length = len(samples)
    ratio = source_rate / target_rate
    out_length = int(np.floor(length / ratio))
    positions = np.arange(out_length, dtype=np.float64) * ratio
    low = np.floor(positions).astype(np.int64)
    high = np.minimum(low + 1, length - 1)
    frac = positions - low
    src = samples.astype(np.float64)
    return (src[low] * (1.0 - frac) + src[high] * frac).astype(np.float32)


def normalize(raw: bytes, *, decoder: Decoder = decode_audio) -> np.ndarray:
    """Decode ``raw`` and convert it to 16 kHz mono float32 samples.

    Args:
        raw: The uploaded audio file contents.
        decoder: Callable turning bytes into an :class:`AudioSignal`.
            Defaults to :func:`decode_audio`; tests pass synthetic signals.

    Raises:
        DecodeError: Propagated from the decoder.
    """
    signal = decoder(raw)
    mono = downmix(signal)
    resampled = resample_linear(mono, signal.sample_rate, TARGET_SAMPLE_RATE)
    logger.info(
        "Normalised %d samples at %d Hz to %d samples at %d Hz",
        signal.length,
        signal.sample_rate,
        len(resampled),
        TARGET_SAMPLE_RATE,
    )
    return resampled
