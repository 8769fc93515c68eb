"""
16‑bit PCM WAV encoding.

Chunks are sent to the recogniser as self‑contained WAV files: a 44 byte
RIFF header followed by little‑endian signed 16‑bit samples, mono, 16 kHz.
Float samples are clamped to ``[-1, 1]`` and scaled asymmetrically
(negative values by 32768, non‑negative values by 32767) before being
truncated toward zero, which keeps the output byte compatible with the
browser encoder this format was first produced by.
"""

from __future__ import annotations

import struct
from typing import Dict

import numpy as np

from .config import TARGET_SAMPLE_RATE

HEADER_SIZE = 44
_BYTES_PER_SAMPLE = 2

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def _to_int16(samples: np.ndarray) -> np.ndarray:
    values = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    clamped = np.clip(values, -1.0, 1.0)
    scaled = np.where(clamped < 0, clamped * 32768.0, clamped * 32767.0)
    return np.trunc(scaled).astype("<i2")


def encode(samples: np.ndarray, sample_rate: int = TARGET_SAMPLE_RATE) -> bytes:
    """Encode mono float samples as a complete WAV file.

    NaN samples are written as silence; infinities clamp to full scale.
    """
    data_size = len(samples) * _BYTES_PER_SAMPLE
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size
        1,  # PCM
        1,  # mono
        sample_rate,
        sample_rate * _BYTES_PER_SAMPLE,
        _BYTES_PER_SAMPLE,
        8 * _BYTES_PER_SAMPLE,
        b"data",
        data_size,
    )
    return header + _to_int16(samples).tobytes()


def read_header(data: bytes) -> Dict[str, int]:
    """Parse the fixed 44 byte header written by :func:`encode`."""
    if len(data) < HEADER_SIZE:
        raise ValueError(f"WAV data too short: {len(data)} bytes")
    (riff, riff_size, wave, fmt, fmt_size, audio_format, channels, sample_rate,
     byte_rate, block_align, bits_per_sample, data_tag, data_size) = _HEADER.unpack_from(data)
    if riff != b"RIFF" or wave != b"WAVE" or fmt != b"fmt " or data_tag != b"data":
        raise ValueError("Not a canonical PCM WAV header")
    return {
        "riff_size": riff_size,
        "fmt_size": fmt_size,
        "audio_format": audio_format,
        "channels": channels,
        "sample_rate": sample_rate,
        "byte_rate": byte_rate,
        "block_align": block_align,
        "bits_per_sample": bits_per_sample,
        "data_size": data_size,
    }
