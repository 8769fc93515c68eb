import struct

import numpy as np
import pytest

from minutes.wav_encoder import HEADER_SIZE, encode, read_header


def _payload(data):
    return list(struct.unpack(f"<{(len(data) - HEADER_SIZE) // 2}h", data[HEADER_SIZE:]))


def test_header_describes_16k_mono_pcm():
    samples = np.zeros(1000, dtype=np.float32)
    data = encode(samples)
    header = read_header(data)
    assert len(data) == 44 + 2 * 1000
    assert header["riff_size"] == 36 + 2000
    assert header["fmt_size"] == 16
    assert header["audio_format"] == 1
    assert header["channels"] == 1
    assert header["sample_rate"] == 16000
    assert header["byte_rate"] == 32000
    assert header["block_align"] == 2
    assert header["bits_per_sample"] == 16
    assert header["data_size"] == 2000


def test_header_bytes_are_canonical():
    data = encode(np.zeros(2, dtype=np.float32))
    assert data[:4] == b"RIFF"
    assert data[8:16] == b"WAVEfmt "
    assert data[36:40] == b"data"


def test_empty_input_is_header_only():
    data = encode(np.zeros(0, dtype=np.float32))
    assert len(data) == 44
    assert read_header(data)["data_size"] == 0


def test_out_of_range_samples_clamp_without_wraparound():
    data = encode(np.array([-2.0, 2.0, 0.0], dtype=np.float32))
    assert _payload(data) == [-32768, 32767, 0]


def test_scaling_is_asymmetric_and_truncates():
    data = encode(np.array([-1.0, 1.0, -0.5, 0.5, 0.99999], dtype=np.float32))
    assert _payload(data) == [-32768, 32767, -16384, 16383, 32766]


def test_non_finite_samples():
    data = encode(np.array([np.nan, np.inf, -np.inf], dtype=np.float32))
    assert _payload(data) == [0, 32767, -32768]


def test_read_header_rejects_foreign_data():
    with pytest.raises(ValueError):
        read_header(b"OggS" + b"\x00" * 60)
    with pytest.raises(ValueError):
        read_header(b"RIFF")
