"""
Chunked transcription.

Long recordings are split into two minute chunks, each chunk is encoded as
a WAV file and sent to the recogniser, and the non-empty results are joined
in chunk order.  Requests are made strictly one after another: the
recogniser is never asked for more than one chunk at a time, and progress
therefore only ever moves forward.

Any failed request aborts the whole transcription.  There is no retry and
no partial result; the caller starts over.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from . import chunker, wav_encoder
from .config import DEFAULT_CHUNK_DURATION_S, TARGET_SAMPLE_RATE
from .errors import EmptyTranscriptError
from .stt_service import Transcriber

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

# Share of the overall progress bar reserved for chunk transcription.
TRANSCRIBE_START = 10
TRANSCRIBE_END = 70

EMPTY_TRANSCRIPT_MESSAGE = "No speech could be recognised. Please check that the file contains audio."


@dataclass(frozen=True)
class EncodedSegment:
    filename: str
    data: bytes
    mime_type: str = "audio/wav"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def chunk_progress(index: int, total: int) -> int:
    """Overall progress percentage before transcribing chunk ``index``."""
    span = TRANSCRIBE_END - TRANSCRIBE_START
    return TRANSCRIBE_START + round_half_up(index / total * span)


def encode_chunk(chunk: chunker.Chunk, sample_rate: int = TARGET_SAMPLE_RATE) -> EncodedSegment:
    return EncodedSegment(filename=f"chunk_{chunk.index}.wav", data=wav_encoder.encode(chunk.samples, sample_rate))


def noop_progress(percent: int, message: str) -> None:
    pass


def transcribe_all(
    samples: np.ndarray,
    transcriber: Transcriber,
    on_progress: Optional[ProgressCallback] = None,
    *,
    sample_rate: int = TARGET_SAMPLE_RATE,
    chunk_duration_s: float = DEFAULT_CHUNK_DURATION_S,
) -> str:
    """Transcribe ``samples`` chunk by chunk and join the results.

    Args:
        samples: Mono samples at ``sample_rate``.
        transcriber: Speech recognition backend.
        on_progress: Called with ``(percent, message)`` before each chunk and
            once after the last one.
        sample_rate: Rate of ``samples`` in Hz.
        chunk_duration_s: Maximum chunk length in seconds.

    Returns:
        The non-empty chunk texts joined with newlines, in chunk order.

    Raises:
        EmptyTranscriptError: No chunk produced any text.
        TranscriptionBoundaryError: A chunk request failed.
        SizeLimitError: An encoded chunk exceeds the recogniser's cap.
    """
    report = on_progress or noop_progress
    chunks = chunker.split(samples, sample_rate, chunk_duration_s)
    total = len(chunks)
    logger.info("Transcribing %d samples in %d chunk(s)", len(samples), total)

    parts: List[str] = []
    for chunk in chunks:
        report(chunk_progress(chunk.index, total), f"Transcribing... ({chunk.index + 1}/{total})")
        segment = encode_chunk(chunk, sample_rate)
        text = transcriber.transcribe(segment.data, segment.filename, segment.mime_type).strip()
        if text:
            parts.append(text)
        else:
            logger.info("Chunk %d/%d produced no text", chunk.index + 1, total)
    report(TRANSCRIBE_END, "Transcription complete")

    transcript = "\n".join(parts)
    if not transcript.strip():
        raise EmptyTranscriptError(EMPTY_TRANSCRIPT_MESSAGE)
    return transcript


def transcribe_direct(audio: bytes, transcriber: Transcriber, filename: str, mime_type: str) -> str:
    """Send ``audio`` to the recogniser unchanged, without decoding or chunking.

    Raises:
        EmptyTranscriptError: The recogniser returned no text.
    """
    logger.info("Transcribing %s directly (%d bytes)", filename, len(audio))
    transcript = transcriber.transcribe(audio, filename, mime_type).strip()
    if not transcript:
        raise EmptyTranscriptError(EMPTY_TRANSCRIPT_MESSAGE)
    return transcript
