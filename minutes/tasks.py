"""
Orchestration layer for the minutes pipeline.

This module defines :func:`run`, which is called from the Flask service in
:mod:`minutes.main` and from the command line client.  It coordinates the
steps of the pipeline:

* Small uploads (up to the size threshold) in a format the recogniser
  reads are sent to it unchanged.
* Larger uploads, and small ones in other formats, are decoded, downmixed
  and resampled to 16 kHz mono, split into two minute chunks, and
  transcribed chunk by chunk.
* The transcript is then summarised into structured minutes.

Progress is reported on one shared scale: 0–10 % setup, 10–70 % chunk
transcription, 70–95 % minutes generation and 95–100 % finalisation.
Failures propagate as :class:`~minutes.errors.MinutesError` subclasses
whose message can be shown to the user directly.
"""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from typing import Optional, Protocol

from . import audio_processor, transcription
from .audio_processor import Decoder
from .config import DEFAULT_CHUNK_DURATION_S, DEFAULT_SMALL_FILE_THRESHOLD, TARGET_SAMPLE_RATE
from .errors import MinutesError
from .models import Minutes
from .stt_service import Transcriber
from .transcription import ProgressCallback

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    def summarise(self, transcript: str) -> Minutes: ...


@dataclass
class PipelineResult:
    transcript: str
    minutes: Minutes


def guess_mime_type(filename: str) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or "application/octet-stream"


def run(
    audio: bytes,
    size_threshold: int = DEFAULT_SMALL_FILE_THRESHOLD,
    *,
    transcriber: Transcriber,
    summarizer: Summarizer,
    filename: str = "audio",
    mime_type: Optional[str] = None,
    decoder: Decoder = audio_processor.decode_audio,
    on_progress: Optional[ProgressCallback] = None,
    chunk_duration_s: float = DEFAULT_CHUNK_DURATION_S,
) -> PipelineResult:
    """Turn an uploaded recording into a transcript and minutes.

    Args:
        audio: Contents of the uploaded audio file.
        size_threshold: Uploads of at most this many bytes skip decoding and
            chunking and are sent to the recogniser as is, provided the
            recogniser accepts their MIME type.
        transcriber: Speech recognition backend.
        summarizer: Minutes generation backend.
        filename: Original file name, forwarded on the direct path.
        mime_type: MIME type of ``audio``; guessed from ``filename`` if
            omitted.
        decoder: Audio decoder used on the chunked path.
        on_progress: Called with ``(percent, message)`` as the run advances.
        chunk_duration_s: Chunk length in seconds on the chunked path.

    Raises:
        DecodeError, SizeLimitError, TranscriptionBoundaryError,
        EmptyTranscriptError, SummarizationBoundaryError: The run failed;
            nothing partial is returned.
    """
    report = on_progress or transcription.noop_progress
    mime_type = mime_type or guess_mime_type(filename)
    try:
        if len(audio) <= size_threshold and transcriber.accepts(mime_type):
            report(10, "Transcribing...")
            transcript = transcription.transcribe_direct(audio, transcriber, filename, mime_type)
        else:
            report(5, "Loading audio...")
            samples = audio_processor.normalize(audio, decoder=decoder)
            report(10, "Processing audio...")
            transcript = transcription.transcribe_all(
                samples,
                transcriber,
                report,
                sample_rate=TARGET_SAMPLE_RATE,
                chunk_duration_s=chunk_duration_s,
            )

        report(75, "Generating minutes...")
        minutes = summarizer.summarise(transcript)
    except MinutesError as exc:
        logger.error("Minutes run for %s failed: %s", filename, exc)
        raise

    report(95, "Done")
    report(100, "Finalizing")
    logger.info("Minutes run for %s complete (%d transcript characters)", filename, len(transcript))
    return PipelineResult(transcript=transcript, minutes=minutes)
