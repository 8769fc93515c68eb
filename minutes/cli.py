"""
Command line client for the minutes pipeline.

Decodes and chunks the recording locally, then uses either a deployed
minutes service (``--server``) or the Google backends directly for speech
recognition and minutes generation.  Progress is logged to stderr and the
Markdown minutes are written to stdout or ``--output``.

Usage::

    minutes meeting.m4a --server https://minutes.example.com -o minutes.md
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import tasks
from .config import Settings
from .errors import MinutesError
from .minutes_formatter import to_markdown
from .remote import RemoteSummarizer, RemoteTranscriber
from .stt_service import GoogleSpeechTranscriber
from .summarizer import GeminiSummarizer

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="minutes",
        description="Generate structured meeting minutes from an audio recording.",
    )
    parser.add_argument("audio", type=Path, help="Path to the recording")
    parser.add_argument(
        "--server",
        help="Base URL of a deployed minutes service; omit to call Google services directly",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Files up to this many bytes are transcribed without chunking",
    )
    parser.add_argument("-o", "--output", type=Path, help="Write the Markdown minutes here instead of stdout")
    parser.add_argument("--transcript-output", type=Path, help="Also write the plain transcript here")
    return parser.parse_args(argv)


def _log_progress(percent: int, message: str) -> None:
    logger.info("[%3d%%] %s", percent, message)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)
    args = _parse_args(argv)
    settings = Settings.from_env()

    if args.server:
        transcriber = RemoteTranscriber(args.server, max_bytes=settings.max_upload_bytes)
        summarizer = RemoteSummarizer(args.server)
    else:
        transcriber = GoogleSpeechTranscriber(
            language_code=settings.stt_language,
            model=settings.stt_model,
            max_bytes=settings.max_upload_bytes,
        )
        summarizer = GeminiSummarizer(settings.genai_api_key, settings.genai_model)

    try:
        audio = args.audio.read_bytes()
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.audio, exc)
        return 1

    threshold = args.threshold if args.threshold is not None else settings.small_file_threshold
    try:
        result = tasks.run(
            audio,
            threshold,
            transcriber=transcriber,
            summarizer=summarizer,
            filename=args.audio.name,
            on_progress=_log_progress,
            chunk_duration_s=settings.chunk_duration_s,
        )
    except MinutesError as exc:
        logger.error("%s", exc)
        return 1

    markdown = to_markdown(result.minutes)
    if args.output:
        args.output.write_text(markdown, encoding="utf-8")
        logger.info("Saved minutes to %s", args.output)
    else:
        sys.stdout.write(markdown)
    if args.transcript_output:
        args.transcript_output.write_text(result.transcript + "\n", encoding="utf-8")
        logger.info("Saved transcript to %s", args.transcript_output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
