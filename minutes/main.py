"""
HTTP entrypoints for the minutes pipeline.

This module exposes a Flask app with three routes:

* ``POST /api/transcribe`` – multipart form with an ``audio`` file; returns
  ``{"text": ...}`` from the speech recogniser.
* ``POST /api/generate-minutes`` – JSON body ``{"transcript": ...}``;
  returns the structured minutes.
* ``POST /api/minutes`` – multipart ``audio`` upload; runs the whole
  pipeline and returns the transcript, the minutes and a Markdown
  rendering of them.

Settings are read from the environment, see :mod:`minutes.config`.
"""

import json
import logging
import os

from flask import Flask, jsonify, request

from . import tasks
from .config import Settings
from .errors import (
    DecodeError,
    EmptyTranscriptError,
    MinutesError,
    SizeLimitError,
    SummarizationBoundaryError,
    TranscriptionBoundaryError,
)
from .minutes_formatter import to_markdown
from .stt_service import GoogleSpeechTranscriber, check_size
from .summarizer import GeminiSummarizer

logging.basicConfig(level=logging.INFO, format="%(message)s")

app = Flask(__name__)
settings = Settings.from_env()

_STATUS = {
    DecodeError: 400,
    SizeLimitError: 413,
    EmptyTranscriptError: 422,
    TranscriptionBoundaryError: 502,
    SummarizationBoundaryError: 502,
}


def build_transcriber() -> GoogleSpeechTranscriber:
    return GoogleSpeechTranscriber(
        language_code=settings.stt_language,
        model=settings.stt_model,
        max_bytes=settings.max_upload_bytes,
    )


def build_summarizer() -> GeminiSummarizer:
    return GeminiSummarizer(settings.genai_api_key, settings.genai_model)


def _status_for(exc: MinutesError) -> int:
    for kind, status in _STATUS.items():
        if isinstance(exc, kind):
            return status
    return 500


@app.route("/api/transcribe", methods=["POST"])
def transcribe():
    upload = request.files.get("audio")
    if upload is None:
        return "No audio file provided", 400
    audio = upload.read()
    logging.info(json.dumps({"event": "transcribe_request", "file": upload.filename, "bytes": len(audio)}))
    try:
        check_size(audio, settings.max_upload_bytes)
        text = build_transcriber().transcribe(
            audio, upload.filename or "audio", upload.mimetype or tasks.guess_mime_type(upload.filename or "")
        )
    except SizeLimitError as exc:
        logging.info(json.dumps({"event": "size_limit", "file": upload.filename, "bytes": len(audio)}))
        return str(exc), 413
    except MinutesError as exc:
        logging.error(json.dumps({"event": "stt_error", "file": upload.filename, "error": str(exc)}))
        return str(exc) or "Transcription failed", 500
    logging.info(json.dumps({"event": "transcribe_complete", "file": upload.filename, "chars": len(text)}))
    return jsonify({"text": text})


@app.route("/api/generate-minutes", methods=["POST"])
def generate_minutes():
    data = request.get_json(silent=True) or {}
    transcript = data.get("transcript")
    if not isinstance(transcript, str) or not transcript.strip():
        return "No transcript provided", 400
    logging.info(json.dumps({"event": "minutes_request", "chars": len(transcript)}))
    try:
        minutes = build_summarizer().summarise(transcript)
    except MinutesError as exc:
        logging.error(json.dumps({"event": "minutes_error", "error": str(exc)}))
        return str(exc) or "Minutes generation failed", 500
    logging.info(json.dumps({"event": "minutes_complete", "title": minutes.title}))
    return jsonify(minutes.to_dict())


@app.route("/api/minutes", methods=["POST"])
def minutes_pipeline():
    upload = request.files.get("audio")
    if upload is None:
        return "No audio file provided", 400
    audio = upload.read()
    filename = upload.filename or "audio"
    logging.info(json.dumps({"event": "pipeline_request", "file": filename, "bytes": len(audio)}))
    try:
        result = tasks.run(
            audio,
            settings.small_file_threshold,
            transcriber=build_transcriber(),
            summarizer=build_summarizer(),
            filename=filename,
            mime_type=upload.mimetype or None,
            on_progress=lambda pct, msg: logging.info(
                json.dumps({"event": "progress", "file": filename, "percent": pct, "message": msg})
            ),
            chunk_duration_s=settings.chunk_duration_s,
        )
    except MinutesError as exc:
        status = _status_for(exc)
        logging.error(json.dumps({"event": "pipeline_error", "file": filename, "status": status, "error": str(exc)}))
        return str(exc), status
    except Exception as exc:
        logging.exception("Error in /api/minutes")
        return f"Server error: {exc}", 500
    return jsonify(
        {
            "transcript": result.transcript,
            "minutes": result.minutes.to_dict(),
            "markdown": to_markdown(result.minutes),
        }
    )


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port)
