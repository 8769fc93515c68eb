"""
HTTP clients for a deployed minutes service.

These let the local pipeline (decoding and chunking on this machine) use a
remote :mod:`minutes.main` deployment for speech recognition and minutes
generation, so no cloud credentials are needed locally.  Error responses
are surfaced with the server's message body verbatim.
"""

from __future__ import annotations

import logging

import requests

from .config import DEFAULT_MAX_UPLOAD_BYTES
from .errors import SummarizationBoundaryError, TranscriptionBoundaryError
from .models import Minutes, fallback_minutes
from .stt_service import Transcriber, is_direct_format

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300


def _error_message(response: requests.Response, action: str) -> str:
    body = response.text.strip()
    return body or f"{action} failed (HTTP {response.status_code})"


class RemoteTranscriber(Transcriber):
    """Transcriber that posts audio to ``<base_url>/api/transcribe``."""

    def __init__(self, base_url: str, *, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES, timeout: float = DEFAULT_TIMEOUT):
        super().__init__(max_bytes=max_bytes)
        self.url = base_url.rstrip("/") + "/api/transcribe"
        self.timeout = timeout

    def accepts(self, mime_type: str) -> bool:
        # The service recognises with Google Speech.
        return is_direct_format(mime_type)

    def _recognize(self, audio: bytes, filename: str, mime_type: str) -> str:
        logger.info("Posting %s (%d bytes) to %s", filename, len(audio), self.url)
        try:
            response = requests.post(
                self.url,
                files={"audio": (filename, audio, mime_type)},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TranscriptionBoundaryError(f"Transcription request failed: {exc}") from exc
        if not response.ok:
            raise TranscriptionBoundaryError(_error_message(response, "Transcription"))
        try:
            data = response.json()
        except ValueError as exc:
            raise TranscriptionBoundaryError("Transcription service returned an invalid response") from exc
        text = data.get("text", "") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise TranscriptionBoundaryError("Transcription service returned an invalid response")
        return text


class RemoteSummarizer:
    """Summarizer that posts the transcript to ``<base_url>/api/generate-minutes``.

    A success reply that is not a JSON object yields the fallback minutes,
    the same as unparseable model output.
    """

    def __init__(self, base_url: str, *, timeout: float = DEFAULT_TIMEOUT):
        self.url = base_url.rstrip("/") + "/api/generate-minutes"
        self.timeout = timeout

    def summarise(self, transcript: str) -> Minutes:
        logger.info("Requesting minutes from %s", self.url)
        try:
            response = requests.post(self.url, json={"transcript": transcript}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SummarizationBoundaryError(f"Minutes request failed: {exc}") from exc
        if not response.ok:
            raise SummarizationBoundaryError(_error_message(response, "Minutes generation"))
        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Minutes service returned invalid JSON; using fallback: %s", exc)
            return fallback_minutes()
        if not isinstance(data, dict):
            logger.warning("Minutes service returned a %s instead of an object; using fallback", type(data).__name__)
            return fallback_minutes()
        return Minutes.from_dict(data)
