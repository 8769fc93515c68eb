"""
Google Speech‑to‑Text service wrapper.

This module encapsulates interaction with the Google Cloud Speech API.  The
:class:`Transcriber` base class defines the narrow contract the pipeline
relies on: one audio blob in, recognised text out.  It also enforces the
hard request size cap before anything is submitted, so an oversized
payload fails fast with a descriptive message instead of a remote error.

Google only accepts inline audio up to about 10 MB and only recognises the
containers listed in ``_ENCODINGS`` without decoding.  Other formats (for
example M4A) are reported by :meth:`Transcriber.accepts` so the pipeline
can decode them into WAV chunks first.

Usage::

    from minutes.stt_service import GoogleSpeechTranscriber

    transcriber = GoogleSpeechTranscriber(language_code="en-US")
    text = transcriber.transcribe(wav_bytes, "chunk_0.wav", "audio/wav")
"""

import logging
from typing import Any, Dict, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech_v1p1beta1 as speech
from google.protobuf.json_format import MessageToDict

from .config import DEFAULT_MAX_UPLOAD_BYTES
from .errors import SizeLimitError, TranscriptionBoundaryError

logger = logging.getLogger(__name__)

_ENCODINGS = {
    "audio/wav": speech.RecognitionConfig.AudioEncoding.LINEAR16,
    "audio/x-wav": speech.RecognitionConfig.AudioEncoding.LINEAR16,
    "audio/flac": speech.RecognitionConfig.AudioEncoding.FLAC,
    "audio/mpeg": speech.RecognitionConfig.AudioEncoding.MP3,
    "audio/ogg": speech.RecognitionConfig.AudioEncoding.OGG_OPUS,
    "audio/webm": speech.RecognitionConfig.AudioEncoding.WEBM_OPUS,
}

# Inline RecognitionAudio.content limit of the Speech API.
INLINE_CONTENT_LIMIT = 10 * 1024 * 1024


def base_mime_type(mime_type: str) -> str:
    return mime_type.split(";")[0].strip().lower()


def is_direct_format(mime_type: str) -> bool:
    """Whether Google Speech recognises ``mime_type`` without decoding."""
    return base_mime_type(mime_type) in _ENCODINGS


def size_limit_message(size: int, limit: int) -> str:
    return (
        f"File size {size / (1024 * 1024):.1f} MB exceeds the "
        f"{limit / (1024 * 1024):.0f} MB limit. Please compress the audio and try again."
    )


def check_size(audio: bytes, limit: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """Raise :class:`SizeLimitError` if ``audio`` is larger than ``limit`` bytes."""
    if len(audio) > limit:
        raise SizeLimitError(size_limit_message(len(audio), limit))


class Transcriber:
    """Base class for speech recognition backends.

    Subclasses implement :meth:`_recognize`; callers use :meth:`transcribe`,
    which applies the size cap first.
    """

    def __init__(self, *, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self.max_bytes = max_bytes

    def transcribe(self, audio: bytes, filename: str, mime_type: str) -> str:
        """Recognise speech in ``audio`` and return the text.

        Raises:
            SizeLimitError: ``audio`` exceeds :attr:`max_bytes`.
            TranscriptionBoundaryError: The backend call failed.
        """
        check_size(audio, self.max_bytes)
        return self._recognize(audio, filename, mime_type)

    def accepts(self, mime_type: str) -> bool:
        """Whether undecoded audio of ``mime_type`` can be submitted as is."""
        return True

    def _recognize(self, audio: bytes, filename: str, mime_type: str) -> str:
        raise NotImplementedError


def extract_text(data: Dict[str, Any]) -> str:
    """Join the top alternative of every result in an STT response."""
    parts = []
    for result in data.get("results", []):
        alternatives = result.get("alternatives", [])
        if not alternatives:
            continue
        text = alternatives[0].get("transcript", "").strip()
        if text:
            parts.append(text)
    return " ".join(parts)


class GoogleSpeechTranscriber(Transcriber):
    """Transcriber backed by Google Cloud Speech‑to‑Text.

    Args:
        language_code: BCP‑47 language tag passed as the recognition hint.
        model: Recognition model identifier.
        enable_automatic_punctuation: Whether to insert punctuation marks.
        max_bytes: Hard cap for a single request; never above
            :data:`INLINE_CONTENT_LIMIT`.
        client: Optional pre-built ``SpeechClient``; one is created lazily
            otherwise.
    """

    def __init__(
        self,
        *,
        language_code: str = "en-US",
        model: str = "latest_long",
        enable_automatic_punctuation: bool = True,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        client: Optional[Any] = None,
    ) -> None:
        super().__init__(max_bytes=min(max_bytes, INLINE_CONTENT_LIMIT))
        self.language_code = language_code
        self.model = model
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = speech.SpeechClient()
        return self._client

    def accepts(self, mime_type: str) -> bool:
        return is_direct_format(mime_type)

    def _build_config(self, mime_type: str) -> speech.RecognitionConfig:
        # WAV and FLAC carry their sample rate in the header.
        encoding = _ENCODINGS.get(
            base_mime_type(mime_type),
            speech.RecognitionConfig.AudioEncoding.ENCODING_UNSPECIFIED,
        )
        return speech.RecognitionConfig(
            encoding=encoding,
            language_code=self.language_code,
            model=self.model,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
        )

    def _recognize(self, audio: bytes, filename: str, mime_type: str) -> str:
        config = self._build_config(mime_type)
        request_audio = speech.RecognitionAudio(content=audio)
        logger.info("Starting STT job for %s (%d bytes)", filename, len(audio))
        try:
            operation = self.client.long_running_recognize(config=config, audio=request_audio)
            response = operation.result()
        except google_exceptions.GoogleAPICallError as exc:
            raise TranscriptionBoundaryError(exc.message or str(exc)) from exc
        except google_exceptions.RetryError as exc:
            raise TranscriptionBoundaryError(f"Transcription timed out: {exc}") from exc
        except auth_exceptions.GoogleAuthError as exc:
            raise TranscriptionBoundaryError(f"Speech credentials unavailable: {exc}") from exc
        logger.info("STT job complete for %s", filename)
        return extract_text(MessageToDict(response._pb))
