"""
Runtime configuration.

All settings come from environment variables so that the same code can be
deployed with different models or limits.  Defaults are suitable for local
use:

* ``STT_MODEL`` – speech recognition model (default ``latest_long``).
* ``STT_LANGUAGE`` – BCP‑47 language hint (default ``en-US``).
* ``GENAI_MODEL`` – generative model used for minutes (default
  ``gemini-2.5-flash``).
* ``GENAI_API_KEY`` – API key for the generative model.
* ``SMALL_FILE_THRESHOLD`` – uploads up to this many bytes are sent to the
  recogniser unchanged (default 4.5 MB).
* ``MAX_UPLOAD_BYTES`` – hard cap for a single recognition request
  (default 25 MB).
* ``CHUNK_DURATION_S`` – length of each transcription chunk in seconds.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

TARGET_SAMPLE_RATE = 16_000
DEFAULT_SMALL_FILE_THRESHOLD = int(4.5 * 1024 * 1024)
DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024
DEFAULT_CHUNK_DURATION_S = 120


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s: %r; using %s", name, raw, default)
        return default


@dataclass
class Settings:
    """Deployment settings for the pipeline and its external services."""

    stt_model: str = "latest_long"
    stt_language: str = "en-US"
    genai_model: str = "gemini-2.5-flash"
    genai_api_key: Optional[str] = None
    small_file_threshold: int = DEFAULT_SMALL_FILE_THRESHOLD
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    chunk_duration_s: int = DEFAULT_CHUNK_DURATION_S

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls(
            stt_model=os.environ.get("STT_MODEL", cls.stt_model),
            stt_language=os.environ.get("STT_LANGUAGE", cls.stt_language),
            genai_model=os.environ.get("GENAI_MODEL", cls.genai_model),
            genai_api_key=os.environ.get("GENAI_API_KEY") or None,
            small_file_threshold=_env_int("SMALL_FILE_THRESHOLD", DEFAULT_SMALL_FILE_THRESHOLD),
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            chunk_duration_s=_env_int("CHUNK_DURATION_S", DEFAULT_CHUNK_DURATION_S),
        )
