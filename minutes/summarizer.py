"""
Meeting minutes generation.

This module asks a generative model to turn a transcript into structured
minutes.  It uses Gemini via the ``google-generativeai`` library.  Model
output is expected to be JSON but is often wrapped in a Markdown code
fence, so fences are stripped before parsing.  Output that still cannot be
parsed is not treated as a failure: the fixed fallback minutes are
returned instead and the transcript remains usable.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

import google.generativeai as genai

from .errors import SummarizationBoundaryError, SummarizationParseError
from .models import Minutes, fallback_minutes

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an assistant that writes meeting minutes.
From a speech-to-text transcript, produce structured minutes.

## Output format (JSON)
Respond with JSON in exactly this shape:

{
  "title": "Meeting title (inferred from the content)",
  "summary": "Summary of the meeting (3-5 sentences)",
  "participants": ["Participant names (inferred from the conversation)"],
  "agenda": ["Topic 1", "Topic 2"],
  "decisions": [
    {"content": "What was decided", "context": "Background or reason"}
  ],
  "action_items": [
    {"assignee": "Owner", "task": "Task description", "deadline": "Deadline (if mentioned)"}
  ],
  "discussion_points": [
    {"topic": "Discussion topic", "details": "Key points of the discussion"}
  ]
}

## Rules
- Stay faithful to what was said. Do not add information by guessing.
- Infer participant names only from how people address or introduce themselves.
- Write "TBD" when an assignee or deadline is not clear.
- Keep technical terms as they are.
- Output nothing but the JSON."""

_OPENING_FENCE = re.compile(r"^```(?:json)?\s*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    cleaned = _OPENING_FENCE.sub("", text.strip())
    return _CLOSING_FENCE.sub("", cleaned).strip()


def parse_minutes(text: str) -> Minutes:
    """Parse model output into :class:`Minutes`.

    Raises:
        SummarizationParseError: If the text is not a JSON object.
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise SummarizationParseError(f"Model output is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SummarizationParseError(f"Expected a JSON object, got {type(data).__name__}")
    return Minutes.from_dict(data)


def minutes_from_text(text: str) -> Minutes:
    """Like :func:`parse_minutes` but degrades to the fallback minutes."""
    try:
        return parse_minutes(text)
    except SummarizationParseError as exc:
        logger.warning("Could not parse minutes; using fallback: %s", exc)
        return fallback_minutes()


class GeminiSummarizer:
    """Generate minutes with a Gemini model.

    Args:
        api_key: Gemini API key.  Without one every call fails with
            :class:`SummarizationBoundaryError`.
        model_name: Model identifier, e.g. ``gemini-2.5-flash``.
        temperature: Sampling temperature; kept low for faithful minutes.
    """

    def __init__(self, api_key: Optional[str], model_name: str = "gemini-2.5-flash", *, temperature: float = 0.1):
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature

    def _generate(self, transcript: str) -> str:
        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model_name, system_instruction=SYSTEM_PROMPT)
        response = model.generate_content(
            f"--- Transcript ---\n{transcript}",
            generation_config={"temperature": self.temperature},
        )
        return response.text.strip()

    def summarise(self, transcript: str) -> Minutes:
        """Generate minutes for ``transcript``.

        Raises:
            SummarizationBoundaryError: No API key is configured or the model
                call failed.
        """
        if not self.api_key:
            raise SummarizationBoundaryError("Generative model API key is not configured")
        try:
            logger.info("Calling generative model %s for minutes", self.model_name)
            raw = self._generate(transcript)
        except Exception as exc:
            logger.exception("Error generating minutes: %s", exc)
            raise SummarizationBoundaryError(str(exc) or "Minutes generation failed") from exc
        return minutes_from_text(raw)
