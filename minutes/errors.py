"""
Error types raised by the minutes pipeline.

Every exception carries a human readable message as its ``str()`` value so
that callers (the HTTP service, the CLI) can surface it to the user as is.
"""


class MinutesError(Exception):
    """Base class for all pipeline failures."""


class DecodeError(MinutesError):
    """The input bytes could not be decoded as audio."""


class SizeLimitError(MinutesError):
    """A payload exceeds the transcription service's hard size cap."""


class TranscriptionBoundaryError(MinutesError):
    """The speech-to-text call failed or returned a non-success status."""


class EmptyTranscriptError(MinutesError):
    """No recognisable speech was found in any chunk."""


class SummarizationBoundaryError(MinutesError):
    """The minutes generation call failed."""


class SummarizationParseError(MinutesError):
    """The model output could not be parsed as minutes JSON.

    Recovered in-process by substituting the fallback minutes; never
    propagated to the pipeline caller.
    """
