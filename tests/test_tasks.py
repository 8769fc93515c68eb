import numpy as np
import pytest

from minutes import tasks
from minutes.audio_processor import AudioSignal
from minutes.errors import (
    DecodeError,
    EmptyTranscriptError,
    SizeLimitError,
    SummarizationBoundaryError,
    TranscriptionBoundaryError,
)
from minutes.models import FALLBACK_SUMMARY, FALLBACK_TITLE, Minutes
from minutes.stt_service import Transcriber
from minutes.summarizer import GeminiSummarizer

THRESHOLD = int(4.5 * 1024 * 1024)


class FakeTranscriber(Transcriber):
    def __init__(self, responses, **kwargs):
        super().__init__(**kwargs)
        self.responses = list(responses)
        self.calls = []

    def _recognize(self, audio, filename, mime_type):
        self.calls.append((audio, filename, mime_type))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeSummarizer:
    def __init__(self, minutes=None, error=None):
        self.minutes = minutes or Minutes(title="Weekly sync")
        self.error = error
        self.calls = []

    def summarise(self, transcript):
        self.calls.append(transcript)
        if self.error:
            raise self.error
        return self.minutes


def _decoder_for(seconds, rate=16000, channels=1):
    signal = AudioSignal(channels=np.zeros((channels, int(seconds * rate)), dtype=np.float32), sample_rate=rate)
    return lambda raw: signal


def _no_decode(raw):
    raise AssertionError("decoder must not be used on the direct path")


def test_small_file_goes_direct_with_original_bytes():
    audio = bytes(range(256)) * 4096  # 1 MB
    stt = FakeTranscriber(["hello there"])
    summarizer = FakeSummarizer()
    result = tasks.run(
        audio, THRESHOLD, transcriber=stt, summarizer=summarizer, filename="standup.mp3", decoder=_no_decode
    )
    assert len(stt.calls) == 1
    sent, filename, mime_type = stt.calls[0]
    assert sent == audio
    assert filename == "standup.mp3"
    assert mime_type == "audio/mpeg"
    assert result.transcript == "hello there"
    assert summarizer.calls == ["hello there"]
    assert result.minutes.title == "Weekly sync"


class WavOnlyTranscriber(FakeTranscriber):
    def accepts(self, mime_type):
        return mime_type == "audio/wav"


def test_small_file_in_unreadable_format_is_decoded_first():
    stt = WavOnlyTranscriber(["from the decoded chunk"])
    result = tasks.run(
        b"m4a bytes",
        THRESHOLD,
        transcriber=stt,
        summarizer=FakeSummarizer(),
        filename="call.m4a",
        mime_type="audio/x-m4a",
        decoder=_decoder_for(3),
    )
    assert [(name, mime) for _, name, mime in stt.calls] == [("chunk_0.wav", "audio/wav")]
    assert result.transcript == "from the decoded chunk"


def test_threshold_is_inclusive():
    stt = FakeTranscriber(["ok"])
    tasks.run(b"x" * 10, 10, transcriber=stt, summarizer=FakeSummarizer(), decoder=_no_decode)
    assert len(stt.calls) == 1


def test_large_file_is_decoded_and_chunked():
    stt = FakeTranscriber(["first", "second", "third"])
    result = tasks.run(
        b"x" * 11,
        10,
        transcriber=stt,
        summarizer=FakeSummarizer(),
        decoder=_decoder_for(300, rate=24000, channels=2),
        chunk_duration_s=120,
    )
    assert [c[1] for c in stt.calls] == ["chunk_0.wav", "chunk_1.wav", "chunk_2.wav"]
    assert result.transcript == "first\nsecond\nthird"


def test_progress_covers_whole_scale_in_order():
    seen = []
    tasks.run(
        b"x" * 11,
        10,
        transcriber=FakeTranscriber(["a", "b"]),
        summarizer=FakeSummarizer(),
        decoder=_decoder_for(2),
        on_progress=lambda pct, msg: seen.append(pct),
        chunk_duration_s=1,
    )
    assert seen == [5, 10, 10, 40, 70, 75, 95, 100]
    assert seen == sorted(seen)


def test_all_silence_skips_summarisation():
    summarizer = FakeSummarizer()
    with pytest.raises(EmptyTranscriptError):
        tasks.run(
            b"x" * 11,
            10,
            transcriber=FakeTranscriber(["", "", ""]),
            summarizer=summarizer,
            decoder=_decoder_for(3),
            chunk_duration_s=1,
        )
    assert summarizer.calls == []


def test_unparseable_minutes_fall_back(monkeypatch):
    summarizer = GeminiSummarizer("key")
    monkeypatch.setattr(summarizer, "_generate", lambda transcript: "Sorry, I cannot help with that.")
    result = tasks.run(b"abc", 10, transcriber=FakeTranscriber(["we agreed"]), summarizer=summarizer)
    assert result.transcript == "we agreed"
    assert result.minutes.title == FALLBACK_TITLE
    assert result.minutes.summary == FALLBACK_SUMMARY
    assert result.minutes.decisions == []
    assert result.minutes.action_items == []


def test_transcription_error_message_is_surfaced_verbatim():
    summarizer = FakeSummarizer()
    with pytest.raises(TranscriptionBoundaryError) as excinfo:
        tasks.run(
            b"abc", 10, transcriber=FakeTranscriber([TranscriptionBoundaryError("503 backend busy")]), summarizer=summarizer
        )
    assert str(excinfo.value) == "503 backend busy"
    assert summarizer.calls == []


def test_direct_path_enforces_hard_cap():
    stt = FakeTranscriber(["never"], max_bytes=16)
    with pytest.raises(SizeLimitError):
        tasks.run(b"x" * 32, 100, transcriber=stt, summarizer=FakeSummarizer())
    assert stt.calls == []


def test_decode_error_propagates():
    def broken(raw):
        raise DecodeError("Could not decode audio: bad header")

    with pytest.raises(DecodeError, match="bad header"):
        tasks.run(b"x" * 11, 10, transcriber=FakeTranscriber([]), summarizer=FakeSummarizer(), decoder=broken)


def test_summarizer_failure_propagates():
    summarizer = FakeSummarizer(error=SummarizationBoundaryError("model overloaded"))
    with pytest.raises(SummarizationBoundaryError, match="model overloaded"):
        tasks.run(b"abc", 10, transcriber=FakeTranscriber(["text"]), summarizer=summarizer)


def test_guess_mime_type():
    assert tasks.guess_mime_type("a.wav") in ("audio/wav", "audio/x-wav")
    assert tasks.guess_mime_type("noext") == "application/octet-stream"
