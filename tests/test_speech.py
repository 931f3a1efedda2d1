import base64

import pytest

from interview_coach.config import FAST_MODEL, TTS_MODEL
from interview_coach.errors import EmptyAudioError
from interview_coach.infrastructure.audio.processing.capture import AudioBlob
from interview_coach.infrastructure.audio.speech import TranscriptionClient, SpeechSynthesizer
from interview_coach.interview.testing import MockLLMClient


def test_transcribe_sends_inline_audio_and_strips_text():
    llm = MockLLMClient(text_responses=["  I migrated the billing system.\n"])
    text = TranscriptionClient(llm).transcribe(AudioBlob(b"RIFFdata", "audio/wav"))

    assert text == "I migrated the billing system."
    request = llm.requests_of("text")[0]
    assert request["parts"][0]["inlineData"] == {
        "mimeType": "audio/wav", "data": base64.b64encode(b"RIFFdata").decode("ascii")
    }
    assert "Transcribe" in request["parts"][1]["text"]
    assert request["kwargs"]["model"] == FAST_MODEL


def test_empty_audio_is_never_sent():
    llm = MockLLMClient()
    with pytest.raises(EmptyAudioError):
        TranscriptionClient(llm).transcribe(AudioBlob(b""))
    assert llm.request_history == []


def test_synthesize_uses_voice_and_tts_model():
    llm = MockLLMClient(audio_responses=["UENNREFUQQ=="])
    audio = SpeechSynthesizer(llm, voice="Puck").synthesize("Why do you want this role?")

    assert audio == "UENNREFUQQ=="
    request = llm.requests_of("audio")[0]
    assert request["text"].endswith("Why do you want this role?")
    assert request["kwargs"] == {"voice": "Puck", "model": TTS_MODEL}


def test_synthesize_rejects_empty_text():
    with pytest.raises(ValueError):
        SpeechSynthesizer(MockLLMClient()).synthesize("   ")
