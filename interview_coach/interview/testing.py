"""
Testing infrastructure with mock services for the interview system.
"""
import threading
from typing import Any, Callable, Dict, List, Optional

from ..errors import MicrophonePermissionError
from ..config import MSG_MIC_PERMISSION
from ..infrastructure.audio.processing.capture import AudioBlob
from ..infrastructure.audio.speech import SpeechSynthesizer, TranscriptionClient
from ..utils.documents import DocumentData
from .events import InterviewEventBus
from .models import InterviewInputs
from .orchestrator import InterviewOrchestrator
from .turn_generator import TurnGenerator

MOCK_AUDIO_B64 = "AAAAAA=="
MOCK_WAV = b"RIFF\x24\x00\x00\x00WAVEfmt mock-recording"


class MockLLMClient:
    """
    Mock Gemini client for testing.

    Each scripted list is consumed in order. An Exception instance in a list
    is raised instead of returned.
    """

    def __init__(self,
                 json_responses: Optional[List[Any]] = None,
                 text_responses: Optional[List[Any]] = None,
                 audio_responses: Optional[List[Any]] = None):
        self.json_responses = list(json_responses or [])
        self.text_responses = list(text_responses or [])
        self.audio_responses = list(audio_responses or [])
        self.request_history: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def _next(self, kind: str, script: List[Any], default: Any, **request) -> Any:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.request_history.append({"kind": kind, **request})
        try:
            response = script.pop(0) if script else default
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            with self._lock:
                self.in_flight -= 1

    def requests_of(self, kind: str) -> List[Dict[str, Any]]:
        return [r for r in self.request_history if r["kind"] == kind]

    def generate_json(self, parts, response_schema, **kwargs) -> Dict[str, Any]:
        return self._next("json", self.json_responses, report_response(),
                          parts=parts, response_schema=response_schema, kwargs=kwargs)

    def generate_text(self, parts, **kwargs) -> str:
        return self._next("text", self.text_responses, "I led the migration to a new billing system.",
                          parts=parts, kwargs=kwargs)

    def generate_audio(self, text: str, **kwargs) -> str:
        return self._next("audio", self.audio_responses, MOCK_AUDIO_B64, text=text, kwargs=kwargs)


class MockPlayer:
    """Mock audio player; records what was played."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.played: List[str] = []

    def play(self, audio_b64: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.played.append(audio_b64)


class MockRecorder:
    """
    Mock microphone.

    stop() hands out the scripted blobs in order. on_started, when set, is
    called after every start(); tests point it at the orchestrator's
    stop_recording to simulate the user finishing an answer.
    """

    def __init__(self, blobs: Optional[List[AudioBlob]] = None, deny_permission: bool = False):
        self.blobs = list(blobs or [])
        self.deny_permission = deny_permission
        self.on_started: Optional[Callable[[], Any]] = None
        self.opened = 0
        self.closed = 0
        self.starts = 0
        self.stops = 0
        self.recording = False
        self._on_complete = None

    def open(self) -> None:
        if self.deny_permission:
            raise MicrophonePermissionError(MSG_MIC_PERMISSION)
        self.opened += 1

    def start(self, on_complete=None) -> None:
        if self.recording:
            raise RuntimeError("A capture is already active")
        self.recording = True
        self.starts += 1
        self._on_complete = on_complete
        if self.on_started is not None:
            self.on_started()

    def stop(self) -> Optional[AudioBlob]:
        if not self.recording:
            return None
        self.recording = False
        self.stops += 1
        blob = self.blobs.pop(0) if self.blobs else AudioBlob(MOCK_WAV)
        callback, self._on_complete = self._on_complete, None
        if callback:
            callback(blob)
        return blob

    def close(self) -> None:
        self.recording = False
        self.closed += 1


def question_response(number: int, question: str, source: str = "Mixed",
                      feedback: Optional[str] = None, score: int = 4) -> Dict[str, Any]:
    """A turn reply asking another question, with analysis when feedback is given."""
    data: Dict[str, Any] = {
        "interviewComplete": False,
        "nextQuestion": {"questionNumber": number, "question": question, "sourceOfQuestion": source},
    }
    if feedback is not None:
        data["currentAnswerAnalysis"] = _analysis(feedback, score)
    return data


def report_response(feedback: Optional[str] = "Strong close.", score: int = 4,
                    overall: int = 78, markdown: str = "", text: str = "") -> Dict[str, Any]:
    """A turn reply ending the interview with a final report."""
    data: Dict[str, Any] = {
        "interviewComplete": True,
        "finalReport": {
            "summary": {
                "companyDetected": "Acme Corp",
                "roleDetected": "Senior Backend Engineer",
                "overallScore": overall,
                "topStrengths": ["Clear ownership of outcomes", "Good use of metrics"],
                "topImprovements": [
                    {"point": "Answers run long", "suggestion": "Lead with the result, then the context."}
                ],
            },
            "downloadableTranscriptMarkdown": markdown,
            "downloadableReportText": text,
        },
    }
    if feedback is not None:
        data["currentAnswerAnalysis"] = _analysis(feedback, score)
    return data


def _analysis(feedback: str, score: int) -> Dict[str, Any]:
    return {
        "quickFeedback": feedback,
        "scores": {k: score for k in ("relevance", "structure", "metrics", "alignment", "communication")},
    }


def create_mock_inputs(job_description: str = "Senior Backend Engineer at Acme Corp. Python, AWS, Postgres.") -> InterviewInputs:
    cv = DocumentData(base64="JVBERi0xLjQK", mime_type="application/pdf", name="cv.pdf")
    return InterviewInputs(job_description=job_description, cv=cv)


def create_mock_interview_setup(json_responses: Optional[List[Any]] = None,
                                text_responses: Optional[List[Any]] = None,
                                audio_responses: Optional[List[Any]] = None,
                                blobs: Optional[List[AudioBlob]] = None,
                                deny_permission: bool = False,
                                auto_stop: bool = True) -> Dict[str, Any]:
    """
    Create a complete mock interview setup for testing.

    The real TurnGenerator, SpeechSynthesizer and TranscriptionClient run on
    top of a MockLLMClient, so prompts and parsing are exercised end to end.
    """
    if json_responses is None:
        json_responses = [
            question_response(1, "Tell me about a system you designed end to end.", "CandidateProfile"),
            question_response(2, "How would you scale our order pipeline on AWS?", "JD",
                              feedback="Good structure, add numbers."),
            report_response(feedback="Solid technical depth."),
        ]

    llm_client = MockLLMClient(json_responses, text_responses, audio_responses)
    recorder = MockRecorder(blobs=blobs, deny_permission=deny_permission)
    player = MockPlayer()
    event_bus = InterviewEventBus()

    orchestrator = InterviewOrchestrator(
        turn_generator=TurnGenerator(llm_client),
        synthesizer=SpeechSynthesizer(llm_client),
        player=player,
        recorder=recorder,
        transcriber=TranscriptionClient(llm_client),
        event_bus=event_bus,
        verbose=False,
    )
    if auto_stop:
        recorder.on_started = orchestrator.stop_recording

    return {
        "orchestrator": orchestrator,
        "llm_client": llm_client,
        "recorder": recorder,
        "player": player,
        "event_bus": event_bus,
        "inputs": create_mock_inputs(),
    }
