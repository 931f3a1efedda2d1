"""
Interview state machine.

transition() is a pure reducer: given a session and a command it returns the
next session and the effects the orchestrator must perform. Effects that
produce results (remote calls, device operations) report back as commands.
Commands that do not apply to the current status are ignored.
"""
import logging
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

from ..config import (
    MIN_ANSWER_CHARS, PLACEHOLDER_ANSWER_ECHO, MSG_INVALID_ANSWER, MSG_TRANSCRIPTION_FAILED,
    MSG_MIC_PERMISSION, MSG_INTERVIEW_FAILED
)
from ..infrastructure.audio.processing.capture import AudioBlob
from .models import InterviewSession, InterviewStatus, InterviewReport, Turn
from .report import with_local_renderings
from .schemas import QuestionStep, ReportStep, TurnResult

logger = logging.getLogger("state_machine")

S = InterviewStatus
MSG_ABANDONED = "The interview was abandoned."


# =============================================================================
# Commands
# =============================================================================

@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class PermissionDenied:
    pass


@dataclass(frozen=True)
class TurnReceived:
    result: TurnResult


@dataclass(frozen=True)
class GenerationFailed:
    error: Exception


@dataclass(frozen=True)
class AudioReady:
    audio_b64: str


@dataclass(frozen=True)
class PlaybackFinished:
    pass


@dataclass(frozen=True)
class SpeechFailed:
    error: Exception


@dataclass(frozen=True)
class StopRequested:
    pass


@dataclass(frozen=True)
class AudioCaptured:
    blob: AudioBlob


@dataclass(frozen=True)
class CaptureFailed:
    error: Exception
    permission: bool = False


@dataclass(frozen=True)
class TranscriptionSucceeded:
    text: str


@dataclass(frozen=True)
class TranscriptionFailed:
    error: Exception


@dataclass(frozen=True)
class Abandon:
    pass


# =============================================================================
# Effects
# =============================================================================

@dataclass(frozen=True)
class RequestTurn:
    transcript: Tuple[Turn, ...]
    answer: Optional[str]


@dataclass(frozen=True)
class SynthesizeSpeech:
    text: str


@dataclass(frozen=True)
class PlayAudio:
    audio_b64: str


@dataclass(frozen=True)
class StartCapture:
    pass


@dataclass(frozen=True)
class StopCapture:
    pass


@dataclass(frozen=True)
class Transcribe:
    blob: AudioBlob


@dataclass(frozen=True)
class ShowWarning:
    message: str


@dataclass(frozen=True)
class ReleaseMicrophone:
    pass


Effects = List[Any]


# =============================================================================
# Helpers
# =============================================================================

def is_degenerate_answer(text: str) -> bool:
    """Too short to be an answer, or the known placeholder echo."""
    stripped = (text or "").strip()
    return len(stripped) < MIN_ANSWER_CHARS or PLACEHOLDER_ANSWER_ECHO in stripped.lower()


def _fail(session: InterviewSession, message: str) -> Tuple[InterviewSession, Effects]:
    return replace(session, status=S.FAILED, error_message=message, warning=None), [ReleaseMicrophone()]


def _retry_recording(session: InterviewSession, message: str) -> Tuple[InterviewSession, Effects]:
    return replace(session, status=S.RECORDING, warning=message), [ShowWarning(message), StartCapture()]


def _apply_turn(session: InterviewSession, result: TurnResult) -> Tuple[InterviewSession, Effects]:
    transcript = list(session.transcript)
    analysis = result.previous_answer_analysis
    if analysis is not None and transcript:
        transcript[-1] = transcript[-1].with_analysis(analysis.quick_feedback, analysis.scores)

    if isinstance(result, ReportStep):
        report = with_local_renderings(InterviewReport(
            summary=result.summary,
            transcript=tuple(transcript),
            downloadable_transcript_markdown=result.downloadable_transcript_markdown,
            downloadable_report_text=result.downloadable_report_text,
        ))
        session = replace(session, transcript=tuple(transcript), status=S.COMPLETE, report=report, warning=None)
        return session, [ReleaseMicrophone()]

    number = session.current_question_number + 1
    if result.question_number != number:
        logger.warning("Model numbered the question %d, expected %d; using %d",
                       result.question_number, number, number)
    transcript.append(Turn(
        question_number=number,
        question=result.question,
        source_of_question=result.source_of_question,
    ))
    session = replace(
        session,
        transcript=tuple(transcript),
        status=S.AWAITING_AUDIO_GENERATION,
        current_question_number=number,
        current_question_text=result.question,
        warning=None,
    )
    return session, [SynthesizeSpeech(result.question)]


# =============================================================================
# Reducer
# =============================================================================

def transition(session: InterviewSession, command: Any) -> Tuple[InterviewSession, Effects]:
    """Compute the next session and the effects to run for a command."""
    status = session.status

    if status.terminal:
        logger.debug("Ignoring %s in terminal status %s", type(command).__name__, status.value)
        return session, []

    if isinstance(command, Abandon):
        return _fail(session, MSG_ABANDONED)

    if isinstance(command, Start) and status == S.INITIALIZING:
        return replace(session, status=S.AWAITING_QUESTION), [RequestTurn(transcript=(), answer=None)]

    if isinstance(command, PermissionDenied) and status == S.INITIALIZING:
        return _fail(session, MSG_MIC_PERMISSION)

    if isinstance(command, TurnReceived) and status in (S.AWAITING_QUESTION, S.AWAITING_ANALYSIS):
        return _apply_turn(session, command.result)

    if isinstance(command, GenerationFailed) and status in (S.AWAITING_QUESTION, S.AWAITING_ANALYSIS):
        return _fail(session, MSG_INTERVIEW_FAILED)

    if isinstance(command, AudioReady) and status == S.AWAITING_AUDIO_GENERATION:
        return replace(session, status=S.PLAYING_QUESTION), [PlayAudio(command.audio_b64)]

    if isinstance(command, SpeechFailed) and status in (S.AWAITING_AUDIO_GENERATION, S.PLAYING_QUESTION):
        return _fail(session, MSG_INTERVIEW_FAILED)

    if isinstance(command, PlaybackFinished) and status == S.PLAYING_QUESTION:
        return replace(session, status=S.RECORDING), [StartCapture()]

    if isinstance(command, StopRequested) and status == S.RECORDING:
        return replace(session, status=S.TRANSCRIBING, warning=None), [StopCapture()]

    if isinstance(command, CaptureFailed) and status in (S.RECORDING, S.TRANSCRIBING):
        return _fail(session, MSG_MIC_PERMISSION if command.permission else MSG_INTERVIEW_FAILED)

    if isinstance(command, AudioCaptured) and status == S.TRANSCRIBING:
        if command.blob is None or command.blob.empty:
            return _retry_recording(session, MSG_INVALID_ANSWER)
        return session, [Transcribe(command.blob)]

    if isinstance(command, TranscriptionFailed) and status == S.TRANSCRIBING:
        return _retry_recording(session, MSG_TRANSCRIPTION_FAILED)

    if isinstance(command, TranscriptionSucceeded) and status == S.TRANSCRIBING:
        if is_degenerate_answer(command.text):
            return _retry_recording(session, MSG_INVALID_ANSWER)
        answer = command.text.strip()
        transcript = session.transcript[:-1] + (session.transcript[-1].with_answer(answer),)
        session = replace(session, transcript=transcript, status=S.AWAITING_ANALYSIS)
        return session, [RequestTurn(transcript=transcript, answer=answer)]

    logger.debug("Ignoring %s in status %s", type(command).__name__, status.value)
    return session, []
