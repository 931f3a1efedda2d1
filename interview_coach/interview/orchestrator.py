"""
Interview orchestrator: runs the state machine's effects one at a time.
"""
import time
import uuid
import queue
import logging
import threading
from collections import deque
from dataclasses import replace
from typing import Any, Dict, Optional

from ..config import Config, QUALITY_MODEL, MSG_INTERVIEW_FAILED
from ..errors import MicrophonePermissionError
from ..infrastructure.audio.processing.capture import AudioRecorder, AudioBlob
from ..infrastructure.audio.processing.playback import AudioPlayer
from ..infrastructure.audio.speech import TranscriptionClient, SpeechSynthesizer
from ..infrastructure.llm import GeminiRestClient
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    InterviewStartedEvent, StatusChangedEvent, QuestionAskedEvent, AnswerTranscribedEvent,
    AnswerRejectedEvent, TurnAnalyzedEvent, InterviewCompletedEvent, InterviewFailedEvent
)
from .models import InterviewInputs, InterviewSession, InterviewStatus
from .state_machine import (
    transition,
    Start, PermissionDenied, TurnReceived, GenerationFailed, AudioReady, PlaybackFinished,
    SpeechFailed, StopRequested, AudioCaptured, CaptureFailed, TranscriptionSucceeded,
    TranscriptionFailed, Abandon,
    RequestTurn, SynthesizeSpeech, PlayAudio, StartCapture, StopCapture, Transcribe,
    ShowWarning, ReleaseMicrophone,
)
from .turn_generator import TurnGenerator

logger = logging.getLogger("orchestrator")


class InterviewOrchestrator:
    """
    Drives one mock interview from the first question to the final report.

    The state machine decides what happens next; this class performs the
    resulting effects (remote calls, playback, recording) strictly in
    sequence and feeds their outcomes back as commands. Only the user's stop
    signal and abandon() arrive from other threads, through a queue.
    """

    def __init__(self,
                 turn_generator: TurnGenerator,
                 synthesizer: SpeechSynthesizer,
                 player: AudioPlayer,
                 recorder: AudioRecorder,
                 transcriber: TranscriptionClient,
                 event_bus: Optional[InterviewEventBus] = None,
                 verbose: bool = True):
        self.turn_generator = turn_generator
        self.synthesizer = synthesizer
        self.player = player
        self.recorder = recorder
        self.transcriber = transcriber
        self.verbose = verbose

        self.event_bus = event_bus or InterviewEventBus()
        self.event_logger = EventLogger()
        self.metrics = InterviewMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

        self.conversation_id = ""
        self._session: Optional[InterviewSession] = None
        self._commands: "queue.Queue[Any]" = queue.Queue()
        self._pending: deque = deque()
        self._abandon_requested = threading.Event()
        self._mic_released = True

    @classmethod
    def from_config(cls, config: Config, llm_client: Optional[GeminiRestClient] = None,
                    **kwargs) -> 'InterviewOrchestrator':
        """Wire the real services from configuration."""
        if llm_client is None:
            llm_client = GeminiRestClient(
                api_key=config.gemini_api_key,
                project=config.google_cloud_project,
                location=config.vertex_location,
                credentials_json=config.google_application_credentials,
                timeout=config.llm_timeout,
                retries=config.llm_retries,
                retry_delay=config.llm_retry_delay,
            )
        return cls(
            turn_generator=TurnGenerator(llm_client, model=QUALITY_MODEL),
            synthesizer=SpeechSynthesizer(llm_client, voice=config.tts_voice),
            player=AudioPlayer(),
            recorder=AudioRecorder(),
            transcriber=TranscriptionClient(llm_client),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def session(self) -> Optional[InterviewSession]:
        return self._session

    @property
    def status(self) -> Optional[InterviewStatus]:
        return self._session.status if self._session else None

    def stop_recording(self) -> bool:
        """User signal that the answer is finished. Ignored unless recording."""
        if self._session is None or self._session.status != InterviewStatus.RECORDING:
            logger.debug("stop_recording ignored in status %s", self.status)
            return False
        self._commands.put(StopRequested())
        return True

    def abandon(self) -> None:
        """Tear the session down; results still in flight are discarded."""
        self._abandon_requested.set()
        self._commands.put(Abandon())

    def run(self, inputs: InterviewInputs) -> InterviewSession:
        """
        Run the interview to completion.

        Returns the terminal session (Complete with a report, or Failed with
        an error message). Session failures never raise.
        """
        self.conversation_id = uuid.uuid4().hex[:12]
        self._session = InterviewSession(inputs=inputs)
        self._pending.clear()
        self._abandon_requested.clear()

        input_kind = "cv" if inputs.cv is not None else "profile"
        self.event_bus.emit(InterviewStartedEvent(self.conversation_id, time.time(), input_kind))
        logger.info("Interview %s starting with %s input", self.conversation_id, input_kind)

        try:
            try:
                self.recorder.open()
                self._mic_released = False
            except MicrophonePermissionError as e:
                logger.error("Microphone unavailable: %s", e)
                self._dispatch(PermissionDenied())
                return self._session

            self._pending.append(Start())
            while not self._session.status.terminal:
                if self._abandon_requested.is_set():
                    command = Abandon()
                elif self._pending:
                    command = self._pending.popleft()
                else:
                    command = self._commands.get()
                self._dispatch(command)

            return self._session

        except Exception as e:
            logger.exception("Interview %s crashed: %s", self.conversation_id, e)
            if not self._session.status.terminal:
                previous = self._session
                self._session = replace(previous, status=InterviewStatus.FAILED,
                                        error_message=MSG_INTERVIEW_FAILED, warning=None)
                self._publish(previous, self._session)
            return self._session

        finally:
            self._release_microphone()
            if self.verbose:
                self._display_results(self._session)

    # ------------------------------------------------------------------
    # Executor
    # ------------------------------------------------------------------

    def _dispatch(self, command: Any) -> None:
        previous = self._session
        self._session, effects = transition(previous, command)
        self._publish(previous, self._session)

        for effect in effects:
            follow_up = self._execute(effect)
            if follow_up is not None:
                self._pending.append(follow_up)

    def _execute(self, effect: Any) -> Optional[Any]:
        session = self._session

        if isinstance(effect, RequestTurn):
            if self.verbose:
                print("🤔 Analyzing your answer..." if effect.answer else "🤔 Preparing the first question...")
            try:
                return TurnReceived(self.turn_generator.next_step(session.inputs, effect.transcript, effect.answer))
            except Exception as e:
                logger.error("Turn generation failed: %s", e)
                return GenerationFailed(e)

        if isinstance(effect, SynthesizeSpeech):
            try:
                return AudioReady(self.synthesizer.synthesize(effect.text))
            except Exception as e:
                logger.error("Speech synthesis failed: %s", e)
                return SpeechFailed(e)

        if isinstance(effect, PlayAudio):
            try:
                self.player.play(effect.audio_b64)
                return PlaybackFinished()
            except Exception as e:
                logger.error("Playback failed: %s", e)
                return SpeechFailed(e)

        if isinstance(effect, StartCapture):
            self._discard_queued_stops()
            try:
                self.recorder.start(on_complete=self._on_recording_complete)
            except MicrophonePermissionError as e:
                logger.error("Microphone lost: %s", e)
                return CaptureFailed(e, permission=True)
            except Exception as e:
                logger.error("Failed to start recording: %s", e)
                return CaptureFailed(e)
            if self.verbose:
                print("   🎙️  Recording... press Enter when you have finished answering")
            return None

        if isinstance(effect, StopCapture):
            try:
                blob = self.recorder.stop()
            except Exception as e:
                logger.error("Failed to stop recording: %s", e)
                return CaptureFailed(e)
            if blob is None:
                return AudioCaptured(AudioBlob(b""))
            return None

        if isinstance(effect, Transcribe):
            if self.verbose:
                print("   📝 Transcribing...")
            try:
                return TranscriptionSucceeded(self.transcriber.transcribe(effect.blob))
            except Exception as e:
                logger.warning("Transcription failed: %s", e)
                return TranscriptionFailed(e)

        if isinstance(effect, ShowWarning):
            self.event_bus.emit(AnswerRejectedEvent(
                self.conversation_id, time.time(), session.current_question_number, effect.message
            ))
            if self.verbose:
                print(f"   ⚠️  {effect.message}")
            return None

        if isinstance(effect, ReleaseMicrophone):
            self._release_microphone()
            return None

        raise TypeError(f"Unknown effect: {effect!r}")

    def _on_recording_complete(self, blob: AudioBlob) -> None:
        self._pending.append(AudioCaptured(blob))

    def _discard_queued_stops(self) -> None:
        # A stop queued before this capture started belongs to the previous answer
        kept = []
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                break
            if isinstance(command, StopRequested):
                logger.debug("Discarding stale stop request")
            else:
                kept.append(command)
        for command in kept:
            self._commands.put(command)

    def _release_microphone(self) -> None:
        if self._mic_released:
            return
        self._mic_released = True
        try:
            self.recorder.close()
        except Exception as e:
            logger.warning("Error releasing microphone: %s", e)

    # ------------------------------------------------------------------
    # Events / display
    # ------------------------------------------------------------------

    def _publish(self, previous: InterviewSession, current: InterviewSession) -> None:
        now = time.time()
        cid = self.conversation_id

        if current.status != previous.status:
            self.event_bus.emit(StatusChangedEvent(cid, now, previous.status.value, current.status.value))

        for before, after in zip(previous.transcript, current.transcript):
            if after.analyzed and not before.analyzed:
                self.event_bus.emit(TurnAnalyzedEvent(
                    cid, now, after.question_number, after.quick_feedback, after.scores.to_dict()
                ))
                if self.verbose:
                    print(f"   💬 Feedback: {after.quick_feedback}")
            if after.candidate_answer and not before.candidate_answer:
                self.event_bus.emit(AnswerTranscribedEvent(cid, now, after.question_number, after.candidate_answer))
                if self.verbose:
                    print(f"   🗣️  You said: {after.candidate_answer}")

        if len(current.transcript) > len(previous.transcript):
            turn = current.transcript[-1]
            self.event_bus.emit(QuestionAskedEvent(
                cid, now, turn.question_number, turn.question, turn.source_of_question, current.progress_percent
            ))
            if self.verbose:
                print(f"\n❓ Question {turn.question_number} ({current.progress_percent}%): {turn.question}")

        if current.status == InterviewStatus.COMPLETE and previous.status != InterviewStatus.COMPLETE:
            self.event_bus.emit(InterviewCompletedEvent(
                cid, now, len(current.transcript), current.report.summary.overall_score
            ))
        elif current.status == InterviewStatus.FAILED and previous.status != InterviewStatus.FAILED:
            self.event_bus.emit(InterviewFailedEvent(cid, now, current.error_message or "", len(current.transcript)))

    def _display_results(self, session: Optional[InterviewSession]) -> None:
        if session is None:
            return
        print("\n" + "=" * 50)
        if session.status == InterviewStatus.COMPLETE and session.report:
            summary = session.report.summary
            print("🎯 INTERVIEW COMPLETE")
            print("=" * 50)
            print(f"🏢 {summary.role_detected or 'Unknown Role'} at {summary.company_detected or 'Unknown Company'}")
            print(f"🔢 Overall Score: {summary.overall_score}/100")
            for strength in summary.top_strengths:
                print(f"   ✅ {strength}")
            for item in summary.top_improvements:
                print(f"   🔧 {item.point}: {item.suggestion}")
        else:
            print("🚫 INTERVIEW ENDED")
            print("=" * 50)
            print(f"❌ {session.error_message}")

    def get_metrics(self) -> Dict[str, int]:
        """Get current session metrics."""
        return self.metrics.get_metrics()
