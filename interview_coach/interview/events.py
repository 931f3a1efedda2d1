"""
Event-driven notifications from the interview orchestrator.
"""
import logging
from abc import ABC
from typing import Dict, Any, List, Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of interview events."""
    INTERVIEW_STARTED = "interview_started"
    STATUS_CHANGED = "status_changed"
    QUESTION_ASKED = "question_asked"
    ANSWER_TRANSCRIBED = "answer_transcribed"
    ANSWER_REJECTED = "answer_rejected"
    TURN_ANALYZED = "turn_analyzed"
    INTERVIEW_COMPLETED = "interview_completed"
    INTERVIEW_FAILED = "interview_failed"


@dataclass
class InterviewEvent(ABC):
    """Base class for all interview events."""
    event_type: EventType
    conversation_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class InterviewStartedEvent(InterviewEvent):
    """Event fired when an interview begins."""
    def __init__(self, conversation_id: str, timestamp: float, input_kind: str):
        super().__init__(
            event_type=EventType.INTERVIEW_STARTED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={"input_kind": input_kind}
        )


@dataclass
class StatusChangedEvent(InterviewEvent):
    """Event fired on every status transition."""
    def __init__(self, conversation_id: str, timestamp: float, previous: str, current: str):
        super().__init__(
            event_type=EventType.STATUS_CHANGED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={"previous": previous, "current": current}
        )


@dataclass
class QuestionAskedEvent(InterviewEvent):
    """Event fired when a new question is appended to the transcript."""
    def __init__(self, conversation_id: str, timestamp: float, question_number: int,
                 question: str, source: str, progress_percent: int):
        super().__init__(
            event_type=EventType.QUESTION_ASKED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={
                "question_number": question_number,
                "question": question,
                "source": source,
                "progress_percent": progress_percent
            }
        )


@dataclass
class AnswerTranscribedEvent(InterviewEvent):
    """Event fired when an answer is accepted for the current question."""
    def __init__(self, conversation_id: str, timestamp: float, question_number: int, answer: str):
        super().__init__(
            event_type=EventType.ANSWER_TRANSCRIBED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={"question_number": question_number, "answer": answer}
        )


@dataclass
class AnswerRejectedEvent(InterviewEvent):
    """Event fired when a recording must be retried."""
    def __init__(self, conversation_id: str, timestamp: float, question_number: int, message: str):
        super().__init__(
            event_type=EventType.ANSWER_REJECTED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={"question_number": question_number, "message": message}
        )


@dataclass
class TurnAnalyzedEvent(InterviewEvent):
    """Event fired when feedback and scores arrive for an answered question."""
    def __init__(self, conversation_id: str, timestamp: float, question_number: int,
                 quick_feedback: str, scores: Dict[str, int]):
        super().__init__(
            event_type=EventType.TURN_ANALYZED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={
                "question_number": question_number,
                "quick_feedback": quick_feedback,
                "scores": scores
            }
        )


@dataclass
class InterviewCompletedEvent(InterviewEvent):
    """Event fired when the final report is ready."""
    def __init__(self, conversation_id: str, timestamp: float, turn_count: int, overall_score: int):
        super().__init__(
            event_type=EventType.INTERVIEW_COMPLETED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={"turn_count": turn_count, "overall_score": overall_score}
        )


@dataclass
class InterviewFailedEvent(InterviewEvent):
    """Event fired when the interview ends without a report."""
    def __init__(self, conversation_id: str, timestamp: float, message: str, turn_count: int):
        super().__init__(
            event_type=EventType.INTERVIEW_FAILED,
            conversation_id=conversation_id,
            timestamp=timestamp,
            data={"message": message, "turn_count": turn_count}
        )


EventHandler = Callable[[InterviewEvent], None]


class InterviewEventBus:
    """Event bus for interview system communication."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from specific event type."""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: InterviewEvent) -> None:
        """
        Emit an event to all subscribers.

        A failing handler is logged and does not stop delivery to the others.
        """
        logger.debug(f"Emitting event: {event.event_type} for conversation {event.conversation_id}")

        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in list(self._global_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.log_level = log_level

    def handle_event(self, event: InterviewEvent) -> None:
        self.logger.log(self.log_level,
                        f"Event: {event.event_type.value} | Conversation: {event.conversation_id} | Data: {event.data}")


class InterviewMetrics:
    """Collects metrics from interview events."""

    def __init__(self):
        self.reset()

    def handle_event(self, event: InterviewEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == EventType.INTERVIEW_STARTED:
            self.interviews_started += 1
        elif event.event_type == EventType.INTERVIEW_COMPLETED:
            self.interviews_completed += 1
        elif event.event_type == EventType.INTERVIEW_FAILED:
            self.interviews_failed += 1
        elif event.event_type == EventType.QUESTION_ASKED:
            self.questions_asked += 1
        elif event.event_type == EventType.ANSWER_TRANSCRIBED:
            self.answers_accepted += 1
        elif event.event_type == EventType.ANSWER_REJECTED:
            self.answers_rejected += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return {
            "interviews_started": self.interviews_started,
            "interviews_completed": self.interviews_completed,
            "interviews_failed": self.interviews_failed,
            "questions_asked": self.questions_asked,
            "answers_accepted": self.answers_accepted,
            "answers_rejected": self.answers_rejected,
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.interviews_started = 0
        self.interviews_completed = 0
        self.interviews_failed = 0
        self.questions_asked = 0
        self.answers_accepted = 0
        self.answers_rejected = 0
