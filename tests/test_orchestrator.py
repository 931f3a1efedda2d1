import json

import pytest

from interview_coach.config import MSG_INVALID_ANSWER, MSG_TRANSCRIPTION_FAILED, MSG_MIC_PERMISSION, MSG_INTERVIEW_FAILED
from interview_coach.errors import RemoteCallError, MalformedResponseError
from interview_coach.infrastructure.audio.processing.capture import AudioBlob
from interview_coach.interview import InterviewStatus
from interview_coach.interview.events import EventType
from interview_coach.interview.state_machine import MSG_ABANDONED
from interview_coach.interview.testing import (
    create_mock_interview_setup, question_response, report_response, MOCK_AUDIO_B64
)


def _collect(event_bus):
    events = []
    event_bus.subscribe_all(events.append)
    return events


def test_full_interview_completes_with_analyzed_turns():
    setup = create_mock_interview_setup()
    orchestrator = setup["orchestrator"]
    events = _collect(setup["event_bus"])

    session = orchestrator.run(setup["inputs"])

    assert session.status == InterviewStatus.COMPLETE
    assert session.error_message is None
    assert [t.question_number for t in session.transcript] == [1, 2]
    assert [t.quick_feedback for t in session.transcript] == ["Good structure, add numbers.", "Solid technical depth."]
    assert all(t.analyzed for t in session.transcript)
    assert all(t.candidate_answer == "I led the migration to a new billing system." for t in session.transcript)

    report = session.report
    assert report.summary.company_detected == "Acme Corp"
    assert report.transcript == session.transcript
    assert report.downloadable_transcript_markdown.startswith("# Interview Transcript")

    assert setup["player"].played == [MOCK_AUDIO_B64, MOCK_AUDIO_B64]
    assert setup["recorder"].opened == 1
    assert setup["recorder"].closed == 1
    assert setup["llm_client"].max_in_flight == 1

    types = [e.event_type for e in events]
    assert types[0] == EventType.INTERVIEW_STARTED
    assert types[-1] == EventType.INTERVIEW_COMPLETED
    assert types.count(EventType.QUESTION_ASKED) == 2
    assert types.count(EventType.TURN_ANALYZED) == 2


def test_requests_alternate_first_turn_and_answers():
    setup = create_mock_interview_setup()
    setup["orchestrator"].run(setup["inputs"])

    json_requests = setup["llm_client"].requests_of("json")
    assert len(json_requests) == 3
    first_task = json_requests[0]["parts"][-1]["text"]
    second_task = json_requests[1]["parts"][-1]["text"]
    assert "Start the interview" in first_task
    assert "I led the migration to a new billing system." in second_task

    sent = json.loads(json_requests[1]["parts"][-2]["text"].split("Full transcript so far:\n", 1)[1])
    assert len(sent) == 1
    assert sent[0]["scores"] == {"relevance": 1, "structure": 1, "metrics": 1, "alignment": 1, "communication": 1}
    assert len(setup["llm_client"].requests_of("audio")) == 2
    assert len(setup["llm_client"].requests_of("text")) == 2


def test_metrics_count_questions_and_answers():
    setup = create_mock_interview_setup()
    orchestrator = setup["orchestrator"]
    orchestrator.run(setup["inputs"])

    metrics = orchestrator.get_metrics()
    assert metrics["interviews_started"] == 1
    assert metrics["interviews_completed"] == 1
    assert metrics["questions_asked"] == 2
    assert metrics["answers_accepted"] == 2
    assert metrics["answers_rejected"] == 0


def test_permission_denied_fails_without_any_requests():
    setup = create_mock_interview_setup(deny_permission=True)
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.FAILED
    assert session.error_message == MSG_MIC_PERMISSION
    assert setup["llm_client"].request_history == []
    assert setup["recorder"].closed == 0


def test_empty_recording_is_retried():
    setup = create_mock_interview_setup(blobs=[AudioBlob(b"")])
    events = _collect(setup["event_bus"])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.COMPLETE
    assert setup["recorder"].starts == 3
    rejected = [e for e in events if e.event_type == EventType.ANSWER_REJECTED]
    assert len(rejected) == 1
    assert rejected[0].data["message"] == MSG_INVALID_ANSWER
    assert rejected[0].data["question_number"] == 1
    # empty audio never reaches the transcriber
    assert len(setup["llm_client"].requests_of("text")) == 2


@pytest.mark.parametrize("bad_transcript", ["um", "This is my transcribed answer."])
def test_degenerate_answer_is_rejected_and_not_recorded(bad_transcript):
    setup = create_mock_interview_setup(text_responses=[bad_transcript])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.COMPLETE
    assert setup["recorder"].starts == 3
    assert all(bad_transcript not in t.candidate_answer for t in session.transcript)
    assert setup["orchestrator"].get_metrics()["answers_rejected"] == 1


def test_transcription_failure_lets_user_retry():
    setup = create_mock_interview_setup(text_responses=[RemoteCallError("stt down", status_code=500)])
    events = _collect(setup["event_bus"])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.COMPLETE
    messages = [e.data["message"] for e in events if e.event_type == EventType.ANSWER_REJECTED]
    assert messages == [MSG_TRANSCRIPTION_FAILED]


def test_generation_failure_is_terminal():
    setup = create_mock_interview_setup(json_responses=[
        question_response(1, "Walk me through your last project.", "CandidateProfile"),
        RemoteCallError("quota exhausted", status_code=429),
    ])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.FAILED
    assert session.error_message == MSG_INTERVIEW_FAILED
    assert session.report is None
    assert len(session.transcript) == 1
    assert setup["recorder"].closed == 1


def test_malformed_first_turn_fails_interview():
    setup = create_mock_interview_setup(json_responses=[{"interviewComplete": False}])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.FAILED
    assert session.transcript == ()
    assert setup["player"].played == []


def test_missing_analysis_is_treated_as_malformed():
    setup = create_mock_interview_setup(json_responses=[
        question_response(1, "Why this company?", "JD"),
        question_response(2, "Next one?", "JD"),  # no analysis for the answer
    ])
    session = setup["orchestrator"].run(setup["inputs"])
    assert session.status == InterviewStatus.FAILED


def test_speech_failure_is_terminal():
    setup = create_mock_interview_setup(audio_responses=[MalformedResponseError("Failed to generate audio from text.")])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.FAILED
    assert session.error_message == MSG_INTERVIEW_FAILED
    assert setup["player"].played == []
    assert setup["recorder"].starts == 0


def test_playback_failure_is_terminal():
    setup = create_mock_interview_setup()
    setup["player"].fail_with = OSError("no output device")
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.FAILED
    assert setup["recorder"].closed == 1


def test_abandon_while_recording_discards_the_answer():
    setup = create_mock_interview_setup(auto_stop=False)
    orchestrator = setup["orchestrator"]
    setup["recorder"].on_started = orchestrator.abandon

    session = orchestrator.run(setup["inputs"])

    assert session.status == InterviewStatus.FAILED
    assert session.error_message == MSG_ABANDONED
    assert setup["recorder"].closed == 1
    assert len(setup["llm_client"].requests_of("text")) == 0
    assert len(setup["llm_client"].requests_of("json")) == 1


def test_stop_recording_is_ignored_when_not_recording():
    setup = create_mock_interview_setup()
    orchestrator = setup["orchestrator"]
    assert orchestrator.stop_recording() is False

    orchestrator.run(setup["inputs"])
    assert orchestrator.status == InterviewStatus.COMPLETE
    assert orchestrator.stop_recording() is False


def test_question_numbers_are_assigned_locally():
    setup = create_mock_interview_setup(json_responses=[
        question_response(5, "Describe a production incident you owned.", "CandidateProfile"),
        question_response(5, "How do you review code?", "Mixed", feedback="Clear timeline."),
        report_response(),
    ])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.status == InterviewStatus.COMPLETE
    assert [t.question_number for t in session.transcript] == [1, 2]


def test_model_renderings_are_kept_when_present():
    setup = create_mock_interview_setup(json_responses=[
        question_response(1, "Tell me about yourself.", "CandidateProfile"),
        report_response(markdown="# Custom transcript\n", text="Custom report\n"),
    ])
    session = setup["orchestrator"].run(setup["inputs"])

    assert session.report.downloadable_transcript_markdown == "# Custom transcript\n"
    assert session.report.downloadable_report_text == "Custom report\n"


def test_repeated_stop_does_not_cut_off_the_next_answer():
    setup = create_mock_interview_setup(auto_stop=False)
    orchestrator = setup["orchestrator"]
    recorder = setup["recorder"]
    queued_at_start = []

    def user_presses_enter():
        queued_at_start.append(orchestrator._commands.qsize())
        orchestrator.stop_recording()
        if recorder.starts == 1:
            orchestrator.stop_recording()

    recorder.on_started = user_presses_enter
    session = orchestrator.run(setup["inputs"])

    assert session.status == InterviewStatus.COMPLETE
    assert queued_at_start == [0, 0]
    assert orchestrator.get_metrics()["answers_rejected"] == 0
