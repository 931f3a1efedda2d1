import json

import pytest

from interview_coach.config import QUALITY_MODEL
from interview_coach.errors import MalformedResponseError
from interview_coach.interview import InterviewInputs, TurnGenerator
from interview_coach.interview.models import Turn
from interview_coach.interview.prompts import SYSTEM_INSTRUCTION
from interview_coach.interview.schemas import QuestionStep, ReportStep, TURN_RESPONSE_SCHEMA, parse_turn_response
from interview_coach.interview.testing import MockLLMClient, question_response, report_response
from interview_coach.utils.documents import DocumentData

LINKEDIN = DocumentData(base64="bGlua2Vk", mime_type="application/pdf", name="linkedin.pdf")


def test_first_turn_parts_and_request_options(inputs):
    llm = MockLLMClient(json_responses=[question_response(1, "Why Acme?", "JD")])
    result = TurnGenerator(llm).next_step(inputs, (), None)

    assert result == QuestionStep(1, "Why Acme?", "JD")
    request = llm.requests_of("json")[0]
    parts = request["parts"]
    assert parts[0]["text"].startswith("Job Description:\nSenior Backend Engineer")
    assert parts[1] == {"inlineData": {"mimeType": "application/pdf", "data": "JVBERi0xLjQK"}}
    assert json.loads(parts[2]["text"].split("Full transcript so far:\n", 1)[1]) == []
    assert "Start the interview" in parts[3]["text"]
    assert request["response_schema"] is TURN_RESPONSE_SCHEMA
    assert request["kwargs"]["model"] == QUALITY_MODEL
    assert request["kwargs"]["system_instruction"] == SYSTEM_INSTRUCTION


def test_profile_is_used_when_no_cv_and_linkedin_is_appended(profile):
    inputs = InterviewInputs(job_description="Staff engineer", profile=profile, linkedin=LINKEDIN)
    llm = MockLLMClient(json_responses=[question_response(1, "Q?", "CandidateProfile")])
    TurnGenerator(llm).next_step(inputs, (), None)

    parts = llm.requests_of("json")[0]["parts"]
    assert parts[1]["text"].startswith("Candidate Profile Data:\nName: Ada Lovelace")
    assert parts[2]["inlineData"]["data"] == "bGlua2Vk"


def test_cv_takes_precedence_over_profile(inputs, profile):
    both = InterviewInputs(job_description="Staff engineer", cv=inputs.cv, profile=profile)
    llm = MockLLMClient(json_responses=[question_response(1, "Q?", "Mixed")])
    TurnGenerator(llm).next_step(both, (), None)

    texts = [p.get("text", "") for p in llm.requests_of("json")[0]["parts"]]
    assert not any("Candidate Profile Data" in t for t in texts)


def test_answer_turn_sends_transcript_and_parses_analysis(inputs):
    transcript = (Turn(1, "Why Acme?", "JD", "I like payments."),)
    llm = MockLLMClient(json_responses=[question_response(2, "Next?", "Mixed", feedback="Be specific.", score=3)])
    result = TurnGenerator(llm).next_step(inputs, transcript, "I like payments.")

    assert result.previous_answer_analysis.quick_feedback == "Be specific."
    assert result.previous_answer_analysis.scores.metrics == 3
    parts = llm.requests_of("json")[0]["parts"]
    sent = json.loads(parts[-2]["text"].split("Full transcript so far:\n", 1)[1])
    assert sent[0]["candidateAnswer"] == "I like payments."
    assert sent[0]["quickFeedback"] == "Analyzing..."
    assert 'answer to the previous question: "I like payments."' in parts[-1]["text"]


def test_report_step_is_returned(inputs):
    llm = MockLLMClient(json_responses=[report_response(overall=91)])
    result = TurnGenerator(llm).next_step(inputs, (Turn(1, "Q", "JD", "A long enough answer"),), "A long enough answer")
    assert isinstance(result, ReportStep)
    assert result.summary.overall_score == 91
    assert result.summary.top_improvements[0].point == "Answers run long"


def test_analysis_is_ignored_on_first_turn():
    result = parse_turn_response(question_response(1, "Q?", "JD", feedback="stray"), expect_analysis=False)
    assert result.previous_answer_analysis is None


@pytest.mark.parametrize("data", [
    {},
    {"interviewComplete": True},
    {"interviewComplete": False},
    {"interviewComplete": False, "nextQuestion": {"questionNumber": 1, "question": "", "sourceOfQuestion": "JD"}},
    {"interviewComplete": False, "nextQuestion": {"questionNumber": 1, "question": "Q", "sourceOfQuestion": "Web"}},
    {"interviewComplete": False, "nextQuestion": {"questionNumber": 1, "question": "Q", "sourceOfQuestion": "JD"},
     "unexpected": 1},
])
def test_malformed_replies_are_rejected(data):
    with pytest.raises(MalformedResponseError):
        parse_turn_response(data, expect_analysis=False)


def test_out_of_range_scores_are_rejected():
    data = question_response(2, "Q?", "JD", feedback="ok", score=6)
    with pytest.raises(MalformedResponseError):
        parse_turn_response(data, expect_analysis=True)


def _with_scores(**overrides):
    data = question_response(2, "Q?", "JD", feedback="ok", score=4)
    data["currentAnswerAnalysis"]["scores"].update(overrides)
    return data


def _with_question_number(value):
    data = question_response(2, "Q?", "JD", feedback="ok", score=4)
    data["nextQuestion"]["questionNumber"] = value
    return data


@pytest.mark.parametrize("data", [
    _with_scores(structure=True),
    _with_scores(relevance="4"),
    _with_scores(metrics=3.0),
    _with_question_number("2"),
])
def test_wrongly_typed_values_are_not_coerced(data):
    with pytest.raises(MalformedResponseError):
        parse_turn_response(data, expect_analysis=True)


def test_final_report_without_answer_analysis_is_rejected():
    with pytest.raises(MalformedResponseError):
        parse_turn_response(report_response(feedback=None), expect_analysis=True)

    result = parse_turn_response(report_response(feedback=None), expect_analysis=False)
    assert isinstance(result, ReportStep)
    assert result.previous_answer_analysis is None
