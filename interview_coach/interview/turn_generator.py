"""
Turn generation: one request per exchange, returning the next question or the final report.
"""
import json
import logging
from typing import List, Optional, Sequence

from ..config import QUALITY_MODEL
from ..candidate.models import profile_to_text
from ..infrastructure.llm.client import GeminiRestClient, Part, inline_part, text_part
from .models import InterviewInputs, Turn
from .prompts import (
    SYSTEM_INSTRUCTION, JOB_DESCRIPTION_PART, PROFILE_PART, TRANSCRIPT_PART, TASK_PART, task_prompt
)
from .schemas import TURN_RESPONSE_SCHEMA, TurnResult, QuestionStep, parse_turn_response

logger = logging.getLogger("turn_generator")


class TurnGenerator:
    """Builds the turn prompt from session state and validates the reply."""

    def __init__(self, llm_client: GeminiRestClient, model: str = QUALITY_MODEL, timeout: Optional[float] = None):
        self.llm_client = llm_client
        self.model = model
        self.timeout = timeout

    def build_parts(self, inputs: InterviewInputs, transcript: Sequence[Turn], answer: Optional[str]) -> List[Part]:
        parts = [text_part(JOB_DESCRIPTION_PART.format(jd=inputs.job_description))]

        if inputs.cv is not None:
            parts.append(inline_part(inputs.cv.base64, inputs.cv.mime_type))
        elif inputs.profile is not None:
            parts.append(text_part(PROFILE_PART.format(profile_text=profile_to_text(inputs.profile))))

        if inputs.linkedin is not None:
            parts.append(inline_part(inputs.linkedin.base64, inputs.linkedin.mime_type))

        transcript_json = json.dumps([t.to_dict() for t in transcript], indent=2, ensure_ascii=False)
        parts.append(text_part(TRANSCRIPT_PART.format(transcript_json=transcript_json)))
        parts.append(text_part(TASK_PART.format(prompt=task_prompt(answer))))
        return parts

    def next_step(self, inputs: InterviewInputs, transcript: Sequence[Turn], answer: Optional[str]) -> TurnResult:
        """
        Ask the model for the next step.

        Args:
            inputs: Job description and candidate material
            transcript: Turns so far (the current turn carries the answer, if any)
            answer: The latest answer, or None for the first question

        Returns:
            QuestionStep or ReportStep
        """
        parts = self.build_parts(inputs, transcript, answer)
        logger.info("Requesting turn (transcript=%d, answer=%s)", len(transcript), answer is not None)

        data = self.llm_client.generate_json(
            parts,
            response_schema=TURN_RESPONSE_SCHEMA,
            model=self.model,
            system_instruction=SYSTEM_INSTRUCTION,
            timeout=self.timeout,
        )
        result = parse_turn_response(data, expect_analysis=answer is not None)

        if isinstance(result, QuestionStep):
            logger.info("Next question #%d (%s)", result.question_number, result.source_of_question)
        else:
            logger.info("Final report received (overall score %d)", result.summary.overall_score)
        return result
