"""
Prompt text for the interviewer model.
"""

SYSTEM_INSTRUCTION = """You are Interview Coach Pro, an AI designed to conduct realistic job interviews. Your goal is to help candidates practice.
- You must use BOTH the provided job description and the candidate's documents (CV/LinkedIn/Profile) to ask relevant questions.
- Ask 6-8 questions in total. At least 2-3 questions must be based specifically on the candidate's profile.
- Ask one question at a time. Do not answer for the candidate.
- After each answer, provide a score and brief feedback, then the next question.
- After the last question, provide a full final report.
- Maintain a professional and encouraging tone.
- Your responses MUST be in the specified JSON format."""

FIRST_TURN_PROMPT = (
    "Start the interview. The job description is provided. The candidate has uploaded their documents. "
    "Generate the first question based on this context."
)

ANSWER_PROMPT = """Here is the candidate's answer to the previous question: "{answer}".
Analyze the answer in the context of the full interview so far.
If the interview is complete (6-8 questions asked), generate the final report.
Otherwise, provide feedback and scores for this answer, and generate the next question."""

JOB_DESCRIPTION_PART = "Job Description:\n{jd}\n\n"
PROFILE_PART = "Candidate Profile Data:\n{profile_text}\n"
TRANSCRIPT_PART = "\n\nFull transcript so far:\n{transcript_json}"
TASK_PART = "\n\n---\n\nYour task:\n{prompt}"


def task_prompt(answer=None) -> str:
    """First-turn prompt when answer is None, otherwise the analysis prompt."""
    if answer is None:
        return FIRST_TURN_PROMPT
    return ANSWER_PROMPT.format(answer=answer)
