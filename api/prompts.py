from __future__ import annotations  # Prompt text for backend generation calls

from textwrap import dedent
from typing import Dict, List, Sequence

from interview_setup import PracticeConfig, SessionConfig, SubjectiveVivaConfig, practice_questions
from prompt_builder import EXAMINER, INTERVIEWER
from transcript import Message

OPENING_REQUEST = (
    "Based on the above instructions, introduce yourself and ask the first question. "
    "Keep your introduction brief and professional."
)
NEXT_TURN_REQUEST = "Based on the conversation above, provide the next response in character."


def opening_messages(system_message: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_message},
        {"role": "user", "content": OPENING_REQUEST},
    ]


def turn_messages(system_message: str | None, history: Sequence[Message]) -> List[Dict[str, str]]:
    messages: List[Dict[str, str]] = []
    if system_message:
        messages.append({"role": "system", "content": system_message})
    messages.extend({"role": item.role, "content": item.content} for item in history if item.role != "system")
    messages.append({"role": "system", "content": NEXT_TURN_REQUEST})
    return messages


def scripted_opening(system_message: str | None) -> str:  # Opening used when the first generation fails
    if system_message and EXAMINER.name in system_message:
        return (
            f"Hello! I'm {EXAMINER.name} from Kiwi Labs, and I'll be conducting your viva today. "
            "Let's start with the first question: Could you tell me about your understanding of this subject?"
        )
    return (
        f"Hello! I'm {INTERVIEWER.name} from Kiwi Labs, and I'll be conducting your interview today. "
        "Let's start with the first question: Could you tell me about your experience with the technologies "
        "mentioned in the job requirements?"
    )


def _transcript_block(messages: Sequence[Message], *, assistant: str, user: str) -> str:
    lines = []
    for message in messages:
        if message.role == "system":
            continue
        speaker = assistant if message.role == "assistant" else user
        lines.append(f"{speaker}: {message.content}")
    return "\n\n".join(lines) or "(no conversation recorded)"


_REPORT_CONTRACT = dedent(
    """
    Provide a comprehensive analysis of the {audience}'s performance including:
    1. An overall score as a percentage (0-100)
    2. 3-5 specific strengths demonstrated in the {session}
    3. 3-5 specific areas for improvement
    4. A paragraph of detailed feedback (100-150 words)

    Format your response as a JSON object with the following structure:
    {{
      "overallScore": number,
      "strengths": string[],
      "improvements": string[],
      "detailedFeedback": string
    }}
    """
).strip()


def _practice_analysis_prompt(config: PracticeConfig, messages: Sequence[Message]) -> str:
    references = "\n".join(
        f"{index}. {item.question}\n   Model answer: {item.sample_answer}"
        for index, item in enumerate(practice_questions(config.practice_type), start=1)
    )
    header = (
        f"You are {INTERVIEWER.name}, an expert interview coach from Kiwi Labs. "
        f"Analyze this {config.practice_type} practice interview."
    )
    transcript = _transcript_block(messages, assistant=INTERVIEWER.name, user="Candidate")
    parts = [header]
    if references:
        parts.append(f"Main questions with model answers for comparison:\n{references}")
    parts.append(f"Interview Transcript:\n{transcript}")
    parts.append(_REPORT_CONTRACT.format(audience="candidate", session="interview"))
    return "\n\n".join(parts)


def analysis_prompt(config: SessionConfig, messages: Sequence[Message]) -> str:
    if isinstance(config, PracticeConfig):
        return _practice_analysis_prompt(config, messages)
    if isinstance(config, SubjectiveVivaConfig):
        project = (
            f"\n- The student submitted a project document: {config.file_details.name if config.file_details else 'unnamed'}"
            if config.has_project_document
            else ""
        )
        header = dedent(
            f"""
            You are {EXAMINER.name}, an expert academic evaluator from Kiwi Labs. Analyze this viva examination for the subject {config.subject} on the topic {config.topic}.

            Subject Details:
            - Subject: {config.subject}
            - Topic: {config.topic}
            - Education Level: {config.subject_level}
            """
        ).strip()
        transcript = _transcript_block(messages, assistant=EXAMINER.name, user="Student")
        return f"{header}{project}\n\nViva Transcript:\n{transcript}\n\n" + _REPORT_CONTRACT.format(
            audience="student", session="viva"
        )

    header = dedent(
        f"""
        You are {INTERVIEWER.name}, an expert interview coach from Kiwi Labs. Analyze this job interview for a {config.job_title} position.

        Job Details:
        - Title: {config.job_title}
        - Company: {config.company or "Not specified"}
        - Experience Level: {config.experience_level}
        - Interview Type: {config.interview_type}
        - Required Skills: {config.required_skills}
        """
    ).strip()
    transcript = _transcript_block(messages, assistant=INTERVIEWER.name, user="Candidate")
    return f"{header}\n\nInterview Transcript:\n{transcript}\n\n" + _REPORT_CONTRACT.format(
        audience="candidate", session="interview"
    )
