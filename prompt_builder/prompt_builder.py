from __future__ import annotations  # System instructions for the interviewer and examiner personas

from dataclasses import dataclass, replace
from textwrap import dedent
from typing import List

from config.settings import settings
from interview_setup import JobInterviewConfig, PracticeConfig, PracticeQuestion, SessionConfig, SubjectiveVivaConfig, practice_questions


@dataclass(frozen=True)
class Persona:  # Named AI character and how it refers to the user
    name: str
    role: str
    audience: str
    session_label: str


INTERVIEWER = Persona(
    name="Kiwi Master",
    role="an experienced interviewer from Kiwi Labs",
    audience="candidate",
    session_label="interview",
)
EXAMINER = Persona(
    name="Professor Kiwi",
    role="an experienced professor from Kiwi Labs",
    audience="student",
    session_label="viva",
)


# Interviewer role per practice round; other types get a generic interviewer.
PRACTICE_ROLES = {
    "technical": "senior software engineer",
    "behavioral": "HR manager",
    "case": "management consultant",
}


def persona_for(config: SessionConfig) -> Persona:
    if config.kind == "subjective":
        return EXAMINER
    if isinstance(config, PracticeConfig):
        role = PRACTICE_ROLES.get(config.practice_type, "interviewer")
        return replace(INTERVIEWER, role=f"an AI {role} from Kiwi Labs")
    return INTERVIEWER


def question_total(config: SessionConfig) -> int:
    """Main questions in a session: the bank size for practice rounds."""

    if isinstance(config, PracticeConfig):
        return len(practice_questions(config.practice_type)) or settings.TOTAL_QUESTIONS
    return settings.TOTAL_QUESTIONS


def user_name(config: SessionConfig) -> str:  # Name to address, or a generic role label
    persona = persona_for(config)
    profile = config.user_profile
    if profile is not None and profile.name.strip():
        return profile.name.strip()
    return f"the {persona.audience}"


def build_system_instruction(config: SessionConfig, *, total_questions: int | None = None) -> str:
    """Compose the persona instruction for ``config``.

    Every variant shares one layout: identity, facts, numbered rules and the
    opening-turn request. Practice rounds also list their bank questions.
    """

    total = total_questions or question_total(config)
    persona = persona_for(config)
    name = user_name(config)
    appendix: List[str] = []
    if isinstance(config, SubjectiveVivaConfig):
        identity = (
            f"You are {persona.name}, {persona.role} conducting a viva examination on the subject of "
            f"{config.subject}, specifically focusing on the topic of {config.topic}."
        )
        facts = _viva_facts(config, name)
        focus_rules = _viva_rules(config, total)
    elif isinstance(config, PracticeConfig):
        identity = f"You are {persona.name}, {persona.role} conducting a {config.practice_type} interview."
        facts = [f"Candidate Name: {name}", f"Interview Type: {config.practice_type}"]
        focus_rules = [f"Ask a total of {total} main questions, tracking how many you've asked."]
        appendix = _practice_questions_block(config)
    else:
        position = config.job_title + (f" at {config.company}" if config.company else "")
        identity = (
            f"You are {persona.name}, {persona.role} conducting a job interview for the position of {position}."
        )
        facts = _job_facts(config, name)
        focus_rules = _job_rules(config, total)

    rules = [
        f"Start by briefly introducing yourself as {persona.name} from Kiwi Labs and explain the {persona.session_label} process.",
        f"Address the {persona.audience} by their name ({name}).",
        f"Ask one question at a time, waiting for the {persona.audience}'s response.",
        f"After the {persona.audience} responds, provide brief feedback and then ask a follow-up question or move to the next question.",
        f"Stay in character as a professional {'academic examiner' if persona is EXAMINER else 'interviewer'} throughout.",
        *focus_rules,
        f"When you've asked all {total} questions, tell the {persona.audience} the {persona.session_label} is complete and provide overall feedback.",
    ]
    numbered = "\n".join(f"{index}. {rule}" for index, rule in enumerate(rules, start=1))

    return "\n\n".join(
        [
            identity,
            "\n".join(facts),
            "Follow these rules:\n" + numbered,
            "Your first message should be a brief introduction followed by the first question.",
            *appendix,
        ]
    )


def _job_facts(config: JobInterviewConfig, name: str) -> List[str]:
    facts = [
        f"Candidate Name: {name}",
        f"Job Title: {config.job_title}",
        f"Job Description:\n{config.job_description or 'Not provided'}",
        f"Required Skills:\n{config.required_skills or 'Not provided'}",
        f"Experience Level: {config.experience_level}",
        f"Interview Type: {config.interview_type}",
    ]
    if config.additional_notes:
        facts.append(f"Additional Notes: {config.additional_notes}")
    return facts


def _viva_facts(config: SubjectiveVivaConfig, name: str) -> List[str]:
    facts = [
        f"Student Name: {name}",
        f"Subject: {config.subject}",
        f"Topic: {config.topic}",
        f"Education Level: {config.subject_level}",
    ]
    if config.additional_notes:
        facts.append(f"Additional Notes: {config.additional_notes}")
    if config.has_project_document:
        document = config.file_details.name if config.file_details else "project document"
        facts.append(f"The student has submitted a project document: {document}")
    return facts


def _job_rules(config: JobInterviewConfig, total: int) -> List[str]:
    return [
        f"Ask a total of {total} questions that are highly relevant to the job description and required skills.",
        "For technical interviews, focus on technical skills and problem-solving. For behavioral interviews, "
        "focus on past experiences and soft skills. For mixed interviews, include both.",
        f"Adapt the difficulty based on the experience level ({config.experience_level}).",
    ]


def _numbered_questions(questions: List[PracticeQuestion]) -> str:
    return "\n".join(f"{index}. {item.question}" for index, item in enumerate(questions, start=1))


def _practice_questions_block(config: PracticeConfig) -> List[str]:
    questions = practice_questions(config.practice_type)
    if not questions:
        return []
    header = f"Available main questions for this {config.practice_type} interview (use these in order):"
    return [header + "\n" + _numbered_questions(questions)]


def _viva_rules(config: SubjectiveVivaConfig, total: int) -> List[str]:
    rules = [
        f"Ask a total of {total} questions that are highly relevant to the subject and topic.",
        f"Adapt the difficulty based on the education level ({config.subject_level}).",
    ]
    if config.has_project_document:
        rules.append("Ask at least 2 questions that relate to the student's project work.")
    return rules


def fallback_opening(config: SessionConfig) -> str:  # Scripted opening when the first generation fails
    persona = persona_for(config)
    if isinstance(config, SubjectiveVivaConfig):
        return dedent(
            f"""
            Hello! I'm {persona.name} from Kiwi Labs, and I'll be conducting your viva on {config.subject} today.
            Let's start with the first question: Could you tell me about your understanding of {config.topic}?
            """
        ).strip().replace("\n", " ")
    if isinstance(config, PracticeConfig):
        questions = practice_questions(config.practice_type)
        first = questions[0].question if questions else "Could you tell me a little about yourself?"
        return (
            f"Hello! I'm {persona.name} from Kiwi Labs, and I'll be conducting your {config.practice_type} "
            f"practice interview today. Let's start with the first question: {first}"
        )
    return dedent(
        f"""
        Hello! I'm {persona.name} from Kiwi Labs, and I'll be conducting your interview for the {config.job_title} role today.
        Let's start with the first question: Could you tell me about your experience with the technologies mentioned in the job requirements?
        """
    ).strip().replace("\n", " ")
