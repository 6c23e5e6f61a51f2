"""Offline feedback used when the analysis endpoint is unavailable."""
from __future__ import annotations

import re
from typing import List, Sequence

from transcript import Message, user_answers

from .models import FeedbackReport

KEYWORDS = ("experience", "project", "team", "learned", "challenge", "solution")
MIN_POINTS = 3

DEFAULT_STRENGTHS = (
    "Engaged with all questions",
    "Maintained a professional tone throughout",
    "Stayed on topic when answering",
)
DEFAULT_IMPROVEMENTS = (
    "Practice more structured responses using the STAR method",
    "Quantify results and impact where possible",
    "Prepare concrete examples before the session",
)


def _keyword_hits(answers: Sequence[str]) -> int:
    joined = " ".join(answers)
    return sum(len(re.findall(rf"\b{keyword}\b", joined, flags=re.IGNORECASE)) for keyword in KEYWORDS)


def _pad(points: List[str], defaults: Sequence[str]) -> List[str]:
    for item in defaults:
        if len(points) >= MIN_POINTS:
            break
        if item not in points:
            points.append(item)
    return points


def _detail_label(average_words: float) -> str:
    if average_words < 30:
        return "limited"
    if average_words < 50:
        return "adequate"
    return "good"


def local_feedback(transcript: Sequence[Message]) -> FeedbackReport:
    """Score the user's answers by length and keyword use."""

    answers = user_answers(transcript)
    word_count = sum(len(answer.split()) for answer in answers)
    average_words = word_count / len(answers) if answers else 0.0

    if average_words < 20:
        score = 5.0
    elif average_words < 50:
        score = 7.0
    else:
        score = 8.0
    hits = _keyword_hits(answers)
    score += min(hits / 2, 2)

    strengths: List[str] = []
    improvements: List[str] = []
    if average_words >= 30:
        strengths.append("Provided detailed answers")
    else:
        improvements.append("Provide more detailed responses with examples")
    if hits >= 3:
        strengths.append("Used relevant terminology")
    else:
        improvements.append("Include more industry-specific terminology")
    if any(len(answer) > 100 for answer in answers):
        strengths.append("Gave comprehensive answers to complex questions")
    if all(len(answer) < 200 for answer in answers):
        improvements.append("Elaborate more on complex topics")

    detailed = " ".join(
        [
            f"Your responses showed {_detail_label(average_words)} detail.",
            f"You used relevant terminology {'sparingly' if hits < 3 else 'effectively'}.",
            "Your communication style was "
            + ("concise but could benefit from more detail." if average_words < 30 else "appropriately detailed."),
            "To improve, focus on providing specific examples from your experience "
            "and quantifying your achievements where possible.",
        ]
    )

    return FeedbackReport(
        overall_score=round(score * 10),
        strengths=_pad(strengths, DEFAULT_STRENGTHS),
        improvements=_pad(improvements, DEFAULT_IMPROVEMENTS),
        detailed_feedback=detailed,
    )
