"""Completion detection and question counting over assistant messages.

Both decisions are phrase heuristics: a paraphrased closing line ("we are
done here") is not recognised, and ``concluded`` on its own can match an
assistant message that merely mentions a concluded project.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol, Sequence, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).resolve().parents[1] / "config" / "classifier.yaml"

COMPLETION_PHRASES: Tuple[str, ...] = (
    "interview is complete",
    "interview has concluded",
    "end of our interview",
    "viva is complete",
    "viva has concluded",
    "concluded",
)
CLARIFYING_OPENERS: Tuple[str, ...] = ("could you",)


class CompletionClassifier(Protocol):
    def is_session_end(self, text: str) -> bool:
        ...

    def counts_as_question(self, text: str) -> bool:
        ...


def _normalise(phrases: Iterable[str]) -> Tuple[str, ...]:
    return tuple(str(phrase).strip().lower() for phrase in phrases if str(phrase).strip())


class PhraseClassifier:
    def __init__(
        self,
        completion_phrases: Sequence[str] = COMPLETION_PHRASES,
        clarifying_openers: Sequence[str] = CLARIFYING_OPENERS,
    ) -> None:
        self.completion_phrases = _normalise(completion_phrases)
        self.clarifying_openers = _normalise(clarifying_openers)

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "PhraseClassifier":
        """Load phrase lists from YAML; missing keys keep the built-in lists."""

        target = Path(path) if path else DEFAULT_PATH
        if not target.exists() and target != DEFAULT_PATH:
            logger.warning("Classifier config %s not found; using %s", target, DEFAULT_PATH)
            target = DEFAULT_PATH
        with target.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        return cls(
            completion_phrases=data.get("completion_phrases") or COMPLETION_PHRASES,
            clarifying_openers=data.get("clarifying_openers") or CLARIFYING_OPENERS,
        )

    def is_session_end(self, text: str) -> bool:
        lowered = text.lower()
        return any(phrase in lowered for phrase in self.completion_phrases)

    def counts_as_question(self, text: str) -> bool:
        # Clarifying follow-ups ("Could you expand on...") do not advance the count.
        if "?" not in text:
            return False
        lowered = text.lstrip().lower()
        return not any(lowered.startswith(opener) for opener in self.clarifying_openers)
