"""Session turn loop, completion heuristics and voice coordination."""
from .classifier import CompletionClassifier, PhraseClassifier
from .controller import APOLOGY, SessionController
from .models import Notice, SessionPhase, SessionState

__all__ = [
    "APOLOGY",
    "CompletionClassifier",
    "Notice",
    "PhraseClassifier",
    "SessionController",
    "SessionPhase",
    "SessionState",
]
