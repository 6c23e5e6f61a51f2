"""Post-session feedback: the analysis client and its local fallback."""
from .feedback_generator import FeedbackEndpointError, FeedbackErrorKind, FeedbackGenerator
from .local_scoring import local_feedback
from .models import FeedbackReport

__all__ = [
    "FeedbackEndpointError",
    "FeedbackErrorKind",
    "FeedbackGenerator",
    "FeedbackReport",
    "local_feedback",
]
