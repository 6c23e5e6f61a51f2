"""Session configuration models, practice question banks and the screen-to-screen handoff codec."""
from .handoff import HandoffError, decode_config_param, encode_config_param
from .models import (
    FileDetails,
    JobInterviewConfig,
    PracticeConfig,
    PracticeType,
    SessionConfig,
    SessionKind,
    SubjectiveVivaConfig,
    UserProfile,
    config_to_wire,
    infer_kind,
    parse_session_config,
)
from .question_bank import PRACTICE_TYPES, PracticeQuestion, QuestionBankError, load_question_bank, practice_questions

__all__ = [
    "FileDetails",
    "HandoffError",
    "JobInterviewConfig",
    "PRACTICE_TYPES",
    "PracticeConfig",
    "PracticeQuestion",
    "PracticeType",
    "QuestionBankError",
    "SessionConfig",
    "SessionKind",
    "SubjectiveVivaConfig",
    "UserProfile",
    "config_to_wire",
    "decode_config_param",
    "encode_config_param",
    "infer_kind",
    "load_question_bank",
    "parse_session_config",
    "practice_questions",
]
