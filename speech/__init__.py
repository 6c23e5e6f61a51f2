"""Speech input and output adapters over pluggable platform engines."""
from .speech_input import SpeechInputAdapter
from .speech_output import SpeechOutputAdapter, split_into_chunks
from .state_store import SpeechStateStore
from .types import (
    RecognitionEngine,
    RecognitionFailure,
    RecognitionResult,
    RecognitionStream,
    SpeechInputErrorKind,
    SpeechInputState,
    SpeechOutputErrorKind,
    SpeechOutputState,
    SynthesisEngine,
)

__all__ = [
    "RecognitionEngine",
    "RecognitionFailure",
    "RecognitionResult",
    "RecognitionStream",
    "SpeechInputAdapter",
    "SpeechInputErrorKind",
    "SpeechInputState",
    "SpeechOutputAdapter",
    "SpeechOutputErrorKind",
    "SpeechOutputState",
    "SpeechStateStore",
    "SynthesisEngine",
    "split_into_chunks",
]
