"""Named slots for the backend's generation callables.

The API binds chat and analysis callables here at startup; tests bind fakes
under the same keys.
"""
from typing import Any, Callable, Dict

CHAT_KEY = "models.chat_turn"
ANALYSIS_KEY = "models.interview_analysis"

Generator = Callable[..., Any]

_BOUND: Dict[str, Generator] = {}


def bind_model(key: str, fn: Generator) -> None:
    _BOUND[key] = fn


def get_model(key: str) -> Generator:
    """Return the callable bound to ``key``.

    Raises:
        KeyError: when nothing is bound, e.g. the app was built without
            ``bind_default_models``.
    """

    try:
        return _BOUND[key]
    except KeyError:
        raise KeyError(f"No generation callable bound for {key}") from None


def is_bound(key: str) -> bool:
    return key in _BOUND


def unbind_model(key: str) -> None:
    _BOUND.pop(key, None)
