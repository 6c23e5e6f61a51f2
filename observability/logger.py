"""Session event log: one human line per event, plus JSON lines on disk.

Events never carry message content, only counters and outcome labels.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "0") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/sessions.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

# Fields promoted onto the human line, in this order.
SUMMARY_FIELDS = ("phase", "role", "question_count", "complete", "error_kind", "attempt", "source", "score", "ms")

_logger = logging.getLogger("sessions")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _human_only(record: logging.LogRecord) -> bool:
    return not _is_json(record)


def _attach(handler: logging.Handler, formatter: logging.Formatter, accept: Callable[[logging.LogRecord], bool]) -> None:
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    handler.addFilter(accept)
    _logger.addHandler(handler)


def _rotating(path: Path) -> logging.Handler:
    return logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)


def _console_stream():
    # stdout belongs to the terminal session transcript
    return sys.stderr


def _configure() -> None:
    if _logger.handlers:
        return

    human = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    _attach(logging.StreamHandler(stream=_console_stream()), human, _human_only)
    if not ENABLE_FILE_LOGS:
        return

    json_path = Path(LOG_FILE)
    json_path.parent.mkdir(parents=True, exist_ok=True)
    human_path = json_path.with_name(f"{json_path.stem}-human{json_path.suffix or '.log'}")
    _attach(_rotating(json_path), logging.Formatter("%(message)s"), _is_json)
    _attach(_rotating(human_path), human, _human_only)


def summarize(event: Dict[str, Any]) -> str:
    parts: List[str] = [f"session={event.get('session_id')}", f"kind={event.get('kind')}"]
    parts.extend(f"{key}={event[key]}" for key in SUMMARY_FIELDS if key in event)
    return " ".join(parts)


def _dispatch(message: str, level: int, *, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, level, "", 0, message, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Record a session event at ``level``; file sinks are enabled via ``ENABLE_FILE_LOGS``."""

    _configure()
    event: Dict[str, Any] = {"ts": time.time(), "trace": uuid.uuid4().hex, "kind": kind, "session_id": session_id}
    event.update(fields)

    _dispatch(summarize(event), level, is_json=False)
    if ENABLE_FILE_LOGS:
        _dispatch(json.dumps(event, ensure_ascii=False, default=str), level, is_json=True)


__all__ = ["log_event", "summarize"]
