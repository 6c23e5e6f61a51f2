"""Percent-encoded JSON handoff used to pass configuration between screens."""
from __future__ import annotations

import json
from urllib.parse import quote, unquote

from pydantic import ValidationError

from .models import SessionConfig, config_to_wire, parse_session_config


class HandoffError(ValueError):  # Raised when a handoff payload cannot be decoded
    pass


def encode_config_param(config: SessionConfig) -> str:
    return quote(json.dumps(config_to_wire(config), ensure_ascii=False), safe="")


def decode_config_param(raw: str) -> SessionConfig:
    if not raw:
        raise HandoffError("missing configuration payload")
    try:
        data = json.loads(unquote(raw))
    except json.JSONDecodeError as exc:
        raise HandoffError("configuration payload is not valid JSON") from exc
    if not isinstance(data, dict):
        raise HandoffError("configuration payload must be a JSON object")
    try:
        return parse_session_config(data)
    except ValidationError as exc:
        raise HandoffError(f"configuration payload is incomplete: {exc.error_count()} invalid fields") from exc
