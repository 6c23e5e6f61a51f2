"""Explicit persistence for the speech input's disabled-by-network flag."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class SpeechStateStore:
    """JSON file holding ``{"network_error": bool}``, written atomically."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load_network_error(self) -> bool:
        if not self.path.exists():
            return False
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable speech state %s: %s", self.path, exc)
            return False
        return bool(isinstance(data, dict) and data.get("network_error"))

    def save_network_error(self, flag: bool) -> None:
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump({"network_error": flag}, handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, self.path)
