"""Bind the registry keys used by the routes to configured LLM routes."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from config import ANALYSIS_KEY, CHAT_KEY, bind_model, is_bound, load_config, resolve_registry, settings
from feedback.models import FeedbackReport
from llm_gateway import HttpClient, chat, complete

logger = logging.getLogger(__name__)

CHAT_TARGET = "api.chat"
ANALYSIS_TARGET = "api.analyze_interview"


def bind_default_models(
    config_path: Optional[Path] = None,
    *,
    client: Optional[HttpClient] = None,
    overwrite: bool = False,
) -> None:
    """Bind chat and analysis callables unless something is already bound."""

    path = config_path or Path(settings.APP_CONFIG_PATH)
    routes = resolve_registry(load_config(path), [CHAT_TARGET, ANALYSIS_TARGET])
    chat_route = routes[CHAT_TARGET]
    analysis_route = routes[ANALYSIS_TARGET]

    def _chat_turn(*, messages: List[Dict[str, str]]) -> str:
        return complete(messages, cfg=chat_route, client=client)

    def _analysis(*, messages: List[Dict[str, str]]) -> FeedbackReport:
        return chat(messages, FeedbackReport, cfg=analysis_route, client=client)

    for key, fn in ((CHAT_KEY, _chat_turn), (ANALYSIS_KEY, _analysis)):
        if overwrite or not is_bound(key):
            bind_model(key, fn)
            logger.info("Bound %s from %s", key, path)
