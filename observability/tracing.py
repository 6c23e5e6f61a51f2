"""Simple span helper for recording gateway and playback timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator


@contextmanager
def span(state, name: str) -> Iterator[None]:
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except BaseException:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        state.events.append({"span": name, "ms": elapsed_ms, "outcome": outcome})


__all__ = ["span"]
