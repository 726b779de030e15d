"""Per-stage latency instrumentation for the NLU pipeline."""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Generator
from dataclasses import dataclass

from dompetku.observability.logging import get_logger

logger = get_logger(__name__)

# Every stage is pure CPU work; anything slower is worth a warning.
SLOW_STAGE_MS = 250.0


@dataclass(slots=True)
class StageTimer:
    """Elapsed time of one stage; filled in when the block exits."""

    component: str
    elapsed_ms: float = 0.0


@contextlib.contextmanager
def timed(
    component: str,
    slow_ms: float = SLOW_STAGE_MS,
    timings: dict[str, float] | None = None,
) -> Generator[StageTimer, None, None]:
    """Measures one pipeline stage and logs its latency.

    Usage:
        with timed("normalizer", timings=result_timings):
            result = normalizer.normalize(text)

    Logs ``component_latency`` (component, elapsed_ms) at INFO, or at WARNING
    when the stage took longer than slow_ms. When `timings` is given the
    elapsed time is also recorded there under the component name.
    """
    timer = StageTimer(component)
    start = time.perf_counter()
    try:
        yield timer
    finally:
        timer.elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        if timings is not None:
            timings[component] = timer.elapsed_ms
        level = logging.WARNING if timer.elapsed_ms > slow_ms else logging.INFO
        logger.log(
            level,
            "component_latency",
            extra={"component": component, "elapsed_ms": timer.elapsed_ms},
        )
