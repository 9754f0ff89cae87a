# chess_scout/tracing.py

"""
tracing
~~~~~~~

Context-aware logging helpers for the profile pipeline stages.
"""

import functools
import time
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def trace_stage(stage_name: str) -> Callable[[F], F]:
    """
    A decorator that logs entry and exit of a pipeline stage.

    The stage name is bound into structlog's context variables for the
    duration of the call, so every event logged inside the stage carries it.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with structlog.contextvars.bound_contextvars(stage=stage_name):
                started = time.perf_counter()
                logger.debug("Entering processing stage.")
                result = func(*args, **kwargs)
                logger.debug(
                    "Exiting processing stage.",
                    elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                return result
        return wrapper  # type: ignore[return-value]
    return decorator
