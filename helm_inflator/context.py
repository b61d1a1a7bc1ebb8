"""Utilities for tracing the steps of a generator run."""

from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

__all__ = ["trace_context"]


def _label(step: str, chart_name: str | None) -> str:
    if chart_name:
        return f"{step} [{chart_name}]"
    return step


@contextmanager
def trace_context(
    step: str, chart_name: str | None = None
) -> Generator[None, None, None]:
    """Log the start and end of a step of inflating a chart with its duration.

    Steps that raise are logged as failed, the exception is propagated.
    """
    label = _label(step, chart_name)
    t1 = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    except BaseException:
        _LOGGER.debug("[Trace] ! %s failed (%0.2fs)", label, perf_counter() - t1)
        raise
    _LOGGER.debug("[Trace] < %s (%0.2fs)", label, perf_counter() - t1)
