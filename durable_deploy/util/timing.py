"""Phase timing for deployment runs."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator


def _fields(kv: dict) -> str:
    return "".join(f" {k}={v}" for k, v in sorted(kv.items()))


@contextmanager
def timed(logger: logging.Logger, phase: str, **fields: Any) -> Iterator[None]:
    """
    Time one deployment phase.

    Logs "<phase>.done ms=<int>" at INFO when the block completes, or
    "<phase>.failed ms=<int> error=<ExceptionType>" at ERROR when it raises.
    The exception is re-raised unchanged; fields are appended sorted by key.
    """
    started = time.monotonic()
    try:
        yield
    except Exception as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.error(
            "%s.failed ms=%d error=%s%s", phase, elapsed_ms, type(e).__name__, _fields(fields)
        )
        raise
    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info("%s.done ms=%d%s", phase, elapsed_ms, _fields(fields))
