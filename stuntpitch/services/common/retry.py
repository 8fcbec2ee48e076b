# stuntpitch/services/common/retry.py
"""Single retry policy for upstream LLM calls: exponential backoff on rate-limit / overload."""
from __future__ import annotations
import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar

from stuntpitch.core.config import settings

logger = logging.getLogger("ai.retry")

F = TypeVar("F", bound=Callable[..., Any])

# 429 = rate limited, 529 = provider overloaded
RETRYABLE_STATUS_CODES = frozenset({429, 529})


def _status_code(exc: BaseException) -> Optional[int]:
    code = getattr(exc, "status_code", None)
    if code is None:
        code = getattr(exc, "status", None)
    return code if isinstance(code, int) else None


def is_retryable(exc: BaseException) -> bool:
    return _status_code(exc) in RETRYABLE_STATUS_CODES


def backoff_delays(max_retries: int, base_seconds: float) -> list[float]:
    """Delays before each retry: base, 2*base, 4*base ... (2s/4s/8s by default)."""
    return [base_seconds * (2 ** i) for i in range(max_retries)]


def retry_on_overload(
    func: Optional[F] = None,
    *,
    max_retries: Optional[int] = None,
    base_seconds: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """Retry `func` when it raises a 429/529 error; every other exception propagates at once."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            retries = settings.LLM_MAX_RETRIES if max_retries is None else max_retries
            base = settings.LLM_BACKOFF_BASE_SECONDS if base_seconds is None else base_seconds
            delays = backoff_delays(retries, base)
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except Exception as e:
                    if not is_retryable(e) or attempt >= len(delays):
                        raise
                    delay = delays[attempt]
                    attempt += 1
                    logger.warning(
                        "Upstream overloaded (status=%s); retrying in %.1fs (attempt %d/%d)",
                        _status_code(e), delay, attempt, retries,
                    )
                    sleep(delay)

        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator
