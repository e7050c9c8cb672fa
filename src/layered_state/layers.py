"""Reusable override layers built on the previous-handle side channel.

Each factory returns a plain function of the form ``layer(context, *args, previous,
**kwargs)``: the handle arrives as the last positional argument, which holds under
both injection policies because the layers accept ``*args``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from layered_state.handle import PreviousHandle

logger = logging.getLogger(__name__)

Layer = Callable[..., Any]


def _split(args: tuple[Any, ...]) -> tuple[tuple[Any, ...], PreviousHandle]:
    if not args or not isinstance(args[-1], PreviousHandle):
        raise TypeError("override layer invoked without a previous handle")
    return args[:-1], args[-1]


def memoize() -> Layer:
    """Cache results of the previous implementation per call arguments."""

    def memoized(context: Any, *args: Any, **kwargs: Any) -> Any:
        call_args, previous = _split(args)
        cache: dict[Hashable, Any] | None = getattr(previous, "cache", None)
        if cache is None:
            cache = {}
            previous.cache = cache
        key = (call_args, tuple(sorted(kwargs.items())))
        if key not in cache:
            cache[key] = previous(*call_args, **kwargs)
        return cache[key]

    return memoized


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt budget and exponential backoff for :func:`retry`."""

    attempts: int = 3
    base_delay_seconds: float = 0.1
    max_delay_seconds: float = 2.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    def __post_init__(self) -> None:
        if self.attempts <= 0:
            raise ValueError("attempts must be positive")
        if self.base_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("delays must be non-negative")


def backoff_seconds(attempt: int, policy: RetryPolicy) -> float:
    """Delay before retrying after the zero-based ``attempt`` failed."""
    return min(policy.base_delay_seconds * (2**attempt), policy.max_delay_seconds)


def retry(policy: RetryPolicy | None = None, *, sleep: Callable[[float], None] = time.sleep) -> Layer:
    """Re-invoke the previous implementation on the policy's exception types."""

    resolved = policy or RetryPolicy()

    def retrying(context: Any, *args: Any, **kwargs: Any) -> Any:
        call_args, previous = _split(args)
        attempt = 0
        while True:
            try:
                return previous(*call_args, **kwargs)
            except resolved.retry_on as exc:
                previous.failures = getattr(previous, "failures", 0) + 1
                if attempt + 1 >= resolved.attempts:
                    raise
                delay = backoff_seconds(attempt, resolved)
                logger.warning(
                    "layer.retry",
                    extra={
                        "data": {
                            "operation": previous.operation.name,
                            "attempt": attempt + 1,
                            "reason": type(exc).__name__,
                            "backoff_s": delay,
                        }
                    },
                )
                sleep(delay)
                attempt += 1

    return retrying


def throttle(min_interval: float, *, clock: Callable[[], float] = time.monotonic) -> Layer:
    """Reuse the last result while calls arrive within ``min_interval`` seconds."""

    if min_interval < 0:
        raise ValueError("min_interval must be non-negative")

    def throttled(context: Any, *args: Any, **kwargs: Any) -> Any:
        call_args, previous = _split(args)
        now = clock()
        last_called: float | None = getattr(previous, "last_called", None)
        if last_called is not None and now - last_called < min_interval:
            return previous.last_result
        result = previous(*call_args, **kwargs)
        previous.last_called = now
        previous.last_result = result
        return result

    return throttled


def instrument(log: logging.Logger | None = None, *, name: str | None = None) -> Layer:
    """Log start, finish and failure of the previous implementation."""

    target = log or logger

    def instrumented(context: Any, *args: Any, **kwargs: Any) -> Any:
        call_args, previous = _split(args)
        label = name or previous.operation.name
        start = time.perf_counter()
        target.debug("layer.call.start", extra={"data": {"operation": label}})
        try:
            result = previous(*call_args, **kwargs)
        except Exception:
            target.exception(
                "layer.call.failed",
                extra={"data": {"operation": label, "elapsed_ms": _elapsed_ms(start)}},
            )
            raise
        previous.calls = getattr(previous, "calls", 0) + 1
        target.info(
            "layer.call.finish",
            extra={"data": {"operation": label, "elapsed_ms": _elapsed_ms(start)}},
        )
        return result

    return instrumented


def validate(check: Callable[..., bool], message: str | None = None) -> Layer:
    """Reject calls whose arguments fail ``check`` before delegating."""

    def validated(context: Any, *args: Any, **kwargs: Any) -> Any:
        call_args, previous = _split(args)
        if not check(*call_args, **kwargs):
            raise ValueError(message or f"invalid arguments for {previous.operation.name}")
        return previous(*call_args, **kwargs)

    return validated


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


__all__ = [
    "Layer",
    "RetryPolicy",
    "backoff_seconds",
    "instrument",
    "memoize",
    "retry",
    "throttle",
    "validate",
]
