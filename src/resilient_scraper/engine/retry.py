"""Bounded retry with a pluggable backoff policy."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from .errors import SessionError

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Backoff:
    """Delay policy between attempts.

    The wait after the n-th failed attempt is
    ``(initial + step * (n - 1)) * factor ** (n - 1)``, capped at ``max_delay``.
    """
    initial: float = 0.0
    step: float = 0.0
    factor: float = 1.0
    max_delay: float | None = None

    def __post_init__(self):
        if self.initial < 0 or self.step < 0:
            raise ValueError("Backoff delays must be non-negative")
        if self.factor < 1.0:
            raise ValueError("Backoff factor must be >= 1.0")
        if self.max_delay is not None and self.max_delay < 0:
            raise ValueError("Backoff max_delay must be non-negative")

    @classmethod
    def none(cls) -> "Backoff":
        return cls()

    @classmethod
    def fixed(cls, delay: float) -> "Backoff":
        return cls(initial=delay)

    @classmethod
    def incremental(cls, initial: float, step: float) -> "Backoff":
        return cls(initial=initial, step=step)

    @classmethod
    def exponential(cls, initial: float, factor: float = 2.0,
                    max_delay: float | None = None) -> "Backoff":
        return cls(initial=initial, factor=factor, max_delay=max_delay)

    def delay(self, failures: int) -> float:
        """Seconds to wait after the ``failures``-th failed attempt (1-based)."""
        n = max(1, failures) - 1
        d = (self.initial + self.step * n) * (self.factor ** n)
        if self.max_delay is not None:
            d = min(d, self.max_delay)
        return d


def with_retry(
    operation: Callable[[], T],
    max_attempts: int,
    backoff: Backoff,
    *,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, SessionError, float], None] | None = None,
) -> T:
    """Call ``operation`` until it succeeds, at most ``max_attempts`` times.

    Only retryable SessionErrors (element not found, stale element, transient
    network) trigger another attempt. DetectionBlocked and any other exception
    propagate immediately. When attempts run out the last failure is re-raised
    with ``attempts`` set to the number of invocations made.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except SessionError as e:
            e.attempts = attempt
            if not e.retryable:
                log.warning(f"Attempt {attempt}: {e.kind.value} is not retryable, surfacing")
                raise
            if attempt >= max_attempts:
                log.warning(f"Giving up after {attempt} attempt(s): {e}")
                raise
            delay = backoff.delay(attempt)
            log.info(f"Attempt {attempt}/{max_attempts} failed ({e.kind.value}), "
                     f"retrying in {delay:.1f}s")
            if on_retry is not None:
                on_retry(attempt, e, delay)
            if delay > 0:
                sleep(delay)
