"""Session configuration.

All values, paths included, are injected by the caller at runtime; nothing
is derived from the package location or the environment.
"""
from dataclasses import dataclass, field, replace

from .engine.detection import (
    DEFAULT_BLOCK_MARKERS,
    DEFAULT_BLOCKED_STATUSES,
    DEFAULT_CAPTCHA_SELECTORS,
)
from .engine.failure_bundle import BundleVerbosity
from .engine.retry import Backoff


@dataclass(frozen=True)
class SessionConfig:
    default_timeout: float = 10.0       # seconds, used when wait_for gets no timeout
    poll_interval: float = 0.25         # seconds between lookups while waiting
    navigation_timeout: float = 30.0
    max_attempts: int = 3
    backoff: Backoff = field(default_factory=lambda: Backoff.fixed(2.0))
    captcha_selectors: tuple[str, ...] = DEFAULT_CAPTCHA_SELECTORS
    block_markers: tuple[str, ...] = DEFAULT_BLOCK_MARKERS
    blocked_statuses: tuple[int, ...] = DEFAULT_BLOCKED_STATUSES
    transient_statuses: tuple[int, ...] = (429, 502, 503, 504)
    check_detection_on_goto: bool = True
    failure_bundle_verbosity: str = BundleVerbosity.OFF
    failure_dir: str = "data/logs/failures"

    def __post_init__(self):
        for name in ("default_timeout", "poll_interval", "navigation_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.failure_bundle_verbosity not in BundleVerbosity.ALL:
            raise ValueError(
                f"Unknown failure_bundle_verbosity {self.failure_bundle_verbosity!r}"
            )

    def with_overrides(self, **overrides) -> "SessionConfig":
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **overrides)
