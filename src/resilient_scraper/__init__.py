"""resilient-scraper — fault-tolerant element lookup for browser automation.

Wraps an externally owned Playwright page with bounded waits, explicit
iframe context handling, retry with backoff, and anti-bot wall detection.
"""
from .browser.locator import By, Locator  # noqa: F401
from .browser.session import ResilientSession, DEFAULT_FRAME  # noqa: F401
from .config import SessionConfig  # noqa: F401
from .engine.errors import (  # noqa: F401
    ErrorKind,
    SessionError,
    ElementNotFound,
    StaleElement,
    TransientNetworkFailure,
    DetectionBlocked,
)
from .engine.retry import Backoff, with_retry  # noqa: F401
