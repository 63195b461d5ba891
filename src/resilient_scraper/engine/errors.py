"""Normalized error kinds for browser sessions.

Driver exceptions are mapped into these kinds so retry and diagnostics
logic can treat every failure the same way regardless of where it came from.
"""
from enum import Enum

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

# Substrings Playwright uses when a handle or its document went away.
# A closed page, context or browser is not listed: it propagates unchanged.
_STALE_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "execution context was destroyed",
    "frame was detached",
)


class ErrorKind(Enum):
    """Failure kinds a session can surface."""
    ELEMENT_NOT_FOUND = "element_not_found"  # locator never resolved in time
    STALE_ELEMENT = "stale_element"          # handle invalidated by page mutation
    TRANSIENT_NETWORK = "transient_network"  # navigation/load did not complete
    DETECTION_BLOCKED = "detection_blocked"  # bot wall, never retried

    @property
    def retryable(self) -> bool:
        return self is not ErrorKind.DETECTION_BLOCKED


class SessionError(Exception):
    """Exception carrying a normalized ErrorKind.

    ``attempts`` is the number of invocations made when the error was raised
    out of a retry loop (1 otherwise). ``bundle_path`` points at a saved
    failure bundle when diagnostics are enabled.
    """

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        self.attempts = 1
        self.bundle_path = ""
        super().__init__(message or kind.value)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable


class ElementNotFound(SessionError):
    def __init__(self, locator, timeout: float, frame: str = "default", message: str = ""):
        self.locator = locator
        self.timeout = timeout
        self.frame = frame
        super().__init__(
            ErrorKind.ELEMENT_NOT_FOUND,
            message or f"{locator} not found within {timeout:g}s (frame: {frame})",
        )


class StaleElement(SessionError):
    def __init__(self, locator=None, message: str = ""):
        self.locator = locator
        super().__init__(
            ErrorKind.STALE_ELEMENT,
            message or f"Element for {locator} went stale before use",
        )


class TransientNetworkFailure(SessionError):
    def __init__(self, url: str = "", message: str = ""):
        self.url = url
        super().__init__(
            ErrorKind.TRANSIENT_NETWORK,
            message or f"Navigation to {url} did not complete",
        )


class DetectionBlocked(SessionError):
    """Automation was detected and blocked. Always surfaced, never retried."""

    def __init__(self, reason: str, url: str = "", message: str = ""):
        self.reason = reason
        self.url = url
        super().__init__(
            ErrorKind.DETECTION_BLOCKED,
            message or f"Blocked by target site ({reason})" + (f" at {url}" if url else ""),
        )


def classify_error(exc: BaseException) -> ErrorKind | None:
    """Map a driver exception to an ErrorKind, or None if it is not one we know."""
    if isinstance(exc, SessionError):
        return exc.kind
    if isinstance(exc, PlaywrightTimeoutError):
        return ErrorKind.TRANSIENT_NETWORK
    if isinstance(exc, PlaywrightError):
        msg = str(exc).lower()
        if any(marker in msg for marker in _STALE_MARKERS):
            return ErrorKind.STALE_ELEMENT
        if "net::err_" in msg or "ns_error_" in msg:
            return ErrorKind.TRANSIENT_NETWORK
    return None
