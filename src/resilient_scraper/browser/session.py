"""Resilient wrapper around an externally owned Playwright page.

The session never opens or closes a browser — the app layer owns the page
and its lifecycle. This module adds bounded waiting, explicit iframe context
handling, navigation error mapping, and retry on top of it.
"""
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, TypeVar

from playwright.sync_api import Error as PlaywrightError

from ..config import SessionConfig
from ..engine import retry
from ..engine.detection import DetectionProbe
from ..engine.errors import (
    DetectionBlocked,
    ElementNotFound,
    ErrorKind,
    SessionError,
    StaleElement,
    TransientNetworkFailure,
    classify_error,
)
from ..engine.failure_bundle import BundleVerbosity, capture_failure_bundle, save_failure_bundle
from .locator import Locator

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FRAME = "default"


class ResilientSession:
    """Element lookup and basic fault tolerance atop a Playwright page.

    Single-owner and single-threaded: every wait blocks the calling thread
    until success, timeout, or retry exhaustion.

    The active document is either the top-level page (``current_frame ==
    "default"``) or the innermost entered iframe. Lookups always resolve
    against the active document.
    """

    def __init__(
        self,
        page: Any,
        config: SessionConfig | None = None,
        *,
        event_logger: Any = None,
        probe: DetectionProbe | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.page = page
        self.config = config or SessionConfig()
        self._events = event_logger
        self._probe = probe or DetectionProbe(
            captcha_selectors=self.config.captcha_selectors,
            block_markers=self.config.block_markers,
            blocked_statuses=self.config.blocked_statuses,
        )
        self._clock = clock
        self._sleep = sleep
        # (identifier, playwright Frame) from outermost to innermost
        self._frames: list[tuple[str, Any]] = []
        self._started = clock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit_frame()
        if self._events is not None:
            self._events.log_session_end(
                duration=self._clock() - self._started,
                final_frame=self.current_frame,
                status="ok" if exc is None else "error",
            )

    # ------------------------------------------------------------------
    # Frame context
    # ------------------------------------------------------------------

    @property
    def current_frame(self) -> str:
        return self._frames[-1][0] if self._frames else DEFAULT_FRAME

    @property
    def is_idle(self) -> bool:
        return not self._frames

    def _document(self):
        return self._frames[-1][1] if self._frames else self.page

    def _log_frame(self, action: str, frame_from: str):
        log.info(f"Frame {action}: {frame_from} -> {self.current_frame}")
        if self._events is not None:
            self._events.log_frame(action, frame_from, self.current_frame)

    def enter_frame(self, locator: Locator, timeout: float | None = None) -> None:
        """Wait for an iframe element and make its document the active one."""

        def _content_frame(handle):
            return handle.content_frame()

        frame = self._poll(locator, timeout, _content_frame)
        name = getattr(frame, "name", "")
        identifier = name if isinstance(name, str) and name else str(locator)
        before = self.current_frame
        self._frames.append((identifier, frame))
        self._log_frame("enter", before)

    def exit_frame(self) -> None:
        """Return to the top-level document. No-op when already there."""
        if not self._frames:
            return
        before = self.current_frame
        self._frames.clear()
        self._log_frame("exit", before)

    def parent_frame(self) -> None:
        """Step out one nesting level. No-op at the top-level document."""
        if not self._frames:
            return
        before = self.current_frame
        self._frames.pop()
        self._log_frame("parent", before)

    @contextmanager
    def frame(self, locator: Locator, timeout: float | None = None):
        """Enter a frame for the duration of the block, then restore the
        exact context that was active before, nested or not."""
        saved = list(self._frames)
        self.enter_frame(locator, timeout)
        try:
            yield self
        finally:
            before = self.current_frame
            self._frames = saved
            self._log_frame("restore", before)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _resolve_timeout(self, timeout: float | None, default: float) -> float:
        if timeout is None:
            return default
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        return float(timeout)

    def _poll(self, locator: Locator, timeout: float | None,
              accept: Callable[[Any], Any]) -> Any:
        """Query the active document until ``accept(handle)`` returns non-None.

        Yields to Playwright between ticks via page.wait_for_timeout().
        Handles that go stale mid-check are dropped and re-queried.
        """
        timeout = self._resolve_timeout(timeout, self.config.default_timeout)
        selector = locator.selector()
        start = self._clock()
        deadline = start + timeout
        polls = 0

        while True:
            polls += 1
            result = None
            try:
                handle = self._document().query_selector(selector)
                if handle is not None:
                    result = accept(handle)
            except PlaywrightError as e:
                if classify_error(e) is not ErrorKind.STALE_ELEMENT:
                    raise
                log.debug(f"{locator}: stale during poll {polls}, re-querying")
            if result is not None:
                elapsed = self._clock() - start
                log.debug(f"{locator}: found after {elapsed:.2f}s ({polls} polls)")
                if self._events is not None:
                    self._events.log_wait(str(locator), self.current_frame, True,
                                          elapsed, timeout, polls)
                return result

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            wait_ms = int(min(self.config.poll_interval, remaining) * 1000)
            self.page.wait_for_timeout(max(wait_ms, 1))

        elapsed = self._clock() - start
        if self._events is not None:
            self._events.log_wait(str(locator), self.current_frame, False,
                                  elapsed, timeout, polls)
        err = ElementNotFound(locator, timeout, self.current_frame)
        log.warning(str(err))
        self._record_failure(err)
        raise err

    def wait_for(self, locator: Locator, timeout: float | None = None):
        """Wait until the element exists and is interactable (visible and enabled).

        Raises ElementNotFound when ``timeout`` seconds elapse first.
        """

        def _interactable(handle):
            if handle.is_visible() and handle.is_enabled():
                return handle
            return None

        return self._poll(locator, timeout, _interactable)

    def find_all(self, locator: Locator) -> list:
        """Immediate lookup of every match in the active document. Never waits."""
        return list(self._document().query_selector_all(locator.selector()))

    # ------------------------------------------------------------------
    # Acting on elements
    # ------------------------------------------------------------------

    def use(self, handle: Any, action: Callable[[Any], T], locator: Locator | None = None) -> T:
        """Run ``action(handle)``, translating a detached handle into StaleElement."""
        try:
            return action(handle)
        except PlaywrightError as e:
            if classify_error(e) is ErrorKind.STALE_ELEMENT:
                raise StaleElement(locator, f"Element for {locator} went stale: {e}") from e
            raise

    def click(self, locator: Locator, timeout: float | None = None) -> None:
        handle = self.wait_for(locator, timeout)
        self.use(handle, lambda h: h.click(), locator)

    def fill(self, locator: Locator, text: str, timeout: float | None = None) -> None:
        handle = self.wait_for(locator, timeout)
        self.use(handle, lambda h: h.fill(text), locator)

    def text_of(self, locator: Locator, timeout: float | None = None) -> str:
        handle = self.wait_for(locator, timeout)
        return self.use(handle, lambda h: h.inner_text(), locator) or ""

    # ------------------------------------------------------------------
    # Navigation and detection
    # ------------------------------------------------------------------

    def goto(self, url: str, timeout: float | None = None,
             wait_until: str = "domcontentloaded"):
        """Navigate the page, mapping load failures to TransientNetworkFailure.

        Navigation always drops the frame context back to default.
        """
        timeout = self._resolve_timeout(timeout, self.config.navigation_timeout)
        self.exit_frame()
        start = self._clock()
        log.info(f"Navigating to {url}")
        try:
            response = self.page.goto(url, timeout=timeout * 1000, wait_until=wait_until)
        except PlaywrightError as e:
            if classify_error(e) is not ErrorKind.TRANSIENT_NETWORK:
                raise
            self._log_navigation(url, None, start, ErrorKind.TRANSIENT_NETWORK)
            log.warning(f"Navigation to {url} failed: {e}")
            raise TransientNetworkFailure(url, f"Navigation to {url} failed: {e}") from e

        status = response.status if response is not None else None
        if self.config.check_detection_on_goto:
            try:
                self.ensure_not_blocked(status=status)
            except DetectionBlocked:
                self._log_navigation(url, status, start, ErrorKind.DETECTION_BLOCKED)
                raise
        if status is not None and status in self.config.transient_statuses:
            self._log_navigation(url, status, start, ErrorKind.TRANSIENT_NETWORK)
            log.warning(f"Navigation to {url} returned HTTP {status}")
            raise TransientNetworkFailure(url, f"Navigation to {url} returned HTTP {status}")

        self._log_navigation(url, status, start, None)
        return response

    def _log_navigation(self, url: str, status: int | None, start: float,
                        kind: ErrorKind | None):
        if self._events is not None:
            self._events.log_navigation(url, status, kind is None, self._clock() - start,
                                        kind.value if kind is not None else None)

    def ensure_not_blocked(self, status: int | None = None) -> None:
        """Raise DetectionBlocked if the page shows a captcha or block wall."""
        reason = self._probe.check(self.page, status=status)
        if reason is None:
            return
        url = ""
        try:
            url = self.page.url or ""
        except PlaywrightError:
            pass
        err = DetectionBlocked(reason, url=url)
        log.warning(str(err))
        self._record_failure(err)
        if self._events is not None:
            self._events.log_blocked(url, reason, err.bundle_path)
        raise err

    # ------------------------------------------------------------------
    # Retry and diagnostics
    # ------------------------------------------------------------------

    def with_retry(self, operation: Callable[[], T], max_attempts: int | None = None,
                   backoff: retry.Backoff | None = None) -> T:
        """Run ``operation`` with bounded retries using the session defaults."""
        attempts = self.config.max_attempts if max_attempts is None else max_attempts
        policy = backoff if backoff is not None else self.config.backoff

        def _on_retry(attempt: int, err: SessionError, delay: float):
            if self._events is not None:
                self._events.log_retry(attempt, attempts, err.kind.value, str(err), delay)

        return retry.with_retry(operation, attempts, policy,
                                sleep=self._sleep, on_retry=_on_retry)

    def _record_failure(self, err: SessionError) -> None:
        verbosity = self.config.failure_bundle_verbosity
        if verbosity == BundleVerbosity.OFF:
            return
        bundle = capture_failure_bundle(
            self.page, err, frame=self.current_frame, verbosity=verbosity,
            screenshot_dir=self.config.failure_dir,
        )
        err.bundle_path = save_failure_bundle(bundle, base_dir=self.config.failure_dir)
        if err.bundle_path:
            log.info(f"Saved failure bundle: {err.bundle_path}")
