"""Tests for ErrorKind, SessionError subclasses, and classify_error."""
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from resilient_scraper.browser.locator import Locator
from resilient_scraper.engine.errors import (
    DetectionBlocked,
    ElementNotFound,
    ErrorKind,
    SessionError,
    StaleElement,
    TransientNetworkFailure,
    classify_error,
)


def test_kind_values():
    assert ErrorKind.ELEMENT_NOT_FOUND.value == "element_not_found"
    assert ErrorKind.STALE_ELEMENT.value == "stale_element"
    assert ErrorKind.TRANSIENT_NETWORK.value == "transient_network"
    assert ErrorKind.DETECTION_BLOCKED.value == "detection_blocked"


def test_only_detection_is_not_retryable():
    assert ErrorKind.ELEMENT_NOT_FOUND.retryable
    assert ErrorKind.STALE_ELEMENT.retryable
    assert ErrorKind.TRANSIENT_NETWORK.retryable
    assert not ErrorKind.DETECTION_BLOCKED.retryable


def test_session_error_default_message():
    err = SessionError(ErrorKind.STALE_ELEMENT)
    assert str(err) == "stale_element"
    assert err.attempts == 1
    assert err.bundle_path == ""


def test_element_not_found_fields():
    loc = Locator.class_name("price")
    err = ElementNotFound(loc, 10.0, frame="checkout")
    assert err.kind is ErrorKind.ELEMENT_NOT_FOUND
    assert err.locator == loc
    assert err.frame == "checkout"
    assert "class_name='price'" in str(err)
    assert "10s" in str(err)


def test_subclasses_are_session_errors():
    for err in (
        ElementNotFound(Locator.css("a"), 1.0),
        StaleElement(Locator.css("a")),
        TransientNetworkFailure("https://example.com"),
        DetectionBlocked("http_403", url="https://example.com"),
    ):
        assert isinstance(err, SessionError)
        assert isinstance(err, Exception)


def test_detection_blocked_message():
    err = DetectionBlocked("captcha:.g-recaptcha", url="https://example.com")
    assert err.reason == "captcha:.g-recaptcha"
    assert "https://example.com" in str(err)
    assert not err.retryable


def test_classify_playwright_errors():
    assert classify_error(PlaywrightTimeoutError("Timeout 30000ms exceeded.")) is ErrorKind.TRANSIENT_NETWORK
    assert classify_error(PlaywrightError("net::ERR_NAME_NOT_RESOLVED")) is ErrorKind.TRANSIENT_NETWORK
    assert classify_error(PlaywrightError("Element is not attached to the DOM")) is ErrorKind.STALE_ELEMENT
    assert classify_error(
        PlaywrightError("Execution context was destroyed, most likely because of a navigation")
    ) is ErrorKind.STALE_ELEMENT
    assert classify_error(PlaywrightError("Protocol error")) is None
    assert classify_error(PlaywrightError("Target closed")) is None
    assert classify_error(
        PlaywrightError("Target page, context or browser has been closed")
    ) is None


def test_classify_session_and_foreign_errors():
    assert classify_error(StaleElement()) is ErrorKind.STALE_ELEMENT
    assert classify_error(ValueError("x")) is None
