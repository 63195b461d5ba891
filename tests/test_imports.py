"""Smoke tests: public modules are importable."""


def test_top_level_imports():
    from resilient_scraper import (
        By,
        Locator,
        ResilientSession,
        DEFAULT_FRAME,
        SessionConfig,
        ErrorKind,
        SessionError,
        ElementNotFound,
        StaleElement,
        TransientNetworkFailure,
        DetectionBlocked,
        Backoff,
        with_retry,
    )
    assert callable(ResilientSession)
    assert callable(with_retry)
    assert DEFAULT_FRAME == "default"
    assert By.CLASS_NAME.value == "class_name"
    assert isinstance(Locator.css("a"), Locator)
    assert isinstance(SessionConfig(), SessionConfig)
    assert ErrorKind.DETECTION_BLOCKED.value == "detection_blocked"
    for cls in (ElementNotFound, StaleElement, TransientNetworkFailure, DetectionBlocked):
        assert issubclass(cls, SessionError)
    assert Backoff.fixed(1.0).delay(1) == 1.0


def test_browser_imports():
    from resilient_scraper.browser import (
        open_browser,
        build_user_agent,
        build_stealth_shim,
    )
    assert callable(open_browser)
    assert callable(build_user_agent)
    assert callable(build_stealth_shim)


def test_engine_imports():
    from resilient_scraper.engine import (
        DetectionProbe,
        solve_captcha,
        classify_error,
        FailureBundle,
        BundleVerbosity,
        capture_failure_bundle,
        save_failure_bundle,
    )
    assert callable(DetectionProbe)
    assert callable(solve_captcha)
    assert callable(classify_error)
    assert callable(capture_failure_bundle)
    assert callable(save_failure_bundle)
    assert BundleVerbosity.OFF == "off"
    assert FailureBundle(kind="x", message="y").frame == "default"


def test_telemetry_imports():
    from resilient_scraper.telemetry import SessionEventLogger
    assert callable(SessionEventLogger)
