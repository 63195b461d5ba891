"""Tests for the launch helpers — no actual browser needed."""
from unittest.mock import MagicMock

import pytest

from resilient_scraper.browser.launch import build_stealth_shim, build_user_agent, open_browser


def test_build_user_agent():
    ua = build_user_agent("131.0.6778.86")
    assert "Chrome/131.0.6778.86" in ua
    assert "Headless" not in ua


def test_build_user_agent_custom_template():
    assert build_user_agent("131.0.0.0", template="MyBrowser/{version}") == "MyBrowser/131.0.0.0"


def test_build_stealth_shim():
    js = build_stealth_shim(languages=("de-DE", "de"), hardware_concurrency=4)
    assert "webdriver" in js
    assert '["de-DE", "de"]' in js
    assert "=> 4" in js


def _make_playwright():
    playwright = MagicMock()
    browser = playwright.chromium.launch.return_value
    browser.version = "130.0.1.2"
    context = browser.new_context.return_value
    context.pages = []
    return playwright, browser, context


def test_open_browser_headless_defaults():
    playwright, browser, context = _make_playwright()

    with open_browser(playwright) as (page, ctx):
        assert ctx is context
        assert page is context.new_page.return_value

    kwargs = playwright.chromium.launch.call_args.kwargs
    assert kwargs["headless"] is True
    assert "--disable-blink-features=AutomationControlled" in kwargs["args"]
    assert "Chrome/130.0.1.2" in browser.new_context.call_args.kwargs["user_agent"]
    context.add_init_script.assert_called_once()
    context.close.assert_called_once()
    browser.close.assert_called_once()


def test_open_browser_stealth_file(tmp_path):
    playwright, _, context = _make_playwright()
    script = tmp_path / "stealth.min.js"
    script.write_text("/* stealth */")

    with open_browser(playwright, headed=True, stealth_js_path=str(script)):
        pass

    first = context.add_init_script.call_args_list[0].args[0]
    assert first == "/* stealth */"
    assert context.add_init_script.call_count == 2
    assert playwright.chromium.launch.call_args.kwargs["headless"] is False


def test_open_browser_persistent_context(tmp_path):
    playwright = MagicMock()
    context = playwright.chromium.launch_persistent_context.return_value
    existing = MagicMock()
    context.pages = [existing]

    with open_browser(playwright, user_data_dir=str(tmp_path / "profile"),
                      user_agent="UA/1") as (page, _):
        assert page is existing

    kwargs = playwright.chromium.launch_persistent_context.call_args.kwargs
    assert kwargs["user_agent"] == "UA/1"
    assert (tmp_path / "profile").is_dir()
    playwright.chromium.launch.assert_not_called()
    context.close.assert_called_once()


def test_open_browser_closes_on_error():
    playwright, browser, context = _make_playwright()

    with pytest.raises(RuntimeError):
        with open_browser(playwright):
            raise RuntimeError("scrape failed")

    context.close.assert_called_once()
    browser.close.assert_called_once()


def test_open_browser_closes_browser_when_context_fails():
    playwright, browser, _ = _make_playwright()
    browser.new_context.side_effect = RuntimeError("context launch failed")

    with pytest.raises(RuntimeError):
        with open_browser(playwright):
            pass

    browser.close.assert_called_once()
