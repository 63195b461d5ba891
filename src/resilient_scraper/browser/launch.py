"""Optional browser launch helper with headless-detection mitigations.

ResilientSession never launches a browser. This is for apps that want a
ready-made Playwright Chromium page to hand to it. All paths are
runtime-injected.
"""
import json
import logging
import os
from contextlib import contextmanager
from typing import Any

log = logging.getLogger(__name__)

# Cache keyed by absolute path — supports multiple stealth JS files.
_stealth_js_cache: dict[str, str] = {}

_LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--window-size=1920,1080",
]

_DEFAULT_UA_TEMPLATE = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{version} Safari/537.36"
)


def build_user_agent(chrome_version: str, template: str = "") -> str:
    """Build a desktop User-Agent for ``chrome_version``.

    Headless Chromium advertises "HeadlessChrome" in its default UA, which is
    the first thing most bot walls check.
    """
    return (template or _DEFAULT_UA_TEMPLATE).format(version=chrome_version)


def build_stealth_shim(languages: tuple[str, ...] = ("en-US", "en"),
                       hardware_concurrency: int = 8) -> str:
    """Init script that hides the most common automation tells."""
    languages_js = json.dumps(list(languages))
    return f"""
    (() => {{
        Object.defineProperty(navigator, 'webdriver', {{
            get: () => undefined, configurable: true,
        }});
        Object.defineProperty(navigator, 'languages', {{
            get: () => {languages_js}, configurable: true,
        }});
        Object.defineProperty(navigator, 'hardwareConcurrency', {{
            get: () => {hardware_concurrency}, configurable: true,
        }});
        if (!navigator.plugins || navigator.plugins.length === 0) {{
            Object.defineProperty(navigator, 'plugins', {{
                get: () => [1, 2, 3], configurable: true,
            }});
        }}
        if (!window.chrome) {{
            window.chrome = {{ runtime: {{}} }};
        }}
    }})();
    """


def _load_stealth_js(path: str) -> str:
    """Load a stealth JS file from disk, with caching.

    Returns ``""`` if *path* is empty or does not point to a file.
    """
    if not path:
        return ""
    abs_path = os.path.abspath(path)
    if abs_path in _stealth_js_cache:
        return _stealth_js_cache[abs_path]
    if not os.path.isfile(abs_path):
        log.warning(f"Stealth script not found: {abs_path}")
        _stealth_js_cache[abs_path] = ""
        return ""
    with open(abs_path, "r", encoding="utf-8") as f:
        content = f.read()
    _stealth_js_cache[abs_path] = content
    return content


@contextmanager
def open_browser(
    playwright: Any,
    *,
    headed: bool = False,
    user_agent: str = "",
    locale: str = "en-US",
    user_data_dir: str = "",
    stealth_js_path: str = "",
    chrome_version: str = "",
):
    """Launch Chromium and yield ``(page, context)``; closes everything on exit.

    With ``user_data_dir`` a persistent context is used so cookies survive
    between runs. Without an explicit ``user_agent`` one is built from
    ``chrome_version`` (or the launched browser's version when available).
    """
    browser = None
    context = None
    if user_data_dir:
        os.makedirs(user_data_dir, exist_ok=True)
        context = playwright.chromium.launch_persistent_context(
            user_data_dir=user_data_dir,
            headless=not headed,
            args=_LAUNCH_ARGS,
            viewport={"width": 1920, "height": 1080},
            user_agent=user_agent or build_user_agent(chrome_version or "131.0.0.0"),
            locale=locale,
        )
    else:
        browser = playwright.chromium.launch(headless=not headed, args=_LAUNCH_ARGS)

    try:
        if context is None:
            version = chrome_version or getattr(browser, "version", "") or "131.0.0.0"
            context = browser.new_context(
                viewport={"width": 1920, "height": 1080},
                user_agent=user_agent or build_user_agent(version),
                locale=locale,
            )
        stealth_js = _load_stealth_js(stealth_js_path)
        if stealth_js:
            context.add_init_script(stealth_js)
        context.add_init_script(build_stealth_shim(languages=(locale, locale.split("-")[0])))
        page = context.pages[0] if context.pages else context.new_page()
        log.info(f"Browser ready ({'headed' if headed else 'headless'})")
        yield page, context
    finally:
        if context is not None:
            try:
                context.close()
            except Exception as e:
                log.warning(f"Failed to close browser context cleanly: {e}")
        if browser is not None:
            try:
                browser.close()
            except Exception as e:
                log.warning(f"Failed to close browser cleanly: {e}")
