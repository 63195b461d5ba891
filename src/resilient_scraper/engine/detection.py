"""Anti-bot wall detection and the opaque captcha-solver hook.

A detected wall is surfaced as DetectionBlocked and is never retried
automatically; whether to solve, rotate, or give up is the caller's call.
"""
import logging
from typing import Any, Callable

from .errors import DetectionBlocked

log = logging.getLogger(__name__)

DEFAULT_CAPTCHA_SELECTORS = (
    "iframe[src*='recaptcha']",
    "iframe[src*='hcaptcha.com']",
    "iframe[src*='challenges.cloudflare.com']",
    "#challenge-form",
    "#px-captcha",
    ".g-recaptcha",
)

DEFAULT_BLOCK_MARKERS = (
    "access denied",
    "unusual traffic",
    "verify you are human",
    "are you a robot",
    "request blocked",
)

DEFAULT_BLOCKED_STATUSES = (403,)

# Only the start of the body is scanned; block pages are short.
_TEXT_SCAN_LIMIT = 4000


class DetectionProbe:
    """Checks a page for captcha widgets, block pages, and blocking statuses."""

    def __init__(
        self,
        captcha_selectors: tuple[str, ...] = DEFAULT_CAPTCHA_SELECTORS,
        block_markers: tuple[str, ...] = DEFAULT_BLOCK_MARKERS,
        blocked_statuses: tuple[int, ...] = DEFAULT_BLOCKED_STATUSES,
    ):
        self.captcha_selectors = tuple(captcha_selectors)
        self.block_markers = tuple(m.lower() for m in block_markers)
        self.blocked_statuses = tuple(blocked_statuses)

    def check(self, page: Any, status: int | None = None) -> str | None:
        """Return a reason string if the page looks blocked, else None.

        Block markers are always matched against the title. Body text is only
        scanned when the response was not a 2xx (or no status is known), so
        an ordinary page that merely mentions "access denied" passes.

        Errors from a page that is mid-navigation count as "not blocked";
        the next lookup will surface them.
        """
        if status is not None and status in self.blocked_statuses:
            return f"http_{status}"

        for sel in self.captcha_selectors:
            try:
                if page.query_selector(sel) is not None:
                    return f"captcha:{sel}"
            except Exception as e:
                log.debug(f"Detection probe selector {sel!r} failed: {e}")
                return None

        scan_body = status is None or not (200 <= status < 300)
        try:
            haystack = (page.title() or "").lower()
            if scan_body:
                body = page.evaluate(
                    f"() => document.body?.innerText?.slice(0, {_TEXT_SCAN_LIMIT}) || ''"
                ) or ""
                haystack += "\n" + str(body).lower()
        except Exception as e:
            log.debug(f"Detection probe text scan failed: {e}")
            return None
        for marker in self.block_markers:
            if marker in haystack:
                return f"marker:{marker}"
        return None


def solve_captcha(session: Any, solver: Callable[[Any], str | None]) -> str:
    """Hand the current page to an external solver and return its token.

    The solver is treated as a black box: a truthy return value is the solved
    challenge token, anything else means the bypass failed and the block is
    surfaced as DetectionBlocked. Exceptions from the solver propagate as-is.
    """
    page = session.page
    log.info("Handing captcha to external solver")
    token = solver(page)
    if not token:
        url = ""
        try:
            url = page.url or ""
        except Exception:
            pass
        log.warning("Captcha solver returned no token")
        raise DetectionBlocked("captcha_unsolved", url=url)
    log.info("Captcha solver returned a token")
    return token
