"""Diagnostic snapshot capture when a session error is surfaced.

Captures the failing locator, frame context, and page state. Designed for
zero overhead when disabled (verbosity="off").
"""
import json
import logging
import os
import time
from dataclasses import dataclass, field, asdict

log = logging.getLogger(__name__)


class BundleVerbosity:
    OFF = "off"             # No capture at all
    MINIMAL = "minimal"     # error details + frame only
    STANDARD = "standard"   # + page URL/title/text snippet (~10ms)
    FULL = "full"           # + screenshot (~200-500ms)

    ALL = (OFF, MINIMAL, STANDARD, FULL)


@dataclass
class FailureBundle:
    kind: str
    message: str
    locator: str = ""
    frame: str = "default"
    attempts: int = 1
    page_url: str = ""
    page_title: str = ""
    page_text_snippet: str = ""
    screenshot_path: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


def _stamp() -> str:
    return time.strftime("%Y%m%d_%H%M%S") + f"_{int(time.time() * 1000) % 1000:03d}"


def capture_failure_bundle(
    page,
    error,
    frame: str = "default",
    verbosity: str = BundleVerbosity.STANDARD,
    screenshot_dir: str = "",
) -> FailureBundle:
    """Best-effort capture of failure diagnostics. Never raises."""
    kind = getattr(error, "kind", None)
    locator = getattr(error, "locator", None)
    bundle = FailureBundle(
        kind=kind.value if kind is not None else type(error).__name__,
        message=str(error),
        locator=str(locator) if locator is not None else "",
        frame=frame,
        attempts=getattr(error, "attempts", 1),
    )

    if verbosity in (BundleVerbosity.STANDARD, BundleVerbosity.FULL):
        try:
            bundle.page_url = page.url or ""
        except Exception:
            pass
        try:
            bundle.page_title = page.title() or ""
        except Exception:
            pass
        try:
            snippet = page.evaluate("() => document.body?.innerText?.slice(0, 2000) || ''")
            bundle.page_text_snippet = snippet or ""
        except Exception:
            pass

    if verbosity == BundleVerbosity.FULL and screenshot_dir:
        try:
            os.makedirs(screenshot_dir, exist_ok=True)
            path = os.path.join(screenshot_dir, f"fail_{_stamp()}_{bundle.kind}.png")
            page.screenshot(path=path, full_page=False)
            bundle.screenshot_path = path
        except Exception:
            pass

    return bundle


def save_failure_bundle(bundle: FailureBundle, base_dir: str = "data/logs/failures") -> str:
    """Save bundle to JSON under ``base_dir/<kind>/``. Returns file path, or '' on failure."""
    try:
        out_dir = os.path.join(base_dir, bundle.kind or "unknown")
        os.makedirs(out_dir, exist_ok=True)
        path = os.path.join(out_dir, f"{_stamp()}.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(bundle.to_dict(), f, ensure_ascii=False, indent=2, default=str)
        return path
    except Exception as e:
        log.debug(f"Failed to save failure bundle: {e}")
        return ""
