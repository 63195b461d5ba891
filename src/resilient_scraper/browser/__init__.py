"""browser — Playwright session wrapper, locators, and launch helpers."""
from .locator import By, Locator  # noqa: F401
from .session import ResilientSession, DEFAULT_FRAME  # noqa: F401
from .launch import open_browser, build_user_agent, build_stealth_shim  # noqa: F401
