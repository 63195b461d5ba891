"""Tests for SessionConfig validation."""
import pytest

from resilient_scraper.config import SessionConfig
from resilient_scraper.engine.retry import Backoff


def test_defaults():
    config = SessionConfig()
    assert config.default_timeout == 10.0
    assert config.max_attempts == 3
    assert config.backoff == Backoff.fixed(2.0)
    assert config.failure_bundle_verbosity == "off"
    assert 403 in config.blocked_statuses
    assert 503 in config.transient_statuses


@pytest.mark.parametrize("kwargs", [
    {"default_timeout": 0},
    {"poll_interval": -0.1},
    {"navigation_timeout": 0},
    {"max_attempts": 0},
    {"failure_bundle_verbosity": "loud"},
])
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        SessionConfig(**kwargs)


def test_with_overrides():
    base = SessionConfig()
    tuned = base.with_overrides(default_timeout=3.0, backoff=Backoff.exponential(0.5))
    assert tuned.default_timeout == 3.0
    assert tuned.backoff.factor == 2.0
    assert base.default_timeout == 10.0


def test_with_overrides_revalidates():
    with pytest.raises(ValueError):
        SessionConfig().with_overrides(max_attempts=0)
