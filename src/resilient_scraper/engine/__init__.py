"""engine — error kinds, retry, detection, and failure diagnostics."""
from .errors import (  # noqa: F401
    ErrorKind,
    SessionError,
    ElementNotFound,
    StaleElement,
    TransientNetworkFailure,
    DetectionBlocked,
    classify_error,
)
from .retry import Backoff, with_retry  # noqa: F401
from .detection import DetectionProbe, solve_captcha  # noqa: F401
from .failure_bundle import FailureBundle, BundleVerbosity, capture_failure_bundle, save_failure_bundle  # noqa: F401
