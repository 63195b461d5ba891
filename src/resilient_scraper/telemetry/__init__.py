"""telemetry — structured JSONL session event logging."""
from .logger import SessionEventLogger  # noqa: F401
