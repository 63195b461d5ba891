"""Structured JSONL event logging for browser sessions."""
import json
import logging
import os
import time

log = logging.getLogger(__name__)


class SessionEventLogger:
    """Writes one JSON line per event to a per-session JSONL file.

    All logging is best-effort — methods never raise exceptions.
    Supports context-manager protocol for automatic close.

    An optional ``site`` field is included in every event when provided.
    """

    def __init__(self, session_id: str, log_dir: str = "data/logs/session_events",
                 site: str | None = None):
        self._session_id = session_id
        self._site = site
        self._f = None
        self._counts: dict[str, int] = {}
        try:
            os.makedirs(log_dir, exist_ok=True)
            safe_id = session_id.replace("/", "_").replace("\\", "_")
            self.path = os.path.join(log_dir, f"{safe_id}.jsonl")
            self._f = open(self.path, "a", encoding="utf-8")
        except Exception as e:
            self.path = ""
            log.warning(f"SessionEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def counts(self) -> dict[str, int]:
        """Number of events written so far, by event name."""
        return dict(self._counts)

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["session_id"] = self._session_id
            if self._site is not None:
                event["site"] = self._site
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
            name = event.get("event", "")
            self._counts[name] = self._counts.get(name, 0) + 1
        except Exception as e:
            log.warning(f"SessionEventLogger: write failed: {e}")

    def log_wait(self, locator: str, frame: str, found: bool, elapsed: float,
                 timeout: float, polls: int):
        self._write({
            "event": "wait",
            "locator": locator,
            "frame": frame,
            "found": found,
            "elapsed": elapsed,
            "timeout": timeout,
            "polls": polls,
        })

    def log_frame(self, action: str, frame_from: str, frame_to: str):
        """``action`` is one of enter, parent, exit, restore."""
        self._write({
            "event": "frame",
            "action": action,
            "from": frame_from,
            "to": frame_to,
        })

    def log_navigation(self, url: str, status: int | None, ok: bool, elapsed: float,
                       error_kind: str | None = None):
        self._write({
            "event": "navigation",
            "url": url,
            "status": status,
            "ok": ok,
            "elapsed": elapsed,
            "error_kind": error_kind,
        })

    def log_retry(self, attempt: int, max_attempts: int, error_kind: str,
                  message: str, delay: float):
        self._write({
            "event": "retry",
            "attempt": attempt,
            "max_attempts": max_attempts,
            "error_kind": error_kind,
            "message": message,
            "delay": delay,
        })

    def log_blocked(self, url: str, reason: str, bundle_path: str = ""):
        self._write({
            "event": "blocked",
            "url": url,
            "reason": reason,
            "bundle_path": bundle_path,
        })

    def log_session_end(self, duration: float, final_frame: str, status: str = "ok"):
        self._write({
            "event": "session_end",
            "duration": duration,
            "final_frame": final_frame,
            "status": status,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
