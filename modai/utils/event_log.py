"""Structured JSON-lines event log for troubleshooting sessions"""
import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class EventLog:
    """
    Appends one JSON record per line: ``{"ts": ..., "kind": ..., **payload}``.

    Logging must never break the agent, so write failures are dropped.
    With no ``path`` and no ``keep`` the log discards everything; ``keep=True``
    also collects records in ``records``.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, keep: bool = False):
        self.path = Path(path) if path else None
        self.keep = keep
        self.records: List[Dict[str, Any]] = []

    def log_event(self, kind: str, payload: Optional[Dict[str, Any]] = None):
        if not self.keep and self.path is None:
            return
        record = {"ts": time.strftime("%Y-%m-%d %H:%M:%S"), "kind": kind, **(payload or {})}
        if self.keep:
            self.records.append(record)
        if self.path is None:
            return
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        except OSError:
            pass

    def log_request(self, provider: str, url: str, message_count: int, model: Optional[str]):
        self.log_event("api_request", {
            "provider": provider,
            "url": url,
            "model": model,
            "message_count": message_count,
        })

    def log_response(self, provider: str, content: str):
        self.log_event("api_response", {
            "provider": provider,
            "content": content[:2000],
            "content_length": len(content),
        })

    def log_api_error(self, provider: str, status_code: Optional[int], error_body: str):
        self.log_event("api_error", {
            "provider": provider,
            "status_code": status_code,
            "error_body": error_body[:2000],
        })

    def kinds(self) -> List[str]:
        return [record["kind"] for record in self.records]

    def clear(self) -> str:
        """Clear the log file and in-memory records."""
        self.records.clear()
        if self.path is not None and self.path.exists():
            self.path.unlink()
            return "Event log cleared."
        return "No log file to clear."
