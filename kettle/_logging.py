import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Any

# Create the library logger
logger = logging.getLogger("kettle")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_key(key: dict[str, Any] | str) -> str:
    """
    Redacts sensitive key information for logging.
    hashes the values to allow correlation without revealing PII.
    """
    try:
        if isinstance(key, dict):
            redacted = {}
            for k, v in key.items():
                val_str = str(v).encode("utf-8")
                redacted[k] = hashlib.sha256(val_str).hexdigest()[:8]
            return str(redacted)
        else:
            return hashlib.sha256(str(key).encode("utf-8")).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"


@dataclass(frozen=True)
class QueryLogEntry:
    """
    One store call recorded by the query log.

    Attributes:
        operation: Client operation name (getItem, putItem, query, ...)
        args: Request arguments as sent to the client
        response: Raw client response, only kept when response logging is on
    """

    operation: str
    args: dict[str, Any]
    response: Any | None = None


class QueryLog:
    """
    Process-wide, append-only log of store calls.

    Appends are guarded by a lock so records sharing the log from several
    threads never lose entries.
    """

    def __init__(self) -> None:
        self._entries: list[QueryLogEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: QueryLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> list[QueryLogEntry]:
        with self._lock:
            return list(self._entries)

    def last(self) -> QueryLogEntry | None:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_query_log = QueryLog()


def log_query(
    operation: str,
    args: dict[str, Any],
    response: Any,
    enabled: bool,
    include_response: bool = False,
) -> None:
    """Appends a store call to the query log when logging is enabled."""
    if not enabled:
        return
    _query_log.append(
        QueryLogEntry(
            operation=operation,
            args=args,
            response=response if include_response else None,
        )
    )


def get_query_log() -> list[QueryLogEntry]:
    """Returns a copy of every logged store call, oldest first."""
    return _query_log.entries()


def get_last_query() -> QueryLogEntry | None:
    """Returns the most recent logged store call, or None."""
    return _query_log.last()


def clear_query_log() -> None:
    _query_log.clear()
