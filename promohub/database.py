"""A database handle that reports its own health."""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)

_NS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class PoolStats:
    """Connection pool counters."""

    open_connections: int = 0
    in_use: int = 0
    idle: int = 0
    wait_count: int = 0
    wait_duration: timedelta = timedelta(0)
    max_idle_closed: int = 0
    max_lifetime_closed: int = 0


def _fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    digits = str(rest).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(duration: timedelta) -> str:
    """Format a duration as hours, minutes and seconds, e.g. ``1h2m3.5s`` or ``150ms``."""
    ns = ((duration.days * 86_400 + duration.seconds) * 1_000_000 + duration.microseconds) * 1000
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_fraction(ns, 1000)}\u00b5s"
    if ns < _NS_PER_SECOND:
        return f"{sign}{_fraction(ns, 1_000_000)}ms"
    hours, rest = divmod(ns, 3600 * _NS_PER_SECOND)
    minutes, rest = divmod(rest, 60 * _NS_PER_SECOND)
    seconds = _fraction(rest, _NS_PER_SECOND)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def evaluate_health(stats: PoolStats) -> dict[str, str]:
    """Return the health message and the pool counters as strings."""
    message = "It's healthy"
    if stats.open_connections > 40:
        message = "The database is experiencing heavy load."
    if stats.wait_count > 1000:
        message = (
            "The database has a high number of wait events, indicating potential bottlenecks."
        )
    if stats.max_idle_closed > stats.open_connections // 2:
        message = (
            "Many idle connections are being closed, "
            "consider revising the connection pool settings."
        )
    if stats.max_lifetime_closed > stats.open_connections // 2:
        message = (
            "Many connections are being closed due to max lifetime, consider increasing "
            "max lifetime or revising the connection usage pattern."
        )
    return {
        "message": message,
        "open_connections": str(stats.open_connections),
        "in_use": str(stats.in_use),
        "idle": str(stats.idle),
        "wait_count": str(stats.wait_count),
        "wait_duration": format_duration(stats.wait_duration),
        "max_idle_closed": str(stats.max_idle_closed),
        "max_lifetime_closed": str(stats.max_lifetime_closed),
    }


class DatabaseService:
    """A SQLite connection with health reporting."""

    def __init__(self, database: str | os.PathLike[str] = ":memory:") -> None:
        self.database = os.fspath(database)
        self._conn = sqlite3.connect(self.database, check_same_thread=False)
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> DatabaseService:
        """Open the database named by ``BLUEPRINT_DB_DATABASE``, in memory if unset."""
        if environ is None:
            environ = os.environ
        return cls(environ.get("BLUEPRINT_DB_DATABASE") or ":memory:")

    def __enter__(self) -> DatabaseService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def stats(self) -> PoolStats:
        """The current connection counters."""
        open_count = 0 if self._closed else 1
        return PoolStats(open_connections=open_count, idle=open_count)

    def health(self) -> dict[str, str]:
        """Ping the database and return status information.

        Raises ConnectionError when the database does not answer.
        """
        with self._lock:
            try:
                self._conn.execute("SELECT 1").fetchone()
            except sqlite3.Error as exc:
                logger.error("db down: %s", exc)
                raise ConnectionError(f"db down: {exc}") from exc
        return {"status": "up", **evaluate_health(self.stats)}

    def close(self) -> None:
        """Close the connection."""
        logger.info("Disconnected from database: %s", self.database)
        with self._lock:
            self._conn.close()
            self._closed = True