# ABOUTME: Persistent per-provider state (last memory reset) in ~/.ccs/state.db.
# ABOUTME: One StateStore per invocation; the connection opens lazily and closes on exit.
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

# ABOUTME: Memory resets run at most once per provider per day
MEMORY_RESET_INTERVAL_MS = 24 * 60 * 60 * 1000

SCHEMA = """
CREATE TABLE IF NOT EXISTS provider_state (
    provider_key TEXT PRIMARY KEY,
    last_memory_reset INTEGER NOT NULL DEFAULT 0
)
"""


def now_ms() -> int:
    return int(time.time() * 1000)


def get_state_db_path() -> Path:
    """Return ~/.ccs/state.db (the file may not exist yet)."""
    return Path.home() / ".ccs" / "state.db"


def connect(db_path: Path) -> sqlite3.Connection:
    """Open the state database.

    Uses WAL mode + 5s busy timeout so concurrent ccs invocations
    can open the same file.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.isolation_level = None
    try:
        conn.execute("PRAGMA busy_timeout = 5000")
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute(SCHEMA)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


class StateStore:
    """Key -> last memory reset timestamp table.

    ABOUTME: Usable as a context manager; close() is idempotent
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or get_state_db_path()
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "StateStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = connect(self.db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get_last_memory_reset(self, provider_key: str) -> int:
        """Milliseconds timestamp of the last reset, 0 if never reset."""
        row = self.conn.execute(
            "SELECT last_memory_reset FROM provider_state WHERE provider_key = ?",
            (provider_key,),
        ).fetchone()
        return int(row["last_memory_reset"]) if row else 0

    def set_last_memory_reset(self, provider_key: str, timestamp_ms: int | None = None) -> None:
        """Record a reset for `provider_key` (upsert)."""
        timestamp_ms = now_ms() if timestamp_ms is None else timestamp_ms
        self.conn.execute(
            """
            INSERT INTO provider_state (provider_key, last_memory_reset)
            VALUES (?, ?)
            ON CONFLICT(provider_key) DO UPDATE SET last_memory_reset = excluded.last_memory_reset
            """,
            (provider_key, timestamp_ms),
        )
        logger.debug(f"Memory reset recorded for {provider_key} at {timestamp_ms}")

    def should_reset_memory(
        self,
        provider_key: str,
        max_age_ms: int = MEMORY_RESET_INTERVAL_MS,
        now: int | None = None,
    ) -> bool:
        """True if the provider was never reset or its last reset is older than `max_age_ms`."""
        current = now_ms() if now is None else now
        return current - self.get_last_memory_reset(provider_key) > max_age_ms
