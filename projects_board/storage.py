"""
Session persistence backend (SQLite).

Stores the bearer token and the signed-in identity as two rows of a small
key/value table. Both rows are always written or cleared in one transaction.
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Tuple

from .errors import StorageError
from .schema import Identity, Session

logger = logging.getLogger(__name__)

TOKEN_KEY = "@projects_board_token"
USER_KEY = "@projects_board_user"


@contextmanager
def _transaction(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open a connection, commit on success, roll back on error, always close."""
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise StorageError(f"Cannot open session store {db_path}: {e}") from e
    conn.row_factory = sqlite3.Row
    try:
        with conn:
            yield conn
    except sqlite3.Error as e:
        raise StorageError(f"Session store error: {e}") from e
    finally:
        conn.close()


class SessionStorage:
    """SQLite-backed store for the persisted session."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store and create the table if needed."""
        if db_path is None:
            db_path = str(Path.home() / ".local" / "share" / "projects-board" / "session.db")
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self) -> None:
        with _transaction(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS session_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def read(self) -> Tuple[Optional[str], Optional[Identity]]:
        """
        Read token and identity in one go.

        Returns (token, identity); either may be None. A stored identity that
        cannot be decoded is reported as None.
        """
        with _transaction(self.db_path) as conn:
            rows = conn.execute(
                "SELECT key, value FROM session_state WHERE key IN (?, ?)",
                (TOKEN_KEY, USER_KEY),
            ).fetchall()
        values = {row["key"]: row["value"] for row in rows}

        token = values.get(TOKEN_KEY) or None
        user = None
        raw_user = values.get(USER_KEY)
        if raw_user:
            try:
                user = Identity.from_dict(json.loads(raw_user))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Ignoring unreadable stored identity: {e}")
        return token, user

    def write(self, session: Session) -> None:
        """Persist token and identity together; neither is kept if either fails."""
        now = datetime.now(timezone.utc).isoformat()
        with _transaction(self.db_path) as conn:
            conn.executemany(
                """
                INSERT INTO session_state (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """,
                [
                    (TOKEN_KEY, session.token, now),
                    (USER_KEY, json.dumps(session.user.to_dict()), now),
                ],
            )

    def clear(self) -> None:
        """Remove both entries."""
        with _transaction(self.db_path) as conn:
            conn.execute(
                "DELETE FROM session_state WHERE key IN (?, ?)",
                (TOKEN_KEY, USER_KEY),
            )
