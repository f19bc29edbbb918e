"""SQLite-backed persistence for authentication tokens and the cached user."""

import json
import sqlite3
from datetime import datetime
from typing import Any, Optional

from focaplus.core.models import AuthTokens

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"


class TokenStore:
    """Small key/value table holding the login state between runs.

    Values are stored as text; the cached user is stored as JSON.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def init_db(self) -> None:
        """Create the table if it doesn't already exist."""
        conn = self._get_conn()
        conn.execute(
            """\
            CREATE TABLE IF NOT EXISTS auth_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

    # ------------------------------------------------------------------
    # Key/value operations
    # ------------------------------------------------------------------

    def _set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO auth_state (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now().isoformat()),
        )
        conn.commit()

    def _get(self, key: str) -> Optional[str]:
        row = self._get_conn().execute(
            "SELECT value FROM auth_state WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row is not None else None

    # ------------------------------------------------------------------
    # Auth state
    # ------------------------------------------------------------------

    def save_tokens(self, tokens: AuthTokens) -> None:
        self._set(ACCESS_TOKEN_KEY, tokens.access_token)
        self._set(REFRESH_TOKEN_KEY, tokens.refresh_token)
        if tokens.user:
            self.save_user(tokens.user)

    def save_user(self, user: dict[str, Any]) -> None:
        self._set(USER_KEY, json.dumps(user, ensure_ascii=False))

    def get_access_token(self) -> Optional[str]:
        return self._get(ACCESS_TOKEN_KEY)

    def get_refresh_token(self) -> Optional[str]:
        return self._get(REFRESH_TOKEN_KEY)

    def get_user(self) -> Optional[dict[str, Any]]:
        raw = self._get(USER_KEY)
        return json.loads(raw) if raw else None

    def load_tokens(self) -> Optional[AuthTokens]:
        """Return the stored tokens, or ``None`` unless both are present."""
        access = self.get_access_token()
        refresh = self.get_refresh_token()
        if not access or not refresh:
            return None
        return AuthTokens(access_token=access, refresh_token=refresh, user=self.get_user() or {})

    def clear(self) -> None:
        """Forget the login (logout, or the backend rejected the token)."""
        conn = self._get_conn()
        conn.execute(
            "DELETE FROM auth_state WHERE key IN (?, ?, ?)",
            (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY),
        )
        conn.commit()
