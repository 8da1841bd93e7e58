"""SQLite-backed profile store.

Profiles are stored as one JSON document per user, using aiosqlite for
async database access.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from src.profiles.config import ProfileConfig
from src.profiles.models import UserProfile
from src.profiles.store import ProfileStore

# SQL schema for the profiles table
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS profiles (
    user_id TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_profiles_updated ON profiles(updated_at);
"""


class SqliteProfileStore(ProfileStore):
    """Async SQLite profile store.

    Call `initialize()` before use and `close()` when done.
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        config: ProfileConfig | None = None,
    ):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file. Defaults to the
                configured `PROFILE_DB_PATH`.
            config: Profile configuration (history caps, defaults).
        """
        super().__init__(config=config)
        self.db_path = Path(db_path) if db_path is not None else self.config.db_path
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.execute(CREATE_TABLE_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def get(self, user_id: str) -> UserProfile | None:
        """Get a profile by user id.

        Returns:
            The profile if found, None otherwise.
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT payload FROM profiles WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None

        return UserProfile.model_validate_json(row["payload"])

    async def save(self, profile: UserProfile) -> None:
        """Insert or replace a profile."""
        now = datetime.now(UTC).isoformat()
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO profiles (user_id, payload, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    payload = excluded.payload,
                    updated_at = excluded.updated_at
                """,
                (
                    profile.user_id,
                    profile.model_dump_json(),
                    profile.created_at.isoformat(),
                    now,
                ),
            )
            await conn.commit()

    async def list_profiles(
        self, *, exclude_user_id: str | None = None, limit: int | None = None
    ) -> list[UserProfile]:
        """List stored profiles, most recently updated first."""
        sql = "SELECT payload FROM profiles"
        params: list = []
        if exclude_user_id is not None:
            sql += " WHERE user_id != ?"
            params.append(exclude_user_id)
        sql += " ORDER BY updated_at DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with self._get_connection() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()

        return [UserProfile.model_validate_json(row["payload"]) for row in rows]

    async def count(self) -> int:
        """Return the number of stored profiles."""
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT COUNT(*) AS count FROM profiles")
            row = await cursor.fetchone()
        return int(row["count"]) if row is not None else 0
