"""
Row stores for user profiles.

A store is the handle `UserRepository` is parameterized by. It deals in rows
(dicts keyed by column name, `is_active` as 0/1) and knows nothing about
validation. Read methods exclude inactive rows unless called with
`active_only=False`.

- `PostgresUserStore`: raw SQL over the shared asyncpg `Database`.
- `MemoryUserStore`: in-process rows for tests and local development.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any

from core.db import Database

WRITABLE_COLUMNS = ("name", "email", "secret", "age", "is_active", "created_at", "updated_at")

_SELECT_USER = """
    SELECT id, name, email, secret, age, is_active, created_at, updated_at
    FROM users
"""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    secret TEXT,
    age INTEGER,
    is_active SMALLINT NOT NULL DEFAULT 1,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE UNIQUE INDEX IF NOT EXISTS users_email_lower_key ON users (lower(email));
"""


class UserStore(ABC):
    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def fetch_active(self) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    async def fetch_by_id(self, user_id: int, *, active_only: bool = True) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def fetch_by_email(self, email: str, *, active_only: bool = True) -> dict[str, Any] | None:
        """
        Case-insensitive email lookup.
        """

    @abstractmethod
    async def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it with the store-assigned `id`.
        """

    @abstractmethod
    async def update(self, user_id: int, row: dict[str, Any]) -> dict[str, Any] | None:
        """
        Overwrite the writable columns of an existing row (active or not).
        """

    @abstractmethod
    async def count_active(self) -> int:
        ...


class PostgresUserStore(UserStore):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def open(self) -> None:
        await self._db.connect()
        await self._db.execute(SCHEMA_SQL)

    async def close(self) -> None:
        await self._db.close()

    async def fetch_active(self) -> list[dict[str, Any]]:
        return await self._db.fetch_all(
            _SELECT_USER
            + """
            WHERE is_active = 1
            ORDER BY id
            """
        )

    async def fetch_by_id(self, user_id: int, *, active_only: bool = True) -> dict[str, Any] | None:
        return await self._db.fetch_one(
            _SELECT_USER
            + """
            WHERE id = $1
              AND ($2::boolean = false OR is_active = 1)
            """,
            user_id,
            active_only,
        )

    async def fetch_by_email(self, email: str, *, active_only: bool = True) -> dict[str, Any] | None:
        return await self._db.fetch_one(
            _SELECT_USER
            + """
            WHERE lower(email) = lower($1)
              AND ($2::boolean = false OR is_active = 1)
            ORDER BY id
            LIMIT 1
            """,
            email,
            active_only,
        )

    async def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        inserted = await self._db.fetch_one(
            """
            INSERT INTO users (name, email, secret, age, is_active, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id, name, email, secret, age, is_active, created_at, updated_at
            """,
            *(row.get(column) for column in WRITABLE_COLUMNS),
        )
        if inserted is None:
            raise RuntimeError("Failed to insert user.")
        return inserted

    async def update(self, user_id: int, row: dict[str, Any]) -> dict[str, Any] | None:
        return await self._db.fetch_one(
            """
            UPDATE users
            SET name = $2,
                email = $3,
                secret = $4,
                age = $5,
                is_active = $6,
                created_at = $7,
                updated_at = $8
            WHERE id = $1
            RETURNING id, name, email, secret, age, is_active, created_at, updated_at
            """,
            user_id,
            *(row.get(column) for column in WRITABLE_COLUMNS),
        )

    async def count_active(self) -> int:
        value = await self._db.fetch_value("SELECT count(*) FROM users WHERE is_active = 1")
        return int(value or 0)


class MemoryUserStore(UserStore):
    """
    Rows live in a dict owned by the instance; ids are handed out like SERIAL.
    """

    def __init__(self) -> None:
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    async def fetch_active(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(row) for _, row in sorted(self._rows.items()) if row["is_active"] == 1]

    async def fetch_by_id(self, user_id: int, *, active_only: bool = True) -> dict[str, Any] | None:
        row = self._rows.get(user_id)
        if row is None or (active_only and row["is_active"] != 1):
            return None
        return copy.deepcopy(row)

    async def fetch_by_email(self, email: str, *, active_only: bool = True) -> dict[str, Any] | None:
        wanted = (email or "").lower()
        for _, row in sorted(self._rows.items()):
            if active_only and row["is_active"] != 1:
                continue
            if (row["email"] or "").lower() == wanted:
                return copy.deepcopy(row)
        return None

    def _check_unique_email(self, email: str | None, *, exclude_id: int | None = None) -> None:
        # Mirrors the unique index on lower(email).
        wanted = (email or "").lower()
        for user_id, existing in self._rows.items():
            if user_id != exclude_id and (existing["email"] or "").lower() == wanted:
                raise ValueError(f"duplicate email: {email!r}")

    async def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        self._check_unique_email(row.get("email"))
        user_id = self._next_id
        self._next_id += 1
        stored = {column: row.get(column) for column in WRITABLE_COLUMNS}
        stored["id"] = user_id
        self._rows[user_id] = stored
        return copy.deepcopy(stored)

    async def update(self, user_id: int, row: dict[str, Any]) -> dict[str, Any] | None:
        stored = self._rows.get(user_id)
        if stored is None:
            return None
        self._check_unique_email(row.get("email"), exclude_id=user_id)
        for column in WRITABLE_COLUMNS:
            stored[column] = row.get(column)
        return copy.deepcopy(stored)

    async def count_active(self) -> int:
        return sum(1 for row in self._rows.values() if row["is_active"] == 1)
