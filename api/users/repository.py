"""
User profile repository.

The only component that reads or writes user rows. It maps rows to `User`
entities and back, runs validation before any write, enforces email
uniqueness and hides soft-deleted rows from every read except
`email_exists`.

Outcomes are returned, not raised: writes produce a `WriteResult`, missing
records come back as None/False. Store failures propagate unchanged.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping

from core import security

from .entity import User, utc_now
from .store import UserStore

EMAIL_TAKEN = "email already registered"

UPDATABLE_FIELDS = ("name", "email", "age")


class Failure(StrEnum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class WriteResult:
    success: bool
    user: User | None = None
    errors: list[str] = field(default_factory=list)
    failure: Failure | None = None


def _clean_text(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _from_row(row: Mapping[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        secret=row.get("secret"),
        age=row.get("age"),
        is_active=int(row["is_active"]) == 1,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_row(user: User) -> dict[str, Any]:
    return {
        "name": user.name,
        "email": user.email,
        "secret": user.secret,
        "age": user.age,
        "is_active": 1 if user.is_active else 0,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class UserRepository:
    def __init__(self, store: UserStore) -> None:
        self._store = store
        # Serializes read-check-write sequences across concurrent requests.
        self._write_lock = asyncio.Lock()

    async def find_all(self) -> list[User]:
        rows = await self._store.fetch_active()
        return [_from_row(row) for row in rows]

    async def find_by_id(self, user_id: int) -> User | None:
        row = await self._store.fetch_by_id(user_id)
        return _from_row(row) if row is not None else None

    async def find_by_email(self, email: str) -> User | None:
        row = await self._store.fetch_by_email(email)
        return _from_row(row) if row is not None else None

    async def email_exists(self, email: str) -> bool:
        """
        True when any record, active or soft-deleted, holds `email`.
        """
        row = await self._store.fetch_by_email(email, active_only=False)
        return row is not None

    async def count(self) -> int:
        return await self._store.count_active()

    async def create(self, data: Mapping[str, Any]) -> WriteResult:
        user = User(
            name=_clean_text(data.get("name")),
            email=_clean_text(data.get("email")),
            secret=data.get("secret"),
            age=data.get("age"),
        )

        validation = user.validate()
        if not validation.valid:
            return WriteResult(success=False, errors=validation.errors, failure=Failure.VALIDATION)

        async with self._write_lock:
            if await self.email_exists(user.email):
                return WriteResult(success=False, errors=[EMAIL_TAKEN], failure=Failure.CONFLICT)

            user.secret = security.hash_secret(user.secret) if user.secret else None
            user.created_at = user.updated_at = utc_now()
            row = await self._store.insert(_to_row(user))

        return WriteResult(success=True, user=_from_row(row))

    async def update(self, user_id: int, fields: Mapping[str, Any]) -> WriteResult:
        """
        Apply the present keys among name/email/age to an active record.
        """
        async with self._write_lock:
            user = await self.find_by_id(user_id)
            if user is None:
                return WriteResult(success=False, failure=Failure.NOT_FOUND)

            changes = {key: _clean_text(fields[key]) for key in UPDATABLE_FIELDS if key in fields}

            new_email = changes.get("email")
            if isinstance(new_email, str) and new_email.lower() != (user.email or "").lower():
                holder = await self._store.fetch_by_email(new_email, active_only=False)
                if holder is not None and int(holder["id"]) != user.id:
                    return WriteResult(success=False, errors=[EMAIL_TAKEN], failure=Failure.CONFLICT)

            for key, value in changes.items():
                setattr(user, key, value)

            validation = user.validate()
            if not validation.valid:
                return WriteResult(success=False, errors=validation.errors, failure=Failure.VALIDATION)

            user.updated_at = utc_now()
            row = await self._store.update(user_id, _to_row(user))

        if row is None:
            return WriteResult(success=False, failure=Failure.NOT_FOUND)
        return WriteResult(success=True, user=_from_row(row))

    async def delete(self, user_id: int) -> bool:
        """
        Soft delete: the row stays, flagged inactive.
        """
        async with self._write_lock:
            user = await self.find_by_id(user_id)
            if user is None:
                return False

            user.is_active = False
            user.updated_at = utc_now()
            await self._store.update(user_id, _to_row(user))
        return True
