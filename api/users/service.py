"""
User endpoint logic: input coercion and mapping repository outcomes to
envelopes and HTTP status codes.
"""

from __future__ import annotations

from typing import Any

from fastapi import status

from core.responses import ApiError, envelope

from . import schemas
from .repository import Failure, UserRepository, WriteResult

USER_NOT_FOUND = "user not found"
INVALID_USER_ID = "invalid user id"

# users.id is a SERIAL (int4) column.
MAX_USER_ID = 2_147_483_647


def parse_user_id(raw: str) -> int:
    value = (raw or "").strip()
    if not value.isascii() or not value.isdigit() or int(value) > MAX_USER_ID:
        raise ApiError(status.HTTP_400_BAD_REQUEST, INVALID_USER_ID)
    return int(value)


def parse_age(value: Any) -> Any:
    """
    Best-effort conversion of untyped age input.

    Blank values mean "no age" and integer strings become ints. Anything else
    is passed through unchanged so the entity reports it with its single
    range message.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _raise_for_failure(result: WriteResult) -> None:
    if result.failure is Failure.NOT_FOUND:
        raise ApiError(status.HTTP_404_NOT_FOUND, USER_NOT_FOUND)
    raise ApiError(status.HTTP_400_BAD_REQUEST, ", ".join(result.errors), errors=list(result.errors))


async def list_users(repo: UserRepository, *, view: schemas.ListView = "public") -> dict:
    users = await repo.find_all()
    if view == "list":
        data = [user.to_list_view() for user in users]
    else:
        data = [user.to_public_view() for user in users]
    return envelope(success=True, message="users listed successfully", data=data, count=len(data))


async def count_users(repo: UserRepository) -> dict:
    total = await repo.count()
    return envelope(success=True, message="active users counted", count=total)


async def get_user(repo: UserRepository, raw_id: str) -> dict:
    user = await repo.find_by_id(parse_user_id(raw_id))
    if user is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, USER_NOT_FOUND)
    return envelope(success=True, message="user found", data=user.to_public_view())


async def create_user(repo: UserRepository, payload: schemas.UserCreateRequest) -> dict:
    data = payload.model_dump()
    data["age"] = parse_age(data.get("age"))

    result = await repo.create(data)
    if not result.success or result.user is None:
        _raise_for_failure(result)
    return envelope(success=True, message="user created successfully", data=result.user.to_public_view())


async def update_user(repo: UserRepository, raw_id: str, payload: schemas.UserUpdateRequest) -> dict:
    user_id = parse_user_id(raw_id)
    fields = payload.model_dump(exclude_unset=True)
    if "age" in fields:
        fields["age"] = parse_age(fields["age"])

    result = await repo.update(user_id, fields)
    if not result.success or result.user is None:
        _raise_for_failure(result)
    return envelope(success=True, message="user updated successfully", data=result.user.to_public_view())


async def delete_user(repo: UserRepository, raw_id: str) -> dict:
    deleted = await repo.delete(parse_user_id(raw_id))
    if not deleted:
        raise ApiError(status.HTTP_404_NOT_FOUND, USER_NOT_FOUND)
    return envelope(success=True, message="user deleted successfully")
