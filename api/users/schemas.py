"""
User API schemas (request models).

Field rules live in `User.validate()`, so these models stay permissive and
only pin down JSON types.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field

ListView = Literal["public", "list"]


class UserCreateRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    # HTML forms post the secret as "password".
    secret: str | None = Field(default=None, validation_alias=AliasChoices("secret", "password"))
    age: Any = None


class UserUpdateRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    age: Any = None
