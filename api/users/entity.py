"""
User profile entity.

Owns field validation and the two output projections. Instances are
transient: the repository rebuilds them from rows on every read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MIN_NAME_LENGTH = 2
MIN_AGE = 0
MAX_AGE = 150

NAME_REQUIRED = "name is required"
NAME_TOO_SHORT = f"name must be at least {MIN_NAME_LENGTH} characters"
EMAIL_REQUIRED = "email is required"
EMAIL_INVALID = "email must be valid"
AGE_OUT_OF_RANGE = f"age must be a number between {MIN_AGE} and {MAX_AGE}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _is_valid_age(age: Any) -> bool:
    # bool is an int subclass; True is not an age.
    if isinstance(age, bool) or not isinstance(age, int):
        return False
    return MIN_AGE <= age <= MAX_AGE


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class User:
    name: str | None
    email: str | None
    secret: str | None = None
    age: Any = None
    is_active: bool = True
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def validate(self) -> ValidationResult:
        """
        Run every field rule and collect all failures, in a stable order.
        """
        errors: list[str] = []

        name = (self.name or "").strip()
        if not name:
            errors.append(NAME_REQUIRED)
        elif len(name) < MIN_NAME_LENGTH:
            errors.append(NAME_TOO_SHORT)

        email = (self.email or "").strip()
        if not email:
            errors.append(EMAIL_REQUIRED)
        elif not EMAIL_PATTERN.fullmatch(self.email or ""):
            errors.append(EMAIL_INVALID)

        if self.age is not None and not _is_valid_age(self.age):
            errors.append(AGE_OUT_OF_RANGE)

        return ValidationResult(valid=not errors, errors=errors)

    def to_public_view(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "is_active": self.is_active,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    def to_list_view(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "age": self.age,
        }

    def __repr__(self) -> str:
        return f"<User id={self.id} {self.email} active={self.is_active}>"
