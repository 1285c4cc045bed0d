"""
Dependencies for user routes.
"""

from __future__ import annotations

from fastapi import Request

from .repository import UserRepository


def get_user_repository(request: Request) -> UserRepository:
    # Built once in the app lifespan (see `api/main.py`).
    return request.app.state.user_repository
