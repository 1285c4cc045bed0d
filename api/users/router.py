"""
User profile API endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from . import schemas, service
from .dependencies import get_user_repository
from .repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users")


@router.get("")
async def list_users(
    view: schemas.ListView = Query(default="public"),
    repo: UserRepository = Depends(get_user_repository),
) -> dict:
    """
    List active users. `view=list` narrows each item to name/email/age.
    """
    return await service.list_users(repo, view=view)


@router.get("/count")
async def count_users(repo: UserRepository = Depends(get_user_repository)) -> dict:
    return await service.count_users(repo)


@router.get("/{user_id}")
async def get_user(user_id: str, repo: UserRepository = Depends(get_user_repository)) -> dict:
    return await service.get_user(repo, user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: schemas.UserCreateRequest,
    repo: UserRepository = Depends(get_user_repository),
) -> dict:
    body = await service.create_user(repo, payload)
    logger.info("user_created id=%s", body["data"]["id"])
    return body


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: schemas.UserUpdateRequest,
    repo: UserRepository = Depends(get_user_repository),
) -> dict:
    body = await service.update_user(repo, user_id, payload)
    logger.info("user_updated id=%s fields=%s", user_id, sorted(payload.model_fields_set))
    return body


@router.delete("/{user_id}")
async def delete_user(user_id: str, repo: UserRepository = Depends(get_user_repository)) -> dict:
    body = await service.delete_user(repo, user_id)
    logger.info("user_deleted id=%s", user_id)
    return body
