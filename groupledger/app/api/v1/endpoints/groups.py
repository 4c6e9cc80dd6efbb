"""
Group API Endpoints.

Group creation, lookup by id or join code, and membership.
"""

import logging
from fastapi import APIRouter, Depends, status
from typing import List

from groupledger.app.core.dependencies import get_ledger_store, get_balance_cache
from groupledger.app.core.exceptions import ConflictError, NotFoundError
from groupledger.app.domain.ledger.records import NewGroup
from groupledger.app.domain.ledger.store import LedgerStore
from groupledger.app.schemas.group import (
    GroupCreate, GroupResponse, GroupMemberCreate, GroupMemberResponse, GroupMemberDetailResponse
)
from groupledger.app.schemas.user import UserResponse
from groupledger.app.services.balance_cache import BalanceCache
from groupledger.app.services.group_codes import generate_unique_group_code

logger = logging.getLogger("groupledger.api.groups")

router = APIRouter(tags=["Groups"])


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(group_data: GroupCreate, store: LedgerStore = Depends(get_ledger_store)):
    """
    Create a group. The creator joins it in the same transaction.
    """
    if not await store.get_user(group_data.created_by):
        raise NotFoundError("User", group_data.created_by)

    code = group_data.code.upper() if group_data.code else None
    if code is None:
        code = await generate_unique_group_code(store)
    elif await store.get_group_by_code(code):
        raise ConflictError("Group code already in use", details={"code": code})

    group = await store.create_group(NewGroup(
        name=group_data.name,
        type=group_data.type,
        code=code,
        created_by=group_data.created_by,
    ))
    logger.info("Group created", extra={"group_id": group.id, "created_by": group.created_by})
    return group


@router.get("/groups/code/{code}", response_model=GroupResponse)
async def get_group_by_code(code: str, store: LedgerStore = Depends(get_ledger_store)):
    """Look a group up by its join code."""
    group = await store.get_group_by_code(code.upper())
    if not group:
        raise NotFoundError("Group", code)
    return group


@router.get("/groups/{group_id}", response_model=GroupResponse)
async def get_group(group_id: int, store: LedgerStore = Depends(get_ledger_store)):
    """Get a group by id."""
    group = await store.get_group(group_id)
    if not group:
        raise NotFoundError("Group", group_id)
    return group


@router.post("/group-members", response_model=GroupMemberResponse, status_code=status.HTTP_201_CREATED)
async def join_group(
    member_data: GroupMemberCreate,
    store: LedgerStore = Depends(get_ledger_store),
    cache: BalanceCache = Depends(get_balance_cache)
):
    """
    Add a user to a group. A user can join a group only once (409).
    """
    if not await store.get_group(member_data.group_id):
        raise NotFoundError("Group", member_data.group_id)
    if not await store.get_user(member_data.user_id):
        raise NotFoundError("User", member_data.user_id)
    if await store.is_member(member_data.user_id, member_data.group_id):
        raise ConflictError(
            "User is already a member of this group",
            details={"group_id": member_data.group_id, "user_id": member_data.user_id},
        )

    member = await store.add_member(member_data.group_id, member_data.user_id)
    await cache.invalidate(member_data.group_id)
    return member


@router.get("/groups/{group_id}/members", response_model=List[GroupMemberDetailResponse])
async def list_group_members(group_id: int, store: LedgerStore = Depends(get_ledger_store)):
    """Members of a group with their profiles, in join order."""
    details = []
    for member in await store.get_members(group_id):
        user = await store.get_user(member.user_id)
        details.append(GroupMemberDetailResponse(
            id=member.id,
            group_id=member.group_id,
            user_id=member.user_id,
            joined_at=member.joined_at,
            user=UserResponse.model_validate(user) if user else None,
        ))
    return details
