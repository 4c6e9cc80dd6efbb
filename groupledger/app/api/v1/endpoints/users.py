"""
User API Endpoints.

Users are synced from the identity provider on first sign-in.
"""

from fastapi import APIRouter, Depends, Response, status
from typing import List

from groupledger.app.core.dependencies import get_ledger_store
from groupledger.app.core.exceptions import NotFoundError
from groupledger.app.domain.ledger.records import NewUser
from groupledger.app.domain.ledger.store import LedgerStore
from groupledger.app.schemas.user import UserCreate, UserUpdate, UserResponse
from groupledger.app.schemas.group import GroupResponse
from groupledger.app.schemas.expense import ExpenseResponse
from groupledger.app.schemas.settlement import SettlementResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def sync_user(
    user_data: UserCreate,
    response: Response,
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Create a user, or return the existing one for this email (200).
    """
    existing = await store.get_user_by_email(user_data.email)
    if existing:
        response.status_code = status.HTTP_200_OK
        return existing

    return await store.create_user(NewUser(
        id=user_data.id,
        email=user_data.email,
        display_name=user_data.display_name,
        photo_url=user_data.photo_url,
    ))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, store: LedgerStore = Depends(get_ledger_store)):
    """Get a user by identity id."""
    user = await store.get_user(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    store: LedgerStore = Depends(get_ledger_store)
):
    """Update display name or photo."""
    user = await store.update_user(
        user_id,
        display_name=user_data.display_name,
        photo_url=user_data.photo_url,
    )
    if not user:
        raise NotFoundError("User", user_id)
    return user


@router.get("/{user_id}/groups", response_model=List[GroupResponse])
async def list_user_groups(user_id: str, store: LedgerStore = Depends(get_ledger_store)):
    """Groups the user belongs to."""
    return await store.get_user_groups(user_id)


@router.get("/{user_id}/expenses", response_model=List[ExpenseResponse])
async def list_user_expenses(user_id: str, store: LedgerStore = Depends(get_ledger_store)):
    """Expenses across all of the user's groups."""
    return await store.get_user_expenses(user_id)


@router.get("/{user_id}/settlements", response_model=List[SettlementResponse])
async def list_user_settlements(user_id: str, store: LedgerStore = Depends(get_ledger_store)):
    """Settlements the user paid or received."""
    return await store.get_user_settlements(user_id)
