"""
Ledger Store contract.

The ledger components only ever talk to a ``LedgerStore``; they never
import a concrete storage technology. Every method is a single atomic
operation from the caller's point of view.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional, Sequence

from groupledger.app.domain.ledger.records import (
    NewUser, NewGroup, NewExpense, NewShare, NewSettlement,
)


class LedgerStore(ABC):
    """Abstract data-access interface for users, groups, expenses and settlements."""

    # Users

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def create_user(self, user: NewUser) -> Any:
        """Raises ConflictError if the id or email is taken."""

    @abstractmethod
    async def update_user(self, user_id: str, display_name: Optional[str] = None,
                          photo_url: Optional[str] = None) -> Optional[Any]:
        ...

    # Groups

    @abstractmethod
    async def create_group(self, group: NewGroup) -> Any:
        """Create a group and the creator's membership together."""

    @abstractmethod
    async def get_group(self, group_id: int) -> Optional[Any]:
        ...

    @abstractmethod
    async def get_group_by_code(self, code: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def get_user_groups(self, user_id: str) -> List[Any]:
        ...

    # Members

    @abstractmethod
    async def add_member(self, group_id: int, user_id: str) -> Any:
        """Raises ConflictError if the user already belongs to the group."""

    @abstractmethod
    async def get_members(self, group_id: int) -> List[Any]:
        """Memberships in join order."""

    @abstractmethod
    async def is_member(self, user_id: str, group_id: int) -> bool:
        ...

    # Expenses

    @abstractmethod
    async def create_expense_with_shares(self, expense: NewExpense,
                                         shares: Sequence[NewShare]) -> Any:
        """Persist an expense and its shares all-or-nothing."""

    @abstractmethod
    async def get_expense(self, expense_id: int) -> Optional[Any]:
        ...

    @abstractmethod
    async def get_expense_shares(self, expense_id: int) -> List[Any]:
        ...

    @abstractmethod
    async def get_group_expenses(self, group_id: int) -> List[Any]:
        ...

    @abstractmethod
    async def get_user_expenses(self, user_id: str) -> List[Any]:
        """Expenses of every group the user belongs to."""

    @abstractmethod
    async def update_expense(self, expense_id: int, title: Optional[str] = None,
                             date: Optional[datetime] = None) -> Optional[Any]:
        """Only descriptive fields are mutable; amounts never change in place."""

    @abstractmethod
    async def delete_expense_cascade(self, expense_id: int) -> bool:
        """Delete an expense with its shares. Returns False if it did not exist."""

    # Settlements

    @abstractmethod
    async def create_settlement(self, settlement: NewSettlement) -> Any:
        ...

    @abstractmethod
    async def get_group_settlements(self, group_id: int) -> List[Any]:
        ...

    @abstractmethod
    async def get_user_settlements(self, user_id: str) -> List[Any]:
        ...
