"""
SQLAlchemy Ledger Store.

Implements the ``LedgerStore`` contract over an ``AsyncSession``.
Every write commits exactly once, or rolls back entirely.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.app.core.exceptions import ConflictError
from groupledger.app.domain.ledger.money import to_money
from groupledger.app.domain.ledger.records import (
    NewUser, NewGroup, NewExpense, NewShare, NewSettlement,
)
from groupledger.app.domain.ledger.store import LedgerStore
from groupledger.app.models.user import User
from groupledger.app.models.group import Group, GroupMember
from groupledger.app.models.expense import Expense, ExpenseShare
from groupledger.app.models.settlement import Settlement


class SqlLedgerStore(LedgerStore):

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _transaction(self):
        """Commit on success, roll back and re-raise on any failure."""
        try:
            yield
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    # Users

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(self, user: NewUser) -> User:
        new_user = User(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            photo_url=user.photo_url,
        )
        try:
            async with self._transaction():
                self.session.add(new_user)
        except IntegrityError as exc:
            raise ConflictError("User already exists", details={"email": user.email}) from exc
        await self.session.refresh(new_user)
        return new_user

    async def update_user(self, user_id: str, display_name: Optional[str] = None,
                          photo_url: Optional[str] = None) -> Optional[User]:
        user = await self.get_user(user_id)
        if user is None:
            return None
        async with self._transaction():
            if display_name is not None:
                user.display_name = display_name
            if photo_url is not None:
                user.photo_url = photo_url
        return user

    # Groups

    async def create_group(self, group: NewGroup) -> Group:
        new_group = Group(
            name=group.name,
            type=group.type,
            code=group.code,
            created_by=group.created_by,
        )
        try:
            async with self._transaction():
                self.session.add(new_group)
                await self.session.flush()  # To get new_group.id
                self.session.add(GroupMember(group_id=new_group.id, user_id=group.created_by))
        except IntegrityError as exc:
            raise ConflictError("Group could not be created", details={"code": group.code}) from exc
        await self.session.refresh(new_group)
        return new_group

    async def get_group(self, group_id: int) -> Optional[Group]:
        return await self.session.get(Group, group_id)

    async def get_group_by_code(self, code: str) -> Optional[Group]:
        result = await self.session.execute(select(Group).where(Group.code == code))
        return result.scalar_one_or_none()

    async def get_user_groups(self, user_id: str) -> List[Group]:
        result = await self.session.execute(
            select(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(GroupMember.user_id == user_id)
            .order_by(GroupMember.id)
        )
        return list(result.scalars().all())

    # Members

    async def add_member(self, group_id: int, user_id: str) -> GroupMember:
        member = GroupMember(group_id=group_id, user_id=user_id)
        try:
            async with self._transaction():
                self.session.add(member)
        except IntegrityError as exc:
            raise ConflictError(
                "User is already a member of this group",
                details={"group_id": group_id, "user_id": user_id},
            ) from exc
        await self.session.refresh(member)
        return member

    async def get_members(self, group_id: int) -> List[GroupMember]:
        result = await self.session.execute(
            select(GroupMember).where(GroupMember.group_id == group_id).order_by(GroupMember.id)
        )
        return list(result.scalars().all())

    async def is_member(self, user_id: str, group_id: int) -> bool:
        result = await self.session.execute(
            select(GroupMember.id).where(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
            )
        )
        return result.first() is not None

    # Expenses

    async def create_expense_with_shares(self, expense: NewExpense,
                                         shares: Sequence[NewShare]) -> Expense:
        new_expense = Expense(
            group_id=expense.group_id,
            title=expense.title,
            amount=to_money(expense.amount),
            paid_by=expense.paid_by,
            split_type=expense.split_type,
            created_by=expense.created_by,
        )
        async with self._transaction():
            # Row lock on the group serializes concurrent writers (no-op on SQLite)
            await self.session.execute(
                select(Group.id).where(Group.id == expense.group_id).with_for_update()
            )
            self.session.add(new_expense)
            await self.session.flush()  # To get new_expense.id
            self.session.add_all([
                ExpenseShare(expense_id=new_expense.id, user_id=s.user_id, amount=to_money(s.amount))
                for s in shares
            ])
        await self.session.refresh(new_expense)
        return new_expense

    async def get_expense(self, expense_id: int) -> Optional[Expense]:
        return await self.session.get(Expense, expense_id)

    async def get_expense_shares(self, expense_id: int) -> List[ExpenseShare]:
        result = await self.session.execute(
            select(ExpenseShare).where(ExpenseShare.expense_id == expense_id).order_by(ExpenseShare.id)
        )
        return list(result.scalars().all())

    async def get_group_expenses(self, group_id: int) -> List[Expense]:
        result = await self.session.execute(
            select(Expense).where(Expense.group_id == group_id).order_by(Expense.id)
        )
        return list(result.scalars().all())

    async def get_user_expenses(self, user_id: str) -> List[Expense]:
        result = await self.session.execute(
            select(Expense)
            .join(GroupMember, GroupMember.group_id == Expense.group_id)
            .where(GroupMember.user_id == user_id)
            .order_by(Expense.id)
        )
        return list(result.scalars().all())

    async def update_expense(self, expense_id: int, title: Optional[str] = None,
                             date: Optional[datetime] = None) -> Optional[Expense]:
        expense = await self.get_expense(expense_id)
        if expense is None:
            return None
        async with self._transaction():
            if title is not None:
                expense.title = title
            if date is not None:
                expense.date = date
        return expense

    async def delete_expense_cascade(self, expense_id: int) -> bool:
        async with self._transaction():
            await self.session.execute(
                delete(ExpenseShare).where(ExpenseShare.expense_id == expense_id)
            )
            result = await self.session.execute(
                delete(Expense).where(Expense.id == expense_id)
            )
        return result.rowcount > 0

    # Settlements

    async def create_settlement(self, settlement: NewSettlement) -> Settlement:
        new_settlement = Settlement(
            group_id=settlement.group_id,
            from_user_id=settlement.from_user_id,
            to_user_id=settlement.to_user_id,
            amount=to_money(settlement.amount),
            notes=settlement.notes,
        )
        async with self._transaction():
            self.session.add(new_settlement)
        await self.session.refresh(new_settlement)
        return new_settlement

    async def get_group_settlements(self, group_id: int) -> List[Settlement]:
        result = await self.session.execute(
            select(Settlement).where(Settlement.group_id == group_id).order_by(Settlement.id)
        )
        return list(result.scalars().all())

    async def get_user_settlements(self, user_id: str) -> List[Settlement]:
        result = await self.session.execute(
            select(Settlement).where(
                (Settlement.from_user_id == user_id) | (Settlement.to_user_id == user_id)
            ).order_by(Settlement.id)
        )
        return list(result.scalars().all())
