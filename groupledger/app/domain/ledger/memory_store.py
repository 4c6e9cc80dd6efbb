"""
In-memory Ledger Store.

Dicts keyed by sequential ids. Used by tests and for running the ledger
without a database.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from groupledger.app.core.exceptions import ConflictError
from groupledger.app.domain.ledger.money import to_money
from groupledger.app.domain.ledger.records import (
    NewUser, NewGroup, NewExpense, NewShare, NewSettlement,
    UserRecord, GroupRecord, MemberRecord, ExpenseRecord, ShareRecord, SettlementRecord,
)
from groupledger.app.domain.ledger.store import LedgerStore


class MemoryLedgerStore(LedgerStore):

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.groups: Dict[int, GroupRecord] = {}
        self.members: Dict[int, MemberRecord] = {}
        self.expenses: Dict[int, ExpenseRecord] = {}
        self.shares: Dict[int, ShareRecord] = {}
        self.settlements: Dict[int, SettlementRecord] = {}
        self._next_id = {
            "group": 1, "member": 1, "expense": 1, "share": 1, "settlement": 1,
        }

    def _allocate_id(self, kind: str) -> int:
        value = self._next_id[kind]
        self._next_id[kind] = value + 1
        return value

    # Users

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def create_user(self, user: NewUser) -> UserRecord:
        if user.id in self.users or await self.get_user_by_email(user.email):
            raise ConflictError("User already exists", details={"email": user.email})
        record = UserRecord(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            photo_url=user.photo_url,
        )
        self.users[record.id] = record
        return record

    async def update_user(self, user_id: str, display_name: Optional[str] = None,
                          photo_url: Optional[str] = None) -> Optional[UserRecord]:
        user = self.users.get(user_id)
        if user is None:
            return None
        if display_name is not None:
            user.display_name = display_name
        if photo_url is not None:
            user.photo_url = photo_url
        return user

    # Groups

    async def create_group(self, group: NewGroup) -> GroupRecord:
        if await self.get_group_by_code(group.code):
            raise ConflictError("Group code already in use", details={"code": group.code})
        record = GroupRecord(
            id=self._allocate_id("group"),
            name=group.name,
            type=group.type,
            code=group.code,
            created_by=group.created_by,
        )
        self.groups[record.id] = record
        await self.add_member(record.id, group.created_by)
        return record

    async def get_group(self, group_id: int) -> Optional[GroupRecord]:
        return self.groups.get(group_id)

    async def get_group_by_code(self, code: str) -> Optional[GroupRecord]:
        return next((g for g in self.groups.values() if g.code == code), None)

    async def get_user_groups(self, user_id: str) -> List[GroupRecord]:
        return [
            self.groups[m.group_id]
            for m in self.members.values()
            if m.user_id == user_id and m.group_id in self.groups
        ]

    # Members

    async def add_member(self, group_id: int, user_id: str) -> MemberRecord:
        if await self.is_member(user_id, group_id):
            raise ConflictError(
                "User is already a member of this group",
                details={"group_id": group_id, "user_id": user_id},
            )
        record = MemberRecord(id=self._allocate_id("member"), group_id=group_id, user_id=user_id)
        self.members[record.id] = record
        return record

    async def get_members(self, group_id: int) -> List[MemberRecord]:
        return [m for m in self.members.values() if m.group_id == group_id]

    async def is_member(self, user_id: str, group_id: int) -> bool:
        return any(m.group_id == group_id and m.user_id == user_id for m in self.members.values())

    # Expenses

    async def create_expense_with_shares(self, expense: NewExpense,
                                         shares: Sequence[NewShare]) -> ExpenseRecord:
        # Build everything first; nothing is visible until both dicts are updated.
        record = ExpenseRecord(
            id=self._next_id["expense"],
            group_id=expense.group_id,
            title=expense.title,
            amount=to_money(expense.amount),
            paid_by=expense.paid_by,
            split_type=expense.split_type,
            created_by=expense.created_by,
        )
        share_records = []
        next_share_id = self._next_id["share"]
        for offset, share in enumerate(shares):
            share_records.append(ShareRecord(
                id=next_share_id + offset,
                expense_id=record.id,
                user_id=share.user_id,
                amount=to_money(share.amount),
            ))

        self._next_id["expense"] += 1
        self._next_id["share"] += len(share_records)
        self.expenses[record.id] = record
        self.shares.update((s.id, s) for s in share_records)
        return record

    async def get_expense(self, expense_id: int) -> Optional[ExpenseRecord]:
        return self.expenses.get(expense_id)

    async def get_expense_shares(self, expense_id: int) -> List[ShareRecord]:
        return [s for s in self.shares.values() if s.expense_id == expense_id]

    async def get_group_expenses(self, group_id: int) -> List[ExpenseRecord]:
        return [e for e in self.expenses.values() if e.group_id == group_id]

    async def get_user_expenses(self, user_id: str) -> List[ExpenseRecord]:
        group_ids = {g.id for g in await self.get_user_groups(user_id)}
        return [e for e in self.expenses.values() if e.group_id in group_ids]

    async def update_expense(self, expense_id: int, title: Optional[str] = None,
                             date: Optional[datetime] = None) -> Optional[ExpenseRecord]:
        expense = self.expenses.get(expense_id)
        if expense is None:
            return None
        changes = {}
        if title is not None:
            changes["title"] = title
        if date is not None:
            changes["date"] = date
        updated = replace(expense, **changes)
        self.expenses[expense_id] = updated
        return updated

    async def delete_expense_cascade(self, expense_id: int) -> bool:
        if expense_id not in self.expenses:
            return False
        share_ids = [sid for sid, s in self.shares.items() if s.expense_id == expense_id]
        del self.expenses[expense_id]
        for share_id in share_ids:
            del self.shares[share_id]
        return True

    # Settlements

    async def create_settlement(self, settlement: NewSettlement) -> SettlementRecord:
        record = SettlementRecord(
            id=self._allocate_id("settlement"),
            group_id=settlement.group_id,
            from_user_id=settlement.from_user_id,
            to_user_id=settlement.to_user_id,
            amount=to_money(settlement.amount),
            notes=settlement.notes,
        )
        self.settlements[record.id] = record
        return record

    async def get_group_settlements(self, group_id: int) -> List[SettlementRecord]:
        return [s for s in self.settlements.values() if s.group_id == group_id]

    async def get_user_settlements(self, user_id: str) -> List[SettlementRecord]:
        return [
            s for s in self.settlements.values()
            if s.from_user_id == user_id or s.to_user_id == user_id
        ]
