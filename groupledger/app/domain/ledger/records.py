"""
Plain records exchanged with a Ledger Store.

Inputs (``New*``) describe rows to be written; the stored-record classes
mirror the ORM models attribute for attribute so the ledger components
work the same against either store.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from groupledger.app.models.enums import GroupType, SplitType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Inputs

@dataclass
class NewUser:
    id: str
    email: str
    display_name: str
    photo_url: Optional[str] = None


@dataclass
class NewGroup:
    name: str
    code: str
    created_by: str
    type: GroupType = GroupType.OTHER


@dataclass
class NewExpense:
    group_id: int
    title: str
    amount: Decimal
    paid_by: str
    created_by: str
    split_type: SplitType = SplitType.CUSTOM


@dataclass
class NewShare:
    user_id: str
    amount: Decimal


@dataclass
class NewSettlement:
    group_id: int
    from_user_id: str
    to_user_id: str
    amount: Decimal
    notes: Optional[str] = None


# Stored records (in-memory store)

@dataclass
class UserRecord:
    id: str
    email: str
    display_name: str
    photo_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class GroupRecord:
    id: int
    name: str
    type: GroupType
    code: str
    created_by: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class MemberRecord:
    id: int
    group_id: int
    user_id: str
    joined_at: datetime = field(default_factory=utcnow)


@dataclass
class ExpenseRecord:
    id: int
    group_id: int
    title: str
    amount: Decimal
    paid_by: str
    split_type: SplitType
    created_by: str
    date: datetime = field(default_factory=utcnow)


@dataclass
class ShareRecord:
    id: int
    expense_id: int
    user_id: str
    amount: Decimal


@dataclass
class SettlementRecord:
    id: int
    group_id: int
    from_user_id: str
    to_user_id: str
    amount: Decimal
    notes: Optional[str] = None
    date: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class Transfer:
    """A payment instruction produced by the debt minimizer."""
    from_user_id: str
    to_user_id: str
    amount: Decimal
