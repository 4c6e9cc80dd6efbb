"""
Database seeding script for a demo group.

Creates three users, a shared flat group and one equally split expense.
Run this script after the database is set up.
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from groupledger.app.db.session import AsyncSessionLocal, engine, Base
from groupledger.app.domain.ledger.expense_recorder import split_equally
from groupledger.app.domain.ledger.records import NewExpense, NewGroup, NewUser
from groupledger.app.domain.ledger.service import LedgerService
from groupledger.app.domain.ledger.sql_store import SqlLedgerStore
from groupledger.app.models.enums import GroupType, SplitType
# Import models to ensure they are registered with Base
from groupledger.app.models.user import User  # noqa: F401
from groupledger.app.models.group import Group, GroupMember  # noqa: F401
from groupledger.app.models.expense import Expense, ExpenseShare  # noqa: F401
from groupledger.app.models.settlement import Settlement  # noqa: F401

DEMO_USERS = [
    ("demo-alice", "alice@groupledger.dev", "Alice"),
    ("demo-bob", "bob@groupledger.dev", "Bob"),
    ("demo-carol", "carol@groupledger.dev", "Carol"),
]


async def seed_demo():
    """
    Seed a demo group.

    Creates:
    - 3 users
    - 1 HOME group (code DEMO01) with all three as members
    - 1 expense of 30.00 paid by Alice, split equally
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        store = SqlLedgerStore(db)
        ledger = LedgerService(store)
        print("🌱 Starting demo seeding...")

        if await store.get_group_by_code("DEMO01"):
            print("ℹ️  Demo group already exists, skipping seeding")
            return

        for user_id, email, name in DEMO_USERS:
            if not await store.get_user(user_id):
                await store.create_user(NewUser(id=user_id, email=email, display_name=name))
                print(f"✅ Created user {name} ({email})")

        group = await store.create_group(NewGroup(
            name="Demo Flat", code="DEMO01", created_by="demo-alice", type=GroupType.HOME
        ))
        group_id = group.id
        for user_id, _, _ in DEMO_USERS[1:]:
            await store.add_member(group_id, user_id)

        await ledger.record_expense(
            NewExpense(
                group_id=group_id,
                title="Groceries",
                amount=Decimal("30.00"),
                paid_by="demo-alice",
                created_by="demo-alice",
                split_type=SplitType.EQUAL,
            ),
            split_equally("30.00", [u[0] for u in DEMO_USERS]),
        )

        print("\n🎉 Demo seeding completed successfully!")
        print("\nSettle-up suggestions:")
        for transfer in await ledger.settle_group(group_id):
            print(f"  - {transfer.from_user_id} pays {transfer.to_user_id} {transfer.amount}")


if __name__ == "__main__":
    asyncio.run(seed_demo())
