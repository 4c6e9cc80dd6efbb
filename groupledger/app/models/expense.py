"""
Expense and expense share database models.

An expense and its shares are written and deleted as one unit.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Numeric
from sqlalchemy.sql import func
from groupledger.app.db.session import Base
from groupledger.app.models.enums import SplitType


class Expense(Base):
    """
    Expense model.

    Invariant: the amounts of ``shares`` sum exactly to ``amount``.
    """
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)

    paid_by = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)
    split_type = Column(Enum(SplitType, values_callable=lambda e: [m.value for m in e]), nullable=False)

    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_by = Column(String(128), ForeignKey('users.id'), nullable=False)

    def __repr__(self):
        return f"<Expense(id={self.id}, group_id={self.group_id}, amount={self.amount})>"


class ExpenseShare(Base):
    """A single user's portion of an expense."""
    __tablename__ = "expense_shares"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    expense_id = Column(Integer, ForeignKey('expenses.id', ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)

    def __repr__(self):
        return f"<ExpenseShare(expense_id={self.expense_id}, user_id='{self.user_id}', amount={self.amount})>"
