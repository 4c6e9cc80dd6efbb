"""
Settlement database model.

Records a real-world payment between two members of a group.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.sql import func
from groupledger.app.db.session import Base


class Settlement(Base):
    """
    Settlement model.

    Append-only: reduces what ``from_user_id`` owes ``to_user_id``.
    NO updates or deletions allowed.
    """
    __tablename__ = "settlements"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey('groups.id'), nullable=False, index=True)

    # Parties
    from_user_id = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)  # Payer
    to_user_id = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)  # Payee

    amount = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)

    # Immutable - no updated_at
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Settlement(id={self.id}, {self.from_user_id} -> {self.to_user_id}, amount={self.amount})>"
