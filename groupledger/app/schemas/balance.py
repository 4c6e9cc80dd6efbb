"""
Balance Schemas.
"""

from pydantic import BaseModel
from groupledger.app.schemas.money import Money


class BalanceResponse(BaseModel):
    """A single net balance. Positive: owed money. Negative: owes money."""
    balance: Money


class TransferResponse(BaseModel):
    """One settle-up instruction."""
    from_user_id: str
    to_user_id: str
    amount: Money

    class Config:
        from_attributes = True
