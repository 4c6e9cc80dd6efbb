"""
Settlement Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from groupledger.app.schemas.money import Money


class SettlementCreate(BaseModel):
    """Schema for recording a payment between two members."""
    group_id: int = Field(..., ge=1)
    from_user_id: str = Field(..., min_length=1, max_length=128, description="Payer")
    to_user_id: str = Field(..., min_length=1, max_length=128, description="Payee")
    amount: Decimal = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=1000)


class SettlementResponse(BaseModel):
    """Schema for displaying settlements."""
    id: int
    group_id: int
    from_user_id: str
    to_user_id: str
    amount: Money
    date: datetime
    notes: Optional[str]

    class Config:
        from_attributes = True
