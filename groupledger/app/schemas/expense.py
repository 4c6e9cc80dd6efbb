"""
Expense Pydantic schemas.

Defines request and response models for expenses and their shares.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from groupledger.app.models.enums import SplitType
from groupledger.app.schemas.money import Money


class ExpenseCreate(BaseModel):
    """Expense part of an expense creation request."""
    group_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, description="Total amount, two decimals")
    paid_by: str = Field(..., min_length=1, max_length=128)
    split_type: SplitType = SplitType.EQUAL
    created_by: str = Field(..., min_length=1, max_length=128)


class ExpenseShareCreate(BaseModel):
    """A single share of an expense."""
    user_id: str = Field(..., min_length=1, max_length=128)
    amount: Decimal = Field(..., ge=0)


class ExpenseCreateRequest(BaseModel):
    """
    Expense creation request.

    For ``equal`` splits the shares may be omitted; the amount is then
    split among ``split_with`` (or every group member).
    """
    expense: ExpenseCreate
    shares: List[ExpenseShareCreate] = Field(default_factory=list)
    split_with: Optional[List[str]] = None


class ExpenseUpdate(BaseModel):
    """Only descriptive fields can change; amounts are re-recorded instead."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[datetime] = None


class ExpenseShareResponse(BaseModel):
    """Schema for share response."""
    id: int
    expense_id: int
    user_id: str
    amount: Money

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    group_id: int
    title: str
    amount: Money
    paid_by: str
    split_type: SplitType
    date: datetime
    created_by: str

    class Config:
        from_attributes = True


class ExpenseWithSharesResponse(ExpenseResponse):
    """Expense row with its shares inlined (group expense listing)."""
    shares: List[ExpenseShareResponse] = Field(default_factory=list)


class ExpenseDetailResponse(BaseModel):
    """Single expense lookup."""
    expense: ExpenseResponse
    shares: List[ExpenseShareResponse]
