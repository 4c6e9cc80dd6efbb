"""
Shared money type for request and response schemas.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

from groupledger.app.domain.ledger.money import to_money

# Serialized as a two-decimal string, e.g. "20.00"
Money = Annotated[Decimal, PlainSerializer(lambda v: str(to_money(v)), return_type=str)]
