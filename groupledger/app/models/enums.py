"""
Ledger enumerations.

Defines group types and expense split types.
"""

import enum


class GroupType(str, enum.Enum):
    """
    Group type enumeration.

    Types:
        HOME: Shared household
        TRIP: Travel group
        COUPLE: Two-person group
        OTHER: Anything else (default)
    """
    HOME = "home"
    TRIP = "trip"
    COUPLE = "couple"
    OTHER = "other"


class SplitType(str, enum.Enum):
    """How an expense amount is divided between members."""
    EQUAL = "equal"  # Server-computed equal shares
    CUSTOM = "custom"  # Caller-provided shares
