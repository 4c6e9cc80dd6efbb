"""
Group join codes.

Short, upper-case, human-shareable codes used to join a group.
"""

import secrets
import string

from groupledger.app.core.config import settings
from groupledger.app.domain.ledger.store import LedgerStore

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_group_code(length: int = None) -> str:
    length = length or settings.group_code_length
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


async def generate_unique_group_code(store: LedgerStore, attempts: int = 10) -> str:
    """
    Generate a code no existing group uses.

    Raises:
        RuntimeError: If every attempt collided
    """
    for _ in range(attempts):
        code = generate_group_code()
        if await store.get_group_by_code(code) is None:
            return code
    raise RuntimeError("Could not generate a unique group code")
