"""
Debt Minimizer (Domain Logic).

Turns a group's balances into payment instructions using greedy
largest-creditor / largest-debtor matching.

The greedy match is not guaranteed to find the fewest possible transfers
(that is NP-hard in general), but it always terminates within
``members - 1`` transfers and leaves every balance at exactly zero.
"""

from decimal import Decimal
from typing import List, Mapping

from groupledger.app.domain.ledger.balance_calculator import BalanceCalculator
from groupledger.app.domain.ledger.money import ZERO, to_money
from groupledger.app.domain.ledger.records import Transfer


def minimize_transfers(balances: Mapping[str, Decimal]) -> List[Transfer]:
    """
    Compute transfers that settle the given balances.

    Args:
        balances: user id -> balance, in a stable order (member order).
            Python's sort is stable, so ties keep this order.

    Returns:
        Transfers from debtors to creditors; empty if everyone is settled
    """
    creditors = [[user_id, to_money(b)] for user_id, b in balances.items() if to_money(b) > ZERO]
    debtors = [[user_id, -to_money(b)] for user_id, b in balances.items() if to_money(b) < ZERO]

    creditors.sort(key=lambda entry: entry[1], reverse=True)
    debtors.sort(key=lambda entry: entry[1], reverse=True)

    transfers = []
    i = j = 0
    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        # min() of two two-decimal values is already exact
        amount = min(creditor[1], debtor[1])
        transfers.append(Transfer(from_user_id=debtor[0], to_user_id=creditor[0], amount=amount))

        creditor[1] -= amount
        debtor[1] -= amount

        if creditor[1] == ZERO:
            i += 1
        if debtor[1] == ZERO:
            j += 1

    return transfers


class DebtMinimizer:

    def __init__(self, calculator: BalanceCalculator):
        self.calculator = calculator

    async def settle_group(self, group_id: int) -> List[Transfer]:
        """Transfers that would bring every member of the group to zero."""
        balances = await self.calculator.group_balances(group_id)
        return minimize_transfers(balances)
