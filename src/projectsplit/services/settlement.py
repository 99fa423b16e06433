from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping

from projectsplit.logging import get_logger
from projectsplit.models import ExpenseSplit
from projectsplit.utils.parse import round2

EPSILON = Decimal("0.01")

log = get_logger(__name__)


@dataclass(slots=True)
class Balance:
    from_user: str
    to_user: str
    amount: Decimal


def accumulate_net_balances(splits: Iterable[ExpenseSplit]) -> dict[str, Decimal]:
    """Net position per identifier: positive is owed money, negative owes money.

    Keys appear in the order they are first touched, which decides how
    ``simplify_debts`` pairs people up.
    """
    balances: dict[str, Decimal] = {}
    for split in splits:
        payer = split.paid_by
        if not payer:
            continue
        for participant in split.participants:
            if participant.paid:
                continue
            balances[payer] = balances.get(payer, Decimal("0")) + participant.amount
            balances[participant.user_id] = balances.get(participant.user_id, Decimal("0")) - participant.amount
    return balances


def simplify_debts(net_balances: Mapping[str, Decimal]) -> list[Balance]:
    """Greedy two-pointer matching of debtors to creditors.

    Creditors and debtors are walked in first-seen order, not by size. The
    result has at most ``creditors + debtors - 1`` transfers, which is not
    always the smallest possible set.
    """
    creditors: list[list] = []
    debtors: list[list] = []

    for user_id, balance in net_balances.items():
        if balance > EPSILON:
            creditors.append([user_id, balance])
        elif balance < -EPSILON:
            debtors.append([user_id, -balance])

    transfers: list[Balance] = []
    i, j = 0, 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        settle_amount = min(creditor[1], debtor[1])
        if settle_amount > EPSILON:
            transfers.append(Balance(from_user=debtor[0], to_user=creditor[0], amount=round2(settle_amount)))

        creditor[1] -= settle_amount
        debtor[1] -= settle_amount

        if creditor[1] < EPSILON:
            i += 1
        if debtor[1] < EPSILON:
            j += 1

    log.debug(
        "balances.simplified",
        creditors=len(creditors),
        debtors=len(debtors),
        transfers=len(transfers),
    )
    return transfers


def calculate_balances(splits: Iterable[ExpenseSplit]) -> list[Balance]:
    return simplify_debts(accumulate_net_balances(splits))
