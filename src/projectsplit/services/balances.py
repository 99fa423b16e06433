from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from projectsplit.logging import get_logger
from projectsplit.models import ExpenseSplit, Settlement
from projectsplit.services.settlement import EPSILON, Balance, calculate_balances
from projectsplit.utils.parse import round2


@dataclass(slots=True)
class UserBalances:
    user_id: str
    you_owe: list[Balance] = field(default_factory=list)
    you_are_owed: list[Balance] = field(default_factory=list)
    net_balance: Decimal = Decimal("0.00")


def apply_settlements(balances: Iterable[Balance], settlements: Iterable[Settlement]) -> list[Balance]:
    """Subtract recorded payments from computed balances.

    A settlement only offsets a balance with the same sender and recipient;
    a payment from A to B never reduces a balance from B to A. Balances are
    clamped at zero and dropped once they are no larger than a cent.
    """
    settled: dict[tuple[str, str], Decimal] = {}
    for settlement in settlements:
        key = (settlement.from_user, settlement.to_user)
        settled[key] = settled.get(key, Decimal("0")) + settlement.amount

    adjusted: list[Balance] = []
    for balance in balances:
        remaining = max(Decimal("0"), balance.amount - settled.get((balance.from_user, balance.to_user), Decimal("0")))
        if remaining > EPSILON:
            adjusted.append(Balance(from_user=balance.from_user, to_user=balance.to_user, amount=remaining))
    return adjusted


def _in_group(group_id: Optional[str], record_group: Optional[str]) -> bool:
    return group_id is None or record_group == group_id


def summarize_user_balances(
    user_id: str,
    splits: Sequence[ExpenseSplit],
    settlements: Sequence[Settlement],
    group_id: Optional[str] = None,
) -> UserBalances:
    relevant_splits = [s for s in splits if s.has_participant(user_id) and _in_group(group_id, s.group_id)]
    relevant_settlements = [s for s in settlements if s.involves(user_id) and _in_group(group_id, s.group_id)]

    balances = apply_settlements(calculate_balances(relevant_splits), relevant_settlements)

    you_owe = [b for b in balances if b.from_user == user_id]
    you_are_owed = [b for b in balances if b.to_user == user_id]
    net = sum((b.amount for b in you_are_owed), Decimal("0")) - sum((b.amount for b in you_owe), Decimal("0"))

    get_logger(__name__).info(
        "balances.summarized",
        user_id=user_id,
        group_id=group_id,
        splits=len(relevant_splits),
        settlements=len(relevant_settlements),
    )
    return UserBalances(user_id=user_id, you_owe=you_owe, you_are_owed=you_are_owed, net_balance=round2(net))


def settlement_history(
    user_id: str,
    settlements: Iterable[Settlement],
    group_id: Optional[str] = None,
) -> list[Settlement]:
    history = [s for s in settlements if s.involves(user_id) and _in_group(group_id, s.group_id)]
    history.sort(key=lambda s: s.settled_at, reverse=True)
    return history
