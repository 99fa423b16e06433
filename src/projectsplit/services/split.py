from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from projectsplit.errors import ValidationError
from projectsplit.logging import get_logger
from projectsplit.models import SplitType
from projectsplit.utils.parse import Number, round2, to_decimal

PERCENTAGE_TOLERANCE = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

log = get_logger(__name__)


@dataclass(slots=True)
class ParticipantInput:
    user_id: str
    amount: Optional[Number] = None
    percentage: Optional[Number] = None
    shares: Optional[Number] = None


@dataclass(slots=True)
class CalculatedSplit:
    user_id: str
    amount: Decimal


def parse_split_type(value: SplitType | str) -> SplitType:
    if isinstance(value, SplitType):
        return value
    try:
        return SplitType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown split type: {value}") from exc


def calculate_splits(
    total_amount: Number,
    split_type: SplitType | str,
    participants: Sequence[ParticipantInput],
) -> list[CalculatedSplit]:
    """Compute what each participant owes for one expense.

    The result keeps the order and length of ``participants``. Every amount is
    rounded half-up to cents on its own, so for ``equal`` and ``percentage`` the
    lines may not add up to ``total_amount`` exactly; no remainder is moved
    around. ``exact`` amounts are taken as given and never checked against the
    total.
    """
    kind = parse_split_type(split_type)
    total = to_decimal(total_amount, "total_amount")
    if total <= 0:
        raise ValidationError("total_amount must be greater than zero")
    if not participants:
        raise ValidationError("Participants must not be empty")
    for participant in participants:
        if not participant.user_id:
            raise ValidationError("Participant identifier is required")

    if kind is SplitType.EQUAL:
        result = _equal_split(total, participants)
    elif kind is SplitType.PERCENTAGE:
        result = _percentage_split(total, participants)
    elif kind is SplitType.EXACT:
        result = _exact_split(participants)
    else:
        result = _shares_split(total, participants)

    log.debug("split.calculated", split_type=kind.value, participants=len(result))
    return result


def _check_non_negative(participants: Sequence[ParticipantInput], field: str, label: str) -> None:
    for participant in participants:
        raw = getattr(participant, field)
        if raw is not None and to_decimal(raw, field) < 0:
            raise ValidationError(f"{label} for {participant.user_id} must not be negative")


def _value(raw: Optional[Number], field: str) -> Decimal:
    return ZERO if raw is None else to_decimal(raw, field)


def _equal_split(total: Decimal, participants: Sequence[ParticipantInput]) -> list[CalculatedSplit]:
    per_person = total / len(participants)
    return [CalculatedSplit(user_id=p.user_id, amount=round2(per_person)) for p in participants]


def _percentage_split(total: Decimal, participants: Sequence[ParticipantInput]) -> list[CalculatedSplit]:
    total_percentage = sum((_value(p.percentage, "percentage") for p in participants), ZERO)
    if abs(total_percentage - HUNDRED) > PERCENTAGE_TOLERANCE:
        raise ValidationError(f"Percentages must sum to 100. Current total: {total_percentage}")
    for participant in participants:
        percentage = _value(participant.percentage, "percentage")
        if percentage < 0 or percentage > HUNDRED:
            raise ValidationError(f"Percentage for {participant.user_id} must be between 0 and 100")

    return [
        CalculatedSplit(
            user_id=p.user_id,
            amount=round2(total * _value(p.percentage, "percentage") / HUNDRED),
        )
        for p in participants
    ]


def _exact_split(participants: Sequence[ParticipantInput]) -> list[CalculatedSplit]:
    _check_non_negative(participants, "amount", "Amount")
    return [CalculatedSplit(user_id=p.user_id, amount=_value(p.amount, "amount")) for p in participants]


def _shares_split(total: Decimal, participants: Sequence[ParticipantInput]) -> list[CalculatedSplit]:
    _check_non_negative(participants, "shares", "Shares")
    total_shares = sum((_value(p.shares, "shares") for p in participants), ZERO)
    if total_shares == 0:
        raise ValidationError("Total shares must be greater than zero")

    # rounded once, after scaling the unrounded per-share value
    per_share = total / total_shares
    return [
        CalculatedSplit(user_id=p.user_id, amount=round2(per_share * _value(p.shares, "shares")))
        for p in participants
    ]
