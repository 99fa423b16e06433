from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from projectsplit.errors import ParticipantNotFoundError, ValidationError
from projectsplit.logging import get_logger
from projectsplit.models import ExpenseSplit, Settlement, SettlementMethod, SplitParticipant, SplitType
from projectsplit.services.identity import UserDirectory, resolve_identifier
from projectsplit.services.split import ParticipantInput, calculate_splits, parse_split_type
from projectsplit.utils.parse import Number, as_utc, clean_text, parse_amount, sanitize_group_id, to_decimal


async def create_split(
    directory: UserDirectory,
    *,
    expense_id: str,
    total_amount: Number,
    split_type: SplitType | str,
    participants: Sequence[ParticipantInput],
    paid_by: Optional[str] = None,
    group_id: Optional[str] = None,
) -> ExpenseSplit:
    log = get_logger(__name__)
    kind = parse_split_type(split_type)

    payer = await resolve_identifier(directory, paid_by) if paid_by else None
    resolved = [
        ParticipantInput(
            user_id=await resolve_identifier(directory, p.user_id),
            amount=p.amount,
            percentage=p.percentage,
            shares=p.shares,
        )
        for p in participants
    ]

    calculated = calculate_splits(total_amount, kind, resolved)

    entries = [
        SplitParticipant(
            user_id=line.user_id,
            amount=line.amount,
            percentage=to_decimal(p.percentage, "percentage") if p.percentage is not None else None,
            shares=to_decimal(p.shares, "shares") if p.shares is not None else None,
        )
        for p, line in zip(resolved, calculated)
    ]

    split = ExpenseSplit(
        expense_id=expense_id,
        total_amount=to_decimal(total_amount, "total_amount"),
        split_type=kind,
        participants=entries,
        paid_by=payer or None,
        group_id=sanitize_group_id(group_id),
    )
    log.info("split.created", expense_id=expense_id, split_type=kind.value, participants=len(entries))
    return split


def mark_participant_paid(split: ExpenseSplit, participant_id: str) -> ExpenseSplit:
    for participant in split.participants:
        if participant.user_id == participant_id:
            participant.paid = True
            get_logger(__name__).info("split.participant_paid", expense_id=split.expense_id, user_id=participant_id)
            return split
    raise ParticipantNotFoundError("Participant not found")


def record_settlement(
    from_user: str,
    to_user: str,
    amount: Number,
    method: SettlementMethod | str,
    transaction_ref: Optional[str] = None,
    notes: Optional[str] = None,
    group_id: Optional[str] = None,
    settled_at: Optional[datetime] = None,
) -> Settlement:
    if not to_user or not to_user.strip():
        raise ValidationError("Recipient is required")
    try:
        settlement_method = SettlementMethod(method)
    except ValueError as exc:
        raise ValidationError("Invalid payment method") from exc

    settlement = Settlement(
        from_user=from_user,
        to_user=to_user.strip(),
        amount=parse_amount(amount),
        method=settlement_method,
        transaction_ref=clean_text(transaction_ref),
        notes=clean_text(notes),
        group_id=sanitize_group_id(group_id),
        settled_at=as_utc(settled_at) if settled_at else datetime.now(timezone.utc),
    )
    get_logger(__name__).info(
        "settlement.recorded",
        from_user=settlement.from_user,
        to_user=settlement.to_user,
        method=settlement.method.value,
        group_id=settlement.group_id,
    )
    return settlement
