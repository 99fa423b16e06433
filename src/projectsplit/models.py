from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


class SplitType(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    EXACT = "exact"
    SHARES = "shares"


class SettlementMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"
    WALLET = "wallet"
    OTHER = "other"


@dataclass(slots=True)
class SplitParticipant:
    user_id: str
    amount: Decimal = Decimal("0")
    percentage: Optional[Decimal] = None
    shares: Optional[Decimal] = None
    paid: bool = False


@dataclass(slots=True)
class ExpenseSplit:
    expense_id: str
    total_amount: Decimal
    split_type: SplitType
    participants: list[SplitParticipant]
    paid_by: Optional[str] = None
    group_id: Optional[str] = None

    def has_participant(self, user_id: str) -> bool:
        return any(p.user_id == user_id for p in self.participants)


@dataclass(slots=True)
class Settlement:
    from_user: str
    to_user: str
    amount: Decimal
    method: SettlementMethod = SettlementMethod.OTHER
    transaction_ref: Optional[str] = None
    notes: Optional[str] = None
    group_id: Optional[str] = None
    settled_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user, self.to_user)
