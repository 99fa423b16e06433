"""Wire schemas for stored split/settlement documents and balance results."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from projectsplit.models import ExpenseSplit, Settlement, SettlementMethod, SplitParticipant, SplitType
from projectsplit.services.balances import UserBalances
from projectsplit.services.settlement import Balance
from projectsplit.utils.parse import as_utc


def _reference_id(value: Any) -> Any:
    # populated references arrive as {"_id": ..., "name": ...}
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SplitParticipantIn(_Schema):
    user_id: str = Field(..., alias="userId", min_length=1)
    amount: Decimal = Field(Decimal("0"), ge=0)
    percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    shares: Optional[Decimal] = Field(None, ge=0)
    paid: bool = False

    @field_validator("user_id", mode="before")
    @classmethod
    def unwrap_user(cls, value: Any) -> Any:
        return _reference_id(value)

    @field_validator("amount", mode="before")
    @classmethod
    def default_amount(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    def to_record(self) -> SplitParticipant:
        return SplitParticipant(
            user_id=str(self.user_id),
            amount=self.amount,
            percentage=self.percentage,
            shares=self.shares,
            paid=self.paid,
        )


class ExpenseSplitIn(_Schema):
    expense_id: str = Field("", alias="expenseId")
    paid_by: Optional[str] = Field(None, alias="paidBy")
    total_amount: Decimal = Field(..., alias="totalAmount", ge=0)
    split_type: SplitType = Field(SplitType.EQUAL, alias="splitType")
    participants: list[SplitParticipantIn] = Field(default_factory=list)
    group_id: Optional[str] = Field(None, alias="groupId")

    @field_validator("expense_id", "paid_by", "group_id", mode="before")
    @classmethod
    def unwrap_refs(cls, value: Any) -> Any:
        return _reference_id(value)

    def to_record(self) -> ExpenseSplit:
        return ExpenseSplit(
            expense_id=self.expense_id,
            total_amount=self.total_amount,
            split_type=self.split_type,
            participants=[p.to_record() for p in self.participants],
            paid_by=self.paid_by or None,
            group_id=self.group_id or None,
        )


class SettlementIn(_Schema):
    from_user: str = Field(..., alias="fromUser", min_length=1)
    to_user: str = Field(..., alias="toUser", min_length=1)
    amount: Decimal = Field(..., gt=0)
    method: SettlementMethod = SettlementMethod.OTHER
    transaction_ref: Optional[str] = Field(None, alias="transactionRef")
    notes: Optional[str] = None
    group_id: Optional[str] = Field(None, alias="groupId")
    settled_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="settledAt")

    @field_validator("from_user", "to_user", "group_id", mode="before")
    @classmethod
    def unwrap_refs(cls, value: Any) -> Any:
        return _reference_id(value)

    @field_validator("settled_at")
    @classmethod
    def settled_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def to_record(self) -> Settlement:
        return Settlement(
            from_user=self.from_user,
            to_user=self.to_user,
            amount=self.amount,
            method=self.method,
            transaction_ref=self.transaction_ref,
            notes=self.notes,
            group_id=self.group_id or None,
            settled_at=self.settled_at,
        )


class BalanceOut(_Schema):
    from_user_id: str = Field(..., alias="fromUserId")
    to_user_id: str = Field(..., alias="toUserId")
    amount: Decimal

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_balance(cls, balance: Balance) -> "BalanceOut":
        return cls(from_user_id=balance.from_user, to_user_id=balance.to_user, amount=balance.amount)


class UserBalancesOut(_Schema):
    you_owe: list[BalanceOut] = Field(default_factory=list, alias="youOwe")
    you_are_owed: list[BalanceOut] = Field(default_factory=list, alias="youAreOwed")
    net_balance: Decimal = Field(Decimal("0"), alias="netBalance")

    @field_serializer("net_balance")
    def serialize_net_balance(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_result(cls, result: UserBalances) -> "UserBalancesOut":
        return cls(
            you_owe=[BalanceOut.from_balance(b) for b in result.you_owe],
            you_are_owed=[BalanceOut.from_balance(b) for b in result.you_are_owed],
            net_balance=result.net_balance,
        )
