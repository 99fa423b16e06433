from datetime import datetime, timedelta, timezone
from decimal import Decimal

from projectsplit.models import ExpenseSplit, Settlement, SplitParticipant, SplitType
from projectsplit.schemas import SettlementIn
from projectsplit.services.balances import apply_settlements, settlement_history, summarize_user_balances
from projectsplit.services.expenses import record_settlement
from projectsplit.services.settlement import Balance


def dinner(group_id=None):
    return ExpenseSplit(
        expense_id="dinner",
        total_amount=Decimal("90"),
        split_type=SplitType.EQUAL,
        participants=[
            SplitParticipant(user_id="B", amount=Decimal("30")),
            SplitParticipant(user_id="C", amount=Decimal("30")),
            SplitParticipant(user_id="A", amount=Decimal("30")),
        ],
        paid_by="A",
        group_id=group_id,
    )


def payment(from_user, to_user, amount, group_id=None, settled_at=None):
    return Settlement(
        from_user=from_user,
        to_user=to_user,
        amount=Decimal(str(amount)),
        group_id=group_id,
        settled_at=settled_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_apply_settlements_partial():
    balances = [Balance("B", "A", Decimal("30.00")), Balance("C", "A", Decimal("30.00"))]
    adjusted = apply_settlements(balances, [payment("B", "A", 20)])
    assert adjusted == [Balance("B", "A", Decimal("10.00")), Balance("C", "A", Decimal("30.00"))]


def test_apply_settlements_clamps_overpayment():
    adjusted = apply_settlements([Balance("B", "A", Decimal("30.00"))], [payment("B", "A", 25), payment("B", "A", 25)])
    assert adjusted == []


def test_apply_settlements_ignores_reverse_direction():
    adjusted = apply_settlements([Balance("B", "A", Decimal("30.00"))], [payment("A", "B", 30)])
    assert adjusted == [Balance("B", "A", Decimal("30.00"))]


def test_apply_settlements_drops_cent_remainder():
    adjusted = apply_settlements([Balance("B", "A", Decimal("30.00"))], [payment("B", "A", "29.99")])
    assert adjusted == []


def test_summary_for_creditor():
    summary = summarize_user_balances("A", [dinner()], [payment("B", "A", 20)])

    assert summary.you_owe == []
    assert summary.you_are_owed == [Balance("B", "A", Decimal("10.00")), Balance("C", "A", Decimal("30.00"))]
    assert summary.net_balance == Decimal("40.00")


def test_summary_for_debtor_never_flips_sign():
    summary = summarize_user_balances("B", [dinner()], [payment("B", "A", 50)])

    assert summary.you_owe == []
    assert summary.you_are_owed == []
    assert summary.net_balance == Decimal("0.00")


def test_summary_only_uses_splits_with_user():
    other = ExpenseSplit(
        expense_id="taxi",
        total_amount=Decimal("20"),
        split_type=SplitType.EXACT,
        participants=[SplitParticipant(user_id="D", amount=Decimal("20"))],
        paid_by="C",
    )
    summary = summarize_user_balances("B", [dinner(), other], [])
    assert summary.you_owe == [Balance("B", "A", Decimal("30.00"))]
    assert summary.net_balance == Decimal("-30.00")


def test_summary_group_scope():
    splits = [dinner(group_id="trip"), dinner(group_id="office")]
    settlements = [payment("C", "A", 30, group_id="office")]

    trip = summarize_user_balances("C", splits, settlements, group_id="trip")
    office = summarize_user_balances("C", splits, settlements, group_id="office")
    everything = summarize_user_balances("C", splits, settlements)

    assert trip.net_balance == Decimal("-30.00")
    assert office.net_balance == Decimal("0.00")
    assert everything.net_balance == Decimal("-30.00")


def test_settlement_history_newest_first():
    start = datetime(2024, 5, 1, tzinfo=timezone.utc)
    older = payment("B", "A", 5, settled_at=start)
    newer = payment("A", "C", 7, settled_at=start + timedelta(days=2))
    unrelated = payment("C", "D", 9, settled_at=start + timedelta(days=5))

    assert settlement_history("A", [older, unrelated, newer]) == [newer, older]
    assert settlement_history("A", [older, newer], group_id="trip") == []


def test_settlement_history_mixes_stored_and_new_timestamps():
    stored = SettlementIn.model_validate(
        {"fromUser": "B", "toUser": "A", "amount": 5, "method": "cash", "settledAt": "2024-01-01T10:00:00"}
    ).to_record()
    recorded = record_settlement("A", "C", 7, "upi")

    assert stored.settled_at.tzinfo is not None
    assert settlement_history("A", [stored, recorded]) == [recorded, stored]
