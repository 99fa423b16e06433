from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError as SchemaError

from projectsplit.config import get_settings
from projectsplit.errors import ValidationError
from projectsplit.logging import configure_logging, get_logger
from projectsplit.models import SplitType
from projectsplit.schemas import ExpenseSplitIn, SettlementIn, UserBalancesOut
from projectsplit.services.balances import summarize_user_balances
from projectsplit.services.split import ParticipantInput, calculate_splits

STRATEGY_FIELDS = {
    SplitType.EXACT: "amount",
    SplitType.PERCENTAGE: "percentage",
    SplitType.SHARES: "shares",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="projectsplit", description="Expense splitting and balances")
    commands = parser.add_subparsers(dest="command", required=True)

    balances = commands.add_parser("balances", help="show who a user owes and who owes them")
    balances.add_argument("file", type=Path, help='JSON document with "splits" and "settlements"')
    balances.add_argument("--user", required=True)
    balances.add_argument("--group")

    split = commands.add_parser("split", help="allocate an amount between participants")
    split.add_argument("--type", default=SplitType.EQUAL.value, choices=[t.value for t in SplitType])
    split.add_argument("--total", required=True)
    split.add_argument("participants", nargs="+", help="NAME or NAME=VALUE")
    return parser


def parse_participant(token: str, split_type: SplitType) -> ParticipantInput:
    name, _, value = token.partition("=")
    field = STRATEGY_FIELDS.get(split_type)
    if field is None or not value:
        return ParticipantInput(user_id=name)
    return ParticipantInput(user_id=name, **{field: value})


def run_balances(path: Path, user_id: str, group_id: Optional[str]) -> str:
    document = json.loads(path.read_text(encoding="utf-8"))
    splits = [ExpenseSplitIn.model_validate(item).to_record() for item in document.get("splits", [])]
    settlements = [SettlementIn.model_validate(item).to_record() for item in document.get("settlements", [])]
    result = summarize_user_balances(user_id, splits, settlements, group_id=group_id)
    return UserBalancesOut.from_result(result).model_dump_json(by_alias=True, indent=2)


def run_split(split_type: str, total: str, tokens: Sequence[str]) -> str:
    kind = SplitType(split_type)
    participants = [parse_participant(token, kind) for token in tokens]
    lines = calculate_splits(total, kind, participants)
    return json.dumps([{"userId": line.user_id, "amount": float(line.amount)} for line in lines], indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging(get_settings())
    log = get_logger(__name__)
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "balances":
            output = run_balances(args.file, args.user, args.group)
        else:
            output = run_split(args.type, args.total, args.participants)
    except (ValidationError, SchemaError, json.JSONDecodeError, OSError) as exc:
        log.warning("cli.invalid_input", command=args.command, error=str(exc))
        parser.exit(2, f"error: {exc}\n")

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
