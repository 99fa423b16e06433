from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from projectsplit.errors import ValidationError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def to_decimal(value: Number, field: str = "amount") -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # float goes through str so 0.1 stays 0.1
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"{field} must be a number") from exc
    if not result.is_finite():
        raise ValidationError(f"{field} must be a number")
    return result


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: Number, field: str = "amount") -> Decimal:
    """Parse a strictly positive money amount."""
    amount = to_decimal(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return amount


def sanitize_group_id(group_id: Optional[str]) -> Optional[str]:
    if group_id is None:
        return None
    cleaned = group_id.strip()
    return cleaned or None


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def as_utc(value: datetime) -> datetime:
    """Stored timestamps without an offset are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
