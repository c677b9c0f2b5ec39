"""Donation records as read from storage, plus value normalization helpers."""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

DONATION_STATUSES = ("pending", "confirmed", "rejected")
PAYMENT_METHODS = ("wechat", "alipay", "qq", "other")

_CENT = Decimal("0.01")
_QQ_NUMBER_PATTERN = re.compile(r"^\d{5,11}$")
_QQ_EMAIL_PATTERN = re.compile(r"^(\d{5,11})@(qq|vip)\.qq\.com$", re.IGNORECASE)


@dataclass(frozen=True)
class DonationRecord:
    id: int
    user_name: str
    amount: Decimal
    payment_method: str
    status: str
    created_at: datetime
    user_email: str | None = None
    user_url: str | None = None
    user_message: str | None = None
    reply_content: str | None = None
    reply_at: datetime | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def to_decimal(value: Any) -> Decimal:
    """Return ``value`` as an exact Decimal without rounding.

    Floats go through ``str`` first so ``0.1`` stays ``0.1`` rather than
    picking up binary noise.
    """

    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid donation amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid donation amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid donation amount: {value!r}")
    return amount


def parse_amount(value: Any) -> Decimal:
    """Return ``value`` as a Decimal rounded to two fractional digits."""

    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def cents_from_amount(amount: Decimal) -> int:
    return int(parse_amount(amount) * 100)


def amount_from_cents(cents: int) -> Decimal:
    return (Decimal(int(cents)) / 100).quantize(_CENT)


def parse_timestamp(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def isoformat_utc(value: datetime | str) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    moment = parse_timestamp(value).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def is_qq_number(value: str) -> bool:
    return bool(_QQ_NUMBER_PATTERN.match(value.strip()))


def normalize_email_input(value: str | None) -> str | None:
    """Normalize the contact field of a submission.

    A bare QQ account number is turned into its mailbox so the same account
    entered either way links to one donor.
    """

    cleaned = _clean(value)
    if cleaned is None:
        return None
    if is_qq_number(cleaned):
        return f"{cleaned}@qq.com"
    return cleaned.lower()


def mask_contact(value: str | None) -> str:
    cleaned = _clean(value)
    if cleaned is None:
        return ""

    qq_match = _QQ_EMAIL_PATTERN.match(cleaned)
    if qq_match:
        number = qq_match.group(1)
        masked = f"{number[:2]}{'*' * (len(number) - 4)}{number[-2:]}"
        return f"{masked}@{qq_match.group(2)}.qq.com"

    at_index = cleaned.find("@")
    if at_index == -1:
        at_index = len(cleaned)
    if at_index <= 2:
        return "*" * at_index + cleaned[at_index:]
    local_part = cleaned[:at_index]
    return f"{local_part[:2]}{'*' * (len(local_part) - 2)}{cleaned[at_index:]}"


def donation_from_row(row: sqlite3.Row | dict[str, Any]) -> DonationRecord:
    data = dict(row)
    if "amount_cents" in data and data["amount_cents"] is not None:
        amount = amount_from_cents(data["amount_cents"])
    else:
        amount = parse_amount(data.get("amount"))

    reply_at = data.get("reply_at")
    return DonationRecord(
        id=int(data["id"]),
        user_name=data["user_name"],
        amount=amount,
        payment_method=data.get("payment_method") or "other",
        status=data.get("status") or "pending",
        created_at=parse_timestamp(data["created_at"]),
        user_email=_clean(data.get("user_email")),
        user_url=_clean(data.get("user_url")),
        user_message=data.get("user_message"),
        reply_content=data.get("reply_content"),
        reply_at=parse_timestamp(reply_at) if reply_at else None,
    )
