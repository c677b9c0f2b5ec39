"""Checks applied to public donation submissions before they are stored."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any
from urllib.parse import urlparse

from .records import PAYMENT_METHODS, to_decimal

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
MESSAGE_MAX_LENGTH = 500
MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("99999.99")

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def validate_donation(
    user_name: str | None,
    amount: Any,
    payment_method: str | None,
    user_email: str | None = None,
    user_url: str | None = None,
    user_message: str | None = None,
) -> list[str]:
    errors: list[str] = []

    if not user_name or not isinstance(user_name, str):
        errors.append("Please enter a valid name.")
    elif len(user_name) > NAME_MAX_LENGTH:
        errors.append(f"Name must be less than {NAME_MAX_LENGTH} characters.")
    elif len(user_name) < NAME_MIN_LENGTH:
        errors.append(f"Name must be at least {NAME_MIN_LENGTH} characters.")

    if user_email and not _EMAIL_PATTERN.match(user_email):
        errors.append("Please enter a valid email address.")

    if user_url and not _valid_url(user_url):
        errors.append("Please enter a valid URL.")

    if user_message and len(user_message) > MESSAGE_MAX_LENGTH:
        errors.append(f"Message must be less than {MESSAGE_MAX_LENGTH} characters.")

    try:
        parsed_amount = to_decimal(amount)
    except ValueError:
        errors.append("Please enter a valid amount.")
    else:
        if parsed_amount < MIN_AMOUNT:
            errors.append(f"Minimum donation is {MIN_AMOUNT}.")
        elif parsed_amount > MAX_AMOUNT:
            errors.append(f"Maximum donation is {MAX_AMOUNT}.")

    if payment_method not in PAYMENT_METHODS:
        errors.append("Please select a valid payment method.")

    return errors
