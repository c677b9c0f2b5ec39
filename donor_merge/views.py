"""Response shapes built from merged donors for the public pages."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable
from urllib.parse import unquote

from .graph import normalize_identity
from .merge import MergedDonor
from .records import DonationRecord, isoformat_utc


def format_amount(value: Decimal) -> str:
    return f"{value:,.2f}"


def _json_amount(value: Decimal) -> float:
    return float(value)


def public_donor_summary(donor: MergedDonor) -> dict[str, Any]:
    latest = donor.latest
    return {
        "id": donor.id,
        "user_name": donor.user_name,
        "user_url": donor.user_url,
        "amount": _json_amount(donor.total_amount),
        "payment_method": latest.payment_method,
        "user_message": latest.user_message,
        "created_at": donor.last_donation_at,
        "status": latest.status,
        "donation_count": donor.donation_count,
    }


def _history_entry(record: DonationRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_name": record.user_name,
        "user_url": record.user_url,
        "amount": _json_amount(record.amount),
        "payment_method": record.payment_method,
        "user_message": record.user_message,
        "created_at": isoformat_utc(record.created_at),
        "status": record.status,
        "reply_content": record.reply_content,
        "reply_at": isoformat_utc(record.reply_at) if record.reply_at else None,
    }


def donation_history(donor: MergedDonor) -> list[dict[str, Any]]:
    return [_history_entry(record) for record in donor.donations]


def donor_profile(donor: MergedDonor) -> dict[str, Any]:
    return {
        "donor": {
            "id": donor.id,
            "user_name": donor.user_name,
            "user_url": donor.user_url,
            "total_amount": _json_amount(donor.total_amount),
            "donation_count": donor.donation_count,
            "last_donation_at": donor.last_donation_at,
        },
        "history": donation_history(donor),
    }


def find_donor(
    donors: Iterable[MergedDonor],
    donor_id: str,
    case_sensitive: bool = True,
) -> MergedDonor | None:
    """Look a donor up by its ``merged-<id>`` value or by display name.

    An ``id`` match anywhere in ``donors`` wins over a name match. Names
    arrive URL-encoded from path parameters. With
    ``case_sensitive=False`` names are compared after trimming and
    lower-casing, the same way identity keys are built.
    """

    donors = list(donors)
    for donor in donors:
        if donor.id == donor_id:
            return donor

    decoded = unquote(donor_id)
    for donor in donors:
        if case_sensitive:
            if donor.user_name == decoded:
                return donor
        elif normalize_identity(donor.user_name) == normalize_identity(decoded):
            return donor
    return None
