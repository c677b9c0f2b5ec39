"""Collapse donation records into merged donor profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from .graph import build_identity_graph, connected_groups
from .records import DonationRecord, isoformat_utc, parse_timestamp, to_decimal

logger = logging.getLogger(__name__)

MERGED_ID_PREFIX = "merged-"


@dataclass(frozen=True)
class MergedDonor:
    """One logical donor built from every record linked to it.

    ``id`` follows the newest donation in the group, so it changes whenever a
    new donation joins. Links that store it can go stale.
    """

    id: str
    user_name: str
    user_email: str | None
    user_url: str | None
    total_amount: Decimal
    donation_count: int
    last_donation_at: str
    donations: tuple[DonationRecord, ...]

    @property
    def latest(self) -> DonationRecord:
        return self.donations[0]


def _newest_first_key(record: DonationRecord) -> tuple:
    return (parse_timestamp(record.created_at), record.id)


def _first_present(records: Sequence[DonationRecord], field_name: str) -> str | None:
    for record in records:
        value = getattr(record, field_name)
        if value and value.strip():
            return value
    return None


def aggregate_group(group: Sequence[DonationRecord]) -> MergedDonor:
    ordered = tuple(sorted(group, key=_newest_first_key, reverse=True))
    latest = ordered[0]
    total = sum((to_decimal(record.amount) for record in ordered), Decimal("0"))

    return MergedDonor(
        id=f"{MERGED_ID_PREFIX}{latest.id}",
        user_name=latest.user_name,
        user_email=_first_present(ordered, "user_email"),
        user_url=_first_present(ordered, "user_url"),
        total_amount=total,
        donation_count=len(ordered),
        last_donation_at=isoformat_utc(latest.created_at),
        donations=ordered,
    )


def merge_donors(records: Iterable[DonationRecord]) -> list[MergedDonor]:
    """Group donation records into donors linked by shared name or email.

    Callers must drop rejected donations first. The result follows component
    discovery order; use :func:`sort_donors` for a display order.
    """

    records = list(records)
    graph = build_identity_graph(records)
    donors = [aggregate_group(group) for group in connected_groups(graph)]
    logger.debug(
        "Merged %d donations across %d identity keys into %d donors",
        len(records),
        graph.key_count,
        len(donors),
    )
    return donors


_SORT_FIELDS = {
    "total_amount": lambda donor: (donor.total_amount, donor.last_donation_at),
    "last_donation_at": lambda donor: (donor.last_donation_at, donor.latest.id),
    "donation_count": lambda donor: (donor.donation_count, donor.total_amount),
}


def sort_donors(donors: Iterable[MergedDonor], by: str = "total_amount") -> list[MergedDonor]:
    try:
        sort_key = _SORT_FIELDS[by]
    except KeyError:
        raise ValueError(f"Cannot sort donors by {by!r}.") from None
    return sorted(donors, key=sort_key, reverse=True)
