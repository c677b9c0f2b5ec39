"""SQLite-backed persistence layer for public donations."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .merge import MergedDonor, merge_donors
from .records import (
    _CENT,
    DonationRecord,
    _clean,
    amount_from_cents,
    cents_from_amount,
    donation_from_row,
    isoformat_utc,
    normalize_email_input,
)
from .validation import validate_donation

logger = logging.getLogger(__name__)


def _lastrowid(cursor: sqlite3.Cursor) -> int:
    row_id = cursor.lastrowid
    if row_id is None:
        raise RuntimeError("Insert did not return a row id.")
    return row_id


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DonationStore:
    """Persistence operations for donations, their review status, and replies."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def init_db(self) -> None:
        with self._connect() as connection:
            connection.executescript(
                """
                CREATE TABLE IF NOT EXISTS donations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_name TEXT NOT NULL,
                    user_email TEXT,
                    user_url TEXT,
                    user_message TEXT,
                    amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
                    payment_method TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'confirmed', 'rejected')),
                    created_at TEXT NOT NULL,
                    confirmed_at TEXT,
                    reply_content TEXT,
                    reply_at TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_donations_created ON donations (created_at);
                CREATE INDEX IF NOT EXISTS idx_donations_status ON donations (status);
                """
            )

    def add_donation(
        self,
        user_name: str,
        amount: Any,
        payment_method: str,
        user_email: str | None = None,
        user_url: str | None = None,
        user_message: str | None = None,
        created_at: datetime | None = None,
    ) -> int:
        clean_name = _clean(user_name)
        clean_email = normalize_email_input(user_email)
        clean_url = _clean(user_url)
        clean_message = _clean(user_message)

        errors = validate_donation(
            user_name=clean_name,
            amount=amount,
            payment_method=payment_method,
            user_email=clean_email,
            user_url=clean_url,
            user_message=clean_message,
        )
        if errors:
            raise ValueError(" ".join(errors))

        with self._connect() as connection:
            cursor = connection.execute(
                """
                INSERT INTO donations (
                    user_name,
                    user_email,
                    user_url,
                    user_message,
                    amount_cents,
                    payment_method,
                    created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    clean_name,
                    clean_email,
                    clean_url,
                    clean_message,
                    cents_from_amount(amount),
                    payment_method,
                    isoformat_utc(created_at or _utc_now()),
                ),
            )
            return _lastrowid(cursor)

    def _update_donation(self, donation_id: int, assignments: str, parameters: tuple[Any, ...]) -> None:
        with self._connect() as connection:
            cursor = connection.execute(
                f"UPDATE donations SET {assignments} WHERE id = ?",
                (*parameters, donation_id),
            )
            if cursor.rowcount == 0:
                raise LookupError(f"Donation #{donation_id} does not exist.")

    def confirm_donation(self, donation_id: int) -> None:
        self._update_donation(
            donation_id,
            "status = 'confirmed', confirmed_at = ?",
            (isoformat_utc(_utc_now()),),
        )
        logger.info("Donation #%d confirmed", donation_id)

    def reject_donation(self, donation_id: int) -> None:
        self._update_donation(donation_id, "status = 'rejected'", ())
        logger.info("Donation #%d rejected", donation_id)

    def reply_to_donation(self, donation_id: int, reply_content: str) -> None:
        clean_reply = _clean(reply_content)
        if not clean_reply:
            raise ValueError("Reply content is required.")
        self._update_donation(
            donation_id,
            "reply_content = ?, reply_at = ?",
            (clean_reply, isoformat_utc(_utc_now())),
        )
        logger.info("Reply saved for donation #%d", donation_id)

    def get_donation(self, donation_id: int) -> DonationRecord | None:
        with self._connect() as connection:
            row = connection.execute(
                "SELECT * FROM donations WHERE id = ?",
                (donation_id,),
            ).fetchone()
        return donation_from_row(row) if row is not None else None

    def list_donations(self, status: str | None = None) -> list[DonationRecord]:
        where_sql = ""
        parameters: list[Any] = []
        if status is not None:
            where_sql = "WHERE status = ?"
            parameters.append(status)

        query = f"SELECT * FROM donations {where_sql} ORDER BY created_at DESC, id DESC"
        with self._connect() as connection:
            rows = connection.execute(query, parameters).fetchall()
        return [donation_from_row(row) for row in rows]

    def mergeable_donations(self) -> list[DonationRecord]:
        """Return every donation that may count toward a donor, newest first."""

        with self._connect() as connection:
            rows = connection.execute(
                """
                SELECT *
                FROM donations
                WHERE status != 'rejected'
                ORDER BY created_at DESC, id DESC
                """
            ).fetchall()
        return [donation_from_row(row) for row in rows]

    def merged_donors(self) -> list[MergedDonor]:
        return merge_donors(self.mergeable_donations())

    def donation_stats(self) -> dict[str, Any]:
        with self._connect() as connection:
            row = connection.execute(
                """
                SELECT
                    COUNT(*) AS total_count,
                    COUNT(CASE WHEN status = 'confirmed' THEN 1 END) AS confirmed_count,
                    COUNT(CASE WHEN status = 'pending' THEN 1 END) AS pending_count,
                    COALESCE(SUM(CASE WHEN status = 'confirmed' THEN amount_cents ELSE 0 END), 0)
                        AS confirmed_cents,
                    COALESCE(SUM(amount_cents), 0) AS total_cents
                FROM donations
                """
            ).fetchone()

        confirmed_count = int(row["confirmed_count"])
        confirmed_total = amount_from_cents(row["confirmed_cents"])
        average = amount_from_cents(0)
        if confirmed_count > 0:
            average = (confirmed_total / confirmed_count).quantize(_CENT)

        return {
            "total_count": int(row["total_count"]),
            "confirmed_count": confirmed_count,
            "pending_count": int(row["pending_count"]),
            "confirmed_total": confirmed_total,
            "total_amount": amount_from_cents(row["total_cents"]),
            "average_donation": average,
        }
