from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from donor_merge.merge import merge_donors
from donor_merge.records import DonationRecord
from donor_merge.views import donor_profile, find_donor, format_amount, public_donor_summary

BASE_TIME = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def _donors():  # type: ignore[no-untyped-def]
    records = [
        DonationRecord(
            id=3,
            user_name="Tom Smith",
            user_email="tom@qq.com",
            user_url="https://tom.example.org",
            user_message="Good luck!",
            amount=Decimal("3.00"),
            payment_method="alipay",
            status="pending",
            created_at=BASE_TIME + timedelta(days=2),
        ),
        DonationRecord(
            id=2,
            user_name="Tom",
            amount=Decimal("5.00"),
            payment_method="wechat",
            status="confirmed",
            created_at=BASE_TIME + timedelta(days=1),
            reply_content="Thanks Tom",
            reply_at=BASE_TIME + timedelta(days=1, hours=2),
        ),
        DonationRecord(
            id=1,
            user_name="tom",
            user_email="tom@qq.com",
            amount=Decimal("10.00"),
            payment_method="wechat",
            status="confirmed",
            created_at=BASE_TIME,
        ),
        DonationRecord(
            id=4,
            user_name="Jerry",
            amount=Decimal("7.25"),
            payment_method="qq",
            status="confirmed",
            created_at=BASE_TIME - timedelta(days=1),
        ),
    ]
    return merge_donors(records)


def test_public_summary_uses_latest_donation_details() -> None:
    donor = find_donor(_donors(), "merged-3")
    assert donor is not None

    summary = public_donor_summary(donor)

    assert summary == {
        "id": "merged-3",
        "user_name": "Tom Smith",
        "user_url": "https://tom.example.org",
        "amount": 18.0,
        "payment_method": "alipay",
        "user_message": "Good luck!",
        "created_at": "2026-03-03T09:30:00.000Z",
        "status": "pending",
        "donation_count": 3,
    }
    assert "user_email" not in summary


def test_donor_profile_lists_history_newest_first() -> None:
    donor = find_donor(_donors(), "merged-3")
    assert donor is not None

    profile = donor_profile(donor)

    assert profile["donor"]["total_amount"] == 18.0
    assert profile["donor"]["last_donation_at"] == "2026-03-03T09:30:00.000Z"
    assert [row["id"] for row in profile["history"]] == [3, 2, 1]
    assert profile["history"][1]["reply_content"] == "Thanks Tom"
    assert profile["history"][1]["reply_at"] == "2026-03-02T11:30:00.000Z"
    assert profile["history"][2]["reply_at"] is None


def test_find_donor_by_name_respects_case_mode() -> None:
    donors = _donors()

    assert find_donor(donors, "Tom%20Smith") is not None
    assert find_donor(donors, "tom smith") is None

    match = find_donor(donors, "tom smith", case_sensitive=False)
    assert match is not None
    assert match.id == "merged-3"


def test_find_donor_returns_none_for_stale_or_unknown_ids() -> None:
    donors = _donors()

    assert find_donor(donors, "merged-1") is None
    assert find_donor(donors, "Nobody") is None


def test_format_amount_uses_two_decimals() -> None:
    assert format_amount(Decimal("1234.5")) == "1,234.50"


def test_find_donor_prefers_id_over_matching_display_name() -> None:
    donors = merge_donors(
        [
            DonationRecord(
                id=9,
                user_name="merged-7",
                amount=Decimal("1.00"),
                payment_method="other",
                status="confirmed",
                created_at=BASE_TIME + timedelta(days=1),
            ),
            DonationRecord(
                id=7,
                user_name="Ada",
                amount=Decimal("2.00"),
                payment_method="qq",
                status="confirmed",
                created_at=BASE_TIME,
            ),
        ]
    )
    assert [donor.id for donor in donors] == ["merged-9", "merged-7"]

    match = find_donor(donors, "merged-7")
    assert match is not None
    assert match.user_name == "Ada"

    match = find_donor(donors, "merged-7", case_sensitive=False)
    assert match is not None
    assert match.user_name == "Ada"
