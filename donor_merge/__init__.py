"""Donor identity resolution for the donation wall app."""

from .merge import MergedDonor, aggregate_group, merge_donors, sort_donors
from .records import (
    DonationRecord,
    donation_from_row,
    mask_contact,
    normalize_email_input,
)
from .store import DonationStore
from .views import donor_profile, find_donor, format_amount, public_donor_summary

__all__ = [
    "DonationRecord",
    "DonationStore",
    "MergedDonor",
    "aggregate_group",
    "donation_from_row",
    "donor_profile",
    "find_donor",
    "format_amount",
    "mask_contact",
    "merge_donors",
    "normalize_email_input",
    "public_donor_summary",
    "sort_donors",
]
