"""Streamlit app for the public donation wall and its admin review queue."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pandas as pd
import streamlit as st

from donor_merge import (
    DonationStore,
    MergedDonor,
    donor_profile,
    find_donor,
    format_amount,
    mask_contact,
    public_donor_summary,
    sort_donors,
)
from donor_merge.records import PAYMENT_METHODS, DonationRecord

PAYMENT_METHOD_LABELS = {
    "wechat": "WeChat Pay",
    "alipay": "Alipay",
    "qq": "QQ Wallet",
    "other": "Other",
}
WALL_SORT_OPTIONS = {
    "Latest donation": "last_donation_at",
    "Total given": "total_amount",
    "Number of donations": "donation_count",
}

DB_PATH = Path(".data/donations.db")
STORE = DonationStore(DB_PATH)


def _inject_styles() -> None:
    st.markdown(
        """
        <style>
          :root {
            --wall-accent: #c2410c;
            --wall-accent-soft: #fff7ed;
            --wall-text: #1c1917;
            --wall-muted: #57534e;
            --wall-border: #e7e5e4;
          }

          .stApp {
            background: linear-gradient(170deg, #fafaf9 0%, var(--wall-accent-soft) 100%);
            color: var(--wall-text);
          }

          .wall-hero {
            background: linear-gradient(124deg, #9a3412, var(--wall-accent));
            border-radius: 18px;
            color: #ffffff;
            padding: 1.2rem 1.25rem;
            margin-bottom: 1rem;
          }

          .wall-hero h1,
          .wall-hero p {
            color: #ffffff !important;
            margin: 0;
          }

          .wall-hero p {
            margin-top: 0.5rem;
            opacity: 0.93;
          }

          .metric-card {
            border-radius: 14px;
            border: 1px solid var(--wall-border);
            background: #ffffff;
            padding: 0.75rem 0.8rem;
            min-height: 100px;
          }

          .metric-label {
            margin: 0;
            color: var(--wall-muted);
            font-weight: 600;
            font-size: 0.84rem;
          }

          .metric-value {
            margin: 0.3rem 0 0;
            color: #9a3412;
            font-size: 1.45rem;
            line-height: 1.1;
          }

          .metric-sub {
            margin: 0.4rem 0 0;
            color: var(--wall-muted);
            font-size: 0.82rem;
          }

          .section-note {
            color: var(--wall-muted);
            margin-top: -0.2rem;
            margin-bottom: 0.8rem;
          }
        </style>
        """,
        unsafe_allow_html=True,
    )


def _render_metric_card(title: str, value: str, subtitle: str) -> None:
    st.markdown(
        f"""
        <div class="metric-card">
          <p class="metric-label">{title}</p>
          <p class="metric-value">{value}</p>
          <p class="metric-sub">{subtitle}</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def _hero() -> None:
    st.markdown(
        """
        <div class="wall-hero">
          <h1>Supporter Wall</h1>
          <p>Every gift counts. Donations from the same supporter are grouped by name and contact.</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def _table_or_info(frame: pd.DataFrame, empty_message: str) -> None:
    if frame.empty:
        st.info(empty_message)
        return
    st.dataframe(frame, use_container_width=True, hide_index=True)


def _method_label(method: str) -> str:
    return PAYMENT_METHOD_LABELS.get(method, method)


def _donor_option_label(donor: MergedDonor) -> str:
    return f"{donor.user_name} ({donor.donation_count} gifts, {format_amount(donor.total_amount)})"


def _pending_option_label(record: DonationRecord) -> str:
    return f"#{record.id} {record.user_name} {format_amount(record.amount)} ({_method_label(record.payment_method)})"


def render_donate_tab() -> None:
    st.markdown("### Make a Donation")
    st.markdown(
        "<p class='section-note'>Use the same name or email as before and your gifts appear together on the wall.</p>",
        unsafe_allow_html=True,
    )

    with st.form("donation-create-form", clear_on_submit=True):
        user_name = st.text_input("Name *")
        user_email = st.text_input("Email or QQ number")
        user_url = st.text_input("Website")
        amount = st.number_input("Amount *", min_value=0.01, max_value=99999.99, value=10.0, step=1.0)
        payment_method = st.selectbox("Payment Method", PAYMENT_METHODS, format_func=_method_label)
        user_message = st.text_area("Message", height=100, max_chars=500)

        submit = st.form_submit_button("Donate", use_container_width=True)
        if submit:
            try:
                STORE.add_donation(
                    user_name=user_name,
                    amount=Decimal(str(amount)),
                    payment_method=payment_method,
                    user_email=user_email,
                    user_url=user_url,
                    user_message=user_message,
                )
                st.success("Thank you for your donation! It will appear once confirmed.")
            except ValueError as exc:
                st.error(str(exc))


def render_wall_tab(donors: list[MergedDonor]) -> None:
    stats = STORE.donation_stats()
    metric_columns = st.columns(3)
    with metric_columns[0]:
        _render_metric_card("Supporters", str(len(donors)), "Distinct donors after merging")
    with metric_columns[1]:
        _render_metric_card(
            "Confirmed",
            format_amount(stats["confirmed_total"]),
            f"{stats['confirmed_count']} confirmed donations",
        )
    with metric_columns[2]:
        _render_metric_card(
            "Average Gift",
            format_amount(stats["average_donation"]),
            f"{stats['pending_count']} awaiting review",
        )

    st.markdown("### Supporters")
    sort_label = st.selectbox("Sort by", list(WALL_SORT_OPTIONS.keys()))
    ordered = sort_donors(donors, by=WALL_SORT_OPTIONS[sort_label])

    summaries = [public_donor_summary(donor) for donor in ordered]
    wall_df = pd.DataFrame(
        [
            {
                "Name": summary["user_name"],
                "Total": f"{summary['amount']:,.2f}",
                "Donations": summary["donation_count"],
                "Latest Method": _method_label(summary["payment_method"]),
                "Latest Message": summary["user_message"] or "-",
                "Last Donation": summary["created_at"],
                "Website": summary["user_url"] or "-",
            }
            for summary in summaries
        ]
    )
    _table_or_info(wall_df, "No donations yet. Be the first supporter!")


def render_profile_tab(donors: list[MergedDonor]) -> None:
    st.markdown("### Donor Profile")
    if not donors:
        st.info("No supporters to show yet.")
        return

    lookup = st.text_input("Find by name or profile id", placeholder="e.g. Tom or merged-12").strip()
    selected: MergedDonor | None = None
    if lookup:
        selected = find_donor(donors, lookup, case_sensitive=False)
        if selected is None:
            st.warning("No supporter matched that name or id.")
            return
    else:
        ordered = sort_donors(donors, by="last_donation_at")
        donor_map = {donor.id: donor for donor in ordered}
        selected_id = st.selectbox(
            "Supporter",
            options=list(donor_map.keys()),
            format_func=lambda donor_id: _donor_option_label(donor_map[donor_id]),
        )
        selected = donor_map[selected_id]

    profile = donor_profile(selected)
    profile_cols = st.columns(3)
    with profile_cols[0]:
        st.metric("Total Given", format_amount(selected.total_amount))
    with profile_cols[1]:
        st.metric("Donations", str(selected.donation_count))
    with profile_cols[2]:
        st.metric("Last Donation", profile["donor"]["last_donation_at"])

    st.caption(
        f"Profile id {selected.id} follows the latest donation and changes when a new gift is merged in. "
        f"Contact: {mask_contact(selected.user_email) or '-'}"
    )

    history_df = pd.DataFrame(
        [
            {
                "Date": row["created_at"],
                "Name Used": row["user_name"],
                "Amount": f"{row['amount']:,.2f}",
                "Method": _method_label(row["payment_method"]),
                "Status": row["status"],
                "Message": row["user_message"] or "-",
                "Reply": row["reply_content"] or "-",
            }
            for row in profile["history"]
        ]
    )
    _table_or_info(history_df, "No donations for this supporter.")


def render_admin_tab() -> None:
    st.markdown("### Review Queue")
    pending = STORE.list_donations(status="pending")
    if not pending:
        st.info("No donations waiting for review.")
    else:
        pending_map = {record.id: record for record in pending}
        selected_id = st.selectbox(
            "Pending Donation",
            options=list(pending_map.keys()),
            format_func=lambda donation_id: _pending_option_label(pending_map[donation_id]),
        )
        confirm_col, reject_col = st.columns(2)
        with confirm_col:
            if st.button("Confirm", key="admin-confirm", use_container_width=True):
                STORE.confirm_donation(selected_id)
                st.rerun()
        with reject_col:
            if st.button("Reject", key="admin-reject", use_container_width=True):
                STORE.reject_donation(selected_id)
                st.rerun()

    st.markdown("### Reply to a Donation")
    all_donations = STORE.list_donations()
    if not all_donations:
        st.info("No donations yet.")
        return

    donation_map = {record.id: record for record in all_donations}
    with st.form("donation-reply-form", clear_on_submit=True):
        reply_id = st.selectbox(
            "Donation",
            options=list(donation_map.keys()),
            format_func=lambda donation_id: _pending_option_label(donation_map[donation_id]),
        )
        reply_content = st.text_area("Reply", height=100)
        if st.form_submit_button("Save Reply", use_container_width=True):
            try:
                STORE.reply_to_donation(reply_id, reply_content)
                st.success("Reply saved.")
            except (ValueError, LookupError) as exc:
                st.error(str(exc))


def main() -> None:
    st.set_page_config(
        page_title="Supporter Wall",
        page_icon=":heart:",
        layout="wide",
    )
    STORE.init_db()
    _inject_styles()
    _hero()

    donors = STORE.merged_donors()
    tabs = st.tabs(["Donate", "Supporters", "Donor Profile", "Admin Review"])

    with tabs[0]:
        render_donate_tab()
    with tabs[1]:
        render_wall_tab(donors)
    with tabs[2]:
        render_profile_tab(donors)
    with tabs[3]:
        render_admin_tab()


if __name__ == "__main__":
    main()
