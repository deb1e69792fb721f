"""Streamlit app for donor tier analysis of donation exports."""

from __future__ import annotations

import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from donor_tiers import (
    DEFAULT_TIERS,
    DonorSelection,
    DonorTierSession,
    Tier,
    TierGroup,
    TierReport,
    donor_rows,
    format_currency,
    render_text_report,
    selection_for,
    tier_heading,
)
from donor_tiers.fields import DEFAULT_MONTHS_BACK
from donor_tiers.tiers import tier_from_mapping

logger = logging.getLogger(__name__)

SESSION_KEY = "donor_tier_session"
UPLOAD_KEY = "donor_tier_upload_name"
MAX_MONTHS_BACK = 120


def _inject_styles() -> None:
    st.markdown(
        """
        <style>
          @import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@500;700&family=Public+Sans:wght@400;500;600;700&display=swap');

          :root {
            --dt-blue-700: #032d60;
            --dt-blue-600: #0176d3;
            --dt-blue-500: #0b5cab;
            --dt-cloud-100: #f3f2f2;
            --dt-cloud-200: #eef1f6;
            --dt-card: #ffffff;
            --dt-text: #181818;
            --dt-muted: #3e3e3c;
          }

          .stApp {
            background: linear-gradient(170deg, var(--dt-cloud-100) 0%, var(--dt-cloud-200) 56%, #f8fbff 100%);
            color: var(--dt-text);
          }

          html, body, [class*="css"] {
            font-family: "Public Sans", "Trebuchet MS", sans-serif;
          }

          .tier-hero {
            background: linear-gradient(124deg, var(--dt-blue-700), var(--dt-blue-600));
            border-radius: 18px;
            padding: 1.2rem 1.25rem;
            box-shadow: 0 16px 30px rgba(3, 45, 96, 0.28);
            margin-bottom: 1rem;
          }

          .tier-hero h1,
          .tier-hero p {
            color: #ffffff !important;
          }

          .tier-hero h1 {
            margin: 0;
            font-family: "Space Grotesk", "Arial Black", sans-serif;
            font-size: clamp(1.45rem, 2.6vw, 2.2rem);
          }

          .tier-hero p {
            margin: 0.55rem 0 0;
            max-width: 78ch;
            font-weight: 500;
          }

          .metric-card {
            border-radius: 14px;
            border: 1px solid rgba(201, 199, 197, 0.6);
            background: var(--dt-card);
            box-shadow: 0 6px 14px rgba(24, 24, 24, 0.06);
            padding: 0.75rem 0.8rem;
            min-height: 96px;
          }

          .metric-label {
            margin: 0;
            color: var(--dt-muted);
            font-weight: 600;
            font-size: 0.84rem;
          }

          .metric-value {
            margin: 0.3rem 0 0;
            color: var(--dt-blue-700);
            font-family: "Space Grotesk", "Arial Black", sans-serif;
            font-size: 1.45rem;
          }

          .metric-sub {
            margin: 0.4rem 0 0;
            color: #5a5a58;
            font-size: 0.82rem;
          }

          .section-note {
            color: #555453;
            font-weight: 500;
            margin-top: -0.2rem;
            margin-bottom: 0.8rem;
          }

          .stButton > button {
            background: linear-gradient(120deg, var(--dt-blue-500), var(--dt-blue-600));
            color: #ffffff;
            border: 1px solid #0b4f97;
            border-radius: 0.6rem;
            font-weight: 600;
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
        <div class="tier-hero">
          <h1>Donor Tier Analysis</h1>
          <p>
            Upload a donation export, group transactions into donors, sort donors into giving tiers,
            and merge duplicate donor records before downloading the report.
          </p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def _tier_session() -> DonorTierSession:
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = DonorTierSession()
    return st.session_state[SESSION_KEY]


def _tiers_from_frame(frame: pd.DataFrame) -> list[Tier]:
    tiers: list[Tier] = []
    for row in frame.to_dict("records"):
        name = row.get("Tier")
        minimum = row.get("Minimum ($)")
        tiers.append(
            tier_from_mapping(
                {
                    "name": "" if pd.isna(name) else name,
                    "minimum": 0 if pd.isna(minimum) else minimum,
                }
            )
        )
    return tiers


def render_setup() -> tuple[list[Tier], int, bool]:
    st.markdown("### Export & Tiers")
    st.markdown(
        "<p class='section-note'>Tiers are matched from the highest minimum down. Donors below every minimum land in Other.</p>",
        unsafe_allow_html=True,
    )

    left, right = st.columns([1, 1], gap="large")
    session = _tier_session()

    with left:
        uploaded_file = st.file_uploader("Donation export (CSV)", type=["csv"], key="export-upload")
        months_back = int(
            st.number_input(
                "Months back",
                min_value=0,
                max_value=MAX_MONTHS_BACK,
                value=DEFAULT_MONTHS_BACK,
                step=1,
            )
        )

        if uploaded_file is not None and st.session_state.get(UPLOAD_KEY) != uploaded_file.name:
            text = uploaded_file.getvalue().decode("utf-8-sig", errors="replace")
            try:
                session.load_export(text)
                st.session_state[UPLOAD_KEY] = uploaded_file.name
                st.caption(f"Selected: {uploaded_file.name}")
            except ValueError as exc:
                st.session_state.pop(UPLOAD_KEY, None)
                logger.warning("Export %s rejected: %s", uploaded_file.name, exc)
                st.error(str(exc))

    with right:
        tier_frame = pd.DataFrame(
            [{"Tier": tier.name, "Minimum ($)": tier.minimum_amount} for tier in DEFAULT_TIERS]
        )
        edited = st.data_editor(
            tier_frame,
            num_rows="dynamic",
            use_container_width=True,
            hide_index=True,
            key="tier-editor",
            column_config={
                "Minimum ($)": st.column_config.NumberColumn(min_value=0, step=50, format="$%.2f"),
            },
        )

    try:
        tiers = _tiers_from_frame(edited)
    except ValueError as exc:
        st.error(str(exc))
        tiers = []

    analyze = st.button(
        "Analyze Donations",
        disabled=not session.is_loaded,
        key="analyze-run",
    )
    return tiers, months_back, analyze


def render_summary(report: TierReport) -> None:
    summary = report.summary
    metric_columns = st.columns(4)
    with metric_columns[0]:
        _render_metric_card("Time Period", f"{summary.months_back} months", "Recency window")
    with metric_columns[1]:
        _render_metric_card("Total Donors", str(summary.total_donors), "After merges")
    with metric_columns[2]:
        _render_metric_card("Transactions", str(summary.transactions_in_period), "Succeeded, in period")
    with metric_columns[3]:
        _render_metric_card("Total Donated", format_currency(summary.total_donated), "All tiers")


def _tier_table(group: TierGroup) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Select": False,
                "Name": donor.names_label,
                "Email": donor.email or "-",
                "Total Donated": format_currency(donor.total_amount),
                "# Donations": donor.transaction_count,
                "Merged": donor.is_merged,
                "Identity": donor.key,
            }
            for donor in group.donors
        ]
    )


def render_tiers(report: TierReport) -> list[DonorSelection]:
    selected: list[DonorSelection] = []
    donors_by_key = {donor.key: donor for donor in report.donors}

    for group in report.groups.values():
        label = f"{tier_heading(group)} | {group.donor_count} donors | {format_currency(group.total)}"
        with st.expander(label, expanded=bool(group.donors)):
            if not group.donors:
                st.info("No donors in this tier")
                continue

            edited = st.data_editor(
                _tier_table(group),
                use_container_width=True,
                hide_index=True,
                disabled=["Name", "Email", "Total Donated", "# Donations", "Merged", "Identity"],
                key=f"tier-table-{group.name}",
            )
            for row in edited.to_dict("records"):
                if row["Select"]:
                    selected.append(selection_for(donors_by_key[row["Identity"]]))
    return selected


def render_merge_actions(session: DonorTierSession, selected: list[DonorSelection]) -> None:
    st.markdown("### Merge Donors")
    st.markdown(
        "<p class='section-note'>The first selected donor keeps its identity. Unmerge splits a merged donor back into its original records.</p>",
        unsafe_allow_html=True,
    )

    actions = st.columns([1, 1, 1, 3], gap="small")
    merged_selected = [item for item in selected if item.is_merged]

    with actions[0]:
        merge = st.button(
            f"Merge ({len(selected)})",
            disabled=len(selected) < 2,
            use_container_width=True,
            key="donor-merge",
        )
    with actions[1]:
        unmerge = st.button(
            f"Unmerge ({len(merged_selected)})",
            disabled=not merged_selected,
            use_container_width=True,
            key="donor-unmerge",
        )
    with actions[2]:
        reset = st.button("Reset Merges", use_container_width=True, key="donor-merge-reset")

    try:
        if merge:
            session.merge(selected)
            st.rerun()
        if unmerge:
            session.unmerge(merged_selected)
            st.rerun()
        if reset:
            session.reset_identities()
            st.rerun()
    except ValueError as exc:
        st.error(str(exc))


def render_downloads(report: TierReport) -> None:
    stamp = datetime.now()
    left, right = st.columns(2, gap="small")
    with left:
        st.download_button(
            "Download Text Report",
            data=render_text_report(report, generated_at=stamp).encode("utf-8"),
            file_name=f"donor_tiers_{stamp:%Y%m%d}.txt",
            mime="text/plain",
            key="report-download-text",
        )
    with right:
        csv_data = pd.DataFrame(donor_rows(report)).to_csv(index=False).encode("utf-8")
        st.download_button(
            "Download Donors CSV",
            data=csv_data,
            file_name=f"donor_tiers_{stamp:%Y%m%d}.csv",
            mime="text/csv",
            key="report-download-csv",
        )


def main() -> None:
    st.set_page_config(
        page_title="Donor Tier Analysis",
        page_icon=":bar_chart:",
        layout="wide",
    )
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    _inject_styles()
    _hero()

    session = _tier_session()
    tiers, months_back, analyze = render_setup()

    if analyze:
        try:
            session.analyze(tiers, months_back=months_back)
        except ValueError as exc:
            st.error(str(exc))

    report = session.last_report
    if report is None:
        st.info("Upload an export and run Analyze Donations to see donor tiers.")
        return

    st.markdown("### Results")
    render_summary(report)
    selected = render_tiers(report)
    render_merge_actions(session, selected)
    render_downloads(report)


if __name__ == "__main__":
    main()
