from __future__ import annotations

from datetime import datetime

from donor_tiers.report import (
    AMOUNT_WIDTH,
    EMAIL_WIDTH,
    IDENTITY_WIDTH,
    NAME_WIDTH,
    donor_rows,
    format_currency,
    render_text_report,
    tier_heading,
)
from donor_tiers.session import DonorSelection, DonorTierSession
from donor_tiers.tiers import Tier

NOW = datetime(2025, 6, 1)

EXPORT = """Donor ID,First Name,Last Name,Email,Amount,Date
G-1,Grace,Hopper,grace@example.org,"$1,500.00",2025-05-01
S-1,Sam,Ito,sam@example.org,600,2025-04-01
S-2,Sammy,Ito,sammy@example.org,50,2025-03-01
"""


def _build_session():  # type: ignore[no-untyped-def]
    session = DonorTierSession()
    session.load_export(EXPORT)
    session.analyze([Tier("Gold", 1000), Tier("Silver", 500)], now=NOW)
    return session


def test_format_currency() -> None:
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(-5) == "-$5.00"


def test_text_report_layout() -> None:
    session = _build_session()
    report = session.last_report
    text = render_text_report(report, generated_at=datetime(2025, 6, 1, 9, 30))
    lines = text.splitlines()

    assert lines[0] == "DONOR TIER REPORT"
    assert "Generated: 2025-06-01 09:30" in lines
    assert "Total Donors:  3" in lines
    assert "Transactions:  3" in lines
    assert "Total Donated: $2,150.00" in lines
    assert "Gold ($1,000.00+) - 1 donors - $1,500.00" in lines
    assert "No donors in this tier" not in text

    grace = next(line for line in lines if line.startswith("Grace Hopper"))
    assert len(grace) == NAME_WIDTH + IDENTITY_WIDTH + EMAIL_WIDTH + AMOUNT_WIDTH + 4 + 4
    assert grace[NAME_WIDTH + 1:NAME_WIDTH + 1 + IDENTITY_WIDTH].strip() == "G-1"
    assert grace.endswith("$1,500.00".rjust(AMOUNT_WIDTH) + "    1")


def test_text_report_marks_merged_donors() -> None:
    session = _build_session()
    report = session.merge([DonorSelection("S-1"), DonorSelection("S-2")])
    text = render_text_report(report, generated_at=NOW)

    assert "Sam Ito / Sammy Ito*" in text
    assert "* merged donor record" in text
    assert "Other - 0 donors - $0.00" in text
    assert "No donors in this tier" in text


def test_tier_heading_omits_zero_minimum() -> None:
    report = _build_session().last_report
    assert tier_heading(report.groups["Other"]) == "Other"
    assert tier_heading(report.groups["Silver"]) == "Silver ($500.00+)"


def test_donor_rows_flatten_report() -> None:
    report = _build_session().last_report
    rows = donor_rows(report)

    assert [row["identity"] for row in rows] == ["G-1", "S-1", "S-2"]
    assert rows[0]["tier"] == "Gold"
    assert rows[0]["total"] == 1500.0
    assert rows[0]["first_gift"] == "2025-05-01"
    assert rows[2]["tier"] == "Other"


def test_merged_marker_survives_long_names() -> None:
    long_name = "Wellington Bartholomew-Fitzgerald Hargreaves"
    export = (
        "Donor ID,Name,Amount\n"
        f"L-1,{long_name},700\n"
        f"L-2,{long_name} III,20\n"
    )
    session = DonorTierSession()
    session.load_export(export)
    session.analyze([Tier("Silver", 500)], now=NOW)
    report = session.merge([DonorSelection("L-1"), DonorSelection("L-2")])

    text = render_text_report(report, generated_at=NOW)
    line = next(line for line in text.splitlines() if line.startswith("Wellington"))
    assert line[:NAME_WIDTH].endswith("*")
    assert line[NAME_WIDTH + 1:NAME_WIDTH + 1 + IDENTITY_WIDTH].strip() == "L-1"
