"""Tier report structures and plain-text export."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .aggregation import Donor
from .tiers import TierGroup

NAME_WIDTH = 40
IDENTITY_WIDTH = 14
EMAIL_WIDTH = 40
AMOUNT_WIDTH = 12
COUNT_WIDTH = 4


@dataclass(frozen=True)
class ReportSummary:
    total_donors: int
    transactions_in_period: int
    total_donated: float
    months_back: int


@dataclass
class TierReport:
    groups: dict[str, TierGroup]
    summary: ReportSummary

    @property
    def donors(self) -> list[Donor]:
        return [donor for group in self.groups.values() for donor in group.donors]

    def tier_of(self, key: str) -> str | None:
        for group in self.groups.values():
            if any(donor.key == key for donor in group.donors):
                return group.name
        return None


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def _fit(value: str, width: int) -> str:
    return value[:width].ljust(width)


def tier_heading(group: TierGroup) -> str:
    if group.minimum_amount > 0:
        return f"{group.name} ({format_currency(group.minimum_amount)}+)"
    return group.name


def _donor_line(donor: Donor) -> str:
    marker = "*" if donor.is_merged else ""
    return " ".join(
        [
            _fit(donor.names_label[: NAME_WIDTH - len(marker)] + marker, NAME_WIDTH),
            _fit(donor.key, IDENTITY_WIDTH),
            _fit(donor.email, EMAIL_WIDTH),
            format_currency(donor.total_amount).rjust(AMOUNT_WIDTH),
            str(donor.transaction_count).rjust(COUNT_WIDTH),
        ]
    )


def render_text_report(report: TierReport, generated_at: datetime | None = None) -> str:
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    summary = report.summary
    rule = "=" * (NAME_WIDTH + IDENTITY_WIDTH + EMAIL_WIDTH + AMOUNT_WIDTH + COUNT_WIDTH + 4)

    lines = [
        "DONOR TIER REPORT",
        f"Generated: {stamp}",
        rule,
        f"Time Period:   {summary.months_back} months",
        f"Total Donors:  {summary.total_donors}",
        f"Transactions:  {summary.transactions_in_period}",
        f"Total Donated: {format_currency(summary.total_donated)}",
        rule,
    ]

    header = " ".join(
        [
            _fit("Name", NAME_WIDTH),
            _fit("Identity", IDENTITY_WIDTH),
            _fit("Email", EMAIL_WIDTH),
            "Total".rjust(AMOUNT_WIDTH),
            "#".rjust(COUNT_WIDTH),
        ]
    )

    for group in report.groups.values():
        lines.append("")
        lines.append(
            f"{tier_heading(group)} - {group.donor_count} donors - {format_currency(group.total)}"
        )
        lines.append("-" * len(rule))
        if not group.donors:
            lines.append("No donors in this tier")
            continue
        lines.append(header)
        lines.extend(_donor_line(donor) for donor in group.donors)

    if any(donor.is_merged for donor in report.donors):
        lines.append("")
        lines.append("* merged donor record")

    return "\n".join(lines) + "\n"


def _date_text(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def donor_rows(report: TierReport) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for group in report.groups.values():
        for donor in group.donors:
            rows.append(
                {
                    "tier": group.name,
                    "name": donor.names_label,
                    "identity": donor.key,
                    "email": donor.email,
                    "total": round(donor.total_amount, 2),
                    "count": donor.transaction_count,
                    "merged": donor.is_merged,
                    "identities": ", ".join(donor.raw_identities_seen),
                    "first_gift": _date_text(donor.first_gift_at),
                    "last_gift": _date_text(donor.last_gift_at),
                }
            )
    return rows
