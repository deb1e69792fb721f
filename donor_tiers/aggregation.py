"""Aggregation of export rows into one donor record per resolved identity."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from .columns import ColumnMap
from .fields import clean_cell, parse_amount, parse_date, status_allows, within_period
from .identity import IdentityStore

logger = logging.getLogger(__name__)

ANONYMOUS_NAME = "Anonymous"


@dataclass(frozen=True)
class Donation:
    amount: float
    occurred_at: datetime | None
    raw_identity: str
    donor_name: str
    donor_email: str


@dataclass
class Donor:
    """A donor ledger entry built up one donation at a time."""

    key: str
    display_name: str = ANONYMOUS_NAME
    email: str = ""
    total_amount: float = 0.0
    transaction_count: int = 0
    donations: list[Donation] = field(default_factory=list)
    raw_identities_seen: list[str] = field(default_factory=list)
    names_seen: list[str] = field(default_factory=list)
    is_merged: bool = False

    @classmethod
    def from_donation(cls, key: str, donation: Donation, is_merged: bool = False) -> "Donor":
        donor = cls(key=key, is_merged=is_merged)
        donor.add_donation(donation)
        return donor

    def add_donation(self, donation: Donation) -> None:
        self.total_amount += donation.amount
        self.transaction_count += 1
        self.donations.append(donation)

        if donation.raw_identity not in self.raw_identities_seen:
            self.raw_identities_seen.append(donation.raw_identity)

        if donation.donor_name != ANONYMOUS_NAME:
            if donation.donor_name not in self.names_seen:
                self.names_seen.append(donation.donor_name)
            # First real name wins; later names only show up in names_seen.
            if self.display_name == ANONYMOUS_NAME:
                self.display_name = donation.donor_name

        if not self.email and donation.donor_email:
            self.email = donation.donor_email

    @property
    def names_label(self) -> str:
        if len(self.names_seen) > 1:
            return " / ".join(self.names_seen)
        return self.display_name

    def donations_by_date(self) -> list[Donation]:
        """Newest first; undated donations trail in arrival order."""
        dated = [donation for donation in self.donations if donation.occurred_at is not None]
        undated = [donation for donation in self.donations if donation.occurred_at is None]
        dated.sort(key=lambda donation: donation.occurred_at or datetime.min, reverse=True)
        return dated + undated

    @property
    def first_gift_at(self) -> datetime | None:
        dates = [donation.occurred_at for donation in self.donations if donation.occurred_at is not None]
        return min(dates) if dates else None

    @property
    def last_gift_at(self) -> datetime | None:
        dates = [donation.occurred_at for donation in self.donations if donation.occurred_at is not None]
        return max(dates) if dates else None


@dataclass
class AggregationResult:
    donors: list[Donor]
    total_amount: float = 0.0
    transaction_count: int = 0

    def donor(self, key: str) -> Donor | None:
        for donor in self.donors:
            if donor.key == key:
                return donor
        return None


def _cell(row: Sequence[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return clean_cell(row[index])


def donor_name_for(row: Sequence[str], columns: ColumnMap) -> str:
    first_name = _cell(row, columns.first_name) or _cell(row, columns.secondary_first_name)
    last_name = _cell(row, columns.last_name) or _cell(row, columns.secondary_last_name)
    full_name = f"{first_name} {last_name}".strip()
    return (
        full_name
        or _cell(row, columns.display_name)
        or _cell(row, columns.organization)
        or ANONYMOUS_NAME
    )


def donor_email_for(row: Sequence[str], columns: ColumnMap) -> str:
    email = _cell(row, columns.email) or _cell(row, columns.secondary_email)
    return email.lower()


def raw_identity_for(row: Sequence[str], columns: ColumnMap, name: str, email: str) -> str:
    """Identifier column, else email, else a name/organization key.

    Two different people with no id, no email and the same name and
    organization share the fallback key and end up as one donor.
    """
    identity_id = _cell(row, columns.identity_id)
    if identity_id:
        return identity_id
    if email:
        return email
    organization = _cell(row, columns.organization)
    return f"anon_{name}_{organization}".lower()


def aggregate_donations(
    rows: Iterable[Sequence[str]],
    columns: ColumnMap,
    store: IdentityStore,
    cutoff: datetime,
) -> AggregationResult:
    """Build the donor ledger from data rows (header excluded).

    Rows are dropped by the status gate, the recency gate or a non-positive
    amount; everything else is attributed to the donor its identity resolves to.
    """
    donors: dict[str, Donor] = {}
    total_amount = 0.0
    transaction_count = 0
    skipped = 0

    for row in rows:
        if columns.status is not None and not status_allows(_cell(row, columns.status)):
            skipped += 1
            continue

        occurred_at = parse_date(_cell(row, columns.date)) if columns.date is not None else None
        if not within_period(occurred_at, cutoff):
            skipped += 1
            continue

        amount = parse_amount(_cell(row, columns.amount))
        if amount <= 0:
            skipped += 1
            continue

        name = donor_name_for(row, columns)
        email = donor_email_for(row, columns)
        raw_identity = raw_identity_for(row, columns, name, email)
        key = store.resolve(raw_identity)

        donation = Donation(
            amount=amount,
            occurred_at=occurred_at,
            raw_identity=raw_identity,
            donor_name=name,
            donor_email=email,
        )

        existing = donors.get(key)
        if existing is None:
            donors[key] = Donor.from_donation(key, donation, is_merged=store.is_merged_primary(key))
        else:
            existing.add_donation(donation)

        total_amount += amount
        transaction_count += 1

    logger.info(
        "Aggregated %d transaction(s) into %d donor(s); %d row(s) skipped.",
        transaction_count,
        len(donors),
        skipped,
    )
    return AggregationResult(
        donors=list(donors.values()),
        total_amount=total_amount,
        transaction_count=transaction_count,
    )
