"""Analysis session: parsed export, identity store and the current tier report."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, NamedTuple

from .aggregation import AggregationResult, Donor, aggregate_donations
from .columns import ColumnMap, resolve_columns
from .fields import DEFAULT_MONTHS_BACK, recency_cutoff
from .identity import IdentityStore
from .report import ReportSummary, TierReport
from .tabular import parse_delimited
from .tiers import Tier, classify_donors, normalize_tiers

logger = logging.getLogger(__name__)

NO_TIERS_MESSAGE = "Please add at least one tier"
EMPTY_EXPORT_MESSAGE = "CSV file appears to be empty or invalid"
NO_AMOUNT_MESSAGE = "Could not find donation amount column"


class AnalysisError(ValueError):
    """An analysis run cannot start; nothing is reported."""


class DonorSelection(NamedTuple):
    resolved_key: str
    is_merged: bool = False


def selection_for(donor: Donor) -> DonorSelection:
    return DonorSelection(resolved_key=donor.key, is_merged=donor.is_merged)


class DonorTierSession:
    """Holds one loaded export and its merge decisions between analysis runs."""

    def __init__(self, store: IdentityStore | None = None) -> None:
        self.store = store if store is not None else IdentityStore()
        self.headers: list[str] = []
        self.rows: list[list[str]] = []
        self.columns: ColumnMap | None = None
        self.last_report: TierReport | None = None
        self._tiers: list[Tier] = []
        self._months_back = DEFAULT_MONTHS_BACK
        self._cutoff: datetime | None = None

    @property
    def cutoff(self) -> datetime:
        """Recency cutoff of the current analysis; merges and unmerges reuse it."""
        if self._cutoff is None:
            return recency_cutoff(self._months_back)
        return self._cutoff

    @property
    def is_loaded(self) -> bool:
        return self.columns is not None

    def load_export(self, text: str) -> None:
        parsed = parse_delimited(text)
        if len(parsed) < 2:
            raise AnalysisError(EMPTY_EXPORT_MESSAGE)

        columns = resolve_columns(parsed[0])
        if columns.amount is None:
            raise AnalysisError(NO_AMOUNT_MESSAGE)

        self.headers = parsed[0]
        self.rows = parsed[1:]
        self.columns = columns
        self.last_report = None
        logger.info("Loaded export with %d data row(s).", len(self.rows))

    def analyze(
        self,
        tiers: Iterable[Tier],
        months_back: int = DEFAULT_MONTHS_BACK,
        now: datetime | None = None,
    ) -> TierReport:
        ordered_tiers = normalize_tiers(tiers)
        if not ordered_tiers:
            raise AnalysisError(NO_TIERS_MESSAGE)
        if self.columns is None:
            raise AnalysisError(EMPTY_EXPORT_MESSAGE)
        if months_back < 0:
            raise ValueError("Months back must be zero or greater.")

        self._tiers = ordered_tiers
        self._months_back = months_back
        self._cutoff = recency_cutoff(months_back, now)
        return self._run()

    def merge(self, selection: Iterable[DonorSelection]) -> TierReport:
        keys = [item.resolved_key for item in selection]
        self._require_report()
        self.store.merge(keys)
        return self._run()

    def unmerge(self, selection: Iterable[DonorSelection]) -> TierReport:
        keys = [item.resolved_key for item in selection if item.is_merged]
        self._require_report()
        self.store.unmerge(keys)
        return self._run()

    def reset_identities(self) -> TierReport | None:
        self.store.reset()
        if self.last_report is None:
            return None
        return self._run()

    def aggregate(self) -> AggregationResult:
        if self.columns is None:
            raise AnalysisError(EMPTY_EXPORT_MESSAGE)
        return aggregate_donations(self.rows, self.columns, self.store, self.cutoff)

    def _require_report(self) -> None:
        if self.last_report is None:
            raise ValueError("Run an analysis before merging donors.")

    def _run(self) -> TierReport:
        result = self.aggregate()
        groups = classify_donors(result.donors, self._tiers)
        summary = ReportSummary(
            total_donors=len(result.donors),
            transactions_in_period=result.transaction_count,
            total_donated=result.total_amount,
            months_back=self._months_back,
        )
        self.last_report = TierReport(groups=groups, summary=summary)
        return self.last_report


def analyze_export(
    text: str,
    tiers: Iterable[Tier],
    months_back: int = DEFAULT_MONTHS_BACK,
    store: IdentityStore | None = None,
    now: datetime | None = None,
) -> TierReport:
    """Parse, aggregate and classify an export in one call."""
    tier_list = list(tiers)
    if not normalize_tiers(tier_list):
        raise AnalysisError(NO_TIERS_MESSAGE)

    session = DonorTierSession(store=store)
    session.load_export(text)
    return session.analyze(tier_list, months_back=months_back, now=now)
