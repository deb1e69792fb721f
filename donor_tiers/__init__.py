"""Donation export analysis: donor aggregation, giving tiers and donor merging."""

from .aggregation import ANONYMOUS_NAME, AggregationResult, Donation, Donor, aggregate_donations
from .columns import COLUMN_ALIASES, ColumnMap, find_column, resolve_columns
from .config import AnalysisConfig, load_tier_config
from .fields import parse_amount, parse_date, recency_cutoff, status_allows
from .identity import IdentityStore
from .report import (
    ReportSummary,
    TierReport,
    donor_rows,
    format_currency,
    render_text_report,
    tier_heading,
)
from .session import (
    AnalysisError,
    DonorSelection,
    DonorTierSession,
    analyze_export,
    selection_for,
)
from .tabular import parse_delimited
from .tiers import DEFAULT_TIERS, OTHER_TIER_NAME, Tier, TierGroup, classify_donors, normalize_tiers

__all__ = [
    "ANONYMOUS_NAME",
    "AggregationResult",
    "AnalysisConfig",
    "AnalysisError",
    "COLUMN_ALIASES",
    "ColumnMap",
    "DEFAULT_TIERS",
    "Donation",
    "Donor",
    "DonorSelection",
    "DonorTierSession",
    "IdentityStore",
    "OTHER_TIER_NAME",
    "ReportSummary",
    "Tier",
    "TierGroup",
    "TierReport",
    "aggregate_donations",
    "analyze_export",
    "classify_donors",
    "donor_rows",
    "find_column",
    "format_currency",
    "load_tier_config",
    "normalize_tiers",
    "parse_amount",
    "parse_date",
    "parse_delimited",
    "recency_cutoff",
    "render_text_report",
    "resolve_columns",
    "selection_for",
    "status_allows",
    "tier_heading",
]
