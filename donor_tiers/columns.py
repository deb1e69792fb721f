"""Header-row resolution of semantic column roles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "identity_id": ("Donor ID", "Contact ID", "Supporter ID", "Constituent ID", "Customer ID"),
    "email": ("Email", "Email Address", "Donor Email"),
    "secondary_email": ("Contact Email",),
    "first_name": ("First Name",),
    "last_name": ("Last Name",),
    "secondary_first_name": ("Contact First Name",),
    "secondary_last_name": ("Contact Last Name",),
    "display_name": ("Name", "Full Name", "Donor Name"),
    "organization": ("Company", "Contact Company Name", "Organization"),
    "amount": ("Donated", "Amount"),
    "date": ("Transaction Date (UTC)", "Transaction Date", "Date"),
    "status": ("Status Friendly", "Status"),
}


def _normalize_header(value: str) -> str:
    return value.strip().lower()


def find_column(headers: Iterable[str], *aliases: str) -> int | None:
    """Index of the first header matching an alias, aliases taken in priority order."""
    normalized = [_normalize_header(header) for header in headers]
    for alias in aliases:
        target = _normalize_header(alias)
        if target in normalized:
            return normalized.index(target)
    return None


@dataclass(frozen=True)
class ColumnMap:
    identity_id: int | None = None
    email: int | None = None
    secondary_email: int | None = None
    first_name: int | None = None
    last_name: int | None = None
    secondary_first_name: int | None = None
    secondary_last_name: int | None = None
    display_name: int | None = None
    organization: int | None = None
    amount: int | None = None
    date: int | None = None
    status: int | None = None

    def missing_roles(self) -> list[str]:
        return [field.name for field in fields(self) if getattr(self, field.name) is None]


def resolve_columns(
    headers: Iterable[str],
    aliases: Mapping[str, tuple[str, ...]] | None = None,
) -> ColumnMap:
    alias_table = dict(COLUMN_ALIASES)
    if aliases:
        alias_table.update(aliases)

    header_list = list(headers)
    resolved = {
        role: find_column(header_list, *candidates)
        for role, candidates in alias_table.items()
        if role in ColumnMap.__dataclass_fields__
    }
    columns = ColumnMap(**resolved)

    missing = columns.missing_roles()
    if missing:
        logger.debug("Export has no column for: %s", ", ".join(missing))
    return columns
