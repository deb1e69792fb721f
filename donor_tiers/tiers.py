"""Giving-tier configuration and donor classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .aggregation import Donor

OTHER_TIER_NAME = "Other"


@dataclass(frozen=True)
class Tier:
    name: str
    minimum_amount: float = 0.0


DEFAULT_TIERS: tuple[Tier, ...] = (
    Tier("Platinum", 2500),
    Tier("Gold", 1000),
    Tier("Silver", 500),
    Tier("Bronze", 250),
    Tier("Friend", 50),
)


@dataclass
class TierGroup:
    name: str
    minimum_amount: float
    donors: list[Donor] = field(default_factory=list)
    total: float = 0.0

    @property
    def donor_count(self) -> int:
        return len(self.donors)


def tier_from_mapping(row: Mapping[str, Any]) -> Tier:
    name = str(row.get("name") or "").strip()
    raw_minimum = row.get("minimum", row.get("min", 0))
    try:
        minimum = float(raw_minimum or 0)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Tier '{name}' has an invalid minimum amount: {raw_minimum!r}") from exc
    return Tier(name=name, minimum_amount=minimum)


def normalize_tiers(tiers: Iterable[Tier]) -> list[Tier]:
    """Drop unnamed tiers, validate the rest and order them by minimum, highest first.

    Tiers sharing a minimum keep the order they were configured in.
    """
    cleaned: list[Tier] = []
    names: set[str] = set()
    for tier in tiers:
        name = tier.name.strip()
        if not name:
            continue
        if tier.minimum_amount < 0:
            raise ValueError(f"Tier '{name}' minimum amount cannot be negative.")
        if name == OTHER_TIER_NAME or name in names:
            raise ValueError(f"Tier name '{name}' is already in use.")
        names.add(name)
        cleaned.append(Tier(name=name, minimum_amount=float(tier.minimum_amount)))

    cleaned.sort(key=lambda tier: tier.minimum_amount, reverse=True)
    return cleaned


def classify_donors(donors: Iterable[Donor], tiers: Iterable[Tier]) -> dict[str, TierGroup]:
    """Place each donor in the first tier whose minimum it meets, else "Other".

    ``tiers`` must already be ordered by ``normalize_tiers``. The returned
    mapping follows that order with "Other" last; donors inside a group are
    ordered by total, largest first, ties in arrival order.
    """
    ordered_tiers = list(tiers)
    groups: dict[str, TierGroup] = {
        tier.name: TierGroup(name=tier.name, minimum_amount=tier.minimum_amount)
        for tier in ordered_tiers
    }
    groups[OTHER_TIER_NAME] = TierGroup(name=OTHER_TIER_NAME, minimum_amount=0.0)

    for donor in donors:
        target = groups[OTHER_TIER_NAME]
        for tier in ordered_tiers:
            if donor.total_amount >= tier.minimum_amount:
                target = groups[tier.name]
                break
        target.donors.append(donor)
        target.total += donor.total_amount

    for group in groups.values():
        group.donors.sort(key=lambda donor: donor.total_amount, reverse=True)
    return groups
