from __future__ import annotations

import pytest

from donor_tiers.aggregation import Donation, Donor
from donor_tiers.tiers import (
    OTHER_TIER_NAME,
    Tier,
    classify_donors,
    normalize_tiers,
    tier_from_mapping,
)


def _donor(key: str, total: float) -> Donor:
    donation = Donation(
        amount=total,
        occurred_at=None,
        raw_identity=key,
        donor_name=key,
        donor_email="",
    )
    return Donor.from_donation(key, donation)


def test_tier_assignment_example() -> None:
    tiers = normalize_tiers([Tier("Silver", 500), Tier("Gold", 1000)])
    groups = classify_donors([_donor("A", 1200), _donor("B", 700), _donor("C", 300)], tiers)

    assert list(groups) == ["Gold", "Silver", OTHER_TIER_NAME]
    assert [d.key for d in groups["Gold"].donors] == ["A"]
    assert [d.key for d in groups["Silver"].donors] == ["B"]
    assert [d.key for d in groups[OTHER_TIER_NAME].donors] == ["C"]
    assert groups[OTHER_TIER_NAME].minimum_amount == 0


def test_minimum_is_inclusive() -> None:
    groups = classify_donors([_donor("A", 500)], normalize_tiers([Tier("Silver", 500)]))
    assert groups["Silver"].donor_count == 1


def test_groups_sorted_by_total_with_stable_ties() -> None:
    donors = [_donor("A", 600), _donor("B", 900), _donor("C", 600), _donor("D", 750)]
    groups = classify_donors(donors, normalize_tiers([Tier("Silver", 500)]))

    assert [d.key for d in groups["Silver"].donors] == ["B", "D", "A", "C"]
    assert groups["Silver"].total == pytest.approx(2850)


def test_equal_minimums_keep_configured_order() -> None:
    tiers = normalize_tiers([Tier("First", 100), Tier("Second", 100), Tier("Top", 500)])
    assert [tier.name for tier in tiers] == ["Top", "First", "Second"]

    groups = classify_donors([_donor("A", 150)], tiers)
    assert groups["First"].donor_count == 1
    assert groups["Second"].donor_count == 0


def test_normalize_skips_blank_names_and_validates() -> None:
    assert normalize_tiers([Tier("  ", 10)]) == []

    with pytest.raises(ValueError):
        normalize_tiers([Tier("Gold", -1)])
    with pytest.raises(ValueError):
        normalize_tiers([Tier("Gold", 10), Tier("Gold", 20)])
    with pytest.raises(ValueError):
        normalize_tiers([Tier(OTHER_TIER_NAME, 10)])


def test_tier_from_mapping() -> None:
    assert tier_from_mapping({"name": " Gold ", "minimum": "1000"}) == Tier("Gold", 1000.0)
    assert tier_from_mapping({"name": "Friend", "min": 50}) == Tier("Friend", 50.0)
    with pytest.raises(ValueError):
        tier_from_mapping({"name": "Bad", "minimum": "lots"})
