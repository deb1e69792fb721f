"""Analysis settings and tier configuration files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from .fields import DEFAULT_MONTHS_BACK
from .tiers import DEFAULT_TIERS, Tier, normalize_tiers, tier_from_mapping


@dataclass(frozen=True)
class AnalysisConfig:
    tiers: tuple[Tier, ...] = field(default_factory=lambda: DEFAULT_TIERS)
    months_back: int = DEFAULT_MONTHS_BACK

    def __post_init__(self) -> None:
        if self.months_back < 0:
            raise ValueError("Months back must be zero or greater.")
        normalize_tiers(self.tiers)


def load_tier_config(config_path: Path) -> AnalysisConfig:
    """Load tiers from a JSON file.

    Accepts a list of ``{"name": ..., "minimum": ...}`` objects or an object
    with ``"tiers"`` and an optional ``"months_back"``.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    data = json.loads(config_path.read_text(encoding="utf-8"))

    months_back = DEFAULT_MONTHS_BACK
    if isinstance(data, dict):
        if "tiers" not in data:
            raise ValueError("JSON config must be a list or have a 'tiers' key")
        months_back = int(data.get("months_back", DEFAULT_MONTHS_BACK))
        data = data["tiers"]

    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ValueError("Tiers must be a list of objects with 'name' and 'minimum'")

    tiers = tuple(tier_from_mapping(row) for row in data)
    return AnalysisConfig(tiers=tiers, months_back=months_back)
