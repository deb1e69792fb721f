from __future__ import annotations

import json

import pytest

from donor_tiers.cli import main
from donor_tiers.config import AnalysisConfig, load_tier_config
from donor_tiers.session import DonorTierSession
from donor_tiers.tiers import DEFAULT_TIERS, Tier

EXPORT = """Donor ID,Name,Amount,Status
A,Alder Fund,1200,Succeeded
B,Birch Lee,300,Succeeded
C,Birch Lee,400,Succeeded
"""


def test_default_config_uses_default_tiers() -> None:
    config = AnalysisConfig()
    assert config.tiers == DEFAULT_TIERS
    assert config.months_back == 12


def test_config_rejects_negative_months() -> None:
    with pytest.raises(ValueError):
        AnalysisConfig(months_back=-3)


def test_load_tier_config_list(tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "tiers.json"
    path.write_text(json.dumps([{"name": "Gold", "minimum": 1000}, {"name": "Silver", "minimum": 500}]))

    config = load_tier_config(path)
    assert config.tiers == (Tier("Gold", 1000.0), Tier("Silver", 500.0))
    assert config.months_back == 12


def test_load_tier_config_object(tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "tiers.json"
    path.write_text(json.dumps({"tiers": [{"name": "Major", "min": 600}], "months_back": 24}))

    config = load_tier_config(path)
    assert config.tiers == (Tier("Major", 600.0),)
    assert config.months_back == 24


def test_load_tier_config_errors(tmp_path) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(FileNotFoundError):
        load_tier_config(tmp_path / "missing.json")

    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"levels": []}))
    with pytest.raises(ValueError):
        load_tier_config(path)


def test_cli_writes_report_with_merge(tmp_path) -> None:  # type: ignore[no-untyped-def]
    export_path = tmp_path / "export.csv"
    export_path.write_text(EXPORT)
    config_path = tmp_path / "tiers.json"
    config_path.write_text(json.dumps([{"name": "Gold", "minimum": 1000}, {"name": "Silver", "minimum": 500}]))
    output_path = tmp_path / "out" / "report.txt"

    exit_code = main(
        [str(export_path), "-c", str(config_path), "--merge", "B,C", "-o", str(output_path), "-q"]
    )

    assert exit_code == 0
    text = output_path.read_text()
    assert "Silver ($500.00+) - 1 donors - $700.00" in text
    assert "Total Donors:  2" in text


def test_cli_prints_report(tmp_path, capsys) -> None:  # type: ignore[no-untyped-def]
    export_path = tmp_path / "export.csv"
    export_path.write_text(EXPORT)

    assert main([str(export_path), "-q"]) == 0
    out = capsys.readouterr().out
    assert "DONOR TIER REPORT" in out
    assert "Platinum ($2,500.00+)" in out


def test_cli_reports_missing_amount_column(tmp_path, capsys) -> None:  # type: ignore[no-untyped-def]
    export_path = tmp_path / "export.csv"
    export_path.write_text("Name,Total\nA,5\n")

    assert main([str(export_path), "-q"]) == 1
    assert "Could not find donation amount column" in capsys.readouterr().err


def test_cli_fails_cleanly_without_report(tmp_path, capsys, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    export_path = tmp_path / "export.csv"
    export_path.write_text(EXPORT)
    monkeypatch.setattr(DonorTierSession, "analyze", lambda self, tiers, months_back=12, now=None: None)

    assert main([str(export_path), "-q"]) == 1
    assert "No report was produced" in capsys.readouterr().err
