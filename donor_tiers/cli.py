"""Command-line interface for donor tier reports."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import AnalysisConfig, load_tier_config
from .report import render_text_report
from .session import DonorSelection, DonorTierSession

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


def _merge_groups(values: list[str]) -> list[list[str]]:
    groups = []
    for value in values:
        keys = [key.strip() for key in value.split(",") if key.strip()]
        groups.append(keys)
    return groups


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="donor-tiers",
        description="Group donation transactions into donors and giving tiers",
    )
    parser.add_argument("export", type=Path, help="Donation export CSV file")
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="JSON file with tiers (list or {\"tiers\": [...], \"months_back\": n})",
    )
    parser.add_argument(
        "-m", "--months-back",
        type=int,
        help="Only count transactions from the last N months (default: 12)",
    )
    parser.add_argument(
        "--merge",
        action="append",
        default=[],
        metavar="KEY,KEY[,...]",
        help="Treat these donor identities as one donor; the first key is kept. Repeatable.",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the text report here instead of printing it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Quiet mode (errors only)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        setup_logging(args.verbose)

    try:
        config = load_tier_config(args.config) if args.config else AnalysisConfig()
        months_back = args.months_back if args.months_back is not None else config.months_back
        text = args.export.read_text(encoding="utf-8-sig")

        session = DonorTierSession()
        session.load_export(text)
        session.analyze(config.tiers, months_back=months_back)
        for keys in _merge_groups(args.merge):
            session.merge(DonorSelection(resolved_key=key) for key in keys)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    report = session.last_report
    if report is None:
        print("Error: No report was produced.", file=sys.stderr)
        return 1
    rendered = render_text_report(report)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered, encoding="utf-8")
        logger.info("Report written to %s", args.output)
    else:
        sys.stdout.write(rendered)
    return 0


if __name__ == "__main__":
    sys.exit(main())
