"""
Command line entry point: regenerate ``demographics.json``.

    python -m scotland_demographics.main --source xlsx
    python -m scotland_demographics.main --source csv --raw-dir data/raw
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_SOURCE_KIND, SOURCE_LABELS
from .data_manager import by_age_group, by_ethnicity, load_dataset, total_population
from .pipeline import DEFAULT_RAW_DIR, run_pipeline


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Build the Scotland population and ethnicity dataset from the "
            "published spreadsheets or from local CSV files."
        )
    )
    parser.add_argument(
        "--source",
        choices=sorted(SOURCE_LABELS),
        default=DEFAULT_SOURCE_KIND,
        help=f"Which inputs to use (default: {DEFAULT_SOURCE_KIND}).",
    )
    parser.add_argument(
        "--raw-dir",
        type=Path,
        default=DEFAULT_RAW_DIR,
        help="Directory holding population.csv and ethnicity.csv (csv source only).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Artifact path (default: demographics.json in the data directory).",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = {"raw_dir": args.raw_dir} if args.source == "csv" else {}
    path = run_pipeline(args.source, output=args.output, **options)
    if path is None:
        return 1

    dataset = load_dataset(path)
    ranked = by_ethnicity(dataset)
    print("\n--- DEMOGRAPHICS DATASET COMPLETE ---")
    print(
        f"Source: {dataset['metadata']['source']} | "
        f"Total population: {total_population(dataset):,} | "
        f"Age groups: {len(by_age_group(dataset))} | "
        f"Ethnic groups: {len(ranked)}"
    )
    print(f"Saved to {path}")
    for point in ranked[:5]:
        print(f"  {point['name']}: {point['value']:,}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
