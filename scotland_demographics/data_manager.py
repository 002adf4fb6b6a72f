"""Data manager for locating, loading and aggregating the demographics artifact.

This module is the read side of the project.  The pipeline writes
``demographics.json`` once; everything here treats that file as an
immutable input and derives chart-ready views from it.  The aggregation
functions are pure, so calling them repeatedly (or from several sessions
of the dashboard at once) always yields the same output.
"""

import json
import logging
import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .assemble import total_population as _sum_counts
from .config import ARTIFACT_NAME, DATA_DIR_ENV, DEFAULT_DATA_DIR
from .models import ChartPoint, DemographicsDataset, EthnicityPoint

logger = logging.getLogger(__name__)

FALLBACK_DIR_NAME = "scotland_demographics"


# ---------------------------------------------------------------------------
# Artifact location
# ---------------------------------------------------------------------------


def _candidate_dirs() -> list[Path]:
    """Data directory candidates, in lookup order.

    1. The ``DEMOGRAPHICS_DATA_DIR`` environment variable, if set.
    2. A ``data`` folder at the repository root.
    3. A temporary directory in ``/tmp``.
    """
    candidates: list[Path] = []
    env = os.getenv(DATA_DIR_ENV)
    if env:
        candidates.append(Path(env).expanduser().resolve())
    candidates.append(DEFAULT_DATA_DIR)
    candidates.append(Path(tempfile.gettempdir()) / FALLBACK_DIR_NAME)
    return candidates


def resolve_data_dir() -> Path:
    """Select a writable directory for the artifact.

    Each candidate path is tested for writability by attempting to
    create and delete a sentinel file.  The first path that succeeds
    is returned.  Only the writing side (the pipeline) should call this.
    """
    candidates = _candidate_dirs()
    for path in candidates:
        try:
            path.mkdir(parents=True, exist_ok=True)
            test_file = path / ".write_test"
            test_file.write_text("ok", encoding="utf-8")
            test_file.unlink()
            return path
        except OSError as exc:
            logger.debug("Data directory %s not usable: %s", path, exc)
            continue

    fallback = candidates[-1]
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def default_artifact_path() -> Path:
    """Where the pipeline writes the artifact by default."""
    return resolve_data_dir() / ARTIFACT_NAME


def locate_artifact() -> Path:
    """Find an existing artifact without creating or writing anything.

    Returns the artifact in the first candidate directory that has one,
    else the path in the first candidate so a missing file is reported
    where it was expected.
    """
    candidates = [path / ARTIFACT_NAME for path in _candidate_dirs()]
    for path in candidates:
        if path.is_file():
            return path
    return candidates[0]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_dataset(path: Path) -> DemographicsDataset:
    """Read a dataset artifact from disk."""
    with Path(path).open("r", encoding="utf-8") as fh:
        dataset = json.load(fh)
    logger.info(
        "Loaded %s: %d population and %d ethnicity record(s)",
        Path(path).name,
        len(dataset.get("population", [])),
        len(dataset.get("ethnicity", [])),
    )
    return dataset


@lru_cache(maxsize=4)
def _cached_dataset(path: Path) -> DemographicsDataset:
    return load_dataset(path)


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------


def by_age_group(dataset: DemographicsDataset) -> List[ChartPoint]:
    """Sum population counts per age group, in first-seen order.

    Counts are summed across every gender and year, so duplicate age
    groups accumulate.  The result is not sorted.
    """
    population = pd.DataFrame(dataset["population"], columns=["Age Group", "Count"])
    if population.empty:
        return []
    grouped = population.groupby("Age Group", sort=False)["Count"].sum()
    return [
        {"name": name, "value": value}
        for name, value in zip(grouped.index.tolist(), grouped.tolist())
    ]


def by_ethnicity(dataset: DemographicsDataset) -> List[EthnicityPoint]:
    """List ethnicity subgroups ranked by count, largest first.

    The sort is stable, so ties keep their original order.  Nothing is
    truncated; callers wanting a top-N slice take it themselves.
    """
    ethnicity = pd.DataFrame(
        dataset["ethnicity"], columns=["Subgroup", "Count", "Group"]
    ).rename(columns={"Subgroup": "name", "Count": "value", "Group": "group"})
    if ethnicity.empty:
        return []
    ranked = ethnicity.sort_values("value", ascending=False, kind="stable")
    return ranked.to_dict(orient="records")  # type: ignore[return-value]


def total_population(dataset: DemographicsDataset) -> int:
    return _sum_counts(dataset["population"])


def top_ethnicity(dataset: DemographicsDataset, default: str = "N/A") -> str:
    """Name of the largest ethnicity subgroup, or ``default`` when there is none."""
    ranked = by_ethnicity(dataset)
    return ranked[0]["name"] if ranked else default


# ---------------------------------------------------------------------------
# Accessors for the dashboard
# ---------------------------------------------------------------------------


def get_demographics_data(path: Optional[Path] = None) -> DemographicsDataset:
    """Return the raw dataset, loading the artifact once per path."""
    return _cached_dataset(Path(path) if path else locate_artifact())


def get_population_by_age_group(path: Optional[Path] = None) -> List[ChartPoint]:
    return by_age_group(get_demographics_data(path))


def get_ethnicity_data(path: Optional[Path] = None) -> List[EthnicityPoint]:
    return by_ethnicity(get_demographics_data(path))


def clear_cache() -> None:
    """Forget loaded artifacts, e.g. after the pipeline has rewritten them."""
    _cached_dataset.cache_clear()
