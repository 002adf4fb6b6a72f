"""Core pipeline logic: produce the demographics artifact.

Two producers build the same :class:`DemographicsDataset` shape:

* ``"xlsx"`` downloads the NRS mid-year population estimates and the
  Scotland's Census 2022 chart data, extracts records from the
  workbooks heuristically and derives ethnicity counts from percentages.
* ``"csv"`` reads two hand-maintained CSV files from ``data/raw``.

The caller picks one by name.  :func:`build_dataset` propagates every
error; :func:`run_pipeline` is the outermost scope, which logs failures
and guarantees that nothing is written unless the whole run succeeded.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional

from . import data_manager
from .assemble import assemble_dataset, write_artifact
from .config import (
    DEFAULT_DATA_DIR,
    DEFAULT_SOURCE_KIND,
    ETHNICITY_CSV,
    ETHNICITY_URL,
    POPULATION_CSV,
    POPULATION_URL,
    RAW_DIR_NAME,
    SOURCE_LABELS,
    SourceKind,
)
from .csv_normalize import load_ethnicity_csv, load_population_csv
from .extract import extract_ethnicity, extract_population
from .fetch import download_file
from .models import DemographicsDataset
from .workbook import read_workbook

logger = logging.getLogger(__name__)

DEFAULT_RAW_DIR: Path = DEFAULT_DATA_DIR / RAW_DIR_NAME


# ---------------------------------------------------------------------------
# Producers
# ---------------------------------------------------------------------------


def produce_from_spreadsheets(
    *,
    population_url: str = POPULATION_URL,
    ethnicity_url: str = ETHNICITY_URL,
    source: str = SOURCE_LABELS["xlsx"],
    renames: Optional[Dict[str, str]] = None,
    now: Optional[datetime] = None,
) -> DemographicsDataset:
    """Download both workbooks and assemble a dataset from them.

    The downloads live in a temporary directory that is removed when this
    function returns, whether it succeeded or not.
    """
    with tempfile.TemporaryDirectory(prefix="demographics_") as tmp:
        tmp_dir = Path(tmp)
        pop_file = download_file(population_url, tmp_dir / "population.xlsx")
        eth_file = download_file(ethnicity_url, tmp_dir / "ethnicity.xlsx")

        logger.info("Processing population data")
        population = extract_population(read_workbook(pop_file))
        logger.info("Population records found: %d", len(population))

        logger.info("Processing ethnicity data")
        ethnicity = extract_ethnicity(read_workbook(eth_file))
        logger.info("Ethnicity records found: %d", len(ethnicity))

    return assemble_dataset(
        population, ethnicity, source=source, renames=renames, now=now
    )


def produce_from_csv(
    *,
    raw_dir: Path = DEFAULT_RAW_DIR,
    source: str = SOURCE_LABELS["csv"],
    renames: Optional[Dict[str, str]] = None,
    now: Optional[datetime] = None,
) -> DemographicsDataset:
    """Assemble a dataset from ``population.csv`` and ``ethnicity.csv``.

    The CSV files already use current subgroup labels, so no relabelling
    is applied unless ``renames`` is given.
    """
    raw_dir = Path(raw_dir)
    logger.info("Processing CSV data from %s", raw_dir)
    population = load_population_csv(raw_dir / POPULATION_CSV)
    ethnicity = load_ethnicity_csv(raw_dir / ETHNICITY_CSV)
    logger.info(
        "CSV records found: population=%d, ethnicity=%d",
        len(population),
        len(ethnicity),
    )
    return assemble_dataset(
        population, ethnicity, source=source, renames=renames or {}, now=now
    )


PRODUCERS: Dict[str, Callable[..., DemographicsDataset]] = {
    "xlsx": produce_from_spreadsheets,
    "csv": produce_from_csv,
}


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def build_dataset(kind: SourceKind = DEFAULT_SOURCE_KIND, **options) -> DemographicsDataset:
    """Run the named producer with ``options`` and return its dataset."""
    try:
        producer = PRODUCERS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown source {kind!r}; expected one of {sorted(PRODUCERS)}"
        ) from None
    return producer(**options)


def run_pipeline(
    kind: SourceKind = DEFAULT_SOURCE_KIND,
    *,
    output: Optional[Path] = None,
    **options,
) -> Optional[Path]:
    """Build the dataset and write it, containing any failure.

    Parameters
    ----------
    kind : {"xlsx", "csv"}
        Which producer to run.
    output : Path, optional
        Artifact location; defaults to ``demographics.json`` in the
        resolved data directory.
    **options
        Forwarded to the producer (e.g. ``raw_dir`` for ``"csv"``).

    Returns
    -------
    Optional[Path]
        The written artifact path, or ``None`` if the run failed.  On
        failure any artifact already on disk is left untouched.
    """
    target = output
    try:
        target = Path(output) if output else data_manager.default_artifact_path()
        dataset = build_dataset(kind, **options)
        path = write_artifact(dataset, target)
    except Exception:
        logger.exception("Pipeline (%s) failed; no artifact written to %s", kind, target)
        return None

    data_manager.clear_cache()
    return path
