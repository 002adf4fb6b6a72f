"""Assemble extracted records into the persisted demographics artifact.

Ethnicity rows from the census chart data only carry a percentage, so
absolute counts are derived from the total of the population table.  The
finished dataset is written once, atomically, and never updated in place.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import SOURCE_LABELS, SUBGROUP_RENAMES
from .models import DemographicsDataset, EthnicityRecord, PopulationRecord
from .utils import parse_leading_float, round_half_up

logger = logging.getLogger(__name__)


def total_population(population: Sequence[PopulationRecord]) -> int:
    """Sum ``Count`` over every population record."""
    return sum(record["Count"] for record in population)


def derive_ethnicity_counts(
    ethnicity: Sequence[EthnicityRecord],
    total: int,
    renames: Optional[Dict[str, str]] = None,
) -> List[EthnicityRecord]:
    """Rename legacy subgroups and derive counts from percentages.

    Each record carrying a ``Percentage`` gets
    ``Count = round(Percentage / 100 * total)``, computed independently so
    rounding never accumulates.  Text percentages are parsed by their
    leading number; records without a usable percentage keep their count
    and lose the ``Percentage`` key.  Input records are not modified.
    """
    renames = SUBGROUP_RENAMES if renames is None else renames
    derived: List[EthnicityRecord] = []
    for record in ethnicity:
        out: EthnicityRecord = dict(record)  # type: ignore[assignment]
        out["Subgroup"] = renames.get(record["Subgroup"], record["Subgroup"])
        # CSV inputs carry Percentage as text
        percentage = parse_leading_float(record.get("Percentage"))
        if percentage is not None:
            out["Percentage"] = percentage
            out["Count"] = round_half_up(percentage / 100 * total)
        else:
            out.pop("Percentage", None)  # type: ignore[misc]
        derived.append(out)
    return derived


def _timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def assemble_dataset(
    population: Sequence[PopulationRecord],
    ethnicity: Sequence[EthnicityRecord],
    *,
    source: str = SOURCE_LABELS["xlsx"],
    renames: Optional[Dict[str, str]] = None,
    now: Optional[datetime] = None,
) -> DemographicsDataset:
    """Build the final dataset with metadata stamped at creation time.

    Parameters
    ----------
    population : Sequence[PopulationRecord]
        Population records; their counts define the total population.
    ethnicity : Sequence[EthnicityRecord]
        Raw ethnicity records, possibly with placeholder counts.
    source : str, optional
        Provenance string written to ``metadata.source``.
    renames : Dict[str, str], optional
        Subgroup relabelling map; defaults to ``config.SUBGROUP_RENAMES``.
    now : datetime, optional
        Creation time; the current UTC time when omitted.

    Returns
    -------
    DemographicsDataset
        The artifact payload, ready for :func:`write_artifact`.
    """
    total = total_population(population)
    logger.info("Total population: %s", f"{total:,}")
    return {
        "metadata": {"generatedAt": _timestamp(now), "source": source},
        "population": [dict(r) for r in population],  # type: ignore[misc]
        "ethnicity": derive_ethnicity_counts(ethnicity, total, renames),
    }


def write_artifact(dataset: DemographicsDataset, path: Path) -> Path:
    """Write the dataset as JSON atomically.

    The JSON is first written to a temporary file in the same directory and
    then renamed over ``path``, so an interrupted run leaves any previous
    artifact untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(dataset, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.info("Data saved to %s", path)
    return path
