"""
Typed loading of the hand-maintained population and ethnicity CSV files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Sequence, TextIO

import pandas as pd

from .config import (
    ETHNICITY_COLUMNS,
    ETHNICITY_NUMERIC,
    POPULATION_COLUMNS,
    POPULATION_NUMERIC,
)
from .models import EthnicityRecord, PopulationRecord
from .utils import ensure_columns

logger = logging.getLogger(__name__)


def normalize_csv(
    source: str | Path | TextIO,
    *,
    numeric_columns: Sequence[str],
    required: Sequence[str] = (),
    sep: str = ",",
) -> List[Dict[str, object]]:
    """Parse delimited text into records, casting ``numeric_columns``.

    Every other column is kept as text.  Blank lines are skipped.  Malformed
    delimited syntax raises :class:`pandas.errors.ParserError`; rows with
    too few fields and empty or non-numeric values in a numeric column
    raise :class:`ValueError`.  Value ranges are not checked.
    """
    df = pd.read_csv(
        source,
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    ensure_columns(df, list(required))

    # With keep_default_na=False only fields missing from a short row are NaN
    short_rows = df.index[df.isna().any(axis=1)]
    if len(short_rows):
        raise ValueError(
            f"Rows with missing fields (data rows {[i + 1 for i in short_rows]})"
        )

    for col in numeric_columns:
        if col not in df.columns:
            continue
        values = pd.to_numeric(df[col].str.strip(), errors="raise")
        empty = df.index[values.isna()]
        if len(empty):
            raise ValueError(
                f"Empty {col!r} values (data rows {[i + 1 for i in empty]})"
            )
        if (values % 1 == 0).all():
            values = values.astype("int64")
        df[col] = values

    records = df.to_dict(orient="records")
    logger.debug("Parsed %d record(s) with columns %s", len(records), list(df.columns))
    return records


def load_population_csv(source: str | Path | TextIO) -> List[PopulationRecord]:
    """Load ``Year,Age Group,Gender,Count`` rows."""
    return normalize_csv(  # type: ignore[return-value]
        source, numeric_columns=POPULATION_NUMERIC, required=POPULATION_COLUMNS
    )


def load_ethnicity_csv(source: str | Path | TextIO) -> List[EthnicityRecord]:
    """Load ``Group,Subgroup,Count`` rows."""
    return normalize_csv(  # type: ignore[return-value]
        source, numeric_columns=ETHNICITY_NUMERIC, required=ETHNICITY_COLUMNS
    )
