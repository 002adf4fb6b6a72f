"""Heuristic extraction of population and ethnicity records from workbooks.

The source spreadsheets are published for people, not machines, so rows
and columns are located by landmark cells rather than fixed positions.
Every search here follows the same best-effort, first-match policy:

* a landmark search returns the index of the first qualifying row (or
  ``None``) and never looks past it;
* a missing landmark yields an empty or partial result, logged at
  WARNING, instead of an exception.

Any layout change upstream therefore degrades the output quietly, which
is why the pipeline logs record counts after each extraction step.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .config import (
    AGE_BRACKETS,
    DATASET_YEAR,
    DEFAULT_GENDER,
    DEFAULT_GROUP,
    ETHNICITY_HEADER_MARKERS,
    ETHNICITY_PROBE_ROWS,
    ETHNICITY_PROBE_TEXT,
    GROUP_COLUMN,
    HEADER_MARKERS,
    PERCENTAGE_COLUMN,
    PERCENTAGE_SHEET,
    PERSONS_MARKERS,
    POPULATION_SHEET_MARKERS,
    REGION_MARKER,
    YEAR_COLUMN,
)
from .models import Cell, EthnicityRecord, Grid, PopulationRecord, Workbook
from .utils import (
    find_first,
    find_last,
    is_number,
    parse_leading_float,
    parse_leading_int,
    round_half_up,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row predicates
# ---------------------------------------------------------------------------


def _row_has_any(row: Sequence[Cell], markers: Sequence[str]) -> bool:
    """Exact-match test: does any cell equal one of ``markers``?"""
    return any(marker in row for marker in markers)


def _cell(row: Sequence[Cell], idx: int) -> Cell:
    return row[idx] if 0 <= idx < len(row) else None


def _index_of(row: Sequence[Cell], value: str) -> int:
    try:
        return list(row).index(value)
    except ValueError:
        return -1


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------


def select_population_sheet(
    workbook: Workbook, markers: Sequence[str] = POPULATION_SHEET_MARKERS
) -> Optional[str]:
    """Pick the first sheet whose name contains a marker, else the first sheet."""
    names = list(workbook)
    if not names:
        return None
    idx = find_first(names, lambda name: any(m in name for m in markers))
    return names[idx if idx is not None else 0]


def locate_population_rows(
    rows: Grid,
    *,
    header_markers: Sequence[str] = HEADER_MARKERS,
    region_marker: str = REGION_MARKER,
    persons_markers: Sequence[str] = PERSONS_MARKERS,
) -> Tuple[Optional[int], Optional[int]]:
    """Find the (header row, target row) landmarks in a population grid.

    The target row is the first row naming both the region and a
    population category.  The header row is the last header-like row at
    or before the target.  Either index is ``None`` when not found.
    """
    target_idx = find_first(
        rows,
        lambda row: region_marker in row and _row_has_any(row, persons_markers),
    )
    stop = target_idx + 1 if target_idx is not None else None
    header_idx = find_last(rows, lambda row: _row_has_any(row, header_markers), stop)
    return header_idx, target_idx


def sum_age_brackets(
    headers: Sequence[Cell],
    values: Sequence[Cell],
    brackets: Dict[str, Tuple[int, int]] = AGE_BRACKETS,
) -> Dict[str, int]:
    """Sum single-year-of-age columns into inclusive age brackets.

    Header cells without a leading integer and non-numeric value cells
    contribute nothing.
    """
    ages = [parse_leading_int(h) for h in headers]
    totals: Dict[str, int] = {}
    for label, (low, high) in brackets.items():
        total = 0.0
        for col, age in enumerate(ages):
            if age is None or not low <= age <= high:
                continue
            value = _cell(values, col)
            if is_number(value):
                total += value  # type: ignore[operator]
        totals[label] = round_half_up(total)
    return totals


def extract_population(
    workbook: Workbook,
    *,
    sheet_markers: Sequence[str] = POPULATION_SHEET_MARKERS,
    header_markers: Sequence[str] = HEADER_MARKERS,
    region_marker: str = REGION_MARKER,
    persons_markers: Sequence[str] = PERSONS_MARKERS,
    brackets: Dict[str, Tuple[int, int]] = AGE_BRACKETS,
    year: int = DATASET_YEAR,
    gender: str = DEFAULT_GENDER,
) -> List[PopulationRecord]:
    """Extract one population record per age bracket from the region row.

    Returns an empty list when the sheet, the header row or the region
    row cannot be found.
    """
    sheet_name = select_population_sheet(workbook, sheet_markers)
    if sheet_name is None:
        logger.warning("Population workbook has no sheets")
        return []

    rows = workbook[sheet_name]
    header_idx, target_idx = locate_population_rows(
        rows,
        header_markers=header_markers,
        region_marker=region_marker,
        persons_markers=persons_markers,
    )
    if header_idx is None or target_idx is None:
        logger.warning(
            "Population landmarks not found in sheet %r (header=%s, target=%s)",
            sheet_name,
            header_idx,
            target_idx,
        )
        return []

    logger.debug(
        "Population sheet %r: header row %d, %s row %d",
        sheet_name,
        header_idx,
        region_marker,
        target_idx,
    )
    totals = sum_age_brackets(rows[header_idx], rows[target_idx], brackets)
    return [
        {"Year": year, "Age Group": label, "Gender": gender, "Count": count}
        for label, count in totals.items()
    ]


# ---------------------------------------------------------------------------
# Ethnicity
# ---------------------------------------------------------------------------


def has_ethnicity_data(
    rows: Grid,
    probe: str = ETHNICITY_PROBE_TEXT,
    probe_rows: int = ETHNICITY_PROBE_ROWS,
) -> bool:
    """True if a string cell in the first ``probe_rows`` rows mentions ``probe``."""
    needle = probe.lower()
    return any(
        isinstance(cell, str) and needle in cell.lower()
        for row in rows[:probe_rows]
        for cell in row
    )


def extract_percentages(
    rows: Grid,
    *,
    group_column: str = GROUP_COLUMN,
    percentage_column: str = PERCENTAGE_COLUMN,
    year_column: str = YEAR_COLUMN,
    year: int = DATASET_YEAR,
    group: str = DEFAULT_GROUP,
) -> List[EthnicityRecord]:
    """Read ``(subgroup, percentage)`` rows for ``year`` from a chart-data sheet.

    Counts are left at 0; the assembler derives them from the total
    population.
    """
    header_idx = find_first(
        rows, lambda row: group_column in row and percentage_column in row
    )
    if header_idx is None:
        logger.warning(
            "No header with %r and %r in percentage sheet",
            group_column,
            percentage_column,
        )
        return []

    headers = rows[header_idx]
    group_idx = _index_of(headers, group_column)
    pct_idx = _index_of(headers, percentage_column)
    year_idx = _index_of(headers, year_column)
    if year_idx < 0:
        logger.warning("Percentage sheet has no %r column", year_column)
        return []

    records: List[EthnicityRecord] = []
    for row in rows[header_idx + 1 :]:
        subgroup = _cell(row, group_idx)
        pct_cell = _cell(row, pct_idx)
        row_year = _cell(row, year_idx)
        if not subgroup or not pct_cell:
            continue
        if not is_number(row_year) or row_year != year:
            continue
        percentage = parse_leading_float(pct_cell)
        if percentage is None:
            logger.debug("Skipping unparseable percentage %r for %r", pct_cell, subgroup)
            continue
        records.append(
            {
                "Group": group,
                "Subgroup": str(subgroup).strip(),
                "Count": 0,
                "Percentage": percentage,
            }
        )
    return records


def extract_ethnicity(
    workbook: Workbook,
    *,
    header_markers: Sequence[str] = ETHNICITY_HEADER_MARKERS,
    percentage_sheet: str = PERCENTAGE_SHEET,
    year: int = DATASET_YEAR,
) -> List[EthnicityRecord]:
    """Extract ethnicity percentages from the census chart-data workbook.

    Only the first sheet that mentions ethnic groups and has a header row
    is handled; processing stops there even if later sheets also qualify.
    The records themselves come from the ``percentage_sheet`` chart data.
    """
    for name, rows in workbook.items():
        if not has_ethnicity_data(rows):
            continue

        header_idx = find_first(rows, lambda row: _row_has_any(row, header_markers))
        if header_idx is None:
            logger.debug("Sheet %r mentions ethnic groups but has no header row", name)
            continue

        logger.info("Found ethnicity data in sheet %r", name)
        chart_rows = workbook.get(percentage_sheet)
        if chart_rows is None:
            logger.warning("Percentage sheet %r not found", percentage_sheet)
            return []
        return extract_percentages(chart_rows, year=year)

    logger.warning("No sheet with ethnicity data found")
    return []
