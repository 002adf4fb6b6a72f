"""Small helpers shared across the pipeline modules."""

import math
import re
from typing import Callable, List, Optional, Sequence, TypeVar

import pandas as pd

from .models import Cell

T = TypeVar("T")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def find_first(
    items: Sequence[T], predicate: Callable[[T], bool], start: int = 0
) -> Optional[int]:
    """Return the index of the first item matching ``predicate``, or ``None``.

    Scanning stops at the first match; later matches are never inspected.
    """
    for idx in range(start, len(items)):
        if predicate(items[idx]):
            return idx
    return None


def find_last(
    items: Sequence[T], predicate: Callable[[T], bool], stop: Optional[int] = None
) -> Optional[int]:
    """Return the index of the last matching item before ``stop`` (exclusive)."""
    end = len(items) if stop is None else min(stop, len(items))
    for idx in range(end - 1, -1, -1):
        if predicate(items[idx]):
            return idx
    return None


def is_number(value: Cell) -> bool:
    """True for real numeric cells; booleans and NaN do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def parse_leading_int(value: Cell) -> Optional[int]:
    """Parse an integer from the start of a cell (``"90+"`` -> 90)."""
    if is_number(value):
        if math.isinf(value):  # type: ignore[arg-type]
            return None
        return int(value)  # type: ignore[arg-type]
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


def parse_leading_float(value: Cell) -> Optional[float]:
    """Parse a float from the start of a cell (``"12.5%"`` -> 12.5)."""
    if is_number(value):
        return float(value)  # type: ignore[arg-type]
    if isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        if match:
            return float(match.group(1))
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def ensure_columns(df: pd.DataFrame, required: List[str]) -> None:
    """Raise an error if the DataFrame lacks any of the required columns."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise KeyError(f"Missing expected columns: {missing}")
