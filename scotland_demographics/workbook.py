"""
Minimal ``.xlsx`` reader returning every sheet as a grid of typed cells.

The workbook is read straight from its zip/XML parts, so no spreadsheet
engine is required.  Shared strings, inline strings and formula strings
come back as ``str``; booleans as ``bool``; numbers as ``int`` when they
are integral and ``float`` otherwise.  Gaps inside a row are ``None`` and
blank rows are kept as empty lists so row indices match the sheet.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional
from zipfile import ZipFile

from .models import Cell, Grid, Workbook

logger = logging.getLogger(__name__)

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
DOC_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

_NS = {"n": MAIN_NS}
_TAG = f"{{{MAIN_NS}}}"


# ---------------------------------------------------------------------------
# Zip part helpers
# ---------------------------------------------------------------------------


def _load_shared_strings(zf: ZipFile) -> List[str]:
    """Return list of shared strings used in the workbook."""
    try:
        root = ET.fromstring(zf.read("xl/sharedStrings.xml"))
    except KeyError:
        # Workbook with no shared strings
        return []

    strings: List[str] = []
    for si in root.findall("n:si", _NS):
        parts = [t.text or "" for t in si.findall(".//n:t", _NS)]
        strings.append("".join(parts))
    return strings


def _sheet_paths(zf: ZipFile) -> Dict[str, str]:
    """Map sheet name -> path inside the zip, in workbook order."""
    rel_root = ET.fromstring(zf.read("xl/_rels/workbook.xml.rels"))
    rel_map = {
        rel.attrib["Id"]: rel.attrib["Target"]
        for rel in rel_root.findall("r:Relationship", {"r": REL_NS})
    }

    wb_root = ET.fromstring(zf.read("xl/workbook.xml"))
    result: Dict[str, str] = {}
    sheets = wb_root.find("n:sheets", _NS)
    if sheets is None:
        return result
    for sheet in sheets:
        name = sheet.attrib["name"]
        target = rel_map[sheet.attrib[f"{{{DOC_REL_NS}}}id"]]
        # Targets are usually relative to xl/, occasionally absolute
        target = target.lstrip("/")
        if not target.startswith("xl/"):
            target = f"xl/{target}"
        result[name] = target
    return result


def _col_idx(cell_ref: str) -> int:
    """Convert Excel cell reference (A1) into zero-based column index."""
    letters = "".join(ch for ch in cell_ref if ch.isalpha())
    idx = 0
    for ch in letters:
        idx = idx * 26 + (ord(ch.upper()) - ord("A") + 1)
    return idx - 1


def _row_idx(row_ref: Optional[str], fallback: int) -> int:
    try:
        return int(row_ref) - 1 if row_ref else fallback
    except ValueError:
        return fallback


def _number(text: str) -> Cell:
    try:
        value = float(text)
    except ValueError:
        return text
    if value.is_integer():
        return int(value)
    return value


def _cell_value(c: ET.Element, shared_strings: List[str]) -> Cell:
    """Type a single ``<c>`` element according to its ``t`` attribute."""
    kind = c.attrib.get("t", "n")
    if kind == "inlineStr":
        parts = [t.text or "" for t in c.findall(f".//{_TAG}t")]
        return "".join(parts)

    v_elem = c.find(f"{_TAG}v")
    if v_elem is None or v_elem.text is None:
        return None
    raw = v_elem.text

    if kind == "s":
        try:
            return shared_strings[int(raw)]
        except (IndexError, ValueError):
            return raw
    if kind == "b":
        return raw.strip() == "1"
    if kind in ("str", "e"):
        return raw
    return _number(raw)


def _read_sheet_rows(zf: ZipFile, sheet_path: str, shared_strings: List[str]) -> Grid:
    """Return sheet rows as lists, aligning rows and columns by reference."""
    root = ET.fromstring(zf.read(sheet_path))
    rows: Grid = []

    for row in root.findall(f".//{_TAG}row"):
        r_idx = _row_idx(row.attrib.get("r"), len(rows))
        # Pad skipped (blank) rows so indices line up with the sheet
        while len(rows) < r_idx:
            rows.append([])

        cells: Dict[int, Cell] = {}
        for position, c in enumerate(row.findall(f"{_TAG}c")):
            ref = c.attrib.get("r")
            col = _col_idx(ref) if ref else position
            cells[col] = _cell_value(c, shared_strings)

        row_vals: List[Cell] = []
        if cells:
            row_vals = [None] * (max(cells) + 1)
            for col, val in cells.items():
                row_vals[col] = val
        rows.append(row_vals)

    return rows


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def read_workbook(source: str | Path | BinaryIO) -> Workbook:
    """Read every worksheet of an ``.xlsx`` file into an ordered mapping.

    Parameters
    ----------
    source : str, Path or binary file object
        Location of the workbook, or an open binary stream.

    Returns
    -------
    Workbook
        Mapping of sheet name to its rows, in workbook order.
    """
    workbook: Workbook = {}
    with ZipFile(source) as zf:
        shared_strings = _load_shared_strings(zf)
        for name, sheet_path in _sheet_paths(zf).items():
            try:
                workbook[name] = _read_sheet_rows(zf, sheet_path, shared_strings)
            except KeyError:
                # Chart sheets and the like have no worksheet part
                logger.debug("Sheet %r has no worksheet part at %s", name, sheet_path)
    logger.debug("Read %d sheet(s): %s", len(workbook), list(workbook))
    return workbook
