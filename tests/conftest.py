from pathlib import Path
from typing import Dict, List, Sequence
from xml.sax.saxutils import escape
from zipfile import ZipFile

import pytest

from scotland_demographics import data_manager
from scotland_demographics.workbook import _col_idx


def _col_letters(idx: int) -> str:
    letters = ""
    idx += 1
    while idx:
        idx, rem = divmod(idx - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def _sheet_xml(rows: Sequence[Sequence[object]]) -> str:
    out = []
    for r, row in enumerate(rows, start=1):
        if not row:
            continue
        cells = []
        for c, value in enumerate(row):
            ref = f"{_col_letters(c)}{r}"
            assert _col_idx(ref) == c
            if value is None:
                continue
            if isinstance(value, bool):
                cells.append(f'<c r="{ref}" t="b"><v>{int(value)}</v></c>')
            elif isinstance(value, (int, float)):
                cells.append(f'<c r="{ref}"><v>{value}</v></c>')
            else:
                cells.append(
                    f'<c r="{ref}" t="inlineStr"><is><t>{escape(str(value))}</t></is></c>'
                )
        out.append(f'<row r="{r}">{"".join(cells)}</row>')
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">'
        f'<sheetData>{"".join(out)}</sheetData></worksheet>'
    )


def write_xlsx(path: Path, sheets: Dict[str, List[List[object]]]) -> Path:
    """Write a bare-bones workbook; strings are stored inline."""
    sheet_entries, rels = [], []
    with ZipFile(path, "w") as zf:
        for i, (name, rows) in enumerate(sheets.items(), start=1):
            sheet_entries.append(
                f'<sheet name="{escape(name)}" sheetId="{i}" r:id="rId{i}"/>'
            )
            rels.append(
                f'<Relationship Id="rId{i}" '
                'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet" '
                f'Target="worksheets/sheet{i}.xml"/>'
            )
            zf.writestr(f"xl/worksheets/sheet{i}.xml", _sheet_xml(rows))
        zf.writestr(
            "xl/workbook.xml",
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<workbook xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" '
            'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">'
            f'<sheets>{"".join(sheet_entries)}</sheets></workbook>',
        )
        zf.writestr(
            "xl/_rels/workbook.xml.rels",
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            f'{"".join(rels)}</Relationships>',
        )
    return path


# Single-year-of-age header: "All Ages", 0..90 with "90+" as the last column
AGE_HEADER: List[object] = ["Area", "Sex", "All Ages"] + [str(a) for a in range(90)] + ["90+"]


def population_grid(per_age: int = 10) -> List[List[object]]:
    ages = [per_age] * 91
    return [
        ["Table 1: Mid-2022 population estimates"],
        [],
        AGE_HEADER,
        ["Scotland", "Females", per_age * 91] + ages,
        ["Scotland", "Persons", per_age * 91] + ages,
        ["Aberdeen City", "Persons", 1] + [1] * 91,
    ]


def ethnicity_sheets() -> Dict[str, List[List[object]]]:
    return {
        "Cover": [["Scotland's Census 2022 chart data"]],
        "Figure 4": [
            ["Figure 4: Ethnic group by age"],
            ["Ethnic group", "Count"],
            ["White", 100],
        ],
        "Figure 5": [
            ["Figure 5: Ethnic group, Scotland, 2011 and 2022"],
            ["Year", "Ethnic group", "Percentage (%)"],
            [2011, "White Scottish", 84.0],
            [2022, "White Scottish", 77.7],
            [2022, "Other White", 2.5],
            [2022, "Pakistani", "1.3"],
            [2022, None, 4.0],
            [2022, "Not recorded", None],
        ],
    }


@pytest.fixture
def xlsx_factory(tmp_path):
    def _make(name: str, sheets: Dict[str, List[List[object]]]) -> Path:
        return write_xlsx(tmp_path / name, sheets)

    return _make


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("DEMOGRAPHICS_DATA_DIR", str(tmp_path / "data"))
    data_manager.clear_cache()
    yield
    data_manager.clear_cache()
