import io

import pandas as pd
import pytest

from scotland_demographics.csv_normalize import (
    load_ethnicity_csv,
    load_population_csv,
    normalize_csv,
)

POPULATION_TEXT = """Year,Age Group,Gender,Count
2022,0-4,Male,133905

2022,0-4,Female,127560
2022,85+,Female,81562
"""


def test_population_columns_are_cast():
    records = load_population_csv(io.StringIO(POPULATION_TEXT))

    assert records[0] == {"Year": 2022, "Age Group": "0-4", "Gender": "Male", "Count": 133905}
    assert len(records) == 3  # blank line skipped
    assert all(isinstance(r["Count"], int) and isinstance(r["Year"], int) for r in records)
    assert records[2]["Age Group"] == "85+"


def test_ethnicity_only_count_is_numeric():
    text = "Group,Subgroup,Count\nWhite,White Polish,90548\nAsian,2011,47075\n"
    records = load_ethnicity_csv(io.StringIO(text))

    assert records[0] == {"Group": "White", "Subgroup": "White Polish", "Count": 90548}
    assert records[1]["Subgroup"] == "2011"


def test_missing_column_raises():
    with pytest.raises(KeyError):
        load_ethnicity_csv(io.StringIO("Group,Count\nWhite,1\n"))


def test_malformed_rows_propagate():
    text = "Year,Age Group,Gender,Count\n2022,0-4,All,10\n2022,5-9,All,20,extra,more\n"
    with pytest.raises(pd.errors.ParserError):
        load_population_csv(io.StringIO(text))


def test_non_numeric_count_raises():
    text = "Year,Age Group,Gender,Count\n2022,0-4,All,lots\n"
    with pytest.raises(ValueError):
        load_population_csv(io.StringIO(text))


def test_ranges_are_not_validated():
    text = "Year,Age Group,Gender,Count\n1850,200-204,All,-5\n"
    assert load_population_csv(io.StringIO(text))[0]["Count"] == -5


def test_custom_separator():
    records = normalize_csv(io.StringIO("a;b\n1;x\n"), numeric_columns=["a"], sep=";")
    assert records == [{"a": 1, "b": "x"}]


def test_short_row_raises():
    text = "Year,Age Group,Gender,Count\n2022,0-4,All,10\n2022,5-9\n"
    with pytest.raises(ValueError, match="missing fields"):
        load_population_csv(io.StringIO(text))


def test_empty_count_raises():
    text = "Year,Age Group,Gender,Count\n2022,0-4,All,10\n2022,5-9,All,\n"
    with pytest.raises(ValueError):
        load_population_csv(io.StringIO(text))


def test_integral_counts_stay_integers():
    text = "Group,Subgroup,Count\nWhite,White Irish,54090\nAsian,Chinese,47075\n"
    records = load_ethnicity_csv(io.StringIO(text))
    assert [type(r["Count"]) for r in records] == [int, int]


def test_fractional_counts_stay_floats():
    records = normalize_csv(io.StringIO("Count\n1.5\n2\n"), numeric_columns=["Count"])
    assert [r["Count"] for r in records] == [1.5, 2.0]
