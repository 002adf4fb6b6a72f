import json
from datetime import datetime, timezone

import pytest

from scotland_demographics.assemble import (
    assemble_dataset,
    derive_ethnicity_counts,
    total_population,
    write_artifact,
)

NOW = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


def _population(*counts):
    return [
        {"Year": 2022, "Age Group": "0-4", "Gender": "All", "Count": c} for c in counts
    ]


def test_total_population():
    assert total_population(_population(400, 600)) == 1000
    assert total_population([]) == 0


def test_count_from_percentage():
    dataset = assemble_dataset(
        _population(400, 600),
        [{"Group": "All", "Subgroup": "White Scottish", "Count": 0, "Percentage": 70.0}],
        now=NOW,
    )
    assert dataset["ethnicity"][0]["Count"] == 700


@pytest.mark.parametrize("pct", [77.7, 2.5, 0.05, 33.333, 100.0])
def test_each_count_is_rounded_independently(pct):
    total = 5_447_700
    (record,) = derive_ethnicity_counts(
        [{"Group": "All", "Subgroup": "X", "Count": 0, "Percentage": pct}], total
    )
    assert record["Count"] == int(pct / 100 * total + 0.5)


def test_other_white_is_renamed_and_count_unaffected():
    raw = [
        {"Group": "All", "Subgroup": "Other White", "Count": 0, "Percentage": 2.5},
        {"Group": "All", "Subgroup": "Pakistani", "Count": 0, "Percentage": 1.0},
    ]
    derived = derive_ethnicity_counts(raw, 1000)

    assert derived[0]["Subgroup"] == "White Scottish"
    assert derived[0]["Count"] == 25
    assert derived[1]["Subgroup"] == "Pakistani"
    assert raw[0]["Subgroup"] == "Other White"  # input untouched


def test_records_without_percentage_keep_count():
    derived = derive_ethnicity_counts(
        [{"Group": "White", "Subgroup": "White Polish", "Count": 90548}], 1000, renames={}
    )
    assert derived == [{"Group": "White", "Subgroup": "White Polish", "Count": 90548}]


def test_metadata_is_stamped():
    dataset = assemble_dataset([], [], source="Test source", now=NOW)
    assert dataset["metadata"] == {
        "generatedAt": "2024-03-01T12:30:00.000Z",
        "source": "Test source",
    }
    assert dataset["population"] == [] and dataset["ethnicity"] == []


def test_default_timestamp_is_iso_utc():
    stamp = assemble_dataset([], [])["metadata"]["generatedAt"]
    assert stamp.endswith("Z")
    datetime.fromisoformat(stamp.replace("Z", "+00:00"))


def test_write_artifact_replaces_previous(tmp_path):
    path = tmp_path / "out" / "demographics.json"
    write_artifact(assemble_dataset(_population(1), [], now=NOW), path)
    write_artifact(assemble_dataset(_population(2), [], now=NOW), path)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["population"][0]["Count"] == 2
    assert saved["population"][0]["Age Group"] == "0-4"
    assert not path.with_suffix(".json.tmp").exists()


def test_write_artifact_failure_keeps_previous(tmp_path):
    path = tmp_path / "demographics.json"
    path.write_text('{"old": true}', encoding="utf-8")
    bad = assemble_dataset([], [], now=NOW)
    bad["metadata"]["source"] = object()  # not JSON serializable

    with pytest.raises(TypeError):
        write_artifact(bad, path)
    assert json.loads(path.read_text(encoding="utf-8")) == {"old": True}
    assert not path.with_suffix(".json.tmp").exists()


def test_text_percentage_is_parsed():
    raw = [
        {"Group": "All", "Subgroup": "Chinese", "Count": 0, "Percentage": "1.5"},
        {"Group": "All", "Subgroup": "Arab", "Count": 7, "Percentage": ""},
    ]
    derived = derive_ethnicity_counts(raw, 1000, renames={})

    assert derived[0] == {"Group": "All", "Subgroup": "Chinese", "Count": 15, "Percentage": 1.5}
    assert derived[1] == {"Group": "All", "Subgroup": "Arab", "Count": 7}
