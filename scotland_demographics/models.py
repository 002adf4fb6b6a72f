"""Record shapes shared by the extractor, assembler and reader.

Records stay plain dicts so they serialize straight to the JSON artifact.
The functional ``TypedDict`` form is needed because the population age
field is literally named ``"Age Group"``.
"""

from typing import Dict, List, Optional, TypedDict, Union

# A single spreadsheet cell after typing
Cell = Union[str, int, float, bool, None]
Grid = List[List[Cell]]
Workbook = Dict[str, Grid]

PopulationRecord = TypedDict(
    "PopulationRecord",
    {"Year": int, "Age Group": str, "Gender": str, "Count": int},
)


class _EthnicityBase(TypedDict):
    Group: str
    Subgroup: str
    Count: int


class EthnicityRecord(_EthnicityBase, total=False):
    Percentage: Optional[float]


class Metadata(TypedDict):
    generatedAt: str
    source: str


class DemographicsDataset(TypedDict):
    metadata: Metadata
    population: List[PopulationRecord]
    ethnicity: List[EthnicityRecord]


class ChartPoint(TypedDict):
    name: str
    value: int


class EthnicityPoint(ChartPoint):
    group: str
