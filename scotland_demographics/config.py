"""
Configuration constants for the Scotland demographics data pipeline.
"""

from pathlib import Path
from typing import Dict, List, Literal, Tuple

# ======================================================
#  DATA SOURCES / CONSTANTS
# ======================================================
POPULATION_URL: str = (
    "https://www.nrscotland.gov.uk/media/0rciui4s/"
    "data-mid-year-population-estimates-2022.xlsx"
)
ETHNICITY_URL: str = (
    "https://www.scotlandscensus.gov.uk/media/1ioiuhvx/"
    "scotland-s-census-2022-ethnic-group-national-identity-language-and-religion-chart-data_new-1.xlsx"
)

# Provenance strings stamped into metadata.source, keyed by producer
SourceKind = Literal["xlsx", "csv"]
SOURCE_LABELS: Dict[str, str] = {
    "xlsx": "National Records of Scotland & Scotland Census 2022",
    "csv": "National Records of Scotland (Simulated)",
}
DEFAULT_SOURCE_KIND: SourceKind = "xlsx"

REQUEST_TIMEOUT: int = 60

# ======================================================
#  PATHS
# ======================================================
REPO_ROOT: Path = Path(__file__).resolve().parent.parent
DATA_DIR_ENV: str = "DEMOGRAPHICS_DATA_DIR"
DEFAULT_DATA_DIR: Path = REPO_ROOT / "data"
RAW_DIR_NAME: str = "raw"
ARTIFACT_NAME: str = "demographics.json"
POPULATION_CSV: str = "population.csv"
ETHNICITY_CSV: str = "ethnicity.csv"

# ======================================================
#  EXTRACTION LANDMARKS
# ======================================================
DATASET_YEAR: int = 2022
DEFAULT_GENDER: str = "All"
DEFAULT_GROUP: str = "All"

# Sheet name tokens for the population table; first sheet is the fallback
POPULATION_SHEET_MARKERS: List[str] = ["Table 1", "Scotland"]
HEADER_MARKERS: List[str] = ["All Ages", "0"]
REGION_MARKER: str = "Scotland"
PERSONS_MARKERS: List[str] = ["Persons", "All people"]

ETHNICITY_PROBE_TEXT: str = "ethnic group"
ETHNICITY_PROBE_ROWS: int = 10
ETHNICITY_HEADER_MARKERS: List[str] = ["Ethnic group", "Category"]
PERCENTAGE_SHEET: str = "Figure 5"
GROUP_COLUMN: str = "Ethnic group"
PERCENTAGE_COLUMN: str = "Percentage (%)"
YEAR_COLUMN: str = "Year"

# Five-year age brackets as inclusive (min, max); "85+" is open-ended
AGE_BRACKETS: Dict[str, Tuple[int, int]] = {
    "0-4": (0, 4),
    "5-9": (5, 9),
    "10-14": (10, 14),
    "15-19": (15, 19),
    "20-24": (20, 24),
    "25-29": (25, 29),
    "30-34": (30, 34),
    "35-39": (35, 39),
    "40-44": (40, 44),
    "45-49": (45, 49),
    "50-54": (50, 54),
    "55-59": (55, 59),
    "60-64": (60, 64),
    "65-69": (65, 69),
    "70-74": (70, 74),
    "75-79": (75, 79),
    "80-84": (80, 84),
    "85+": (85, 150),
}

# Legacy subgroup labels mapped to the label shown on the dashboard
SUBGROUP_RENAMES: Dict[str, str] = {
    "Other White": "White Scottish",
}

# Numeric columns cast by the CSV normalizer
POPULATION_NUMERIC: List[str] = ["Year", "Count"]
ETHNICITY_NUMERIC: List[str] = ["Count"]
POPULATION_COLUMNS: List[str] = ["Year", "Age Group", "Gender", "Count"]
ETHNICITY_COLUMNS: List[str] = ["Group", "Subgroup", "Count"]

# ======================================================
#  UI DEFAULTS
# ======================================================
TOP_ETHNICITY_SLICES: int = 5
AGE_BAR_COLOR: str = "#005EB8"
ETHNICITY_BAR_COLOR: str = "#002B54"
PIE_COLORS: List[str] = ["#005EB8", "#002B54", "#5BC0DE", "#5CB85C", "#F0AD4E", "#D9534F"]
