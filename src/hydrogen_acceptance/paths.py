"""Centralized path configuration for the hydrogen-acceptance project."""

from pathlib import Path

# Project root (source code repository)
PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

# Local storage for survey extracts and boundary data (not committed)
STORAGE_DIR = PROJECT_DIR / "temp"

# Raw inputs
INPUT_DIR = STORAGE_DIR / "input"

# Analysis outputs
RESULTS_DIR = STORAGE_DIR / "stats" / "results"
FIGURE_DIR = PROJECT_DIR / "stats" / "figures"

# DataZone boundaries joined to census demographics
DATAZONE_SHAPEFILE = INPUT_DIR / "Aberdeen_DZ_Joined_Final.shp"

# Survey extracts: cleaned copy for the clustering join, full copy for models
SURVEY_CLEANED_CSV = INPUT_DIR / "diss_data_cleaned.csv"
SURVEY_CSV = INPUT_DIR / "diss_data.csv"

# Reference lookups
POSTCODE_LOOKUP_CSV = INPUT_DIR / "AB_postcode_districts.csv"
ZONE_LOOKUP_XLSX = INPUT_DIR / "lookuptable.xlsx"
