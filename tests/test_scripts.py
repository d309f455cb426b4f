import runpy
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from hydrogen_acceptance import paths

STATS_DIR = Path(__file__).resolve().parent.parent / "stats"


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    """Point every configured path into a temporary directory."""
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    monkeypatch.setattr(paths, "INPUT_DIR", input_dir)
    monkeypatch.setattr(paths, "RESULTS_DIR", tmp_path / "results")
    monkeypatch.setattr(paths, "FIGURE_DIR", tmp_path / "figures")
    monkeypatch.setattr(paths, "DATAZONE_SHAPEFILE", input_dir / "zones.shp")
    monkeypatch.setattr(paths, "SURVEY_CLEANED_CSV", input_dir / "diss_data_cleaned.csv")
    monkeypatch.setattr(paths, "SURVEY_CSV", input_dir / "diss_data.csv")
    monkeypatch.setattr(paths, "POSTCODE_LOOKUP_CSV", input_dir / "postcodes.csv")
    monkeypatch.setattr(paths, "ZONE_LOOKUP_XLSX", input_dir / "lookuptable.xlsx")
    monkeypatch.setattr(sys, "argv", ["script"])
    return tmp_path


def test_paths_point_inside_project():
    assert paths.INPUT_DIR.parent == paths.STORAGE_DIR
    assert paths.FIGURE_DIR.parent.name == "stats"
    assert paths.DATAZONE_SHAPEFILE.suffix == ".shp"


def test_clustering_script_end_to_end(workspace: Path, zones):
    zones.drop(columns="group").to_file(paths.DATAZONE_SHAPEFILE)
    pd.DataFrame(
        {
            "Postcode": ["AB10 1AA", "AB11 2BB", "AB12 3CC", "AB99 9ZZ"],
            "distance_acceptance_ord": [1, 2, 3, 4],
        }
    ).to_csv(paths.SURVEY_CLEANED_CSV, index=False)
    pd.DataFrame(
        {
            "Postcode": ["AB10 1AA", "AB11 2BB", "AB12 3CC"],
            "Lower layer super output area": ["Zone 00", "Zone 04", "zone 10"],
        }
    ).to_csv(paths.POSTCODE_LOOKUP_CSV, index=False)
    pd.DataFrame({"DZName": [f"Zone {i:02d}" for i in range(12)]}).to_excel(
        paths.ZONE_LOOKUP_XLSX, index=False
    )

    runpy.run_path(str(STATS_DIR / "01_geodemographic_clustering.py"), run_name="__main__")

    assert (workspace / "figures" / "cluster_map_aberdeen.png").exists()
    assert (workspace / "figures" / "kmeans_elbow.png").exists()
    linked = pd.read_csv(workspace / "results" / "survey_with_clusters.csv")
    assert len(linked) == 4
    assert linked["Cluster"].notna().sum() == 3
    assert linked["DZName"].dropna().str.islower().all()


def test_golm_script_end_to_end(workspace: Path):
    rng = np.random.default_rng(7)
    n = 400
    data = pd.DataFrame(
        {
            "distance_acceptance_ord": rng.integers(0, 5, n),
            "used_h2_bus_bin": rng.integers(0, 2, n),
            "aware_projects_bin": rng.integers(0, 2, n),
            "confidence_understanding_ord": rng.integers(1, 6, n),
            "communication_effectiveness_ord": rng.integers(1, 6, n),
            "air_quality_ord": rng.integers(1, 6, n).astype(float),
            "aligns_with_future_ord": rng.integers(1, 6, n),
            "impact_landscape_ord": rng.integers(1, 6, n),
        }
    )
    data.loc[::25, "air_quality_ord"] = np.nan
    data.to_csv(paths.SURVEY_CSV, index=False)

    runpy.run_path(str(STATS_DIR / "02_golm_analysis.py"), run_name="__main__")

    results = workspace / "results"
    for name in ["golm_rq1.csv", "golm_rq2.csv", "golm_rq3.csv", "polr_rq3_simplified.csv"]:
        assert (results / name).exists()
    rq1 = pd.read_csv(results / "golm_rq1.csv", index_col="term")
    assert "used_h2_bus_bin:1" in rq1.index
