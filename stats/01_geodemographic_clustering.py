"""
Geodemographic Clustering of Aberdeen DataZones.

Clusters DataZones on census demographics and links the clusters to the
public-perception survey on hydrogen technology:

1. Load DataZone boundaries with joined demographics
2. K-means on standardised demographics (k = 4, chosen from the elbow plot)
3. Join survey respondents to DataZones via the postcode lookup
4. Attach cluster labels to respondents
5. Clean up zone names and report match rates
6. Map the clusters of zones with respondents

Usage:
    uv run python stats/01_geodemographic_clustering.py
    uv run python stats/01_geodemographic_clustering.py --show   # also display figures
"""

import sys
import warnings

import matplotlib.pyplot as plt
import pandas as pd

from hydrogen_acceptance import geodemographics as geo
from hydrogen_acceptance import survey as sv
from hydrogen_acceptance.figures import (
    plot_cluster_map,
    plot_cluster_profiles,
    plot_elbow,
    plot_population_map,
    plot_survey_cluster_map,
)
from hydrogen_acceptance.ordinal import OUTCOME
from hydrogen_acceptance.paths import (
    DATAZONE_SHAPEFILE,
    FIGURE_DIR,
    POSTCODE_LOOKUP_CSV,
    RESULTS_DIR,
    SURVEY_CLEANED_CSV,
    ZONE_LOOKUP_XLSX,
)

warnings.filterwarnings("ignore", category=FutureWarning)

CLUSTER_MAP_PATH = FIGURE_DIR / "cluster_map_aberdeen.png"


def cluster_datazones(zones):
    """Standardise demographics, draw the elbow curve and fit K-means."""
    print("\n" + "=" * 70)
    print("K-MEANS CLUSTERING ON DEMOGRAPHICS")
    print("=" * 70)

    features = geo.select_cluster_features(zones)
    print(f"  Features: {list(features.columns)}")
    print(features.head().to_string())

    scaled = geo.scale_features(features)

    wss = geo.elbow_wss(scaled)
    print("\n### Elbow curve (WSS by k)")
    for k, value in wss.items():
        print(f"  k = {k:>2}: {value:,.1f}")
    plot_elbow(wss, FIGURE_DIR / "kmeans_elbow.png")

    km = geo.fit_kmeans(scaled)
    print(f"\n### Final model: k = {geo.N_CLUSTERS}, {geo.N_INIT} starts, seed {geo.SEED}")
    print(f"  Total within-cluster SS: {km.inertia_:,.1f}")
    print(f"  Between SS / total SS:   {1 - km.inertia_ / wss[1]:.1%}")

    zones = geo.assign_clusters(zones, km.labels_)

    profiles = geo.cluster_profiles(zones)
    print("\n### Cluster profiles (feature means)")
    print(profiles.round(2).to_string())
    profiles.to_csv(RESULTS_DIR / "cluster_profiles.csv")
    plot_cluster_profiles(profiles, FIGURE_DIR / "cluster_profiles.png")

    plot_cluster_map(zones, FIGURE_DIR / "cluster_map_datazones.png")
    return zones


def link_survey(zones):
    """Join survey respondents to DataZones and cluster labels."""
    print("\n" + "=" * 70)
    print("LINKING SURVEY RESPONDENTS TO CLUSTERS")
    print("=" * 70)

    survey = sv.load_survey(SURVEY_CLEANED_CSV)
    postcode_lookup = sv.load_postcode_lookup(POSTCODE_LOOKUP_CSV)
    zone_lookup = sv.load_zone_lookup(ZONE_LOOKUP_XLSX)

    survey_zones = sv.join_postcode_lookup(survey, postcode_lookup)
    print(f"\n  Rows after postcode join: {len(survey_zones):,}")
    print(survey_zones.head().to_string())

    linked = sv.attach_clusters(survey_zones, geo.cluster_lookup(zones))

    print("\n### Respondents per cluster")
    for cluster, n in sv.cluster_counts(linked).items():
        label = "<NA>" if pd.isna(cluster) else cluster
        print(f"  {label!s:>5}: {n:,}")

    linked = sv.clean_zone_names(linked)
    print(f"\n  Respondents without a DataZone: {linked[geo.ZONE_NAME_COL].isna().sum():,}")

    coverage = sv.zone_lookup_coverage(linked, zone_lookup)
    print(
        f"  DataZone names in reference lookup: {coverage['matched']:,} matched, "
        f"{coverage['unmatched']:,} unrecognised"
    )

    if OUTCOME in linked.columns:
        shares = sv.acceptance_by_cluster(linked, OUTCOME)
        print(f"\n### {OUTCOME} by cluster (row shares)")
        print(shares.round(2).to_string())
        shares.to_csv(RESULTS_DIR / "acceptance_by_cluster.csv")

    linked.to_csv(RESULTS_DIR / "survey_with_clusters.csv", index=False)
    return linked


def main() -> None:
    """Run the geodemographic clustering."""
    print("=" * 70)
    print("GEODEMOGRAPHIC CLUSTERING: ABERDEEN")
    print("=" * 70)

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    FIGURE_DIR.mkdir(parents=True, exist_ok=True)

    zones = geo.load_datazones(DATAZONE_SHAPEFILE)
    plot_population_map(zones, path=FIGURE_DIR / "population_map.png")

    zones = cluster_datazones(zones)
    linked = link_survey(zones)

    zones = sv.clean_zone_names(zones)

    print("\n" + "=" * 70)
    print("CLUSTER MAP")
    print("=" * 70)
    plot_survey_cluster_map(zones, linked, CLUSTER_MAP_PATH)

    if "--show" in sys.argv:
        plt.show()
    plt.close("all")

    print("\nOutput")
    print(f"  Figures: {FIGURE_DIR}")
    print(f"  Tables:  {RESULTS_DIR}")


if __name__ == "__main__":
    main()
