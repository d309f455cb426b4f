"""Maps and charts for the geodemographic analysis."""

from pathlib import Path

import geopandas as gpd
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.patches import Patch

from hydrogen_acceptance.geodemographics import CLUSTER_COL, ZONE_NAME_COL
from hydrogen_acceptance.survey import normalise_zone_names

plt.style.use("seaborn-v0_8-whitegrid")
plt.rcParams.update({"figure.dpi": 150, "savefig.dpi": 150})

# Export settings for the survey cluster map
MAP_SIZE = (10, 8)
MAP_DPI = 300

NO_DATA_COLOR = "#d9d9d9"


def _cluster_colors(categories: list) -> dict:
    palette = sns.color_palette("Set2", n_colors=max(len(categories), 1))
    return {c: palette[i] for i, c in enumerate(categories)}


def _save(fig: plt.Figure, path: Path | None, dpi: int | None = None) -> None:
    if path is None:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight", dpi=dpi)
    print(f"  Saved: {path}")


def _draw_clusters(ax: plt.Axes, zones: gpd.GeoDataFrame, colors: dict) -> None:
    for cluster, color in colors.items():
        subset = zones[zones[CLUSTER_COL] == cluster]
        if len(subset):
            subset.plot(ax=ax, color=color, edgecolor="white", linewidth=0.3)
    handles = [Patch(facecolor=c, label=f"Cluster {k}") for k, c in colors.items()]
    ax.legend(handles=handles, title=CLUSTER_COL, loc="lower left", frameon=True)


def plot_population_map(
    zones: gpd.GeoDataFrame, column: str = "TotPop2022", path: Path | None = None
) -> plt.Figure:
    """Choropleth of total population by DataZone."""
    fig, ax = plt.subplots(figsize=(9, 8))
    zones.plot(
        column=column,
        cmap="viridis",
        legend=True,
        ax=ax,
        edgecolor="white",
        linewidth=0.2,
        legend_kwds={"label": column, "shrink": 0.7},
    )
    ax.set_title("Total Population by DataZone in Aberdeen")
    ax.set_axis_off()
    _save(fig, path)
    return fig


def plot_elbow(wss: pd.Series, path: Path | None = None) -> plt.Figure:
    """Within-cluster sum of squares against k."""
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(wss.index, wss.values, marker="o", color="black")
    ax.set_xticks(list(wss.index))
    ax.set_xlabel("Number of Clusters (k)")
    ax.set_ylabel("Within groups sum of squares (WSS)")
    ax.set_title("Elbow Method to Choose Optimal Clusters")
    _save(fig, path)
    return fig


def plot_cluster_map(zones: gpd.GeoDataFrame, path: Path | None = None) -> plt.Figure:
    """DataZones coloured by geodemographic cluster."""
    colors = _cluster_colors(list(zones[CLUSTER_COL].cat.categories))
    fig, ax = plt.subplots(figsize=(9, 8))
    _draw_clusters(ax, zones, colors)
    ax.set_title("Geodemographic Clusters of Aberdeen")
    ax.set_axis_off()
    _save(fig, path)
    return fig


def plot_cluster_profiles(profiles: pd.DataFrame, path: Path | None = None) -> plt.Figure:
    """Heatmap of standardised feature means per cluster."""
    features = profiles.drop(columns="n_zones", errors="ignore")
    z = (features - features.mean()) / features.std(ddof=0).replace(0, 1)

    fig, ax = plt.subplots(figsize=(11, 4))
    sns.heatmap(
        z,
        ax=ax,
        cmap="RdBu_r",
        center=0,
        annot=True,
        fmt=".1f",
        cbar_kws={"label": "z-score of cluster mean"},
    )
    ax.set_ylabel(CLUSTER_COL)
    ax.set_title("Demographic Profile of Each Cluster")
    _save(fig, path)
    return fig


def plot_survey_cluster_map(
    zones: gpd.GeoDataFrame, survey: pd.DataFrame, path: Path | None = None
) -> plt.Figure:
    """
    Clusters of the DataZones that contain survey respondents.

    Zones without respondents are drawn in grey; respondent counts are
    annotated at each zone's representative point.
    """
    counts = (
        normalise_zone_names(survey[ZONE_NAME_COL]).dropna().value_counts().rename("n")
    )
    keys = normalise_zone_names(zones[ZONE_NAME_COL])
    has_respondents = keys.isin(counts.index).to_numpy()

    colors = _cluster_colors(list(zones[CLUSTER_COL].cat.categories))
    fig, ax = plt.subplots(figsize=MAP_SIZE)
    if (~has_respondents).any():
        zones[~has_respondents].plot(
            ax=ax, color=NO_DATA_COLOR, edgecolor="white", linewidth=0.3
        )
    _draw_clusters(ax, zones[has_respondents], colors)

    sampled = zones[has_respondents]
    for key, point in zip(keys[has_respondents], sampled.geometry.representative_point()):
        ax.annotate(str(counts[key]), xy=(point.x, point.y), ha="center", fontsize=7)

    ax.set_title("Geodemographic Clusters of Hydrogen Positivity in Aberdeen")
    ax.set_axis_off()
    _save(fig, path, dpi=MAP_DPI)
    return fig
