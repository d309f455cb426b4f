"""
Geodemographic clustering of Aberdeen DataZones.

DataZone boundaries carry census demographics (population, age bands,
education and employment rates). The demographics are z-scored and
partitioned with K-means; each zone receives a cluster label 1..k.
"""

from pathlib import Path

import geopandas as gpd
import numpy as np
import pandas as pd
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

# Column names as truncated by the shapefile driver (10 characters)
CLUSTER_FEATURES = [
    "TotPop2022",
    "Age_0_15",
    "Age_16_24",
    "Age_25_34",
    "Age_35_49",
    "Age_50_64",
    "Age_65_",
    "Education_",
    "Educatio_3",
    "Employment",
    "Employme_2",
]

ZONE_NAME_COL = "DZName"
CLUSTER_COL = "Cluster"

# Fixed clustering parameters (k chosen from the elbow plot)
N_CLUSTERS = 4
N_INIT = 25
SEED = 123
MAX_K = 10


def load_datazones(path: Path) -> gpd.GeoDataFrame:
    """
    Load DataZone boundaries with joined demographics.

    Parameters
    ----------
    path : Path
        Path to the shapefile (or any format readable by geopandas).

    Returns
    -------
    gpd.GeoDataFrame
        One row per DataZone.

    Raises
    ------
    FileNotFoundError
        If the input file does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(
            f"DataZone boundaries not found: {path}\n"
            "Export the joined DataZone layer to this location first."
        )

    print(f"Loading DataZones from {path}")
    zones = gpd.read_file(path)
    print(f"  Loaded {len(zones):,} DataZones")
    print(f"  Columns: {list(zones.columns)}")
    return zones


def select_cluster_features(
    zones: pd.DataFrame, features: list[str] | None = None
) -> pd.DataFrame:
    """
    Select the demographic columns used for clustering.

    Geometry is dropped and values are coerced to numeric.

    Raises
    ------
    ValueError
        If any requested feature column is absent.
    """
    features = CLUSTER_FEATURES if features is None else features
    missing = [c for c in features if c not in zones.columns]
    if missing:
        raise ValueError(
            f"Clustering features not found: {missing}\n"
            f"Available columns: {list(zones.columns)}"
        )

    frame = pd.DataFrame(zones.drop(columns="geometry", errors="ignore"))
    selected = frame[features].apply(pd.to_numeric, errors="coerce")
    return selected


def scale_features(features: pd.DataFrame) -> np.ndarray:
    """Standardise each feature to zero mean and unit variance."""
    if features.isna().any().any():
        bad = features.columns[features.isna().any()].tolist()
        raise ValueError(f"Missing values in clustering features: {bad}")
    return StandardScaler().fit_transform(features.to_numpy(dtype=float))


def elbow_wss(scaled: np.ndarray, max_k: int = MAX_K, seed: int = SEED) -> pd.Series:
    """
    Within-cluster sum of squares for k = 1..max_k.

    k = 1 is the total sum of squares about the column means; larger k
    use a single K-means run each.

    Returns
    -------
    pd.Series
        WSS indexed by k.
    """
    max_k = min(max_k, len(scaled))
    wss = {1: float(((scaled - scaled.mean(axis=0)) ** 2).sum())}
    for k in range(2, max_k + 1):
        km = KMeans(n_clusters=k, n_init=1, random_state=seed).fit(scaled)
        wss[k] = float(km.inertia_)
    return pd.Series(wss, name="wss").rename_axis("k")


def fit_kmeans(
    scaled: np.ndarray,
    n_clusters: int = N_CLUSTERS,
    n_init: int = N_INIT,
    seed: int = SEED,
) -> KMeans:
    """Fit the final K-means model (best of ``n_init`` starts)."""
    if len(scaled) < n_clusters:
        raise ValueError(
            f"Need at least {n_clusters} zones to form {n_clusters} clusters, "
            f"got {len(scaled)}"
        )
    return KMeans(n_clusters=n_clusters, n_init=n_init, random_state=seed).fit(scaled)


def assign_clusters(zones: gpd.GeoDataFrame, labels: np.ndarray) -> gpd.GeoDataFrame:
    """
    Attach cluster labels 1..k to each zone as a categorical column.

    Parameters
    ----------
    zones : gpd.GeoDataFrame
        DataZones in the same row order as the clustered features.
    labels : np.ndarray
        Zero-based K-means labels.

    Returns
    -------
    gpd.GeoDataFrame
        Copy of ``zones`` with a ``Cluster`` column.
    """
    labels = np.asarray(labels)
    if len(labels) != len(zones):
        raise ValueError(
            f"Got {len(labels)} cluster labels for {len(zones)} zones"
        )

    out = zones.copy()
    k = int(labels.max()) + 1 if len(labels) else 0
    out[CLUSTER_COL] = pd.Categorical(labels + 1, categories=list(range(1, k + 1)))
    return out


def cluster_profiles(
    zones: pd.DataFrame, features: list[str] | None = None
) -> pd.DataFrame:
    """Zone count and mean of each clustering feature per cluster."""
    features = CLUSTER_FEATURES if features is None else features
    frame = select_cluster_features(zones, features)
    frame[CLUSTER_COL] = zones[CLUSTER_COL].to_numpy()

    grouped = frame.groupby(CLUSTER_COL, observed=False)
    profiles = grouped[features].mean()
    profiles.insert(0, "n_zones", grouped.size())
    return profiles


def cluster_lookup(zones: pd.DataFrame) -> pd.DataFrame:
    """Zone name to cluster label, geometry dropped."""
    return pd.DataFrame(zones[[ZONE_NAME_COL, CLUSTER_COL]]).reset_index(drop=True)
