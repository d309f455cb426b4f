from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from hydrogen_acceptance import geodemographics as geo


def _cluster(zones):
    scaled = geo.scale_features(geo.select_cluster_features(zones))
    km = geo.fit_kmeans(scaled)
    return geo.assign_clusters(zones, km.labels_), scaled


def test_load_datazones_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        geo.load_datazones(tmp_path / "missing.shp")


def test_load_datazones_reads_written_layer(tmp_path: Path, zones):
    path = tmp_path / "zones.gpkg"
    zones.to_file(path, driver="GPKG")
    loaded = geo.load_datazones(path)
    assert len(loaded) == len(zones)
    assert "TotPop2022" in loaded.columns


def test_select_cluster_features_drops_geometry(zones):
    features = geo.select_cluster_features(zones)
    assert list(features.columns) == geo.CLUSTER_FEATURES
    assert "geometry" not in features.columns


def test_select_cluster_features_reports_missing_columns(zones):
    with pytest.raises(ValueError, match="Employme_2"):
        geo.select_cluster_features(zones.drop(columns="Employme_2"))


def test_scale_features_standardises_columns(zones):
    scaled = geo.scale_features(geo.select_cluster_features(zones))
    np.testing.assert_allclose(scaled.mean(axis=0), 0, atol=1e-9)
    np.testing.assert_allclose(scaled.std(axis=0), 1, atol=1e-9)


def test_scale_features_rejects_missing_values(zones):
    features = geo.select_cluster_features(zones)
    features.loc[0, "Age_0_15"] = np.nan
    with pytest.raises(ValueError, match="Age_0_15"):
        geo.scale_features(features)


def test_elbow_wss_starts_at_total_sum_of_squares(zones):
    scaled = geo.scale_features(geo.select_cluster_features(zones))
    wss = geo.elbow_wss(scaled)

    assert list(wss.index) == list(range(1, 11))
    # Standardised columns: total SS = n * n_features
    assert wss[1] == pytest.approx(len(zones) * len(geo.CLUSTER_FEATURES))
    assert wss[2] < wss[1]
    assert wss[4] < wss[2]


def test_elbow_wss_caps_k_at_number_of_zones(zones):
    scaled = geo.scale_features(geo.select_cluster_features(zones.iloc[:5]))
    assert geo.elbow_wss(scaled).index.max() == 5


def test_clusters_are_labelled_one_to_four(zones):
    clustered, _ = _cluster(zones)
    assert list(clustered["Cluster"].cat.categories) == [1, 2, 3, 4]
    assert clustered["Cluster"].notna().all()
    assert len(clustered) == len(zones)


def test_clusters_recover_demographic_groups(zones):
    clustered, _ = _cluster(zones)
    pairs = clustered.groupby("group")["Cluster"].nunique()
    assert (pairs == 1).all()
    assert clustered.groupby("Cluster", observed=True)["group"].nunique().max() == 1


def test_seeded_clustering_is_reproducible(zones):
    first, _ = _cluster(zones)
    second, _ = _cluster(zones)
    assert first["Cluster"].tolist() == second["Cluster"].tolist()


def test_assign_clusters_rejects_length_mismatch(zones):
    with pytest.raises(ValueError):
        geo.assign_clusters(zones, np.array([0, 1]))


def test_fit_kmeans_needs_enough_zones(zones):
    scaled = geo.scale_features(geo.select_cluster_features(zones.iloc[:3]))
    with pytest.raises(ValueError, match="at least 4"):
        geo.fit_kmeans(scaled)


def test_cluster_profiles_counts_zones(zones):
    clustered, _ = _cluster(zones)
    profiles = geo.cluster_profiles(clustered)
    assert profiles["n_zones"].sum() == len(zones)
    assert (profiles["n_zones"] == 3).all()
    assert "TotPop2022" in profiles.columns


def test_cluster_lookup_has_name_and_label_only(zones):
    clustered, _ = _cluster(zones)
    lookup = geo.cluster_lookup(clustered)
    assert list(lookup.columns) == ["DZName", "Cluster"]
    assert isinstance(lookup, pd.DataFrame)
    assert not hasattr(lookup, "geometry")
