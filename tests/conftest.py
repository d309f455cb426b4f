import matplotlib

matplotlib.use("Agg")

import geopandas as gpd  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402
from shapely.geometry import box  # noqa: E402

from hydrogen_acceptance.geodemographics import CLUSTER_FEATURES  # noqa: E402

# Four demographic types, three DataZones each
GROUP_CENTRES = [0.0, 50.0, 100.0, 150.0]
ZONES_PER_GROUP = 3


@pytest.fixture
def zones() -> gpd.GeoDataFrame:
    rng = np.random.default_rng(0)
    rows = []
    for g, centre in enumerate(GROUP_CENTRES):
        for i in range(ZONES_PER_GROUP):
            idx = g * ZONES_PER_GROUP + i
            row = {"DZName": f"Zone {idx:02d} ", "group": g}
            for f, feature in enumerate(CLUSTER_FEATURES):
                # Groups differ in every feature; small within-group noise
                row[feature] = centre * (1 + 0.1 * f) + rng.normal(0, 1)
            row["geometry"] = box(idx, 0, idx + 1, 1)
            rows.append(row)
    return gpd.GeoDataFrame(rows, geometry="geometry", crs="EPSG:27700")


@pytest.fixture
def survey() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "respondent": [1, 2, 3, 4, 5],
            "Postcode": ["AB10 1AA", "AB25 2BB", "AB10 1AA", "ZZ1 9ZZ", None],
            "distance_acceptance_ord": [1, 2, 3, 2, 4],
        }
    )


@pytest.fixture
def postcode_lookup() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Postcode": [" AB10 1AA", "AB25 2BB "],
            "DZName": ["zone 00", "ZONE 05"],
        }
    )


@pytest.fixture
def ordinal_data() -> pd.DataFrame:
    """Simulated survey with a proportional-odds acceptance outcome."""
    rng = np.random.default_rng(42)
    n = 3000
    x1 = rng.integers(0, 2, n).astype(float)
    x2 = rng.integers(1, 6, n).astype(float)
    cuts = np.array([-1.0, 0.5, 2.0])
    # logit P(Y <= j) = cut_j + 0.8 * x1 - 0.5 * x2
    eta = cuts[None, :] + (0.8 * x1 - 0.5 * x2)[:, None]
    cum = 1 / (1 + np.exp(-eta))
    u = rng.random(n)
    y = 1 + (u[:, None] > cum).sum(axis=1)
    return pd.DataFrame(
        {
            "distance_acceptance_ord": y,
            "exposure": x1,
            "agreement": x2,
        }
    )
