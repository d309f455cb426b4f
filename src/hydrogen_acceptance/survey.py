"""
Survey preparation: link respondents to DataZones and geodemographic clusters.

Respondent postcodes are matched to DataZone names through the postcode
lookup, then to cluster labels through the clustered zones. Both joins are
left joins; respondents that do not match keep NaN in the joined columns.
"""

from pathlib import Path

import pandas as pd

from hydrogen_acceptance.geodemographics import CLUSTER_COL, ZONE_NAME_COL

POSTCODE_COL = "Postcode"
DISTRICT_COL = "PostcodeDistrict"

# Column holding the zone name in the postcode lookup export
LOOKUP_ZONE_COL = "Lower layer super output area"

# Aberdeen postcode districts, e.g. "AB10", "AB25"
DISTRICT_PATTERN = r"^(AB\d+)"


def _require_file(path: Path, description: str) -> None:
    if not path.exists():
        raise FileNotFoundError(f"{description} not found: {path}")


def _require_columns(frame: pd.DataFrame, columns: list[str], what: str) -> None:
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise ValueError(
            f"{what} is missing columns {missing}. "
            f"Available columns: {list(frame.columns)}"
        )


def load_survey(path: Path) -> pd.DataFrame:
    """Load survey responses from CSV."""
    _require_file(path, "Survey data")
    print(f"Loading survey responses from {path}")
    survey = pd.read_csv(path)
    print(f"  Respondents: {len(survey):,}")
    return survey


def load_postcode_lookup(path: Path) -> pd.DataFrame:
    """
    Load the postcode to DataZone lookup.

    The zone column is renamed to ``DZName`` and both key columns are
    whitespace-trimmed.
    """
    _require_file(path, "Postcode lookup")
    print(f"Loading postcode lookup from {path}")
    lookup = pd.read_csv(path, dtype=str)
    _require_columns(lookup, [POSTCODE_COL, LOOKUP_ZONE_COL], "Postcode lookup")

    lookup = lookup.rename(columns={LOOKUP_ZONE_COL: ZONE_NAME_COL})
    lookup[ZONE_NAME_COL] = lookup[ZONE_NAME_COL].str.strip()
    lookup[POSTCODE_COL] = lookup[POSTCODE_COL].str.strip()
    print(f"  Postcodes: {len(lookup):,}")
    return lookup


def load_zone_lookup(path: Path) -> pd.DataFrame:
    """Load the DataZone reference spreadsheet."""
    _require_file(path, "DataZone lookup")
    print(f"Loading DataZone lookup from {path}")
    zone_lookup = pd.read_excel(path)
    print(f"  Rows: {len(zone_lookup):,}")
    return zone_lookup


def extract_postcode_district(postcodes: pd.Series) -> pd.Series:
    """Leading Aberdeen district of each postcode, NaN when absent."""
    return postcodes.astype("string").str.extract(DISTRICT_PATTERN, expand=False)


def normalise_zone_names(names: pd.Series) -> pd.Series:
    """Trim and lower-case zone names; missing values stay missing."""
    return names.astype("string").str.strip().str.lower()


def join_postcode_lookup(survey: pd.DataFrame, lookup: pd.DataFrame) -> pd.DataFrame:
    """
    Attach DataZone names to respondents by full postcode.

    Every survey row is kept. Duplicate postcodes in the lookup are not
    collapsed and will repeat the respondent.
    """
    _require_columns(survey, [POSTCODE_COL], "Survey data")
    out = survey.copy()
    out[DISTRICT_COL] = extract_postcode_district(out[POSTCODE_COL])
    # Survey postcodes are trimmed to match the lookup
    out[POSTCODE_COL] = out[POSTCODE_COL].astype("string").str.strip()

    keys = lookup[[POSTCODE_COL, ZONE_NAME_COL]].copy()
    keys[POSTCODE_COL] = keys[POSTCODE_COL].astype("string")
    keys = keys.dropna(subset=[POSTCODE_COL])
    return out.merge(keys, on=POSTCODE_COL, how="left")


def attach_clusters(survey_zones: pd.DataFrame, clusters: pd.DataFrame) -> pd.DataFrame:
    """
    Attach geodemographic cluster labels by DataZone name.

    Names are compared after trimming and lower-casing so that the
    lookup and the boundary file need not agree on case.
    """
    _require_columns(survey_zones, [ZONE_NAME_COL], "Survey data")
    _require_columns(clusters, [ZONE_NAME_COL, CLUSTER_COL], "Cluster lookup")

    left = survey_zones.copy()
    left["_zone_key"] = normalise_zone_names(left[ZONE_NAME_COL])

    right = pd.DataFrame(
        {
            "_zone_key": normalise_zone_names(clusters[ZONE_NAME_COL]),
            CLUSTER_COL: clusters[CLUSTER_COL].to_numpy(),
        }
    ).dropna(subset=["_zone_key"])
    if CLUSTER_COL in left.columns:
        left = left.drop(columns=CLUSTER_COL)

    joined = left.merge(right, on="_zone_key", how="left").drop(columns="_zone_key")
    if isinstance(clusters[CLUSTER_COL].dtype, pd.CategoricalDtype):
        joined[CLUSTER_COL] = pd.Categorical(
            joined[CLUSTER_COL], categories=clusters[CLUSTER_COL].cat.categories
        )
    return joined


def clean_zone_names(frame: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with ``DZName`` trimmed and lower-cased."""
    out = frame.copy()
    out[ZONE_NAME_COL] = normalise_zone_names(out[ZONE_NAME_COL])
    return out


def cluster_counts(survey: pd.DataFrame) -> pd.Series:
    """Respondents per cluster, with unmatched respondents counted as NaN."""
    return survey[CLUSTER_COL].value_counts(dropna=False, sort=False).rename("n")


def zone_lookup_coverage(
    survey: pd.DataFrame, zone_lookup: pd.DataFrame, column: str | None = None
) -> dict[str, int]:
    """
    Count survey zone names found in the DataZone reference lookup.

    ``column`` defaults to ``DZName`` when present, otherwise the first
    column of the spreadsheet.
    """
    if column is None:
        column = ZONE_NAME_COL if ZONE_NAME_COL in zone_lookup.columns else zone_lookup.columns[0]
    _require_columns(zone_lookup, [column], "DataZone lookup")

    reference = set(normalise_zone_names(zone_lookup[column]).dropna())
    names = normalise_zone_names(survey[ZONE_NAME_COL])
    known = names.isin(reference) & names.notna()
    return {
        "matched": int(known.sum()),
        "unmatched": int((names.notna() & ~known).sum()),
        "missing": int(names.isna().sum()),
    }


def acceptance_by_cluster(survey: pd.DataFrame, outcome: str) -> pd.DataFrame:
    """Share of each acceptance level within each cluster (rows sum to 1)."""
    _require_columns(survey, [CLUSTER_COL, outcome], "Survey data")
    matched = survey.dropna(subset=[CLUSTER_COL, outcome])
    # Clusters without matched respondents are left out
    clusters = matched[CLUSTER_COL].astype(object)
    return pd.crosstab(clusters, matched[outcome], normalize="index")
