"""
Ordinal regression models for hydrogen acceptance.

Two model families are used:

- Generalised ordered logit (non-parallel cumulative logit). Each
  cut-point j has its own intercept and slopes,
  ``logit P(Y <= j) = alpha_j + x'beta_j``. Fitted by maximum likelihood
  with ``GenericLikelihoodModel``.
- Proportional-odds logit (``OrderedModel``), used for the simplified RQ3
  model and as the restricted model when testing the parallel-lines
  assumption.
"""

import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import expit, logit
from statsmodels.base.model import GenericLikelihoodModel
from statsmodels.miscmodels.ordinal_model import OrderedModel

OUTCOME = "distance_acceptance_ord"

# Research questions: outcome, predictors and the columns used for the
# complete-case filter (RQ1 filters on a wider selection)
RESEARCH_QUESTIONS = {
    "RQ1": {
        "title": "Exposure to Hydrogen Infrastructure",
        "predictors": ["used_h2_bus_bin", "aware_projects_bin"],
        "selection": [
            OUTCOME,
            "confidence_understanding_ord",
            "aware_projects_bin",
            "used_h2_bus_bin",
            "air_quality_ord",
            "aligns_with_future_ord",
        ],
    },
    "RQ2": {
        "title": "Communication and Understanding",
        "predictors": [
            "confidence_understanding_ord",
            "communication_effectiveness_ord",
        ],
        "selection": [
            OUTCOME,
            "confidence_understanding_ord",
            "communication_effectiveness_ord",
        ],
    },
    "RQ3": {
        "title": "Place Identity and Acceptance",
        "predictors": ["impact_landscape_ord", "aligns_with_future_ord"],
        "selection": [OUTCOME, "impact_landscape_ord", "aligns_with_future_ord"],
    },
}

# Simplified RQ3 factors: source column -> derived three-level factor
RQ3_SIMPLIFIED = {
    "impact_landscape_ord": "landscape_simple",
    "aligns_with_future_ord": "aligns_simple",
}

# Outcome category coded 0 is not a valid acceptance response
INVALID_OUTCOME = 0

# Floor for category probabilities (non-parallel cumulative curves can cross)
PROB_FLOOR = 1e-10


def prepare_model_data(
    data: pd.DataFrame, columns: list[str], outcome: str = OUTCOME
) -> pd.DataFrame:
    """
    Select model columns, keep complete cases and drop invalid outcomes.

    The outcome becomes an ordered categorical over the levels that remain.

    Raises
    ------
    ValueError
        If a column is missing or no rows remain.
    """
    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise ValueError(f"Model columns not found: {missing}")
    if outcome not in columns:
        columns = [outcome] + list(columns)

    model_data = data[columns].dropna()
    model_data = model_data[model_data[outcome] != INVALID_OUTCOME].copy()
    if model_data.empty:
        raise ValueError(f"No complete cases remain for {columns}")

    levels = sorted(model_data[outcome].unique())
    model_data[outcome] = pd.Categorical(
        model_data[outcome], categories=levels, ordered=True
    )
    return model_data


def simplify_agreement(values: pd.Series) -> pd.Series:
    """Collapse a 1-5 agreement scale to disagree / neutral / agree."""
    out = pd.Series(np.nan, index=values.index, dtype=object)
    out[values <= 2] = "disagree"
    out[values == 3] = "neutral"
    out[values >= 4] = "agree"
    return out


class GeneralizedOrderedLogit(GenericLikelihoodModel):
    """
    Cumulative logit model without the parallel-lines constraint.

    Parameters are ordered as all intercepts first, then the slopes of each
    predictor across cut-points: ``(Intercept):1 .. (Intercept):J-1``,
    ``x1:1 .. x1:J-1``, and so on.

    Parameters
    ----------
    endog : pd.Series or array_like
        Ordinal outcome. Ordered categoricals keep their category order;
        anything else is ordered by sorted unique value.
    exog : pd.DataFrame or array_like
        Predictors, without a constant column.
    """

    def __init__(self, endog, exog, **kwds):
        if isinstance(endog, pd.Series) and isinstance(endog.dtype, pd.CategoricalDtype):
            labels = list(endog.cat.categories)
            codes = pd.Series(endog.cat.codes.to_numpy(), index=endog.index, name=endog.name)
            if (codes < 0).any():
                raise ValueError("Missing values in the ordinal outcome")
        else:
            labels, inverse = np.unique(np.asarray(endog), return_inverse=True)
            labels = list(labels)
            name = getattr(endog, "name", None)
            index = getattr(endog, "index", None)
            codes = pd.Series(inverse, index=index, name=name)

        if len(labels) < 2:
            raise ValueError("Ordinal outcome needs at least two levels")

        super().__init__(codes, exog, **kwds)

        self.labels = labels
        self.k_levels = len(labels)
        self.k_vars = self.exog.shape[1]
        self.predictor_names = list(self.exog_names)

        cuts = range(1, self.k_levels)
        names = [f"(Intercept):{j}" for j in cuts]
        names += [f"{var}:{j}" for var in self.predictor_names for j in cuts]
        self.data.xnames = names

        n_cuts = self.k_levels - 1
        self.nparams = len(names)
        self.k_extra = n_cuts
        self.df_model = float(self.k_vars * n_cuts)
        self.df_resid = float(self.endog.shape[0] - self.nparams)

    def _unpack(self, params):
        params = np.asarray(params, dtype=float)
        n_cuts = self.k_levels - 1
        intercepts = params[:n_cuts]
        slopes = params[n_cuts:].reshape(self.k_vars, n_cuts)
        return intercepts, slopes

    def cumulative_proba(self, params, exog=None):
        """P(Y <= j) for j = 1..J-1, one row per observation."""
        exog = self.exog if exog is None else np.asarray(exog, dtype=float)
        intercepts, slopes = self._unpack(params)
        return expit(intercepts + exog @ slopes)

    def predict_proba(self, params, exog=None):
        """Category probabilities P(Y = j), one row per observation."""
        cum = self.cumulative_proba(params, exog)
        n = cum.shape[0]
        cum = np.column_stack([np.zeros(n), cum, np.ones(n)])
        return np.diff(cum, axis=1)

    def predict(self, params, exog=None, *args, **kwargs):
        return self.predict_proba(params, exog)

    def loglikeobs(self, params):
        prob = self.predict_proba(params)
        observed = prob[np.arange(prob.shape[0]), self.endog.astype(int)]
        return np.log(np.clip(observed, PROB_FLOOR, None))

    @property
    def start_params(self):
        # Intercepts from the marginal cumulative shares, slopes at zero
        counts = np.bincount(self.endog.astype(int), minlength=self.k_levels)
        shares = np.cumsum(counts)[:-1] / counts.sum()
        intercepts = logit(np.clip(shares, 1e-3, 1 - 1e-3))
        return np.concatenate([intercepts, np.zeros(self.k_vars * (self.k_levels - 1))])

    def fit(self, start_params=None, method="bfgs", maxiter=2000, disp=False, **kwargs):
        return super().fit(
            start_params=start_params,
            method=method,
            maxiter=maxiter,
            disp=disp,
            **kwargs,
        )


def _report_convergence(results, label: str) -> None:
    if not results.mle_retvals.get("converged", True):
        print(f"  WARNING: {label} did not converge; estimates may be unreliable")


def fit_golm(data: pd.DataFrame, predictors: list[str], outcome: str = OUTCOME):
    """Fit the generalised ordered logit of ``outcome`` on ``predictors``."""
    exog = data[predictors].astype(float)
    results = GeneralizedOrderedLogit(data[outcome], exog).fit()
    _report_convergence(results, "Generalised ordered logit")
    return results


def dummy_code(data: pd.DataFrame, factors: list[str]) -> pd.DataFrame:
    """Treatment-code factors; the alphabetically first level is the baseline."""
    frame = data[factors].astype(str)
    return pd.get_dummies(frame, columns=factors, drop_first=True, dtype=float)


def fit_polr(
    data: pd.DataFrame,
    predictors: list[str],
    outcome: str = OUTCOME,
    factors: list[str] | None = None,
):
    """
    Fit a proportional-odds logistic regression.

    Columns listed in ``factors`` are dummy-coded; the remaining predictors
    enter as numeric.
    """
    factors = factors or []
    numeric = [p for p in predictors if p not in factors]
    parts = [data[numeric].astype(float)]
    if factors:
        parts.append(dummy_code(data, factors))
    exog = pd.concat(parts, axis=1)

    model = OrderedModel(data[outcome], exog, distr="logit")
    results = model.fit(method="bfgs", maxiter=2000, disp=False)
    _report_convergence(results, "Proportional-odds logit")
    return results


def coefficient_table(results) -> pd.DataFrame:
    """Estimates, standard errors, z-values and p-values keyed by name."""
    names = list(results.model.exog_names)
    return pd.DataFrame(
        {
            "estimate": np.asarray(results.params),
            "std_err": np.asarray(results.bse),
            "z": np.asarray(results.tvalues),
            "p_value": np.asarray(results.pvalues),
        },
        index=pd.Index(names, name="term"),
    )


def odds_ratios(results, alpha: float = 0.05) -> pd.DataFrame:
    """
    Odds ratios with confidence intervals for the predictor coefficients.

    Intercepts and thresholds are omitted.
    """
    model = results.model
    names = list(model.exog_names)
    if isinstance(model, OrderedModel):
        keep = np.arange(model.k_vars)
    else:
        keep = np.arange(model.k_levels - 1, len(names))

    params = np.asarray(results.params)[keep]
    ci = np.asarray(results.conf_int(alpha=alpha))[keep]
    return pd.DataFrame(
        {
            "odds_ratio": np.exp(params),
            "ci_lower": np.exp(ci[:, 0]),
            "ci_upper": np.exp(ci[:, 1]),
            "p_value": np.asarray(results.pvalues)[keep],
        },
        index=pd.Index([names[i] for i in keep], name="term"),
    )


def parallel_lines_test(golm_results, polr_results) -> dict[str, float]:
    """
    Likelihood-ratio test of the proportional-odds constraint.

    Both models must be fitted to the same rows and predictors. A small
    p-value indicates the slopes differ across cut-points.
    """
    lr = 2.0 * (golm_results.llf - polr_results.llf)
    df = len(np.asarray(golm_results.params)) - len(np.asarray(polr_results.params))
    if df <= 0:
        raise ValueError("Generalised model must have more parameters than the parallel model")
    lr = max(lr, 0.0)
    return {"lr_stat": float(lr), "df": int(df), "p_value": float(stats.chi2.sf(lr, df))}
