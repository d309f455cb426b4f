"""
Generalised Ordered Logit Models: Spatial Acceptance of Hydrogen.

DV: distance_acceptance_ord (ordinal acceptance of hydrogen infrastructure
at increasing proximity; category 0 is excluded as invalid).

Models (no proportional-odds constraint, cumulative logit link):
- RQ1: Exposure to hydrogen infrastructure (bus use, project awareness)
- RQ2: Communication and understanding
- RQ3: Place identity (landscape impact, alignment with future vision)
- RQ3 simplified: proportional-odds logit on agree / neutral / disagree

Each generalised model is compared with its parallel-lines counterpart by a
likelihood-ratio test. Coefficients are log-odds of P(Y <= j).

Usage:
    uv run python stats/02_golm_analysis.py
"""

import warnings

import pandas as pd

from hydrogen_acceptance.ordinal import (
    OUTCOME,
    RESEARCH_QUESTIONS,
    RQ3_SIMPLIFIED,
    coefficient_table,
    fit_golm,
    fit_polr,
    odds_ratios,
    parallel_lines_test,
    prepare_model_data,
    simplify_agreement,
)
from hydrogen_acceptance.paths import RESULTS_DIR, SURVEY_CSV
from hydrogen_acceptance.survey import load_survey

warnings.filterwarnings("ignore", category=FutureWarning)


def describe_model_data(model_data: pd.DataFrame) -> None:
    """Print sample size and outcome distribution."""
    print(f"  Complete cases: {len(model_data):,}")
    counts = model_data[OUTCOME].value_counts(sort=False)
    print("  Outcome levels: " + ", ".join(f"{k}: {v}" for k, v in counts.items()))


def run_research_question(data: pd.DataFrame, key: str) -> dict:
    """Fit the generalised ordered logit for one research question."""
    rq = RESEARCH_QUESTIONS[key]
    print("\n" + "=" * 70)
    print(f"{key}: {rq['title'].upper()}")
    print("=" * 70)

    model_data = prepare_model_data(data, rq["selection"])
    describe_model_data(model_data)
    formula = f"{OUTCOME} ~ " + " + ".join(rq["predictors"])
    print(f"  Model: {formula}")

    golm = fit_golm(model_data, rq["predictors"])
    print(golm.summary())

    print("\n### Odds ratios")
    print(odds_ratios(golm).round(3).to_string())

    polr = fit_polr(model_data, rq["predictors"])
    test = parallel_lines_test(golm, polr)
    print("\n### Parallel-lines check (LR test vs proportional odds)")
    print(f"  LR = {test['lr_stat']:.2f}, df = {test['df']}, p = {test['p_value']:.4f}")

    coefficient_table(golm).to_csv(RESULTS_DIR / f"golm_{key.lower()}.csv")
    return {"model_data": model_data, "golm": golm, "parallel_test": test}


def run_rq3_simplified(model_data: pd.DataFrame):
    """Proportional-odds model with collapsed agreement predictors."""
    print("\n" + "=" * 70)
    print("RQ3 SIMPLIFIED: PROPORTIONAL ODDS (POLR)")
    print("=" * 70)

    model_data = model_data.copy()
    for source, derived in RQ3_SIMPLIFIED.items():
        model_data[derived] = simplify_agreement(model_data[source])
        counts = model_data[derived].value_counts().to_dict()
        print(f"  {derived}: {counts}")

    factors = list(RQ3_SIMPLIFIED.values())
    polr = fit_polr(model_data, factors, factors=factors)
    print(polr.summary())

    print("\n### Odds ratios")
    print(odds_ratios(polr).round(3).to_string())

    coefficient_table(polr).to_csv(RESULTS_DIR / "polr_rq3_simplified.csv")
    return polr


def main() -> None:
    """Run all GOLM analyses."""
    print("=" * 70)
    print("GOLM ANALYSIS: HYDROGEN ACCEPTANCE")
    print("=" * 70)

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)

    data = load_survey(SURVEY_CSV)
    print(f"  Columns: {list(data.columns)}")

    results = {key: run_research_question(data, key) for key in RESEARCH_QUESTIONS}
    run_rq3_simplified(results["RQ3"]["model_data"])

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"  {'Model':<6} {'N':>6} {'LogLik':>10} {'AIC':>10} {'Parallel p':>11}")
    for key, res in results.items():
        golm = res["golm"]
        aic = -2 * golm.llf + 2 * len(golm.params)
        print(
            f"  {key:<6} {len(res['model_data']):>6} {golm.llf:>10.2f} "
            f"{aic:>10.2f} {res['parallel_test']['p_value']:>11.4f}"
        )
    print(f"\n  Coefficient tables: {RESULTS_DIR}")


if __name__ == "__main__":
    main()
