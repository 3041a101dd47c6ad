import numpy as np
import pandas as pd
import pytest

from maize.errors import InvalidInputError
from maize.stats.diagnostics import (
    CHECK_NAMES,
    FLAGGED,
    PASS,
    DiagnosticResult,
    check_homogeneity,
    check_model,
    check_normality,
    check_outliers,
    diagnostics_table,
)
from maize.stats.regression import fit_intercept_only, fit_with_factor


def _one_outlier_table():
    return pd.DataFrame(
        {
            "group": ["A"] * 6 + ["B"] * 6,
            "height": [10.0, 10.5, 9.5, 10.2, 9.8, 30.0, 12.0, 12.5, 11.5, 12.2, 11.8, 12.1],
        }
    )


def test_single_large_cooks_distance_is_the_only_flag():
    model = fit_with_factor(_one_outlier_table(), "group", reference_level="A")
    result = check_outliers(model)
    assert result.verdict == FLAGGED
    assert result.flagged
    assert result.details["flagged"] == (5,)
    assert result.details["flagged_positions"] == (5,)
    assert np.isclose(result.details["threshold"], 4 / 12)
    cooks = result.details["cooks_distance"]
    assert np.argmax(cooks) == 5
    assert np.all(np.delete(cooks, 5) < result.details["threshold"])


def test_darwin_outliers_are_the_two_short_crossed_plants(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    result = check_outliers(model)
    flagged = result.details["flagged"]
    assert flagged == (2, 28)
    assert (darwin.loc[list(flagged), "height"] == 12.0).all()
    assert (darwin.loc[list(flagged), "type"] == "Cross").all()
    assert np.allclose(result.details["cooks_distance"][[2, 28]], 0.297, atol=1e-3)


def test_custom_threshold_and_leverage(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    result = check_outliers(model, cooks_threshold=0.5)
    assert result.verdict == PASS
    assert result.details["flagged"] == ()
    # balanced two-group design: every observation has leverage 1/15
    assert np.allclose(result.details["leverage"], 1 / 15)


@pytest.mark.parametrize("threshold", [0.0, -1.0, float("nan")])
def test_invalid_cooks_threshold_raises(darwin, threshold):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    with pytest.raises(InvalidInputError, match="cooks_threshold"):
        check_outliers(model, cooks_threshold=threshold)


def test_normality_result_is_consistent_with_alpha(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    result = check_normality(model, alpha=0.05)
    assert result.method == "Shapiro-Wilk"
    assert 0.0 <= result.pvalue <= 1.0
    assert result.flagged == (result.pvalue < 0.05)
    assert len(result.details["theoretical_quantiles"]) == 30
    assert np.all(np.diff(result.details["sample_quantiles"]) >= 0)


def test_homogeneity_result_is_consistent_with_alpha(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    result = check_homogeneity(model, alpha=0.05)
    assert result.method == "Breusch-Pagan"
    assert 0.0 <= result.pvalue <= 1.0
    assert result.flagged == (result.pvalue < 0.05)
    assert -1.0 <= result.details["spearman_rho"] <= 1.0


def test_homogeneity_for_intercept_only_model_is_undefined(darwin):
    result = check_homogeneity(fit_intercept_only(darwin))
    assert result.verdict == PASS
    assert np.isnan(result.pvalue)
    assert "constant" in result.details["notes"]


def test_homogeneity_for_perfect_fit_is_undefined():
    table = pd.DataFrame(
        {"type": ["a", "a", "a", "b", "b", "b"], "height": [1.0, 1.0, 1.0, 2.0, 2.0, 2.0]}
    )
    model = fit_with_factor(table, "type", reference_level="a")
    result = check_homogeneity(model)
    assert result.verdict == PASS
    assert np.isnan(result.statistic)
    assert np.isnan(result.pvalue)
    assert "zero" in result.details["notes"]
    assert np.array_equal(result.details["sqrt_abs_std_resid"], np.zeros(6))


def test_check_model_runs_all_checks_by_default(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    results = check_model(model)
    assert tuple(results) == CHECK_NAMES
    assert all(isinstance(res, DiagnosticResult) for res in results.values())


def test_check_model_accepts_single_names_and_aliases(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    assert list(check_model(model, check="qq")) == ["normality"]
    assert list(check_model(model, check=["influence", "outliers"])) == ["outliers"]


def test_check_model_does_not_modify_the_model(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    params = model.params.copy()
    resid = model.resid.copy()
    check_model(model)
    pd.testing.assert_series_equal(model.params, params)
    assert np.array_equal(model.resid, resid)


def test_check_model_rejects_unknown_check_and_bad_alpha(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    with pytest.raises(InvalidInputError, match="check"):
        check_model(model, check="linearity")
    with pytest.raises(InvalidInputError, match="alpha"):
        check_model(model, alpha=1.5)


def test_diagnostics_table_has_one_row_per_check(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    table = diagnostics_table(check_model(model))
    assert table["check"].tolist() == list(CHECK_NAMES)
    assert set(table["verdict"]) <= {PASS, FLAGGED}
    outliers = table.set_index("check").loc["outliers"]
    assert outliers["n_flagged"] == 2
    assert np.isclose(outliers["threshold"], 4 / 30)
