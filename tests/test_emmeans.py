import numpy as np
import pytest

from maize.errors import InvalidInputError
from maize.stats.descriptive import group_summary
from maize.stats.emmeans import estimated_marginal_means, level_contrast
from maize.stats.regression import fit_intercept_only, fit_with_factor, relevel


def test_emmeans_equal_group_means(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    emm = estimated_marginal_means(model)
    means = group_summary(darwin).set_index("type")["mean"]

    assert emm.columns.tolist() == ["type", "emmean", "se", "df", "lower_cl", "upper_cl", "level"]
    assert emm["type"].tolist() == ["Cross", "Self"]
    by_level = emm.set_index("type")
    assert np.isclose(by_level.loc["Cross", "emmean"], means["Cross"])
    assert np.isclose(by_level.loc["Self", "emmean"], means["Self"])


def test_emmeans_se_comes_from_covariance_matrix(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    emm = estimated_marginal_means(model).set_index("type")
    cov = model.cov_params.to_numpy()

    assert np.isclose(emm.loc["Cross", "se"], np.sqrt(cov[0, 0]))
    assert np.isclose(emm.loc["Self", "se"], np.sqrt(cov.sum()))
    # pooled variance, balanced groups: both SEs are sigma / sqrt(15)
    assert np.isclose(emm.loc["Self", "se"], model.sigma / np.sqrt(15))
    assert (emm["df"] == 28).all()
    assert (emm["lower_cl"] < emm["emmean"]).all()
    assert (emm["emmean"] < emm["upper_cl"]).all()


def test_emmeans_do_not_depend_on_reference_level(darwin):
    base = estimated_marginal_means(fit_with_factor(darwin, "type", reference_level="Cross"))
    swapped = estimated_marginal_means(fit_with_factor(relevel(darwin, "type", "Self"), "type"))
    base = base.set_index("type").sort_index()
    swapped = swapped.set_index("type").sort_index()
    assert np.allclose(base["emmean"], swapped["emmean"])
    assert np.allclose(base["se"], swapped["se"])


def test_emmeans_level_is_recorded(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    narrow = estimated_marginal_means(model, level=0.90)
    wide = estimated_marginal_means(model, level=0.99)
    assert (narrow["level"] == 0.90).all()
    assert ((wide["upper_cl"] - wide["lower_cl"]) > (narrow["upper_cl"] - narrow["lower_cl"])).all()


def test_level_contrast_vectors(darwin):
    model = fit_with_factor(darwin, "type", reference_level="Cross")
    assert level_contrast(model, "Cross").tolist() == [1.0, 0.0]
    assert level_contrast(model, "Self").tolist() == [1.0, 1.0]
    with pytest.raises(InvalidInputError):
        level_contrast(model, "Hybrid")


def test_emmeans_require_a_factor_model(darwin):
    with pytest.raises(InvalidInputError, match="model"):
        estimated_marginal_means(fit_intercept_only(darwin))
