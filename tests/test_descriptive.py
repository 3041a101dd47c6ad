import numpy as np
import pandas as pd
import pytest

from maize.errors import InvalidInputError, PairingError
from maize.stats.descriptive import (
    DifferenceSummary,
    difference_summary,
    group_summary,
    paired_differences,
)


def test_group_summary_darwin_values(darwin):
    summary = group_summary(darwin)
    assert summary["type"].tolist() == ["Cross", "Self"]
    assert summary["n"].tolist() == [15, 15]
    assert summary["n"].sum() == len(darwin)

    cross = summary.set_index("type").loc["Cross"]
    self_ = summary.set_index("type").loc["Self"]
    assert np.isclose(cross["mean"], 302.875 / 15)
    assert np.isclose(self_["mean"], 17.575)
    expected_sd = darwin.loc[darwin["type"] == "Cross", "height"].std(ddof=1)
    assert np.isclose(cross["sd"], expected_sd)
    assert np.isclose(cross["sd"], 3.617, atol=1e-3)
    assert np.isclose(self_["sd"], 2.052, atol=1e-3)


def test_paired_differences_is_cross_minus_self(darwin):
    wide = paired_differences(darwin)
    assert list(wide.columns) == ["pair", "Cross", "Self", "difference"]
    assert len(wide) == 15
    assert wide["pair"].tolist() == list(range(1, 16))
    assert np.allclose(wide["difference"], wide["Cross"] - wide["Self"])

    first = wide.iloc[0]
    assert first["Cross"] == 23.5
    assert first["Self"] == 17.375


def test_mean_difference_equals_difference_of_means(darwin):
    groups = group_summary(darwin).set_index("type")["mean"]
    summary = difference_summary(paired_differences(darwin))
    assert np.isclose(summary.mean, groups["Cross"] - groups["Self"])
    assert np.isclose(summary.mean, 2.6167, atol=1e-4)


def test_difference_summary_darwin_spread(darwin):
    summary = difference_summary(paired_differences(darwin))
    assert isinstance(summary, DifferenceSummary)
    assert summary.n == 15
    assert np.isclose(summary.sd, 4.7181, atol=1e-3)
    assert np.isclose(summary.se, summary.sd / np.sqrt(15))
    assert np.isclose(summary.se, 1.2182, atol=1e-3)

    frame = summary.to_frame()
    assert list(frame.columns) == ["mean", "sd", "n", "se"]
    assert len(frame) == 1


def test_unmatched_pair_raises_pairing_error(darwin):
    table = darwin[~((darwin["pair"] == 3) & (darwin["type"] == "Self"))]
    with pytest.raises(PairingError, match=r"Pair 3 cannot be matched: no Self value") as excinfo:
        paired_differences(table)
    assert excinfo.value.pair_id == 3
    assert isinstance(excinfo.value, ValueError)


def test_repeated_type_within_pair_raises_pairing_error(darwin):
    extra = pd.DataFrame({"pair": [4], "type": ["Cross"], "height": [19.0]})
    table = pd.concat([darwin, extra], ignore_index=True)
    with pytest.raises(PairingError, match="Pair 4"):
        paired_differences(table)


def test_difference_summary_needs_two_pairs():
    with pytest.raises(InvalidInputError):
        difference_summary(pd.DataFrame({"difference": [1.5]}))
