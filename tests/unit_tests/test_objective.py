"""Test the curves and statistics used to score hyperparameters."""
import numpy as np
import pytest

from fidocal import AssociationIndex, InferenceResult, Peptide, aggregate
from fidocal import objective


@pytest.fixture
def ranked():
    """Four ranked groups: T1, {T2, T3}, D1, M1."""
    result = InferenceResult(
        [0.01, 0.05, 0.2, 0.6],
        [("T1",), ("T2", "T3"), ("D1",), ("M1",)],
    )
    return aggregate(result)


@pytest.fixture
def labels():
    """T* are positive, D1 is negative and M1 is both."""
    positives = {"T1", "T2", "T3", "M1"}
    negatives = {"D1", "M1"}
    return positives, negatives


def test_classify_mixed_evidence():
    """A protein with a target and a decoy peptide is in both sets."""
    index = AssociationIndex(
        [
            Peptide("AAAK", 0.1, 1, {"M"}),
            Peptide("KAAA", 0.7, -1, {"M"}),
            Peptide("CCCK", 0.1, 1, {"T"}),
            Peptide("KCCC", 0.9, 0, {"D"}),
        ]
    )
    positives, negatives = objective.classify(index)

    assert positives == {"M", "T"}
    assert negatives == {"M", "D"}


def test_classify(tiny_index):
    """Shared peptides label every one of their proteins."""
    positives, negatives = objective.classify(tiny_index)
    assert positives == {"A", "B"}
    assert negatives == {"B"}


def test_false_discovery_curve(ranked, labels):
    """The estimated FDR are the q-values and the empirical FDR are counts."""
    estimated, empirical = objective.false_discovery_curve(ranked, *labels)

    np.testing.assert_allclose(estimated, ranked.qvalues)
    np.testing.assert_allclose(empirical, [0, 0, 1 / 4, 2 / 5])
    assert len(estimated) == len(empirical) == len(ranked)


def test_mse_fdr():
    """Only ranks within the threshold count."""
    estimated = np.array([0.01, 0.02, 0.05, 0.5])
    empirical = np.array([0.0, 0.05, 0.1, 0.3])
    mse = objective.mse_fdr(0.1, estimated, empirical)
    assert mse == pytest.approx((0.01**2 + 0.03**2 + 0.05**2) / 3)


def test_mse_fdr_nothing_within_threshold():
    """No rank within the threshold gives 0."""
    estimated = np.array([0.01, 0.02])
    empirical = np.array([0.5, 0.6])
    assert objective.mse_fdr(0.1, estimated, empirical) == 0.0


def test_mse_fdr_length_mismatch():
    with pytest.raises(ValueError):
        objective.mse_fdr(0.1, np.array([0.1]), np.array([0.1, 0.2]))


def test_roc_curve(ranked, labels):
    """Cumulative counts, where M1 counts as both."""
    fps, tps = objective.roc_curve(ranked, *labels)

    np.testing.assert_array_equal(fps, [0, 0, 1, 2])
    np.testing.assert_array_equal(tps, [1, 3, 3, 4])


def test_partial_roc_score():
    """The mean sensitivity up to the false positive bound."""
    fps = np.array([0, 0, 1, 2, 3])
    tps = np.array([1, 2, 2, 3, 4])

    assert objective.partial_roc_score(1, fps, tps) == pytest.approx(
        np.mean([1, 2, 2]) / 4
    )
    assert objective.partial_roc_score(50, fps, tps) == pytest.approx(
        np.mean(tps) / 4
    )


def test_partial_roc_score_edge_cases():
    """Without qualifying ranks or true positives the score is 0."""
    assert objective.partial_roc_score(0, np.array([1, 2]), np.array([1, 1])) == 0
    assert objective.partial_roc_score(5, np.array([1, 2]), np.array([0, 0])) == 0


def test_partial_roc_score_is_bounded():
    rng = np.random.default_rng(1)
    is_tp = rng.uniform(size=500) > 0.3
    fps = np.cumsum(~is_tp)
    tps = np.cumsum(is_tp)
    score = objective.partial_roc_score(50, fps, tps)
    assert 0 <= score <= 1


def test_objective_value():
    """(1 - lambda) MSE - lambda ROC."""
    assert objective.objective_value(0.15, 0.02, 0.5) == pytest.approx(
        0.85 * 0.02 - 0.15 * 0.5
    )
    assert objective.objective_value(0.0, 0.02, 0.5) == pytest.approx(0.02)


def test_constants():
    assert objective.OBJECTIVE_LAMBDA == 0.15
    assert objective.FDR_THRESHOLD == 0.1
    assert objective.ROC_MAX_FALSE_POSITIVES == 50
