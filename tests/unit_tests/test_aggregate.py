"""
These tests verify that protein groups are ranked and their q-values are
computed correctly.
"""
import numpy as np
import pandas as pd
import pytest

from fidocal import (
    EmptyInferenceResultError,
    InferenceResult,
    ProteinProbabilities,
    aggregate,
)


def test_qvalues_are_cumulative_mean():
    """The q-values of a small, sorted example."""
    result = InferenceResult([0.1, 0.2, 0.3], [("A",), ("B",), ("C",)])
    out = aggregate(result)

    np.testing.assert_allclose(out.peps, [0.1, 0.2, 0.3])
    np.testing.assert_allclose(out.qvalues, [0.1, 0.15, 0.2])
    assert out.protein_groups == (("A",), ("B",), ("C",))


def test_sorting_reorders_groups():
    """The groups follow their PEPs."""
    result = InferenceResult(
        [0.5, 0.0, 0.25, 0.1],
        [("C", "D"), ("A",), ("E",), ("B",)],
    )
    out = aggregate(result)

    np.testing.assert_allclose(out.peps, [0.0, 0.1, 0.25, 0.5])
    assert out.protein_groups == (("A",), ("B",), ("E",), ("C", "D"))
    np.testing.assert_allclose(
        out.qvalues, [0.0, 0.05, 0.35 / 3, 0.85 / 4]
    )


def test_ties_keep_input_order():
    """Groups with equal PEPs stay in the order inference returned them."""
    result = InferenceResult([0.2, 0.1, 0.2, 0.1], [("W",), ("X",), ("Y",), ("Z",)])
    out = aggregate(result)
    assert out.protein_groups == (("X",), ("Z",), ("W",), ("Y",))


def test_recurrence_on_random_data():
    """The q-values follow q[k] = (k q[k-1] + p[k]) / (k + 1)."""
    rng = np.random.default_rng(42)
    peps = rng.uniform(size=200)
    groups = [(f"P{i}",) for i in range(200)]
    out = aggregate(InferenceResult(peps, groups))

    assert len(out.peps) == len(out.protein_groups) == len(out.qvalues)
    assert np.all(np.diff(out.peps) >= 0)

    expected = np.zeros(200)
    expected[0] = out.peps[0]
    for k in range(1, 200):
        expected[k] = (k * expected[k - 1] + out.peps[k]) / (k + 1)

    np.testing.assert_allclose(out.qvalues, expected)


def test_empty_result():
    """Nothing to rank is an error."""
    with pytest.raises(EmptyInferenceResultError):
        aggregate(InferenceResult([], []))


def test_unequal_lengths():
    """The parallel arrays must line up."""
    with pytest.raises(ValueError):
        InferenceResult([0.1, 0.2], [("A",)])

    with pytest.raises(ValueError):
        ProteinProbabilities([0.1, 0.2], [("A",), ("B",)], [0.1])


def test_query_by_rank():
    """Each rank gives its PEP, group and q-value."""
    out = aggregate(InferenceResult([0.3, 0.1], [("B",), ("A", "C")]))

    assert len(out) == 2
    assert out[0] == (pytest.approx(0.1), ("A", "C"), pytest.approx(0.1))
    assert out[1] == (pytest.approx(0.3), ("B",), pytest.approx(0.2))
    assert [group for _, group, _ in out] == [("A", "C"), ("B",)]


def test_immutable():
    """The output cannot be changed after construction."""
    out = aggregate(InferenceResult([0.3, 0.1], [("B",), ("A",)]))
    with pytest.raises(ValueError):
        out.peps[0] = 1.0

    with pytest.raises(AttributeError):
        out.qvalues = np.zeros(2)


def test_to_dataframe(tiny_index):
    """One row per protein with its supporting peptides."""
    out = aggregate(InferenceResult([0.3, 0.1], [("B",), ("A", "Z")]))
    with pytest.warns(UserWarning):
        df = out.to_dataframe(tiny_index)

    expected = pd.DataFrame(
        {
            "protein_group": ["A,Z", "A,Z", "B"],
            "protein": ["A", "Z", "B"],
            "posterior_error_prob": [0.1, 0.1, 0.3],
            "q-value": [0.1, 0.1, 0.2],
            "peptides": ["AAAK;BBBK", "", "BBBK;CCCK"],
        }
    )
    pd.testing.assert_frame_equal(df, expected)
    assert out.to_dataframe().columns.tolist() == expected.columns[:-1].tolist()
