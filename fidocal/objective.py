"""
Score a set of protein-level estimates by how well they are calibrated and
how many proteins they find.

Proteins are labeled from the peptides that map to them: a protein with at
least one target peptide is evidence-positive and a protein with at least
one decoy peptide is evidence-negative. A protein can be both.

The objective blends two statistics:

- MSE_FDR, the mean squared difference between the estimated FDR (the
  q-values) and the empirical FDR (the fraction of evidence-negative
  proteins), over the ranks where the empirical FDR is within a threshold.
- ROC50, the average sensitivity while no more than 50 evidence-negative
  proteins have been accepted.

The objective, :math:`(1 - \\lambda) MSE_{FDR} - \\lambda ROC_{50}`, is
smaller for better models.
"""

from __future__ import annotations

import logging

import numpy as np
from typeguard import typechecked

from fidocal.aggregate import ProteinProbabilities
from fidocal.association import AssociationIndex
from fidocal.utils import safe_divide

LOGGER = logging.getLogger(__name__)

# Values near 1 favor sensitivity, values near 0 favor calibration.
OBJECTIVE_LAMBDA = 0.15
FDR_THRESHOLD = 0.1
ROC_MAX_FALSE_POSITIVES = 50


@typechecked
def classify(index: AssociationIndex) -> tuple[set[str], set[str]]:
    """Label proteins from the target/decoy labels of their peptides.

    Parameters
    ----------
    index : AssociationIndex
        The protein to peptide associations.

    Returns
    -------
    positives : set of str
        Proteins with at least one target peptide.
    negatives : set of str
        Proteins with at least one decoy peptide.
    """
    positives, negatives = set(), set()
    for protein in index.proteins:
        for peptide in index.peptides_of(protein):
            if peptide.is_target:
                positives.add(protein)
            else:
                negatives.add(protein)

    return positives, negatives


def _count_ranks(
    probabilities: ProteinProbabilities, proteins: set[str]
) -> np.ndarray:
    """The number of `proteins` in each protein group."""
    return np.array(
        [sum(p in proteins for p in g) for g in probabilities.protein_groups],
        dtype=int,
    )


@typechecked
def false_discovery_curve(
    probabilities: ProteinProbabilities,
    positives: set[str],
    negatives: set[str],
) -> tuple[np.ndarray, np.ndarray]:
    """The estimated and empirical FDR at each rank.

    Parameters
    ----------
    probabilities : ProteinProbabilities
        The ranked protein groups.
    positives : set of str
        The evidence-positive proteins.
    negatives : set of str
        The evidence-negative proteins.

    Returns
    -------
    estimated : numpy.ndarray
        The q-value at each rank.
    empirical : numpy.ndarray
        The fraction of evidence-negative proteins among all proteins in the
        groups ranked at or above each rank.
    """
    n_proteins = np.array([len(g) for g in probabilities.protein_groups])
    n_negatives = _count_ranks(probabilities, negatives)
    estimated = probabilities.qvalues.copy()
    empirical = safe_divide(np.cumsum(n_negatives), np.cumsum(n_proteins))
    return estimated, empirical


@typechecked
def mse_fdr(
    threshold: float, estimated: np.ndarray, empirical: np.ndarray
) -> float:
    """The mean squared error between two FDR curves.

    Only the ranks where the empirical FDR is at most `threshold` are used.

    Parameters
    ----------
    threshold : float
        The largest empirical FDR to consider.
    estimated : numpy.ndarray
        The estimated FDR at each rank.
    empirical : numpy.ndarray
        The empirical FDR at each rank.

    Returns
    -------
    float
        The mean squared error, or 0 if no rank is within `threshold`.
    """
    if estimated.shape != empirical.shape:
        raise ValueError("'estimated' and 'empirical' must be the same length")

    keep = empirical <= threshold
    if not keep.any():
        return 0.0

    return float(np.mean((estimated[keep] - empirical[keep]) ** 2))


@typechecked
def roc_curve(
    probabilities: ProteinProbabilities,
    positives: set[str],
    negatives: set[str],
) -> tuple[np.ndarray, np.ndarray]:
    """The cumulative false and true positive counts at each rank.

    Parameters
    ----------
    probabilities : ProteinProbabilities
        The ranked protein groups.
    positives : set of str
        The evidence-positive proteins.
    negatives : set of str
        The evidence-negative proteins.

    Returns
    -------
    fps : numpy.ndarray
        The number of evidence-negative proteins at or above each rank.
    tps : numpy.ndarray
        The number of evidence-positive proteins at or above each rank.
    """
    fps = np.cumsum(_count_ranks(probabilities, negatives))
    tps = np.cumsum(_count_ranks(probabilities, positives))
    return fps, tps


@typechecked
def partial_roc_score(
    max_false_positives: int, fps: np.ndarray, tps: np.ndarray
) -> float:
    """The average sensitivity up to a number of false positives.

    The sensitivity at a rank is its true positive count divided by the
    total number of true positives. It is averaged over the ranks with at
    most `max_false_positives` false positives, so the score is in [0, 1].

    Parameters
    ----------
    max_false_positives : int
        The largest number of false positives to allow.
    fps : numpy.ndarray
        The cumulative false positive counts.
    tps : numpy.ndarray
        The cumulative true positive counts.

    Returns
    -------
    float
        The partial ROC score, or 0 if no rank qualifies or there are no
        true positives.
    """
    if fps.shape != tps.shape:
        raise ValueError("'fps' and 'tps' must be the same length")

    keep = fps <= max_false_positives
    if not keep.any() or tps[-1] == 0:
        return 0.0

    return float(np.mean(tps[keep]) / tps[-1])


def objective_value(lam: float, mse: float, roc: float) -> float:
    """Blend MSE_FDR and the partial ROC score. Smaller is better."""
    return (1 - lam) * mse - lam * roc
