"""
Choose the inference hyperparameters alpha and beta by grid search.

Each cell of the grid is evaluated independently by
:py:func:`evaluate_cell`: inference is run with the cell's hyperparameters,
the protein groups are ranked, and the ranking is scored with the blended
calibration/sensitivity objective from :py:mod:`fidocal.objective`. The
:py:class:`Calibrator` enumerates the grid and keeps the best cell.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Sequence

import numpy as np
from joblib import Parallel, delayed

from fidocal import objective
from fidocal.aggregate import ProteinProbabilities, aggregate
from fidocal.association import AssociationIndex
from fidocal.diagnostics import DiagnosticSink
from fidocal.inference import FidoEngine, InferenceEngine, run_inference
from fidocal.peptides import Peptide

LOGGER = logging.getLogger(__name__)

ALPHA_RANGE = (0.01, 0.76)
BETA_RANGE = (0.0, 0.80)
GRID_STEP = 0.05
DEFAULT_GAMMA = 0.5


@dataclass(frozen=True)
class HyperparameterPoint:
    """A choice of the inference hyperparameters."""

    alpha: float
    beta: float

    def __str__(self) -> str:
        return f"alpha = {self.alpha:g}, beta = {self.beta:g}"


@dataclass(eq=False)
class ObjectiveSample:
    """The evaluation of one grid cell.

    The objective is NaN until it has been computed. Samples are ordered by
    fitness, the negated objective, so that ``a > b`` means that `a` is
    strictly better than `b`.

    Parameters
    ----------
    point : HyperparameterPoint or None
        The hyperparameters that were evaluated.
    positives : set of str
        The evidence-positive proteins.
    negatives : set of str
        The evidence-negative proteins.
    objective : float
        The value of the objective. Smaller is better.
    """

    point: HyperparameterPoint | None
    positives: set[str] = field(default_factory=set)
    negatives: set[str] = field(default_factory=set)
    objective: float = math.nan

    @classmethod
    def worst(cls) -> ObjectiveSample:
        """A placeholder that any evaluated sample is better than."""
        return cls(point=None, objective=math.inf)

    @property
    def is_evaluated(self) -> bool:
        return not math.isnan(self.objective)

    @property
    def fitness(self) -> float:
        """The negated objective. Larger is better."""
        if not self.is_evaluated:
            raise ValueError(f"The objective at {self.point} is not computed.")

        return -self.objective

    def __gt__(self, other: ObjectiveSample) -> bool:
        return self.fitness > other.fitness


# Functions -------------------------------------------------------------------
def grid_values(
    lower: float,
    upper: float,
    step: float = GRID_STEP,
    pinned: float | None = None,
) -> np.ndarray:
    """The values of one hyperparameter to try.

    The upper bound is included when it is reachable from `lower` in whole
    steps, up to floating point error.

    Parameters
    ----------
    lower, upper : float
        The bounds of the range.
    step : float, optional
        The distance between consecutive values.
    pinned : float, optional
        If given, the only value to try.

    Returns
    -------
    numpy.ndarray
        The values, in ascending order.
    """
    if pinned is not None:
        return np.array([float(pinned)])

    if upper < lower:
        raise ValueError(f"The range [{lower}, {upper}] is empty.")

    n_steps = math.floor((upper - lower) / step + 1e-9)
    return np.round(lower + step * np.arange(n_steps + 1), 10)


def hyperparameter_grid(
    alpha: float | None = None,
    beta: float | None = None,
) -> list[HyperparameterPoint]:
    """Enumerate the grid, alpha in the outer loop and beta in the inner.

    Parameters
    ----------
    alpha, beta : float, optional
        Pin a hyperparameter to a value instead of searching it.

    Returns
    -------
    list of HyperparameterPoint
        The grid cells, in evaluation order.
    """
    alphas = grid_values(*ALPHA_RANGE, pinned=alpha)
    betas = grid_values(*BETA_RANGE, pinned=beta)
    return [
        HyperparameterPoint(float(a), float(b)) for a in alphas for b in betas
    ]


def evaluate_cell(
    index: AssociationIndex,
    peptides: Sequence[Peptide],
    point: HyperparameterPoint,
    gamma: float = DEFAULT_GAMMA,
    engine_factory: Callable[[], InferenceEngine] = FidoEngine,
    diagnostics: DiagnosticSink | None = None,
    lam: float = objective.OBJECTIVE_LAMBDA,
    threshold: float = objective.FDR_THRESHOLD,
    max_false_positives: int = objective.ROC_MAX_FALSE_POSITIVES,
) -> ObjectiveSample:
    """Evaluate the objective for one choice of hyperparameters.

    Nothing outside of the returned sample is modified, apart from what the
    diagnostic sink records.

    Parameters
    ----------
    index : AssociationIndex
        The protein to peptide associations.
    peptides : sequence of Peptide
        The scored peptides.
    point : HyperparameterPoint
        The hyperparameters to evaluate.
    gamma : float, optional
        The protein prior.
    engine_factory : callable, optional
        Returns a new inference engine.
    diagnostics : DiagnosticSink, optional
        Receives the intermediate results.
    lam : float, optional
        The weight of the partial ROC score in the objective.
    threshold : float, optional
        The largest empirical FDR used for MSE_FDR.
    max_false_positives : int, optional
        The false positive bound of the partial ROC score.

    Returns
    -------
    ObjectiveSample
        The evaluated cell.
    """
    if diagnostics is None:
        diagnostics = DiagnosticSink()

    LOGGER.debug("Testing performances with parameters: %s", point)
    probabilities = calculate_probabilities(
        peptides, point, gamma, engine_factory
    )
    positives, negatives = objective.classify(index)
    diagnostics.cell_output(point, probabilities)
    diagnostics.evidence(point, positives, negatives)

    estimated, empirical = objective.false_discovery_curve(
        probabilities, positives, negatives
    )
    diagnostics.fdr_curve(point, estimated, empirical)
    mse = objective.mse_fdr(threshold, estimated, empirical)

    fps, tps = objective.roc_curve(probabilities, positives, negatives)
    diagnostics.roc_curve(point, fps, tps)
    roc = objective.partial_roc_score(max_false_positives, fps, tps)

    sample = ObjectiveSample(
        point=point,
        positives=positives,
        negatives=negatives,
        objective=objective.objective_value(lam, mse, roc),
    )
    LOGGER.debug(
        "Objective function value is: %g (MSE_FDR = %g, ROC%i = %g)",
        sample.objective,
        mse,
        max_false_positives,
        roc,
    )
    return sample


def calculate_probabilities(
    peptides: Iterable[Peptide],
    point: HyperparameterPoint,
    gamma: float = DEFAULT_GAMMA,
    engine_factory: Callable[[], InferenceEngine] = FidoEngine,
) -> ProteinProbabilities:
    """Run inference with fixed hyperparameters and rank the result."""
    result = run_inference(
        engine_factory, peptides, point.alpha, point.beta, gamma
    )
    return aggregate(result)


# Classes ---------------------------------------------------------------------
class CalibrationState(Enum):
    IDLE = "idle"
    GRID_ENUMERATION = "grid enumeration"
    EVALUATING = "evaluating"
    COMMITTED = "committed"


class Calibrator:
    """Search the hyperparameter grid for the best objective.

    Parameters
    ----------
    index : AssociationIndex
        The protein to peptide associations.
    peptides : sequence of Peptide
        The scored peptides.
    alpha, beta : float, optional
        Pin a hyperparameter instead of searching it. If both are pinned no
        search is performed.
    gamma : float, optional
        The protein prior.
    engine_factory : callable, optional
        Returns a new inference engine.
    diagnostics : DiagnosticSink, optional
        Receives the intermediate results of every cell.
    max_workers : int, optional
        The number of threads used to evaluate cells.

    Attributes
    ----------
    state : CalibrationState
        Where the calibration is.
    best : ObjectiveSample or None
        The best cell, once the search has finished.
    point : HyperparameterPoint or None
        The chosen hyperparameters, once committed.
    """

    def __init__(
        self,
        index: AssociationIndex,
        peptides: Sequence[Peptide],
        alpha: float | None = None,
        beta: float | None = None,
        gamma: float = DEFAULT_GAMMA,
        engine_factory: Callable[[], InferenceEngine] = FidoEngine,
        diagnostics: DiagnosticSink | None = None,
        max_workers: int = 1,
    ) -> None:
        self.index = index
        self.peptides = peptides
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.engine_factory = engine_factory
        self.diagnostics = diagnostics
        self.max_workers = max_workers

        self.state = CalibrationState.IDLE
        self.best = None
        self.point = None

    def __repr__(self) -> str:
        return (
            f"Calibrator(state={self.state.value}, alpha={self.alpha}, "
            f"beta={self.beta}, point={self.point})"
        )

    @property
    def grid(self) -> list[HyperparameterPoint]:
        """The cells to evaluate."""
        return hyperparameter_grid(self.alpha, self.beta)

    def run(self) -> HyperparameterPoint:
        """Find and commit the best hyperparameters.

        Returns
        -------
        HyperparameterPoint
            The chosen hyperparameters.
        """
        if self.alpha is not None and self.beta is not None:
            self.point = HyperparameterPoint(self.alpha, self.beta)
            self.state = CalibrationState.COMMITTED
            return self.point

        self.state = CalibrationState.GRID_ENUMERATION
        grid = self.grid
        LOGGER.info(
            "Estimating parameters for the model by grid search over %i "
            "cells...",
            len(grid),
        )

        try:
            if self.max_workers > 1:
                self.state = CalibrationState.EVALUATING
                samples = Parallel(
                    n_jobs=self.max_workers, require="sharedmem"
                )(delayed(self._evaluate)(point) for point in grid)
            else:
                samples = self._evaluate_sequentially(grid)

            best = ObjectiveSample.worst()
            for sample in samples:
                if sample > best:
                    LOGGER.debug("Best choice of parameters, so far!")
                    best = sample
        except Exception:
            self.state = CalibrationState.IDLE
            raise

        self.best = best
        self.point = best.point
        self.state = CalibrationState.COMMITTED
        LOGGER.info("The following parameters have been chosen:")
        LOGGER.info("  - alpha = %g", self.point.alpha)
        LOGGER.info("  - beta = %g", self.point.beta)
        return self.point

    def _evaluate(self, point: HyperparameterPoint) -> ObjectiveSample:
        return evaluate_cell(
            self.index,
            self.peptides,
            point,
            gamma=self.gamma,
            engine_factory=self.engine_factory,
            diagnostics=self.diagnostics,
        )

    def _evaluate_sequentially(self, grid):
        for point in grid:
            self.state = CalibrationState.EVALUATING
            yield self._evaluate(point)
