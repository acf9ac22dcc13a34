"""
Estimate protein-level posterior error probabilities and q-values from
scored peptides.

The :py:class:`ProteinProbEstimator` is the primary interface of fidocal:

>>> estimator = ProteinProbEstimator()
>>> estimator.initialize(peptides)
>>> proteins = estimator.calculate_protein_probs()

Unless both `alpha` and `beta` are given, they are chosen by grid search
before the final protein-level probabilities are calculated.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from fidocal.aggregate import ProteinProbabilities
from fidocal.association import (
    AssociationIndex,
    MissingPeptideAssociationWarning,
)
from fidocal.calibrate import (
    DEFAULT_GAMMA,
    Calibrator,
    HyperparameterPoint,
    calculate_probabilities,
)
from fidocal.diagnostics import DiagnosticSink
from fidocal.inference import FidoEngine, InferenceEngine
from fidocal.peptides import Peptide

LOGGER = logging.getLogger(__name__)

__all__ = [
    "MissingPeptideAssociationWarning",
    "ProteinProbEstimator",
    "UninitializedHyperparameterError",
]

DEFAULT_ALPHA = 0.1
DEFAULT_BETA = 0.01


class UninitializedHyperparameterError(ValueError):
    """Raised when probabilities are requested without alpha or beta."""

    pass


class ProteinProbEstimator:
    """Calculate protein-level probabilities from scored peptides.

    Parameters
    ----------
    alpha : float, optional
        The probability that a present protein emits each of its peptides.
        If `None`, it is chosen by grid search.
    beta : float, optional
        The probability that a peptide is emitted spuriously. If `None`, it
        is chosen by grid search.
    gamma : float, optional
        The prior probability that a protein is present.
    engine : callable, optional
        Returns a new :py:class:`~fidocal.inference.InferenceEngine`. One
        engine is created for every probability calculation.
    diagnostics : DiagnosticSink, optional
        Receives the intermediate results of the grid search.
    max_workers : int, optional
        The number of threads used for the grid search.

    Attributes
    ----------
    index : AssociationIndex or None
        The protein to peptide associations, once initialized.
    calibrator : Calibrator or None
        The calibrator of the last grid search.
    """

    def __init__(
        self,
        alpha: float | None = None,
        beta: float | None = None,
        gamma: float = DEFAULT_GAMMA,
        engine: Callable[[], InferenceEngine] = FidoEngine,
        diagnostics: DiagnosticSink | None = None,
        max_workers: int = 1,
    ) -> None:
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.engine = engine
        self.diagnostics = diagnostics
        self.max_workers = max_workers

        self.peptides = None
        self.index = None
        self.calibrator = None

    def __repr__(self) -> str:
        return (
            f"ProteinProbEstimator(alpha={self.alpha}, beta={self.beta}, "
            f"gamma={self.gamma})"
        )

    @property
    def is_pinned(self) -> bool:
        """Are both alpha and beta set?"""
        return self.alpha is not None and self.beta is not None

    def set_default_parameters(self) -> None:
        """Use the default alpha and beta instead of a grid search."""
        self.alpha = DEFAULT_ALPHA
        self.beta = DEFAULT_BETA

    def initialize(self, peptides: Iterable[Peptide]) -> bool:
        """Index the scored peptides.

        Parameters
        ----------
        peptides : iterable of Peptide
            The scored peptides.

        Returns
        -------
        bool
            Is a grid search needed to set alpha and beta?
        """
        self.peptides = list(peptides)
        self.index = AssociationIndex(self.peptides)
        LOGGER.info(
            "  - Mapped %i peptides to %i proteins.",
            len(self.index.num_peptides),
            len(self.index),
        )
        return not self.is_pinned

    def calculate_protein_probs(
        self, grid_search: bool = True
    ) -> ProteinProbabilities:
        """Calculate the protein-level probabilities.

        Parameters
        ----------
        grid_search : bool, optional
            Choose the hyperparameters that are not set by grid search?
            If `False`, both must already be set.

        Returns
        -------
        ProteinProbabilities
            The ranked protein groups with their PEPs and q-values.

        Raises
        ------
        UninitializedHyperparameterError
            If alpha or beta are not set and no grid search was requested.
        """
        if self.index is None:
            raise RuntimeError(
                "The estimator is not initialized. Call 'initialize()' first."
            )

        if grid_search and not self.is_pinned:
            self.calibrator = Calibrator(
                self.index,
                self.peptides,
                alpha=self.alpha,
                beta=self.beta,
                gamma=self.gamma,
                engine_factory=self.engine,
                diagnostics=self.diagnostics,
                max_workers=self.max_workers,
            )
            point = self.calibrator.run()
            self.alpha, self.beta = point.alpha, point.beta

        if not self.is_pinned:
            missing = [
                name
                for name, val in (("alpha", self.alpha), ("beta", self.beta))
                if val is None
            ]
            raise UninitializedHyperparameterError(
                f"The hyperparameters {missing} are not set. Set them, use "
                "the defaults or enable the grid search."
            )

        point = HyperparameterPoint(self.alpha, self.beta)
        LOGGER.info("Calculating protein level probabilities (%s)...", point)
        probabilities = calculate_probabilities(
            self.peptides, point, self.gamma, self.engine
        )
        LOGGER.info("  - Found %i protein groups.", len(probabilities))
        return probabilities

    def peptides_for(self, protein: str) -> list[str]:
        """The peptide sequences that support a protein.

        An unknown protein issues a
        :py:class:`~fidocal.association.MissingPeptideAssociationWarning`
        and yields an empty list.
        """
        if self.index is None:
            raise RuntimeError(
                "The estimator is not initialized. Call 'initialize()' first."
            )

        return self.index.peptide_sequences(protein)
