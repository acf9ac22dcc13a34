"""
The bipartite-graph inference that turns peptide evidence into protein
posterior error probabilities.

The core of fidocal only relies on the :py:class:`InferenceEngine`
interface: an engine is configured with fixed hyperparameters, loaded with
scored peptides and asked for posterior error probabilities per group of
indistinguishable proteins. :py:class:`FidoEngine` implements the Fido
model (Serang et al., J. Proteome Res. 2010):

- every protein is present with prior probability `gamma`,
- every present protein emits each of its peptides with probability `alpha`,
- every peptide may also be emitted spuriously with probability `beta`,
- the observed evidence for a peptide is its probability of being correct,
  `1 - pep`.
"""

from __future__ import annotations

import itertools
import logging
import math
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np
from scipy import sparse
from scipy.sparse.csgraph import connected_components
from scipy.special import comb

from fidocal.association import AssociationIndex
from fidocal.peptides import Peptide

LOGGER = logging.getLogger(__name__)

# Keep the peptide likelihoods finite:
PROB_EPSILON = 1e-10


class EmptyInferenceResultError(RuntimeError):
    """Raised when inference yields no protein groups."""

    pass


@dataclass(frozen=True, eq=False)
class InferenceResult:
    """The posterior error probabilities for groups of proteins.

    Parameters
    ----------
    peps : numpy.ndarray
        The posterior error probability of each protein group.
    protein_groups : tuple of tuple of str
        The proteins sharing each estimate. `protein_groups[i]` is the
        group for `peps[i]`.
    """

    peps: np.ndarray
    protein_groups: tuple[tuple[str, ...], ...]

    def __post_init__(self):
        object.__setattr__(self, "peps", np.array(self.peps, dtype=float))
        object.__setattr__(
            self,
            "protein_groups",
            tuple(tuple(g) for g in self.protein_groups),
        )
        if len(self.peps) != len(self.protein_groups):
            raise ValueError(
                "'peps' and 'protein_groups' must be the same length "
                f"({len(self.peps)} != {len(self.protein_groups)})."
            )

    def __len__(self) -> int:
        return len(self.peps)


class InferenceEngine(ABC):
    """The interface to a protein inference engine.

    An engine is used exactly once: configure it, load the peptides,
    compute the probabilities, then read the results.
    """

    def __init__(self) -> None:
        self.alpha = None
        self.beta = None
        self.gamma = None
        self.peptides = None
        self._result = None

    def configure(self, alpha: float, beta: float, gamma: float) -> None:
        """Fix the hyperparameters of the model.

        Parameters
        ----------
        alpha : float
            The probability that a present protein emits a peptide.
        beta : float
            The probability that a peptide is emitted spuriously.
        gamma : float
            The prior probability that a protein is present.
        """
        for name, val in (("alpha", alpha), ("beta", beta)):
            if not 0 <= val <= 1:
                raise ValueError(f"'{name}' must be in [0, 1] (found {val}).")

        if not 0 < gamma < 1:
            raise ValueError(f"'gamma' must be in (0, 1) (found {gamma}).")

        self.alpha, self.beta, self.gamma = alpha, beta, gamma

    def load(self, peptides: Iterable[Peptide]) -> None:
        """Load the scored peptides."""
        self.peptides = list(peptides)
        self._result = None

    @abstractmethod
    def compute_probabilities(self) -> None:
        """Run inference. The result is available from :py:meth:`results`."""
        raise NotImplementedError

    def results(self) -> InferenceResult:
        """The result of the last call to :py:meth:`compute_probabilities`."""
        if self._result is None:
            raise RuntimeError(
                "No results available. Call 'compute_probabilities()' first."
            )

        return self._result

    def _check_ready(self) -> None:
        if self.alpha is None:
            raise RuntimeError("The engine has not been configured.")

        if self.peptides is None:
            raise RuntimeError("No peptides have been loaded.")


class FidoEngine(InferenceEngine):
    """Compute protein posterior error probabilities with the Fido model.

    Proteins with identical peptide sets cannot be told apart and are merged
    into a single group. The graph of groups and peptides is split into
    connected components, and the marginal posterior of each group is
    computed exactly by enumerating how many proteins of each group are
    present. Components with more than `max_configurations` states fall
    back to treating each group independently of its neighbors.

    Parameters
    ----------
    max_configurations : int, optional
        The largest number of states to enumerate for one component.
    """

    def __init__(self, max_configurations: int = 2**14) -> None:
        super().__init__()
        self.max_configurations = max_configurations

    def compute_probabilities(self) -> None:
        self._check_ready()

        # Keep the best scoring entry of duplicated peptide sequences.
        peptide_probs = {}
        for peptide in self.peptides:
            prob = 1.0 - peptide.pep
            peptide_probs[peptide.sequence] = max(
                prob, peptide_probs.get(peptide.sequence, 0.0)
            )

        index = AssociationIndex(self.peptides)
        groups = defaultdict(list)
        for protein in index.proteins:
            groups[frozenset(index.prot2pep[protein])].append(protein)

        group_peptides = list(groups.keys())
        group_proteins = [tuple(sorted(groups[k])) for k in group_peptides]
        seqs = sorted(peptide_probs)
        seq_idx = {s: i for i, s in enumerate(seqs)}
        probs = np.clip(
            np.array([peptide_probs[s] for s in seqs], dtype=float),
            PROB_EPSILON,
            1 - PROB_EPSILON,
        )

        # Peptide-by-group adjacency
        rows, cols = [], []
        for gidx, peps in enumerate(group_peptides):
            for seq in peps:
                rows.append(seq_idx[seq])
                cols.append(gidx)

        adjacency = sparse.csr_matrix(
            (np.ones(len(rows)), (rows, cols)),
            shape=(len(seqs), len(group_peptides)),
        )

        n_groups = len(group_peptides)
        if not n_groups:
            self._result = InferenceResult(np.array([]), ())
            return

        graph = sparse.bmat([[None, adjacency.T], [adjacency, None]])
        n_comp, comp_labels = connected_components(graph, directed=False)
        LOGGER.debug(
            "Inferring %i protein groups in %i connected components.",
            n_groups,
            n_comp,
        )

        posteriors = np.zeros(n_groups)
        group_labels = comp_labels[:n_groups]
        pep_labels = comp_labels[n_groups:]
        for comp in range(n_comp):
            comp_groups = np.flatnonzero(group_labels == comp)
            comp_peps = np.flatnonzero(pep_labels == comp)
            if not len(comp_groups):
                continue

            sizes = np.array([len(group_proteins[g]) for g in comp_groups])
            sub_adj = adjacency[comp_peps][:, comp_groups].toarray() > 0
            n_configs = math.prod(int(s) + 1 for s in sizes)
            if n_configs <= self.max_configurations:
                posteriors[comp_groups] = self._posteriors(
                    sizes, sub_adj, probs[comp_peps]
                )
                continue

            proteins = [p for g in comp_groups for p in group_proteins[g]]
            LOGGER.warning(
                "A component with %i protein groups has %i states (max "
                "peptide degree %i); approximating its groups independently.",
                len(comp_groups),
                n_configs,
                index.max_peptide_degree(proteins),
            )
            for gidx, group in enumerate(comp_groups):
                keep = sub_adj[:, gidx]
                posteriors[group] = self._posteriors(
                    sizes[[gidx]],
                    sub_adj[keep][:, [gidx]],
                    probs[comp_peps][keep],
                )[0]

        peps = np.clip(1.0 - posteriors, 0.0, 1.0)
        self._result = InferenceResult(peps, tuple(group_proteins))

    def _posteriors(
        self,
        sizes: np.ndarray,
        adjacency: np.ndarray,
        probs: np.ndarray,
    ) -> np.ndarray:
        """The probability that a protein of each group is present.

        Parameters
        ----------
        sizes : numpy.ndarray
            The number of proteins in each group.
        adjacency : numpy.ndarray
            A boolean (peptide x group) matrix.
        probs : numpy.ndarray
            The probability that each peptide is correct.

        Returns
        -------
        numpy.ndarray
            The posterior presence probability for each group.
        """
        configs = np.array(
            list(itertools.product(*[range(int(s) + 1) for s in sizes])),
            dtype=float,
        )
        n_active = configs @ adjacency.T.astype(float)
        p_absent = (1 - self.beta) * (1 - self.alpha) ** n_active
        log_lik = np.log(probs * (1 - p_absent) + (1 - probs) * p_absent)

        log_prior = (
            np.log(comb(sizes, configs))
            + configs * np.log(self.gamma)
            + (sizes - configs) * np.log(1 - self.gamma)
        )

        log_weights = log_lik.sum(axis=1) + log_prior.sum(axis=1)
        weights = np.exp(log_weights - log_weights.max())
        present = configs / sizes
        return (weights @ present) / weights.sum()


def run_inference(
    engine_factory: Callable[[], InferenceEngine],
    peptides: Iterable[Peptide],
    alpha: float,
    beta: float,
    gamma: float,
) -> InferenceResult:
    """Run one inference with fixed hyperparameters.

    A fresh engine is created for every call.

    Parameters
    ----------
    engine_factory : callable
        Returns a new :py:class:`InferenceEngine`.
    peptides : iterable of Peptide
        The scored peptides.
    alpha, beta, gamma : float
        The hyperparameters of the model.

    Returns
    -------
    InferenceResult
        The posterior error probabilities of each protein group.

    Raises
    ------
    EmptyInferenceResultError
        If the engine yields no protein groups.
    """
    engine = engine_factory()
    engine.configure(alpha, beta, gamma)
    engine.load(peptides)
    engine.compute_probabilities()
    result = engine.results()
    if not len(result):
        raise EmptyInferenceResultError(
            f"Inference with alpha={alpha}, beta={beta} yielded no protein "
            "groups."
        )

    return result
