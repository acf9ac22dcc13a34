"""
Rank protein groups by their posterior error probability and assign
q-values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd
from typeguard import typechecked

from fidocal.association import AssociationIndex
from fidocal.inference import EmptyInferenceResultError, InferenceResult

LOGGER = logging.getLogger(__name__)

PROTEIN_GROUP_COL = "protein_group"
PROTEIN_COL = "protein"
PEP_COL = "posterior_error_prob"
QVALUE_COL = "q-value"
PEPTIDES_COL = "peptides"


@dataclass(frozen=True, eq=False)
class ProteinProbabilities:
    """The ranked protein-level confidence estimates.

    All three attributes are parallel and ordered by increasing posterior
    error probability.

    Parameters
    ----------
    peps : numpy.ndarray
        The posterior error probability of each protein group.
    protein_groups : tuple of tuple of str
        The proteins in each group.
    qvalues : numpy.ndarray
        The q-value of each protein group: the mean posterior error
        probability of the groups ranked at or above it.
    """

    peps: np.ndarray
    protein_groups: tuple[tuple[str, ...], ...]
    qvalues: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "peps", np.array(self.peps, dtype=float))
        object.__setattr__(
            self, "qvalues", np.array(self.qvalues, dtype=float)
        )
        object.__setattr__(
            self,
            "protein_groups",
            tuple(tuple(g) for g in self.protein_groups),
        )
        if not len(self.peps) == len(self.protein_groups) == len(self.qvalues):
            raise ValueError(
                "'peps', 'protein_groups' and 'qvalues' must be the same "
                "length."
            )

        self.peps.flags.writeable = False
        self.qvalues.flags.writeable = False

    def __len__(self) -> int:
        return len(self.peps)

    def __getitem__(self, rank: int) -> tuple[float, tuple[str, ...], float]:
        """The PEP, protein group and q-value at a rank."""
        return (
            float(self.peps[rank]),
            self.protein_groups[rank],
            float(self.qvalues[rank]),
        )

    def __iter__(self) -> Iterator[tuple[float, tuple[str, ...], float]]:
        for rank in range(len(self)):
            yield self[rank]

    def to_dataframe(
        self, index: AssociationIndex | None = None
    ) -> pd.DataFrame:
        """One row per protein, in rank order.

        Parameters
        ----------
        index : AssociationIndex, optional
            If given, a column listing the peptides that support each
            protein is added.

        Returns
        -------
        pandas.DataFrame
            The protein-level confidence estimates.
        """
        rows = []
        for pep, group, qval in self:
            group_name = ",".join(group)
            for protein in group:
                row = {
                    PROTEIN_GROUP_COL: group_name,
                    PROTEIN_COL: protein,
                    PEP_COL: pep,
                    QVALUE_COL: qval,
                }
                if index is not None:
                    row[PEPTIDES_COL] = ";".join(
                        index.peptide_sequences(protein)
                    )

                rows.append(row)

        columns = [PROTEIN_GROUP_COL, PROTEIN_COL, PEP_COL, QVALUE_COL]
        if index is not None:
            columns.append(PEPTIDES_COL)

        return pd.DataFrame(rows, columns=columns)


@typechecked
def aggregate(result: InferenceResult) -> ProteinProbabilities:
    """Rank protein groups and compute their q-values.

    The groups are sorted by increasing posterior error probability. Ties
    keep the order of the inference result. The q-value of the group at
    rank k is the mean posterior error probability of ranks 0 to k.

    Parameters
    ----------
    result : InferenceResult
        The posterior error probabilities from inference.

    Returns
    -------
    ProteinProbabilities
        The ranked protein groups.

    Raises
    ------
    EmptyInferenceResultError
        If `result` contains no protein groups.
    """
    if not len(result):
        raise EmptyInferenceResultError(
            "Cannot aggregate an inference result without protein groups."
        )

    order = np.argsort(result.peps, kind="stable")
    peps = result.peps[order]
    groups = tuple(result.protein_groups[i] for i in order)
    qvalues = np.cumsum(peps) / np.arange(1, len(peps) + 1)
    return ProteinProbabilities(peps, groups, qvalues)
