"""
This module contains the scored peptides and the parser for reading them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from typeguard import typechecked

from fidocal.utils import find_column, make_bool_target, tuplize

LOGGER = logging.getLogger(__name__)

PEPTIDE_COLUMNS = ("peptide", "sequence")
PEP_COLUMNS = ("posterior_error_prob", "pep", "posterior_error_probability")
PROTEIN_COLUMNS = ("proteinIds", "proteins", "protein")
LABEL_COLUMNS = ("label", "target")


@dataclass(frozen=True)
class Peptide:
    """A scored peptide.

    Parameters
    ----------
    sequence : str
        The peptide sequence.
    pep : float
        The peptide-level posterior error probability.
    label : int
        1 for a target peptide. Any other value is a decoy.
    proteins : frozenset of str
        The proteins that may have generated the peptide.
    """

    sequence: str
    pep: float
    label: int
    proteins: frozenset[str]

    def __post_init__(self):
        object.__setattr__(self, "proteins", frozenset(self.proteins))
        if not self.proteins:
            raise ValueError(
                f"Peptide '{self.sequence}' is not mapped to any protein."
            )

        if not 0 <= self.pep <= 1:
            raise ValueError(
                f"The PEP of peptide '{self.sequence}' must be in [0, 1] "
                f"(found {self.pep})."
            )

    @property
    def is_target(self) -> bool:
        """Is this a target peptide?"""
        return self.label == 1


# Functions -------------------------------------------------------------------
@typechecked
def read_peptides(
    peptide_files: str | Path | pd.DataFrame | list | tuple,
    decoy_files: str | Path | pd.DataFrame | list | tuple | None = None,
    protein_sep: str = ";",
) -> list[Peptide]:
    """Read scored peptides from tab-delimited files.

    The files are expected to look like the peptide-level results written by
    a PSM rescoring tool: one row per peptide with its sequence, posterior
    error probability and the proteins it maps to. The column names are
    case insensitive:

    - peptide: "peptide"
    - posterior error probability: "posterior_error_prob" or "pep"
    - proteins: "proteinIds" or "proteins", separated by `protein_sep`
    - label (optional): "label" (1/-1 or 1/0) or "target" (bool)

    When there is no label column, rows read from `peptide_files` are targets
    and rows read from `decoy_files` are decoys.

    Parameters
    ----------
    peptide_files : str, Path, pandas.DataFrame or a list of them
        One or more peptide tables.
    decoy_files : str, Path, pandas.DataFrame or a list of them, optional
        Peptide tables that contain only decoys.
    protein_sep : str, optional
        The delimiter between protein identifiers.

    Returns
    -------
    list of Peptide
        The peptides, in the order they were read.
    """
    peptides = []
    for pep_file in _as_list(peptide_files):
        peptides += _parse_peptides(pep_file, protein_sep, default_label=1)

    if decoy_files is not None:
        for decoy_file in _as_list(decoy_files):
            peptides += _parse_peptides(
                decoy_file, protein_sep, default_label=-1
            )

    n_targets = sum(p.is_target for p in peptides)
    LOGGER.info(
        "  - Read %i target and %i decoy peptides.",
        n_targets,
        len(peptides) - n_targets,
    )
    return peptides


def _as_list(files) -> list:
    if isinstance(files, pd.DataFrame):
        return [files]

    return list(tuplize(files))


def _parse_peptides(
    pep_file: str | Path | pd.DataFrame,
    protein_sep: str,
    default_label: int,
) -> list[Peptide]:
    """Parse one peptide table."""
    if isinstance(pep_file, pd.DataFrame):
        df = pep_file.copy()
    else:
        LOGGER.info("Reading %s...", pep_file)
        df = pd.read_csv(pep_file, sep="\t", index_col=False)

    df.columns = [str(c) for c in df.columns]
    columns = df.columns.tolist()
    seq_col = find_column(PEPTIDE_COLUMNS, columns)
    pep_col = find_column(PEP_COLUMNS, columns)
    prot_col = find_column(PROTEIN_COLUMNS, columns)
    label_col = find_column(LABEL_COLUMNS, columns, required=False)

    if label_col is None:
        labels = [default_label] * len(df)
    else:
        labels = [1 if t else -1 for t in make_bool_target(df[label_col])]

    peptides = []
    for seq, pep, label, prots in zip(
        df[seq_col], df[pep_col], labels, df[prot_col]
    ):
        proteins = set()
        if not pd.isna(prots):
            proteins = {p.strip() for p in str(prots).split(protein_sep)}
            proteins.discard("")

        peptides.append(Peptide(str(seq), float(pep), label, proteins))

    return peptides
