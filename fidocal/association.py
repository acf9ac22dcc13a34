"""Index the relation between proteins and the peptides that map to them."""

from __future__ import annotations

import logging
import warnings
from collections import defaultdict
from typing import Iterable

from fidocal.peptides import Peptide

LOGGER = logging.getLogger(__name__)


class MissingPeptideAssociationWarning(UserWarning):
    """A protein was looked up that has no peptides in the index."""

    pass


class AssociationIndex:
    """Map proteins to peptides and count their occurrences.

    The index holds four relations:

    - protein -> ordered list of the peptides registered under it, in input
      order (populated by :py:meth:`build`).
    - protein -> number of times it was registered.
    - peptide sequence -> number of times it was registered.
    - protein -> set of peptide sequences registered under it.

    Registration is not idempotent: registering the same peptide twice
    increments its counts twice.

    Parameters
    ----------
    peptides : iterable of Peptide, optional
        If given, the index is built from these peptides.
    """

    def __init__(self, peptides: Iterable[Peptide] | None = None) -> None:
        self.protein_peptides: dict[str, list[Peptide]] = {}
        self.num_proteins: dict[str, int] = defaultdict(int)
        self.num_peptides: dict[str, int] = defaultdict(int)
        self.prot2pep: dict[str, set[str]] = defaultdict(set)

        if peptides is not None:
            self.build(peptides)

    def __repr__(self) -> str:
        return (
            f"AssociationIndex({len(self.num_proteins)} proteins, "
            f"{len(self.num_peptides)} peptides)"
        )

    def __len__(self) -> int:
        return len(self.protein_peptides)

    def __contains__(self, protein: str) -> bool:
        return protein in self.protein_peptides

    @property
    def proteins(self) -> list[str]:
        """The proteins in the index, in the order they were first seen."""
        return list(self.protein_peptides)

    def register_rel(self, peptide: Peptide, proteins: Iterable[str]) -> None:
        """Register a peptide under each of its proteins.

        Parameters
        ----------
        peptide : Peptide
            The peptide to register.
        proteins : iterable of str
            The proteins the peptide maps to. Must not be empty.
        """
        proteins = set(proteins)
        if not proteins:
            raise ValueError(
                f"Cannot register peptide '{peptide.sequence}' without any "
                "proteins."
            )

        self.num_peptides[peptide.sequence] += 1
        for protein in proteins:
            self.num_proteins[protein] += 1
            self.prot2pep[protein].add(peptide.sequence)

    def max_peptide_degree(self, proteins: Iterable[str]) -> int:
        """The largest number of peptides registered to any of the proteins.

        Unregistered proteins count as zero, so an empty or entirely
        unregistered set yields 0.
        """
        return max(
            (len(self.prot2pep.get(p, ())) for p in proteins),
            default=0,
        )

    def build(self, peptides: Iterable[Peptide]) -> AssociationIndex:
        """(Re)build the index from scored peptides.

        Any previous state is cleared first.

        Parameters
        ----------
        peptides : iterable of Peptide
            The scored peptides, in input order.

        Returns
        -------
        AssociationIndex
            The index itself.
        """
        self.protein_peptides = {}
        self.num_proteins = defaultdict(int)
        self.num_peptides = defaultdict(int)
        self.prot2pep = defaultdict(set)

        for peptide in peptides:
            self.register_rel(peptide, peptide.proteins)
            for protein in sorted(peptide.proteins):
                self.protein_peptides.setdefault(protein, []).append(peptide)

        LOGGER.debug(
            "Indexed %i peptides from %i proteins.",
            len(self.num_peptides),
            len(self.protein_peptides),
        )
        return self

    def peptides_of(self, protein: str) -> list[Peptide]:
        """The peptides registered under a protein, in input order.

        Raises
        ------
        KeyError
            If the protein is not in the index.
        """
        return self.protein_peptides[protein]

    def peptide_sequences(self, protein: str) -> list[str]:
        """The sequences of the peptides that support a protein.

        Proteins reported by inference should always be in the index. If one
        is not, a :py:class:`MissingPeptideAssociationWarning` is issued and
        an empty list is returned.
        """
        try:
            peptides = self.protein_peptides[protein]
        except KeyError:
            warnings.warn(
                f"Protein '{protein}' has no associated peptides in the index.",
                MissingPeptideAssociationWarning,
                stacklevel=2,
            )
            return []

        return [p.sequence for p in peptides]
