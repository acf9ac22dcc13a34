"""Writer to save results in a tab-delmited format"""
from __future__ import annotations

import logging
from pathlib import Path

from fidocal.aggregate import ProteinProbabilities
from fidocal.association import AssociationIndex

LOGGER = logging.getLogger(__name__)


def to_txt(
    probabilities: ProteinProbabilities,
    index: AssociationIndex | None = None,
    dest_dir: str | Path | None = None,
    file_root: str | None = None,
    sep: str = "\t",
) -> Path:
    """Save protein-level confidence estimates to a delimited text file.

    Each protein is written on its own line, in rank order, with the
    protein group it belongs to, the group's posterior error probability
    and q-value. If an association index is provided, the peptides that
    support each protein are listed as well.

    Parameters
    ----------
    probabilities : ProteinProbabilities
        The ranked protein groups.
    index : AssociationIndex, optional
        The protein to peptide associations.
    dest_dir : str or Path, optional
        The directory in which to save the file. :code:`None` will use the
        current working directory.
    file_root : str, optional
        An optional prefix for the file. The suffix will always be
        "fidocal.proteins.txt".
    sep : str, optional
        The delimiter to use.

    Returns
    -------
    Path
        The path to the saved file.
    """
    if isinstance(probabilities, str):
        raise ValueError(
            "'probabilities' should be a ProteinProbabilities object, not a "
            "string."
        )

    file_base = "fidocal"
    if file_root is not None:
        file_base = file_root + "." + file_base
    if dest_dir is not None:
        file_base = Path(dest_dir, file_base)

    out_file = Path(str(file_base) + ".proteins.txt")
    probabilities.to_dataframe(index).to_csv(out_file, sep=sep, index=False)
    LOGGER.info("Wrote protein-level results to %s", out_file)
    return out_file
