"""
Optional sinks for the intermediate results of hyperparameter calibration.

By default nothing is recorded. A :py:class:`DirectorySink` writes the
results of each grid cell to tab-delimited files, which is useful to
inspect why a particular pair of hyperparameters was chosen.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

LOGGER = logging.getLogger(__name__)


class DiagnosticSink:
    """Receive the intermediate results of each grid cell.

    Every hook does nothing. Subclasses override the hooks they need.
    """

    def cell_output(self, point, probabilities) -> None:
        """The ranked protein groups of a cell."""

    def evidence(self, point, positives: set, negatives: set) -> None:
        """The evidence-positive and evidence-negative proteins."""

    def fdr_curve(
        self, point, estimated: np.ndarray, empirical: np.ndarray
    ) -> None:
        """The estimated and empirical FDR at each rank."""

    def roc_curve(self, point, fps: np.ndarray, tps: np.ndarray) -> None:
        """The cumulative false and true positives at each rank."""


class DirectorySink(DiagnosticSink):
    """Write the intermediate results of each cell to a directory.

    One file is written per hook and cell, named
    ``alpha-{alpha}_beta-{beta}.{kind}.tsv``.

    Parameters
    ----------
    dest_dir : str or Path
        The directory in which to write the files. It is created if needed.
    sep : str, optional
        The delimiter to use.
    """

    def __init__(self, dest_dir: str | Path, sep: str = "\t") -> None:
        self.dest_dir = Path(dest_dir)
        self.sep = sep
        self.dest_dir.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"DirectorySink({self.dest_dir})"

    def path(self, point, kind: str) -> Path:
        """The file for one kind of result of a cell."""
        return self.dest_dir / (
            f"alpha-{point.alpha:.2f}_beta-{point.beta:.2f}.{kind}.tsv"
        )

    def _write(self, point, kind: str, df: pd.DataFrame) -> None:
        out_file = self.path(point, kind)
        df.to_csv(out_file, sep=self.sep, index=False)
        LOGGER.debug("Wrote %s", out_file)

    def cell_output(self, point, probabilities) -> None:
        self._write(point, "proteins", probabilities.to_dataframe())

    def evidence(self, point, positives: set, negatives: set) -> None:
        df = pd.DataFrame(
            [(p, True) for p in sorted(positives)]
            + [(p, False) for p in sorted(negatives)],
            columns=["protein", "positive"],
        )
        self._write(point, "evidence", df)

    def fdr_curve(
        self, point, estimated: np.ndarray, empirical: np.ndarray
    ) -> None:
        df = pd.DataFrame({"estimated": estimated, "empirical": empirical})
        self._write(point, "fdr", df)

    def roc_curve(self, point, fps: np.ndarray, tps: np.ndarray) -> None:
        df = pd.DataFrame({"false_positives": fps, "true_positives": tps})
        self._write(point, "roc", df)
