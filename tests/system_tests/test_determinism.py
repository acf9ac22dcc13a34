"""
These tests verify that identical runs produce identical results.
"""

import pandas as pd
import pytest

from ..helpers.cli import run_fidocal_cli


@pytest.mark.slow
def test_determinism_same_file(tmp_path, peptide_files):
    """Test that two identical fidocal runs produce same results."""
    targets, decoys = peptide_files
    params = [targets, "--decoys", decoys, "--dest_dir", tmp_path]
    run_fidocal_cli(params + ["--file_root", "run1"])
    run_fidocal_cli(params + ["--file_root", "run2", "--max_workers", "2"])

    def read_tsv(filename):
        return pd.read_csv(tmp_path / filename, sep="\t")

    df_run1 = read_tsv("run1.fidocal.proteins.txt")
    df_run2 = read_tsv("run2.fidocal.proteins.txt")
    pd.testing.assert_frame_equal(df_run1, df_run2)
