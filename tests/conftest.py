"""
This file contains fixtures that are used at multiple points in the tests.
"""

import logging

import pandas as pd
import pytest

from fidocal import AssociationIndex, Peptide

from .helpers.engines import StubEngine

## This section just adds the sorting of the tests, makes the tests marked
## with the slow marker run last.


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: mark test to run last")


def by_slow_marker(item):
    return 0 if item.get_closest_marker("slow") is None else 1


def pytest_collection_modifyitems(session, config, items):
    if config.getoption("--slow-last"):
        items.sort(key=by_slow_marker, reverse=False)


def pytest_addoption(parser, pluginmanager):
    parser.addoption("--slow-last", action="store_true", default=False)


## End of section (slow makrker)


@pytest.fixture(autouse=True)
def set_logging(caplog):
    """Add logging to everything."""
    caplog.set_level(level=logging.INFO, logger="fidocal")


@pytest.fixture(autouse=True)
def reset_stub_engine():
    """Forget the calls of previous tests."""
    StubEngine.calls = []
    yield
    StubEngine.calls = []


@pytest.fixture
def tiny_peptides() -> list[Peptide]:
    """Three peptides from two proteins."""
    return [
        Peptide("AAAK", 0.01, 1, {"A"}),
        Peptide("BBBK", 0.2, 1, {"A", "B"}),
        Peptide("CCCK", 0.9, -1, {"B"}),
    ]


@pytest.fixture
def tiny_index(tiny_peptides) -> AssociationIndex:
    """The index of the three peptides."""
    return AssociationIndex(tiny_peptides)


@pytest.fixture
def peptide_df() -> pd.DataFrame:
    """Peptides as they are read from a table.

    Protein T1 is strongly supported, T2 and T3 share all of their peptides
    and D1 is a decoy protein.
    """
    data = {
        "Peptide": ["PEPTIDEK", "ELVISK", "LIVESK", "SHAREDR", "KEDITPEP"],
        "posterior_error_prob": [0.001, 0.01, 0.3, 0.05, 0.8],
        "proteinIds": ["T1", "T1", "T1", "T2;T3", "D1"],
        "Label": [1, 1, 1, 1, -1],
    }
    return pd.DataFrame(data)


@pytest.fixture
def peptide_files(tmp_path, peptide_df):
    """The targets and decoys of `peptide_df` written to separate files."""
    targets = peptide_df.loc[peptide_df["Label"] == 1].drop(columns="Label")
    decoys = peptide_df.loc[peptide_df["Label"] == -1].drop(columns="Label")
    target_file = tmp_path / "targets.peptides.tsv"
    decoy_file = tmp_path / "decoys.peptides.tsv"
    targets.to_csv(target_file, sep="\t", index=False)
    decoys.to_csv(decoy_file, sep="\t", index=False)
    return target_file, decoy_file
