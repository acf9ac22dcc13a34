"""Test that the text writer works"""
import pandas as pd
import pytest

from fidocal import InferenceResult, aggregate, to_txt


@pytest.fixture
def probabilities():
    return aggregate(
        InferenceResult([0.3, 0.1], [("B",), ("A", "C")])
    )


def test_sanity(probabilities, tmp_path):
    """Run simple sanity checks"""
    out_file = to_txt(probabilities, dest_dir=tmp_path, file_root="test")
    assert out_file == tmp_path / "test.fidocal.proteins.txt"
    assert out_file.exists()

    with pytest.raises(ValueError):
        to_txt("blah", dest_dir=tmp_path)


def test_columns(probabilities, tmp_path, tiny_index):
    """One row per protein in rank order"""
    out_file = to_txt(probabilities, dest_dir=tmp_path)
    assert out_file.name == "fidocal.proteins.txt"

    df = pd.read_csv(out_file, sep="\t")
    assert df.columns.tolist() == [
        "protein_group",
        "protein",
        "posterior_error_prob",
        "q-value",
    ]
    assert df["protein"].tolist() == ["A", "C", "B"]
    assert df["protein_group"].tolist() == ["A,C", "A,C", "B"]

    with pytest.warns(UserWarning):
        out_file = to_txt(probabilities, index=tiny_index, dest_dir=tmp_path)

    df = pd.read_csv(out_file, sep="\t", keep_default_na=False)
    assert df["peptides"].tolist() == ["AAAK;BBBK", "", "BBBK;CCCK"]
