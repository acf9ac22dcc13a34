"""Test that the version works."""


def test_importlib():
    """The fast way for Python 3.8+."""
    import fidocal

    assert fidocal.__version__ is not None
    assert fidocal.__version__ != "0.0.0"
