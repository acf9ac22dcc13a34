"""Initialize the fidocal package."""

try:
    from importlib.metadata import PackageNotFoundError, version

    try:
        __version__ = version(__name__)
    except PackageNotFoundError:
        __version__ = "0.0.0"

except ImportError:
    __version__ = "0.0.0"

# The peptides have to be imported first
from .peptides import Peptide, read_peptides  # noqa: I001
from .association import AssociationIndex
from .inference import (
    EmptyInferenceResultError,
    FidoEngine,
    InferenceEngine,
    InferenceResult,
)
from .aggregate import ProteinProbabilities, aggregate
from .calibrate import Calibrator, HyperparameterPoint, ObjectiveSample
from .diagnostics import DiagnosticSink, DirectorySink
from .estimator import (
    MissingPeptideAssociationWarning,
    ProteinProbEstimator,
    UninitializedHyperparameterError,
)
from .writers.txt import to_txt

__all__ = [
    "Peptide",
    "read_peptides",
    "AssociationIndex",
    "EmptyInferenceResultError",
    "FidoEngine",
    "InferenceEngine",
    "InferenceResult",
    "ProteinProbabilities",
    "aggregate",
    "Calibrator",
    "HyperparameterPoint",
    "ObjectiveSample",
    "DiagnosticSink",
    "DirectorySink",
    "MissingPeptideAssociationWarning",
    "ProteinProbEstimator",
    "UninitializedHyperparameterError",
    "to_txt",
    "__version__",
]
