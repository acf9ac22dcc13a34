"""
Contains all of the configuration details for running fidocal
from the command line.
"""
import argparse
import textwrap
from pathlib import Path

from fidocal import __version__


class FidocalHelpFormatter(argparse.HelpFormatter):
    """Format help text to keep newlines and whitespace"""

    def _fill_text(self, text, width, indent):
        text_list = text.splitlines(keepends=True)
        return "\n".join(_process_line(l, width, indent) for l in text_list)


def create_config_parser():
    """The parser"""
    desc = (
        f"fidocal version {__version__}.\n"
        "Calibrated protein-level posterior error probabilities and q-values\n"
        "from scored peptides, using the Fido model with its hyperparameters\n"
        "chosen by grid search."
    )

    parser = argparse.ArgumentParser(
        description=desc, formatter_class=FidocalHelpFormatter
    )

    parser.add_argument(
        "peptide_files",
        type=Path,
        nargs="+",
        help=(
            "One or more tab-delimited peptide tables, with a peptide, "
            "posterior error probability and proteins column. Without a "
            "label column every peptide in these files is a target."
        ),
    )

    parser.add_argument(
        "--decoys",
        type=Path,
        nargs="+",
        help="Peptide tables that contain only decoy peptides.",
    )

    parser.add_argument(
        "--protein_sep",
        type=str,
        default=";",
        help="The delimiter between proteins in the proteins column.",
    )

    parser.add_argument(
        "--alpha",
        type=float,
        help=(
            "The probability that a present protein emits each of its "
            "peptides. If not set, it is chosen by grid search over "
            "[0.01, 0.76]."
        ),
    )

    parser.add_argument(
        "--beta",
        type=float,
        help=(
            "The probability that a peptide is emitted spuriously. If not "
            "set, it is chosen by grid search over [0.0, 0.8]."
        ),
    )

    parser.add_argument(
        "--gamma",
        type=float,
        default=0.5,
        help="The prior probability that a protein is present.",
    )

    parser.add_argument(
        "--default_parameters",
        default=False,
        action="store_true",
        help=(
            "Use alpha = 0.1 and beta = 0.01 instead of a grid search. "
            "Values given with --alpha or --beta take precedence."
        ),
    )

    parser.add_argument(
        "--max_configurations",
        type=int,
        default=2**14,
        help=(
            "The largest number of states to enumerate exactly for one "
            "connected component of the protein graph. Larger components "
            "are approximated."
        ),
    )

    parser.add_argument(
        "-w",
        "--max_workers",
        default=1,
        type=int,
        help=(
            "The number of threads to use for the grid search. Note that "
            "using more than one worker will result in garbled logging "
            "messages."
        ),
    )

    parser.add_argument(
        "-d",
        "--dest_dir",
        type=Path,
        help=(
            "The directory in which to write the result files. Defaults to "
            "the current working directory"
        ),
    )

    parser.add_argument(
        "-r",
        "--file_root",
        type=str,
        help="The prefix added to all file names.",
    )

    parser.add_argument(
        "--diagnostics_dir",
        type=Path,
        help=(
            "If set, the ranked proteins, evidence labels, FDR curves and "
            "ROC curves of every grid cell are written to this directory."
        ),
    )

    parser.add_argument(
        "--log_time",
        default=False,
        action="store_true",
        help="Add the time to every logging message.",
    )

    parser.add_argument(
        "-v",
        "--verbosity",
        default=2,
        type=int,
        choices=[0, 1, 2, 3],
        help=(
            "Specify the verbosity of the current "
            "process. Each level prints the following "
            "messages, including all those at a lower "
            "verbosity: 0-errors, 1-warnings, 2-messages"
            ", 3-debug info."
        ),
    )

    return parser


def _process_line(line, width, indent):
    line = textwrap.fill(
        line,
        width,
        initial_indent=indent,
        subsequent_indent=indent,
        replace_whitespace=False,
    )
    return line.strip()
