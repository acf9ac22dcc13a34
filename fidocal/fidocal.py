"""
This is the command line interface for fidocal
"""

import logging
import sys
from functools import partial

from .cli_helper import (
    output_end_message,
    output_start_message,
    setup_logging,
)
from .config import create_config_parser
from .diagnostics import DirectorySink
from .estimator import ProteinProbEstimator
from .inference import FidoEngine
from .peptides import read_peptides
from .writers.txt import to_txt


def main(main_args=None):
    """The CLI entry point"""
    # Get command line arguments
    parser = create_config_parser()
    config = parser.parse_args(args=main_args)

    # Setup logging
    setup_logging(config)
    timer = output_start_message("fidocal", config)

    # Parse
    peptides = read_peptides(
        config.peptide_files,
        decoy_files=config.decoys,
        protein_sep=config.protein_sep,
    )

    if config.dest_dir is not None:
        config.dest_dir.mkdir(exist_ok=True)

    diagnostics = None
    if config.diagnostics_dir is not None:
        logging.info(
            "Writing grid search diagnostics to %s", config.diagnostics_dir
        )
        diagnostics = DirectorySink(config.diagnostics_dir)

    estimator = ProteinProbEstimator(
        alpha=config.alpha,
        beta=config.beta,
        gamma=config.gamma,
        engine=partial(
            FidoEngine, max_configurations=config.max_configurations
        ),
        diagnostics=diagnostics,
        max_workers=config.max_workers,
    )

    if config.default_parameters:
        alpha, beta = config.alpha, config.beta
        estimator.set_default_parameters()
        if alpha is not None:
            estimator.alpha = alpha
        if beta is not None:
            estimator.beta = beta

    estimator.initialize(peptides)
    probabilities = estimator.calculate_protein_probs()

    out_file = to_txt(
        probabilities,
        index=estimator.index,
        dest_dir=config.dest_dir,
        file_root=config.file_root,
    )

    output_end_message("fidocal", config, timer, out_file)


if __name__ == "__main__":
    import traceback

    try:
        main()
    except RuntimeError as _e:
        logging.error(f"[Error] {traceback.format_exc()}")
        sys.exit(250)  # input failure
    except ValueError as _e:
        logging.error(f"[Error] {traceback.format_exc()}")
        sys.exit(250)  # input failure
    except Exception as _e:
        logging.error(f"[Error] {traceback.format_exc()}")
        sys.exit(252)
