import datetime
import logging
import sys
import time

from fidocal import __version__
from fidocal.estimator import DEFAULT_ALPHA, DEFAULT_BETA

LOGGER = logging.getLogger(__name__)

VERBOSITY_LEVELS = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
}


def make_timer():
    t0 = time.time()

    def elapsed():
        nonlocal t0
        t1 = time.time()
        dt, t0 = t1 - t0, t1
        return dt

    return elapsed


def setup_logging(config):
    """Configure the root logger from the command line options.

    Grid cells evaluated by several workers run in threads, so the thread
    name is added when timestamps are requested.
    """
    if not config.log_time:
        log_format = "[{levelname}] {message}"
    elif config.max_workers <= 1:
        log_format = "[{asctime}/{levelname}] {message}"
    else:
        log_format = "[{threadName}/{asctime}/{levelname}] {message}"

    logging.basicConfig(
        format=log_format,
        style="{",
        level=VERBOSITY_LEVELS[config.verbosity],
        force=True,
    )

    # Warnings, such as missing peptide associations, go to the log.
    logging.captureWarnings(True)


def describe_hyperparameters(config):
    """How alpha and beta will be set, one entry per hyperparameter."""
    defaults = {"alpha": DEFAULT_ALPHA, "beta": DEFAULT_BETA}
    described = []
    for name in ("alpha", "beta"):
        value = getattr(config, name)
        if value is not None:
            described.append(f"{name} = {value:g}")
        elif config.default_parameters:
            described.append(f"{name} = {defaults[name]:g} (default)")
        else:
            described.append(f"{name} chosen by grid search")

    return described


def output_start_message(prog_name, config):
    timer = make_timer()
    LOGGER.info("%s version %s", prog_name, __version__)
    LOGGER.info("Command issued:")
    LOGGER.info("  %s", " ".join(sys.argv))
    LOGGER.info("")
    LOGGER.info("Peptide files:")
    for pep_file in config.peptide_files:
        LOGGER.info("  - %s", pep_file)

    for decoy_file in config.decoys or []:
        LOGGER.info("  - %s (decoys)", decoy_file)

    LOGGER.info("Hyperparameters:")
    for line in describe_hyperparameters(config):
        LOGGER.info("  - %s", line)

    LOGGER.info("  - gamma = %g", config.gamma)
    LOGGER.info("")
    LOGGER.info("Starting Analysis")
    LOGGER.info("=================")
    return timer


def output_end_message(prog_name, config, timer, out_file=None):
    total_time = str(datetime.timedelta(seconds=round(timer())))

    LOGGER.info("")
    if out_file is not None:
        LOGGER.info("Protein-level results are in %s", out_file)

    LOGGER.info("=== DONE! ===")
    LOGGER.info("%s analysis completed in %s", prog_name, total_time)
