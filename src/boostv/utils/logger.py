"""Simple module which define logging module style and returns it."""

import logging
import sys

# Configure the formatting of the logger
logging.basicConfig(format="%(message)s", stream=sys.stdout)
# logging.basicConfig(format='[%(levelname)s][%(name)s] %(message)s')

# Capture warning messages (e.g. degenerate N-subjettiness axis sets) and
# redirect them through the logger
logging.captureWarnings(True)

# Initialize logger
logger = logging.getLogger("boostv")


def set_verbosity(verbosity="info"):
    """Sets the verbosity of the package logger.

    Parameters
    ----------
    verbosity : Union[str, int], default 'info'
        Logging level name (e.g. 'debug', 'info', 'warning') or value
    """
    if isinstance(verbosity, str):
        verbosity = verbosity.upper()

    logger.setLevel(verbosity)
