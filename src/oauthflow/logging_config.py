"""Logging setup for the ``oauthflow`` logger hierarchy.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here by the CLI. Applications embedding the library configure
logging themselves.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "oauthflow"


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Send ``oauthflow.*`` records to stderr through Rich.

    Args:
        verbose: Show DEBUG records.
        quiet: Show only ERROR records. Ignored when *verbose* is set.

    Returns:
        The configured ``oauthflow`` logger.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger
