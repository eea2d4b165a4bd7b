"""Console and logging setup for the rkteval CLI."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for rkteval.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows the command run for each block
    - Debug (RKTEVAL_DEBUG=1): DEBUG level - shows everything
    """
    debug = bool(os.environ.get("RKTEVAL_DEBUG"))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("rkteval")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False
