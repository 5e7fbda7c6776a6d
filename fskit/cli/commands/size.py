"""
Size command implementation.
"""

import logging

from fskit.core.entity import file_entity
from fskit.core.exceptions import FskitError

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the size command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    try:
        print(file_entity(args.file).get_size(precision=args.precision))
    except FskitError as e:
        logger.error(f"Size lookup failed: {e}")
        return 1

    return 0
