"""
Normalize command implementation.
"""

import logging

from fskit.core import paths
from fskit.core.exceptions import FskitError

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the normalize command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    try:
        if args.base:
            result = paths.normalize_to(args.path, args.base)
        else:
            result = paths.normalize(args.path)
    except FskitError as e:
        logger.error(f"Normalization failed: {e}")
        return 1

    print(result)
    return 0
