"""
Relpath command implementation.
"""

import logging

from fskit.core import paths

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the relpath command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    print(paths.relative_path(args.source, args.target))
    return 0
