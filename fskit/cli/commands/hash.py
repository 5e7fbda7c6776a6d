"""
Hash command implementation.

Prints a combined hash of every file below a directory, or the per-file map.
"""

import logging

from fskit.cli.utils import get_config
from fskit.core.exceptions import FskitError
from fskit.core.hasher import DirectoryHasher

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the hash command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    try:
        config = get_config(args)
        algorithm = args.algorithm or config.hasher.algorithm
        hasher = DirectoryHasher(args.directory, algorithm)
        if args.files:
            print(hasher.get_hashes())
        else:
            print(hasher.get_hash())
    except FskitError as e:
        logger.error(f"Hashing failed: {e}")
        return 1

    return 0
