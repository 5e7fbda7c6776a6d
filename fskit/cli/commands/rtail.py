"""
Reverse tail command implementation.

Prints the lines of a file from last to first.
"""

import logging

from fskit.cli.utils import decode_escapes, get_config
from fskit.core.exceptions import FskitError
from fskit.core.reverse_reader import ReverseReader

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the rtail command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    if args.lines is not None and args.lines < 0:
        logger.error(f"Line count must not be negative: {args.lines}")
        return 1

    try:
        config = get_config(args)
        newline = (
            decode_escapes(args.newline) if args.newline else config.reader.newline
        )
        chunk_size = args.chunk_size or config.reader.chunk_size

        with ReverseReader(args.file, newline=newline, chunk_size=chunk_size) as reader:
            for line_number, line in reader.items():
                if args.lines is not None and line_number >= args.lines:
                    break
                print(line)
    except ValueError as e:
        logger.error(f"Invalid reader options: {e}")
        return 1
    except FskitError as e:
        logger.error(f"Reading failed: {e}")
        return 1

    return 0
