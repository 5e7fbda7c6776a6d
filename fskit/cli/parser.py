"""
fskit CLI argument parser.

This module implements the command-line interface for fskit using argparse.
"""

import argparse
import importlib
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

try:
    __version__ = version("fskit")
except PackageNotFoundError:
    from fskit import __version__

logger = logging.getLogger(__name__)

# Each subcommand is a module here exposing run(args) -> int
COMMAND_PACKAGE = "fskit.cli.commands"


class CLI:
    """fskit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="fskit",
            description="fskit - filesystem utilities",
            epilog='Use "fskit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"fskit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./fskit.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_hash_command(subparsers)
        self._add_rtail_command(subparsers)
        self._add_relpath_command(subparsers)
        self._add_normalize_command(subparsers)
        self._add_size_command(subparsers)

        return parser

    def _add_hash_command(self, subparsers):
        """Add 'hash' subcommand."""
        parser = subparsers.add_parser(
            "hash",
            help="Hash the contents of a directory",
            description="Compute a combined hash of every file below a directory",
        )
        parser.add_argument("directory", metavar="DIR", help="Directory to hash")
        parser.add_argument(
            "--algorithm",
            metavar="ALGO",
            help="Digest algorithm (default: from config, sha1)",
        )
        parser.add_argument(
            "--files",
            action="store_true",
            help="Print the per-file hash map as JSON instead of the combined hash",
        )

    def _add_rtail_command(self, subparsers):
        """Add 'rtail' subcommand."""
        parser = subparsers.add_parser(
            "rtail",
            help="Print the lines of a file in reverse",
            description="Print the lines of a file from last to first",
        )
        parser.add_argument("file", metavar="FILE", help="File to read")
        parser.add_argument(
            "-n",
            "--lines",
            type=int,
            metavar="N",
            help="Stop after N lines (default: all)",
        )
        parser.add_argument(
            "--newline",
            metavar="S",
            help="Line delimiter, escape sequences allowed (default: from config)",
        )
        parser.add_argument(
            "--chunk-size",
            type=int,
            metavar="N",
            help="Bytes read per seek (default: from config)",
        )

    def _add_relpath_command(self, subparsers):
        """Add 'relpath' subcommand."""
        parser = subparsers.add_parser(
            "relpath",
            help="Compute a relative path",
            description="Compute the path of TO relative to the file FROM "
            "(end FROM with '/' to treat it as a directory)",
        )
        parser.add_argument("source", metavar="FROM")
        parser.add_argument("target", metavar="TO")

    def _add_normalize_command(self, subparsers):
        """Add 'normalize' subcommand."""
        parser = subparsers.add_parser(
            "normalize",
            help="Normalize a path",
            description="Resolve '.' and '..' segments of a path",
        )
        parser.add_argument("path", metavar="PATH")
        parser.add_argument(
            "--base",
            metavar="DIR",
            help="Resolve relative paths against DIR instead of the working directory",
        )

    def _add_size_command(self, subparsers):
        """Add 'size' subcommand."""
        parser = subparsers.add_parser(
            "size",
            help="Print the human readable size of a file",
            description="Print the size of a file using binary units",
        )
        parser.add_argument("file", metavar="FILE")
        parser.add_argument(
            "--precision",
            type=int,
            default=0,
            metavar="N",
            help="Decimal places (default: 0)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, 1 for errors, 130 when interrupted)
        """
        parsed_args = self.parse_args(args)
        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Interrupted")
            return 130
        except Exception as e:
            logger.error(f"{parsed_args.command} failed: {e}")
            logger.debug("Traceback:", exc_info=True)
            return 1

    def _configure_logging(self, args):
        """Route log records to stderr at the level chosen by -v/-q."""
        if args.verbose:
            level, format_str = logging.DEBUG, "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level, format_str = logging.ERROR, "%(levelname)s: %(message)s"
        else:
            level, format_str = logging.INFO, "%(message)s"

        # force: tests call run() repeatedly in one process
        logging.basicConfig(level=level, format=format_str, force=True)

    def _dispatch_command(self, args) -> int:
        """Import fskit.cli.commands.<command> and call its run(args)."""
        module = importlib.import_module(COMMAND_PACKAGE + "." + args.command)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
