"""
Entry point for running the fskit CLI as a module.

Usage: python -m fskit [command] [options]
"""

from fskit.cli.parser import main

if __name__ == "__main__":
    main()
