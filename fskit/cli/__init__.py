"""
fskit CLI module.

This module provides the command-line interface for fskit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
