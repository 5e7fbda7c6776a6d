"""Test fixtures for fskit tests.

- directories: Directory trees for traversal, hashing and locating tests

Import fixtures in your tests using:
    from tests.fixtures.directories import sample_tree
"""

__all__ = [
    "directories",
]
