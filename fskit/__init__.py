"""
fskit - object-oriented wrappers over filesystem primitives.

Provides path normalization, file and directory entities, reverse line
reading, directory content hashing and tracked temporary resources.
"""

__version__ = "0.1.0"
