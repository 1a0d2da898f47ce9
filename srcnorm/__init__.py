"""
source-normalizer - fixed regex cleanup for C-family source files.
"""

__version__ = "0.1.0"
