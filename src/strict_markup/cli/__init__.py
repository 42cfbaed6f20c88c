"""Command-line interface module for strict markup parsing.

This module provides the ``strict-markup`` tool for parsing, normalizing and
validating markup files.
"""

from .main import main

__all__ = ["main"]
