"""Merge the text of logs found in folders and nested archives into one log file."""

__version__ = "0.1.0"

__all__ = ["__version__"]