"""
recap - a persistent, tag-indexed note store.
Items are short text records annotated with free-form, case-insensitive tags.
They are stored in SQLite and retrieved by tag membership.

This version uses synchronous operations.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("recap")
except PackageNotFoundError:
    __version__ = "0.3.0"
