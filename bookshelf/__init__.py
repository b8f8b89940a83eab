"""Bookshelf: a browsable, filterable catalog of books."""

__version__ = "1.0.0"
