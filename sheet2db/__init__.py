"""sheet2db: convert spreadsheet / CSV files into SQLite database files."""

from .services.converter import convert

__all__ = ["convert"]

__version__ = "1.1.0"
