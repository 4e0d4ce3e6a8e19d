"""
Export module data models.
"""

from enum import Enum


class ExportFormat(str, Enum):
    """Supported export file formats."""

    CSV = "csv"     # Delimited text
    TEXT = "text"   # One JSON object per record, blank-line separated

    @property
    def extension(self) -> str:
        return "csv" if self is ExportFormat.CSV else "txt"
