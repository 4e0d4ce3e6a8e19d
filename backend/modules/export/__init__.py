"""
Export module.

Writes snapshots of the mirrored records as delimited or plain text.
"""

from .models import ExportFormat
from .exporter import export_rows, render, render_csv, render_text, write_export

__all__ = [
    "ExportFormat",
    "export_rows",
    "render",
    "render_csv",
    "render_text",
    "write_export",
]
