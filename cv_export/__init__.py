"""
CV export: paginated PDF, Word and JSON output for structured CV records.

The PDF path segments a record into atomic blocks, measures each block in
headless Chromium, places the blocks on fixed-size pages and draws the
result with reportlab.
"""

from version import __version__

from cv_export.exporter import CVExporter, ExportOptions, ExportResult, export_json, export_pdf, export_word
from cv_export.models import CVRecord, parse_cv_payload

__all__ = [
    "CVExporter",
    "CVRecord",
    "ExportOptions",
    "ExportResult",
    "__version__",
    "export_json",
    "export_pdf",
    "export_word",
    "parse_cv_payload",
]
