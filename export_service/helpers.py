"""
Helper functions shared by the export service endpoints.

Converts request bodies into ExportOptions and builds download headers.
"""

from typing import Dict, Optional
from urllib.parse import quote

from cv_export.exporter import ExportOptions, ExportResult


def build_export_options(
    anonymize: bool = False,
    logo_url: Optional[str] = None,
    page_size: Optional[str] = None,
    margin_mm: Optional[float] = None,
) -> ExportOptions:
    """
    Map request fields onto ExportOptions.

    Blank strings are treated as "not given" so form-style clients can send
    empty values without overriding the configured defaults.
    """
    return ExportOptions(
        anonymize=anonymize,
        logo_url=logo_url.strip() if logo_url and logo_url.strip() else None,
        page_format=page_size.strip().lower() if page_size and page_size.strip() else None,
        margin_mm=margin_mm,
    )


def content_disposition(filename: str) -> str:
    """
    Attachment header value for ``filename``.

    Non-ASCII names get an RFC 5987 ``filename*`` parameter next to an
    ASCII fallback.

    Example:
        >>> content_disposition("CV_Jane_Doe.pdf")
        'attachment; filename="CV_Jane_Doe.pdf"'
    """
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quote(filename)}'
    return f'attachment; filename="{filename}"'


def download_headers(result: ExportResult) -> Dict[str, str]:
    """Headers for an export download, carrying the export metadata."""
    metadata = result.to_metadata()
    headers = {
        "Content-Disposition": content_disposition(metadata["filename"]),
        "X-Export-Issues": str(len(metadata["issues"])),
    }
    if metadata["issues"]:
        stages = dict.fromkeys(issue["stage"] for issue in metadata["issues"])
        headers["X-Export-Issue-Stages"] = ",".join(stages)
    if metadata["page_count"] is not None:
        headers["X-Page-Count"] = str(metadata["page_count"])
    return headers
