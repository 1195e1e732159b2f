"""JSON renderer: lossless camelCase serialization of a CV record."""

from cv_export.common.error_handling import RenderError, fatal_operation
from cv_export.models import CVRecord


@fatal_operation("JSON render", stage="render", error_cls=RenderError)
def render_json(record: CVRecord, indent: int = 2) -> bytes:
    """Serialize ``record``; ``CVRecord.from_json`` reads it back unchanged."""
    return record.to_json(indent=indent).encode("utf-8")
