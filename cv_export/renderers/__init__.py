"""Output renderers: paginated PDF, Word and JSON."""

from cv_export.renderers.json_renderer import render_json
from cv_export.renderers.pdf_renderer import PdfRenderer
from cv_export.renderers.word_renderer import WordRenderer

__all__ = ["PdfRenderer", "WordRenderer", "render_json"]
