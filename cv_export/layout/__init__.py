"""
Paginated layout engine for PDF export.

Pipeline: SectionSegmenter -> measure_blocks -> paginate -> PdfRenderer.
"""

from cv_export.layout.geometry import PageGeometry
from cv_export.layout.measurement import (
    BitmapMeasurementAdapter,
    MeasurementAdapter,
    PlaywrightMeasurementAdapter,
    measure_blocks,
)
from cv_export.layout.pagination import SECTION_GAP_MM, paginate
from cv_export.layout.segmenter import SectionSegmenter
from cv_export.layout.types import (
    BlockDescriptor,
    BlockKind,
    LayoutBlock,
    Measurement,
    PagePlacement,
    PagePlan,
)

__all__ = [
    "BitmapMeasurementAdapter",
    "BlockDescriptor",
    "BlockKind",
    "LayoutBlock",
    "Measurement",
    "MeasurementAdapter",
    "PageGeometry",
    "PagePlacement",
    "PagePlan",
    "PlaywrightMeasurementAdapter",
    "SECTION_GAP_MM",
    "SectionSegmenter",
    "measure_blocks",
    "paginate",
]
