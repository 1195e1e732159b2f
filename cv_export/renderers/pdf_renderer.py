"""
PDF renderer: draws a page plan's block bitmaps onto fixed-size pages.

Pages are emitted in increasing index order; a plan with no placements
still yields one blank page so the output is always a valid document.
Coordinates in the plan are mm from the page's top-left corner; reportlab
measures from the bottom-left, so y is flipped when drawing.
"""

import logging
from collections import defaultdict
from io import BytesIO
from typing import Dict, List, Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from cv_export.common.error_handling import RenderError, fatal_operation
from cv_export.layout.geometry import PageGeometry
from cv_export.layout.types import PagePlacement, PagePlan
from cv_export.logo import LogoImage

logger = logging.getLogger(__name__)

DEFAULT_LOGO_HEIGHT_MM = 12.0


class PdfRenderer:
    """Renders a PagePlan to PDF bytes with reportlab."""

    def __init__(self, logo_height_mm: float = DEFAULT_LOGO_HEIGHT_MM, author: str = ""):
        self.logo_height_mm = logo_height_mm
        self.author = author

    @fatal_operation("PDF render", stage="render", error_cls=RenderError)
    def render(
        self,
        plan: PagePlan,
        geometry: PageGeometry,
        logo: Optional[LogoImage] = None,
        title: str = "CV",
    ) -> bytes:
        buffer = BytesIO()
        pdf = canvas.Canvas(
            buffer,
            pagesize=(geometry.page_width_mm * mm, geometry.page_height_mm * mm),
        )
        pdf.setTitle(title)
        if self.author:
            pdf.setAuthor(self.author)

        pages: Dict[int, List[PagePlacement]] = defaultdict(list)
        for placement in plan.placements:
            pages[placement.page_index].append(placement)

        page_count = max(plan.page_count, 1)
        for page_index in range(page_count):
            for placement in pages.get(page_index, []):
                self._draw_placement(pdf, placement, geometry)
            # Logo last so the header block's white background cannot cover it
            if page_index == 0 and logo is not None:
                self._draw_logo(pdf, logo, geometry)
            pdf.showPage()

        pdf.save()
        output = buffer.getvalue()
        logger.info(f"Rendered PDF: {page_count} page(s), {len(plan.placements)} block(s), {len(output)} bytes")
        return output

    def _draw_placement(self, pdf: canvas.Canvas, placement: PagePlacement, geometry: PageGeometry) -> None:
        bottom_mm = geometry.page_height_mm - placement.offset_y_mm - placement.height_mm
        pdf.drawImage(
            ImageReader(BytesIO(placement.block.bitmap)),
            placement.offset_x_mm * mm,
            bottom_mm * mm,
            width=placement.width_mm * mm,
            height=placement.height_mm * mm,
        )

    def _draw_logo(self, pdf: canvas.Canvas, logo: LogoImage, geometry: PageGeometry) -> None:
        height_mm = self.logo_height_mm
        width_mm = logo.width_for_height(height_mm)
        x_mm = geometry.page_width_mm - geometry.margin_mm - width_mm
        y_mm = geometry.page_height_mm - geometry.margin_mm - height_mm
        pdf.drawImage(
            ImageReader(BytesIO(logo.data)),
            x_mm * mm,
            y_mm * mm,
            width=width_mm * mm,
            height=height_mm * mm,
            mask="auto",
        )
