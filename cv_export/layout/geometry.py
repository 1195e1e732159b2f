"""
Page geometry: physical page size, margins and pixel/mm conversion.

Two pixel spaces are involved:
- CSS pixels (96 per inch), used for the browser viewport and block width;
- bitmap pixels, CSS pixels multiplied by the render scale factor.
"""

from dataclasses import dataclass

MM_PER_INCH = 25.4
CSS_DPI = 96.0

DEFAULT_MARGIN_MM = 15.0
DEFAULT_SCALE_FACTOR = 2.0

PAGE_FORMATS = {
    "a4": (210.0, 297.0),
    "letter": (215.9, 279.4),
}


@dataclass(frozen=True)
class PageGeometry:
    """Fixed page layout; margins are uniform on all four sides."""

    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    margin_mm: float = DEFAULT_MARGIN_MM
    scale_factor: float = DEFAULT_SCALE_FACTOR

    @classmethod
    def for_format(
        cls,
        page_format: str = "a4",
        margin_mm: float = DEFAULT_MARGIN_MM,
        scale_factor: float = DEFAULT_SCALE_FACTOR,
    ) -> "PageGeometry":
        try:
            width, height = PAGE_FORMATS[page_format.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown page format '{page_format}'. Use one of: {', '.join(PAGE_FORMATS)}"
            )
        return cls(width, height, margin_mm, scale_factor)

    @property
    def content_width_mm(self) -> float:
        return self.page_width_mm - 2 * self.margin_mm

    @property
    def content_height_mm(self) -> float:
        return self.page_height_mm - 2 * self.margin_mm

    @property
    def css_px_per_mm(self) -> float:
        return CSS_DPI / MM_PER_INCH

    @property
    def px_per_mm(self) -> float:
        """Bitmap pixels per mm at the render scale."""
        return self.css_px_per_mm * self.scale_factor

    @property
    def content_width_css_px(self) -> int:
        return round(self.content_width_mm * self.css_px_per_mm)

    @property
    def content_width_px(self) -> int:
        return round(self.content_width_mm * self.px_per_mm)

    def px_to_mm(self, px: float) -> float:
        return px / self.px_per_mm

    def mm_to_px(self, mm: float) -> float:
        return mm * self.px_per_mm
