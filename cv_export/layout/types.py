"""
Data types for the paginated layout pipeline.

These types are created fresh for every PDF export and discarded after
rendering:
- BlockDescriptor: what to render for one atomic unit (segmenter output)
- Measurement: rasterized bitmap and its pixel size (adapter output)
- LayoutBlock: a measured, placeable block
- PagePlacement: where one block lands (pagination output)
- PagePlan: all placements plus the page count
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class BlockKind(str, Enum):
    """Atomic block kinds, in the order the segmenter emits them."""
    HEADER = "header"
    SUMMARY = "summary"
    SKILLS = "skills"
    EXPERIENCE_ITEM = "experience-item"
    EDUCATION = "education"
    CERTIFICATIONS = "certifications"
    LANGUAGES = "languages"
    PROJECTS = "projects"
    EXTRAS = "extras"
    # Profile description document
    PROFILE_HEADING = "profile-heading"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True)
class BlockDescriptor:
    """Identifies one atomic unit to render; carries no size yet."""

    kind: BlockKind
    source_index: int                  # Index into the record sequence (0 for whole-section blocks)
    html: str                          # Self-contained HTML fragment for this block
    label: str = ""                    # Human-readable name for logs

    @property
    def key(self) -> str:
        return f"{self.kind.value}[{self.source_index}]"


@dataclass(frozen=True)
class Measurement:
    """Result of rasterizing one block."""

    width_px: int
    height_px: int
    bitmap: bytes                      # PNG bytes, opaque white background

    @property
    def is_empty(self) -> bool:
        return self.width_px <= 0 or self.height_px <= 0


@dataclass(frozen=True)
class LayoutBlock:
    """A measured block ready for page placement."""

    kind: BlockKind
    source_index: int
    measured_width_px: int
    measured_height_px: int
    width_mm: float
    height_mm: float
    bitmap: bytes = field(repr=False, default=b"")
    label: str = ""

    @property
    def key(self) -> str:
        return f"{self.kind.value}[{self.source_index}]"


@dataclass(frozen=True)
class PagePlacement:
    """Page index and coordinates (mm, from the page's top-left) for one block."""

    page_index: int
    block: LayoutBlock
    offset_x_mm: float
    offset_y_mm: float
    width_mm: float
    height_mm: float

    @property
    def bottom_mm(self) -> float:
        return self.offset_y_mm + self.height_mm

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_index": self.page_index,
            "block": self.block.key,
            "offset_x_mm": round(self.offset_x_mm, 3),
            "offset_y_mm": round(self.offset_y_mm, 3),
            "width_mm": round(self.width_mm, 3),
            "height_mm": round(self.height_mm, 3),
        }


@dataclass
class PagePlan:
    """Ordered placements for a whole document."""

    placements: List[PagePlacement] = field(default_factory=list)
    overflowing: List[str] = field(default_factory=list)   # Keys of blocks taller than a page

    @property
    def page_count(self) -> int:
        if not self.placements:
            return 0
        return max(p.page_index for p in self.placements) + 1

    def placements_on(self, page_index: int) -> List[PagePlacement]:
        return [p for p in self.placements if p.page_index == page_index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_count": self.page_count,
            "placements": [p.to_dict() for p in self.placements],
            "overflowing": list(self.overflowing),
        }
