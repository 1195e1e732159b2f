"""
Pagination engine: places measured blocks on fixed-size pages.

Greedy first-fit in a single pass, no backtracking:

    for each block, in order:
        remaining = content_height - cursor
        if block fits in remaining, or the page is still empty:
            place at (page, margin, margin + cursor)
        else:
            start a new page, then place at the top
        cursor += block height + section gap

Blocks are atomic. A block taller than a whole page is placed alone at the
top of a page and allowed to run past the bottom margin; it is never split.
Orphaned section headings cannot occur because the segmenter binds each
heading to its first content block.
"""

import logging
from typing import Iterable, Optional

from cv_export.common.error_handling import ErrorCollector
from cv_export.layout.geometry import PageGeometry
from cv_export.layout.types import LayoutBlock, PagePlacement, PagePlan

logger = logging.getLogger(__name__)

SECTION_GAP_MM = 2.0

# Absorbs float noise from px -> mm conversion
FIT_EPSILON_MM = 1e-6


def paginate(
    blocks: Iterable[LayoutBlock],
    geometry: PageGeometry,
    section_gap_mm: float = SECTION_GAP_MM,
    collector: Optional[ErrorCollector] = None,
) -> PagePlan:
    """
    Compute the page plan for ``blocks``.

    Args:
        blocks: Measured blocks in display order
        geometry: Page size and margins
        section_gap_mm: Vertical space left after every block
        collector: Receives a warning for each block taller than a page

    Returns:
        PagePlan whose placements follow input order
    """
    content_height = geometry.content_height_mm
    plan = PagePlan()
    page_index = 0
    cursor_mm = 0.0

    for block in blocks:
        remaining = content_height - cursor_mm
        fits = block.height_mm <= remaining + FIT_EPSILON_MM

        if not fits and cursor_mm > 0:
            page_index += 1
            cursor_mm = 0.0

        if block.height_mm > content_height + FIT_EPSILON_MM:
            message = (
                f"Block {block.key} is {block.height_mm:.1f}mm tall but a page holds "
                f"{content_height:.1f}mm; placing it alone and letting it overflow"
            )
            logger.warning(message)
            plan.overflowing.append(block.key)
            if collector is not None:
                collector.add_issue(
                    stage="paginate",
                    operation="oversized_block",
                    message=message,
                    severity="low",
                )

        plan.placements.append(PagePlacement(
            page_index=page_index,
            block=block,
            offset_x_mm=geometry.margin_mm,
            offset_y_mm=geometry.margin_mm + cursor_mm,
            width_mm=block.width_mm,
            height_mm=block.height_mm,
        ))
        cursor_mm += block.height_mm + section_gap_mm

    logger.info(f"Paginated {len(plan.placements)} blocks onto {plan.page_count} page(s)")
    return plan
