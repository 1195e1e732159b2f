"""
Measurement adapters: rasterize a block and report its pixel size.

Blocks are measured in isolation, each against the fixed page content width,
so a block's height never depends on its neighbours or on pagination.

- PlaywrightMeasurementAdapter renders each block's HTML in headless Chromium
  and takes an element screenshot at the configured scale factor.
- BitmapMeasurementAdapter serves bitmaps that were rendered elsewhere
  (for example sub-regions of a full-document capture), keyed by block key.

measure_blocks() drives an adapter over all descriptors in parallel, applies
a per-block timeout and converts results to LayoutBlocks. A block that fails,
times out or comes back empty is skipped; measurement never aborts an export.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image

from cv_export.common.error_handling import ErrorCollector
from cv_export.layout.block_html import BLOCK_ELEMENT_ID, BlockHtmlRenderer
from cv_export.layout.geometry import PageGeometry
from cv_export.layout.types import BlockDescriptor, LayoutBlock, Measurement

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_MAX_PARALLEL = 4


def png_size(bitmap: bytes) -> Tuple[int, int]:
    """Pixel (width, height) of an encoded image."""
    with Image.open(BytesIO(bitmap)) as image:
        return image.size


class MeasurementAdapter(ABC):
    """
    Renders one block to a bitmap.

    Adapters holding resources (a browser) acquire them in ``__aenter__``
    and release them in ``__aexit__``.
    """

    async def __aenter__(self) -> "MeasurementAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False

    @abstractmethod
    async def measure(self, descriptor: BlockDescriptor) -> Optional[Measurement]:
        """Return the block's bitmap and size, or None for an empty region."""


class PlaywrightMeasurementAdapter(MeasurementAdapter):
    """Rasterizes blocks with headless Chromium, one page per block."""

    def __init__(
        self,
        geometry: PageGeometry,
        html_renderer: Optional[BlockHtmlRenderer] = None,
        headless: bool = True,
        timeout_ms: int = 30000,
    ):
        self.geometry = geometry
        self.html = html_renderer or BlockHtmlRenderer()
        self.headless = headless
        self.timeout_ms = timeout_ms
        self._playwright = None
        self._browser = None
        self._context = None

    async def __aenter__(self) -> "PlaywrightMeasurementAdapter":
        # Import here to avoid loading Playwright until a PDF is requested
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            self._context = await self._browser.new_context(
                viewport={"width": self.geometry.content_width_css_px, "height": 1200},
                device_scale_factor=self.geometry.scale_factor,
            )
        except Exception:
            await self._close()
            raise
        logger.debug(
            f"Chromium ready (viewport {self.geometry.content_width_css_px}px, "
            f"scale {self.geometry.scale_factor})"
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self._close()
        return False

    async def _close(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def measure(self, descriptor: BlockDescriptor) -> Optional[Measurement]:
        if self._context is None:
            raise RuntimeError("PlaywrightMeasurementAdapter used outside 'async with'")

        page = await self._context.new_page()
        try:
            page.set_default_timeout(self.timeout_ms)
            await page.set_content(
                self.html.document(descriptor.html, self.geometry),
                wait_until="networkidle",
            )
            element = page.locator(f"#{BLOCK_ELEMENT_ID}")
            box = await element.bounding_box()
            if not box or box["width"] < 1 or box["height"] < 1:
                return None
            bitmap = await element.screenshot(type="png", animations="disabled")
        finally:
            await page.close()

        width_px, height_px = png_size(bitmap)
        return Measurement(width_px, height_px, bitmap)


class BitmapMeasurementAdapter(MeasurementAdapter):
    """Serves pre-rendered PNG bitmaps keyed by ``BlockDescriptor.key``."""

    def __init__(self, bitmaps: Dict[str, bytes]):
        self.bitmaps = dict(bitmaps)

    async def measure(self, descriptor: BlockDescriptor) -> Optional[Measurement]:
        bitmap = self.bitmaps.get(descriptor.key)
        if not bitmap:
            return None
        width_px, height_px = png_size(bitmap)
        return Measurement(width_px, height_px, bitmap)


def to_layout_block(
    descriptor: BlockDescriptor,
    measurement: Measurement,
    geometry: PageGeometry,
) -> LayoutBlock:
    return LayoutBlock(
        kind=descriptor.kind,
        source_index=descriptor.source_index,
        measured_width_px=measurement.width_px,
        measured_height_px=measurement.height_px,
        width_mm=geometry.px_to_mm(measurement.width_px),
        height_mm=geometry.px_to_mm(measurement.height_px),
        bitmap=measurement.bitmap,
        label=descriptor.label,
    )


async def measure_blocks(
    adapter: MeasurementAdapter,
    descriptors: Sequence[BlockDescriptor],
    geometry: PageGeometry,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_parallel: int = DEFAULT_MAX_PARALLEL,
    collector: Optional[ErrorCollector] = None,
) -> List[LayoutBlock]:
    """
    Measure every descriptor and return the placeable blocks in input order.

    Acts as the barrier in front of pagination: it returns only after every
    block has been measured, skipped or timed out.
    """
    semaphore = asyncio.Semaphore(max_parallel)

    def _skip(descriptor: BlockDescriptor, message: str, severity: str, exc=None) -> None:
        if collector is not None:
            collector.add_issue(
                stage="measure",
                operation="block_measurement",
                message=f"{descriptor.key}: {message}",
                severity=severity,
                exception=exc,
            )

    async def _measure_one(descriptor: BlockDescriptor) -> Optional[LayoutBlock]:
        async with semaphore:
            try:
                measurement = await asyncio.wait_for(
                    adapter.measure(descriptor), timeout=timeout_seconds
                )
            except asyncio.TimeoutError as e:
                logger.warning(f"Measuring {descriptor.key} timed out after {timeout_seconds}s; skipping block")
                _skip(descriptor, f"timed out after {timeout_seconds}s", "medium", e)
                return None
            except Exception as e:
                logger.warning(f"Measuring {descriptor.key} failed: {e}; skipping block")
                _skip(descriptor, f"measurement failed: {e}", "medium", e)
                return None

        if measurement is None or measurement.is_empty:
            logger.info(f"Block {descriptor.key} rendered empty; skipping")
            _skip(descriptor, "empty region", "low")
            return None
        return to_layout_block(descriptor, measurement, geometry)

    results = await asyncio.gather(*(_measure_one(d) for d in descriptors))
    blocks = [block for block in results if block is not None]
    logger.info(f"Measured {len(blocks)}/{len(descriptors)} blocks")
    return blocks
