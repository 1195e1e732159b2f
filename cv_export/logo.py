"""
Logo asset loading.

The logo is optional decoration: if it cannot be fetched or decoded the
export continues without it. Every loaded logo is normalized to PNG so the
PDF and Word renderers receive one format.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import requests
from PIL import Image
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cv_export.common.error_handling import ErrorCollector, safe_execute

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0


@dataclass(frozen=True)
class LogoImage:
    """Decoded logo as PNG bytes plus its pixel size."""

    data: bytes
    width_px: int
    height_px: int

    @property
    def aspect_ratio(self) -> float:
        return self.width_px / self.height_px

    def width_for_height(self, height: float) -> float:
        """Width that keeps the aspect ratio at the given height (any unit)."""
        return height * self.aspect_ratio


@retry(
    stop=stop_after_attempt(2),
    wait=wait_exponential(multiplier=1, min=1, max=4),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    reraise=True,
)
def fetch_logo_bytes(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """Download the logo; raises on HTTP errors."""
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def decode_logo(data: bytes) -> LogoImage:
    """Decode any Pillow-readable image and re-encode it as PNG."""
    with Image.open(BytesIO(data)) as image:
        image.load()
        if image.mode in ("RGB", "RGBA", "L", "LA"):
            return _encode_png(image)
        converted = image.convert("RGBA")
        try:
            return _encode_png(converted)
        finally:
            converted.close()


def _encode_png(image: Image.Image) -> LogoImage:
    width, height = image.size
    if width <= 0 or height <= 0:
        raise ValueError("Logo has no pixels")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return LogoImage(buffer.getvalue(), width, height)


def load_logo(
    url: Optional[str] = None,
    data: Optional[bytes] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    collector: Optional[ErrorCollector] = None,
) -> Optional[LogoImage]:
    """
    Load the logo from raw bytes or a URL (bytes win when both are given).

    Returns None when no logo was requested or when loading failed; failures
    are logged and recorded on ``collector`` but never raised.
    """
    if not data and not url:
        return None

    def _load() -> LogoImage:
        raw = data if data else fetch_logo_bytes(url, timeout=timeout)
        return decode_logo(raw)

    logo = safe_execute(
        _load,
        operation_name="logo load",
        logger=logger,
        fallback=None,
        collector=collector,
        stage="logo",
    )
    if logo is not None:
        logger.debug(f"Logo loaded: {logo.width_px}x{logo.height_px}px")
    return logo
