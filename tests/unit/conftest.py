"""
Global fixtures for all unit tests.

This conftest provides:
- Environment isolation so CV_EXPORT_* variables from the host never leak
  into settings-dependent tests
- Pillow-generated PNG bitmaps standing in for Chromium screenshots
- A fake measurement adapter that serves bitmaps of configured heights
- A representative CV record
"""

import asyncio
import os
from io import BytesIO
from typing import Dict, Optional

import pytest
from PIL import Image

from cv_export.common.config import get_settings
from cv_export.layout.geometry import PageGeometry
from cv_export.layout.measurement import MeasurementAdapter, png_size
from cv_export.layout.types import BlockDescriptor, BlockKind, LayoutBlock, Measurement


def make_png(width: int, height: int, color=(255, 255, 255)) -> bytes:
    """Solid-colour PNG of the given pixel size."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeMeasurementAdapter(MeasurementAdapter):
    """
    Measures every block as a full-width bitmap of a configured height.

    Heights are given in mm per block key; unknown keys use ``default_mm``.
    Keys listed in ``failing`` raise, keys in ``empty`` return None, and
    keys in ``slow`` never finish.
    """

    def __init__(
        self,
        geometry: PageGeometry,
        heights_mm: Optional[Dict[str, float]] = None,
        default_mm: float = 20.0,
        failing=(),
        empty=(),
        slow=(),
    ):
        self.geometry = geometry
        self.heights_mm = heights_mm or {}
        self.default_mm = default_mm
        self.failing = set(failing)
        self.empty = set(empty)
        self.slow = set(slow)
        self.measured = []
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited = True
        return False

    async def measure(self, descriptor: BlockDescriptor) -> Optional[Measurement]:
        self.measured.append(descriptor.key)
        if descriptor.key in self.failing:
            raise RuntimeError(f"render crashed for {descriptor.key}")
        if descriptor.key in self.empty:
            return None
        if descriptor.key in self.slow:
            await asyncio.sleep(3600)

        height_mm = self.heights_mm.get(descriptor.key, self.default_mm)
        width_px = self.geometry.content_width_px
        height_px = max(1, round(self.geometry.mm_to_px(height_mm)))
        bitmap = make_png(width_px, height_px)
        return Measurement(*png_size(bitmap), bitmap)


def layout_block(height_mm: float, index: int = 0, width_mm: float = 180.0, kind=None) -> LayoutBlock:
    """LayoutBlock with the given size and no bitmap, for pagination tests."""
    return LayoutBlock(
        kind=kind or BlockKind.EXPERIENCE_ITEM,
        source_index=index,
        measured_width_px=0,
        measured_height_px=0,
        width_mm=width_mm,
        height_mm=height_mm,
    )


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate tests from host configuration.

    Removes CV_EXPORT_* variables and clears the cached settings before and
    after every test.
    """
    for key in list(os.environ):
        if key.startswith("CV_EXPORT_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def png_factory():
    """Factory for solid-colour PNG bytes."""
    return make_png


@pytest.fixture
def block_factory():
    """Factory for size-only LayoutBlocks."""
    return layout_block


@pytest.fixture
def a4_geometry():
    """Default A4 page with 15mm margins at scale 2."""
    return PageGeometry()


@pytest.fixture
def fake_adapter_factory():
    """Factory producing FakeMeasurementAdapter instances bound to a geometry."""
    def _factory(**kwargs):
        created = []

        def _adapter_for(geometry: PageGeometry) -> FakeMeasurementAdapter:
            adapter = FakeMeasurementAdapter(geometry, **kwargs)
            created.append(adapter)
            return adapter

        _adapter_for.created = created
        return _adapter_for

    return _factory


@pytest.fixture
def sample_payload():
    """A complete CV record in camelCase wire format."""
    return {
        "candidate": {
            "fullName": "Jane Marie Doe",
            "title": "Senior Backend Engineer",
            "location": "London, UK",
            "email": "jane.doe@example.com",
            "phone": "+44 20 1234 5678",
            "links": [{"label": "GitHub", "url": "https://github.com/janedoe"}],
        },
        "summary": "Backend engineer with ten years of experience building data platforms.",
        "skills": [
            {"category": "Languages", "items": ["Python", "Go", "SQL"]},
            {"category": "Infrastructure", "items": ["Kubernetes", "Terraform"]},
        ],
        "experience": [
            {
                "title": "Staff Engineer",
                "company": "Acme Corp",
                "employmentType": "Full-time",
                "location": "London",
                "startDate": "2020-03",
                "endDate": "Present",
                "description": "Led the data platform team.",
                "highlights": ["Cut pipeline latency by 40%", "Mentored six engineers"],
                "tech": ["Python", "Kafka"],
            },
            {
                "title": "Senior Engineer",
                "company": "Globex",
                "startDate": "2016-01",
                "endDate": "2020-02",
                "description": "Built billing services.",
                "highlights": [],
                "tech": ["Go"],
            },
            {
                "title": "Engineer",
                "company": "Initech",
                "startDate": "2013-09",
                "endDate": "2015-12",
                "description": "Maintained reporting tools.",
            },
        ],
        "education": [
            {"degree": "BSc", "field": "Computer Science", "institution": "UCL", "year": "2013"},
        ],
        "certifications": [{"name": "CKA", "issuer": "CNCF", "date": "2021"}],
        "projects": [{"name": "pgwatch", "description": "Postgres monitoring", "tech": ["Go"]}],
        "languages": [{"name": "English", "level": "Native"}, {"name": "German", "level": "B2"}],
        "extras": [{"label": "Interests", "value": "Climbing, chess"}],
    }


@pytest.fixture
def sample_record(sample_payload):
    """The sample payload as a CVRecord."""
    from cv_export.models import CVRecord

    return CVRecord.from_payload(sample_payload)
