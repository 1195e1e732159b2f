"""
Export façade: one entry point per output format.

PDF:   record -> anonymize? -> segment -> measure (Chromium) -> paginate -> render
Word:  record -> anonymize? -> python-docx
JSON:  record -> anonymize? -> camelCase JSON

Each call is self-contained: it builds its own collector, logger and (for
PDF) its own browser, and shares no mutable state with concurrent calls.
A call either returns complete output or raises a single ExportError; it
never returns partial bytes.

Usage:
    exporter = CVExporter()
    result = await exporter.export_pdf(record, ExportOptions(anonymize=True))
    Path("cv.pdf").write_bytes(result.content)
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from cv_export.anonymize import anonymize_record
from cv_export.common.config import ExportSettings, get_settings
from cv_export.common.error_handling import (
    ErrorCollector,
    ExportError,
    ExportIssue,
    InvalidRecordError,
)
from cv_export.common.logger import ExportLogger, get_logger
from cv_export.formatting import export_filename
from cv_export.layout.block_html import BlockHtmlRenderer
from cv_export.layout.geometry import PageGeometry
from cv_export.layout.measurement import (
    MeasurementAdapter,
    PlaywrightMeasurementAdapter,
    measure_blocks,
)
from cv_export.layout.pagination import paginate
from cv_export.layout.segmenter import SectionSegmenter
from cv_export.layout.types import BlockDescriptor, PagePlan
from cv_export.logo import LogoImage, load_logo
from cv_export.models import CVRecord
from cv_export.renderers.json_renderer import render_json
from cv_export.renderers.pdf_renderer import PdfRenderer
from cv_export.renderers.word_renderer import WordRenderer

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
JSON_MEDIA_TYPE = "application/json"

AdapterFactory = Callable[[PageGeometry], MeasurementAdapter]
RecordInput = Union[CVRecord, Dict[str, Any]]


@dataclass
class ExportOptions:
    """Per-call export options; None means "use the configured default"."""

    anonymize: bool = False
    logo_url: Optional[str] = None
    logo_bytes: Optional[bytes] = None
    page_format: Optional[str] = None
    margin_mm: Optional[float] = None


@dataclass
class ExportResult:
    """Complete output of one export plus the recoverable issues it hit."""

    content: bytes
    media_type: str
    filename: str = "export"
    page_count: Optional[int] = None
    issues: List[ExportIssue] = field(default_factory=list)
    plan: Optional[PagePlan] = field(default=None, repr=False)

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "media_type": self.media_type,
            "filename": self.filename,
            "page_count": self.page_count,
            "issues": [issue.to_dict() for issue in self.issues],
        }


class CVExporter:
    """Orchestrates segmenter, measurement, pagination and renderers."""

    def __init__(
        self,
        settings: Optional[ExportSettings] = None,
        adapter_factory: Optional[AdapterFactory] = None,
        html_renderer: Optional[BlockHtmlRenderer] = None,
        pdf_renderer: Optional[PdfRenderer] = None,
        word_renderer: Optional[WordRenderer] = None,
    ):
        self.settings = settings or get_settings()
        self.html = html_renderer or BlockHtmlRenderer(
            font_family=self.settings.font_family,
            font_size_pt=self.settings.font_size_pt,
        )
        self.segmenter = SectionSegmenter(self.html)
        self.adapter_factory = adapter_factory or self._playwright_adapter
        self.pdf_renderer = pdf_renderer or PdfRenderer(logo_height_mm=self.settings.logo_max_height_mm)
        self.word_renderer = word_renderer or WordRenderer(
            logo_height_mm=self.settings.logo_max_height_mm,
            margin_mm=self.settings.margin_mm,
        )

    # ----- shared steps -----

    def _playwright_adapter(self, geometry: PageGeometry) -> MeasurementAdapter:
        return PlaywrightMeasurementAdapter(
            geometry,
            html_renderer=self.html,
            headless=self.settings.playwright_headless,
            timeout_ms=self.settings.playwright_timeout_ms,
        )

    def geometry_for(self, options: ExportOptions) -> PageGeometry:
        page_format = options.page_format or self.settings.page_format
        margin_mm = self.settings.margin_mm if options.margin_mm is None else options.margin_mm
        try:
            geometry = PageGeometry.for_format(
                page_format,
                margin_mm=margin_mm,
                scale_factor=self.settings.render_scale,
            )
        except ValueError as e:
            raise InvalidRecordError.from_exception("options", "page_geometry", e, message=str(e))
        if geometry.content_width_mm <= 0 or geometry.content_height_mm <= 0:
            raise InvalidRecordError(ExportIssue(
                stage="options",
                operation="page_geometry",
                severity="critical",
                message=f"Margin {margin_mm}mm leaves no content area on a {page_format} page",
                recoverable=False,
            ))
        return geometry

    @staticmethod
    def prepare_record(record: RecordInput, options: ExportOptions) -> CVRecord:
        """Coerce dict input and apply anonymization; never mutates the input."""
        if isinstance(record, CVRecord):
            prepared = record
        elif isinstance(record, dict):
            prepared = CVRecord.from_payload(record)
        else:
            raise InvalidRecordError(ExportIssue(
                stage="input",
                operation="record_coercion",
                severity="critical",
                message=f"Expected a CV record or mapping, got {type(record).__name__}",
                recoverable=False,
            ))
        return anonymize_record(prepared) if options.anonymize else prepared

    def _load_logo(self, options: ExportOptions, collector: ErrorCollector) -> Optional[LogoImage]:
        return load_logo(
            url=options.logo_url,
            data=options.logo_bytes,
            timeout=self.settings.logo_fetch_timeout_seconds,
            collector=collector,
        )

    async def _render_paginated(
        self,
        descriptors: Sequence[BlockDescriptor],
        geometry: PageGeometry,
        logo: Optional[LogoImage],
        title: str,
        collector: ErrorCollector,
        log: ExportLogger,
    ) -> ExportResult:
        blocks = []
        if descriptors:
            log.with_stage("measure").info(f"Measuring {len(descriptors)} blocks")
            try:
                async with self.adapter_factory(geometry) as adapter:
                    blocks = await measure_blocks(
                        adapter,
                        descriptors,
                        geometry,
                        timeout_seconds=self.settings.measurement_timeout_seconds,
                        max_parallel=self.settings.max_parallel_measurements,
                        collector=collector,
                    )
            except ExportError:
                raise
            except Exception as e:
                log.with_stage("measure").error(f"Rasterizer unavailable: {e}")
                raise ExportError.from_exception(
                    "measure", "rasterizer_startup", e,
                    message=f"Could not start the block rasterizer: {e}",
                ) from e

        plan = paginate(blocks, geometry, self.settings.section_gap_mm, collector=collector)
        log.with_stage("paginate").info(
            f"{len(plan.placements)} block(s) on {plan.page_count} page(s)"
            + (f", {len(plan.overflowing)} overflowing" if plan.overflowing else "")
        )
        log.with_stage("paginate").debug(f"Page plan: {plan.to_dict()}")


        content = self.pdf_renderer.render(plan, geometry, logo=logo, title=title)
        return ExportResult(
            content=content,
            media_type=PDF_MEDIA_TYPE,
            page_count=max(plan.page_count, 1),
            issues=list(collector.issues),
            plan=plan,
        )

    # ----- CV exports -----

    async def export_pdf(self, record: RecordInput, options: Optional[ExportOptions] = None) -> ExportResult:
        options = options or ExportOptions()
        log = get_logger(__name__, export_id=uuid.uuid4().hex, stage="pdf")
        collector = ErrorCollector()

        prepared = self.prepare_record(record, options)
        geometry = self.geometry_for(options)
        log.info(
            f"Starting PDF export (anonymize={options.anonymize}, "
            f"content {geometry.content_width_mm:.0f}x{geometry.content_height_mm:.0f}mm)"
        )

        descriptors = self.segmenter.segment(prepared)
        logo = await asyncio.to_thread(self._load_logo, options, collector)

        try:
            result = await self._render_paginated(
                descriptors,
                geometry,
                logo,
                title=prepared.candidate.full_name or "CV",
                collector=collector,
                log=log,
            )
        except ExportError as e:
            log.error(f"PDF export failed: {e}")
            raise
        result.filename = export_filename("CV", prepared.candidate.full_name, "pdf")
        log.info(f"PDF export complete: {result.page_count} page(s), {len(result.issues)} issue(s)")
        return result

    def export_word(self, record: RecordInput, options: Optional[ExportOptions] = None) -> ExportResult:
        options = options or ExportOptions()
        log = get_logger(__name__, export_id=uuid.uuid4().hex, stage="word")
        collector = ErrorCollector()

        prepared = self.prepare_record(record, options)
        logo = self._load_logo(options, collector)
        content = self.word_renderer.render(prepared, logo=logo)
        log.info(f"Word export complete: {len(content)} bytes, {len(collector.issues)} issue(s)")
        return ExportResult(
            content=content,
            media_type=DOCX_MEDIA_TYPE,
            filename=export_filename("CV", prepared.candidate.full_name, "docx"),
            issues=list(collector.issues),
        )

    def export_json(self, record: RecordInput, options: Optional[ExportOptions] = None) -> ExportResult:
        options = options or ExportOptions()
        prepared = self.prepare_record(record, options)
        return ExportResult(
            content=render_json(prepared),
            media_type=JSON_MEDIA_TYPE,
            filename=export_filename("CV", prepared.candidate.full_name, "json"),
        )

    # ----- Profile description exports -----

    async def export_profile_pdf(
        self,
        description: str,
        candidate_name: str,
        options: Optional[ExportOptions] = None,
    ) -> ExportResult:
        options = options or ExportOptions()
        log = get_logger(__name__, export_id=uuid.uuid4().hex, stage="profile-pdf")
        collector = ErrorCollector()

        geometry = self.geometry_for(options)
        descriptors = self.segmenter.segment_profile(description, candidate_name)
        logo = await asyncio.to_thread(self._load_logo, options, collector)
        result = await self._render_paginated(
            descriptors,
            geometry,
            logo,
            title=f"{candidate_name} - Profile" if candidate_name else "Profile",
            collector=collector,
            log=log,
        )
        result.filename = export_filename("Profile", candidate_name, "pdf", name_first=True)
        log.info(f"Profile PDF export complete: {result.page_count} page(s)")
        return result

    def export_profile_word(
        self,
        description: str,
        candidate_name: str,
        options: Optional[ExportOptions] = None,
    ) -> ExportResult:
        options = options or ExportOptions()
        collector = ErrorCollector()
        logo = self._load_logo(options, collector)
        content = self.word_renderer.render_profile(description, candidate_name, logo=logo)
        return ExportResult(
            content=content,
            media_type=DOCX_MEDIA_TYPE,
            filename=export_filename("Profile", candidate_name, "docx", name_first=True),
            issues=list(collector.issues),
        )


async def export_pdf(record: RecordInput, options: Optional[ExportOptions] = None) -> bytes:
    return (await CVExporter().export_pdf(record, options)).content


def export_word(record: RecordInput, options: Optional[ExportOptions] = None) -> bytes:
    return CVExporter().export_word(record, options).content


def export_json(record: RecordInput, options: Optional[ExportOptions] = None) -> bytes:
    return CVExporter().export_json(record, options).content
