"""
Export Service - FastAPI application for CV export.

Provides endpoints for exporting structured CV records to paginated PDF,
Word and JSON, exporting profile descriptions, and normalizing raw AI
extraction output into a CV record.
"""

import asyncio
import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from cv_export.common.config import get_settings, validate_config_on_startup
from cv_export.common.error_handling import ExportError, InvalidRecordError
from cv_export.common.logger import setup_logging
from cv_export.exporter import CVExporter, ExportOptions, ExportResult
from cv_export.layout.types import BlockDescriptor, BlockKind
from cv_export.models import parse_cv_payload
from export_service.helpers import build_export_options, download_headers
from version import __version__

settings = get_settings()
setup_logging(settings.log_level, settings.log_format, debug=settings.debug_mode)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CV Export Service",
    version=__version__,
    description="CV export to paginated PDF, Word and JSON"
)

# Configuration
MAX_CONCURRENT_EXPORTS = settings.max_concurrent_exports

# Semaphore for rate limiting
_export_semaphore = asyncio.Semaphore(MAX_CONCURRENT_EXPORTS)

# Playwright readiness state
_playwright_ready = False
_playwright_error: Optional[str] = None

_exporter: Optional[CVExporter] = None


def get_exporter() -> CVExporter:
    """Process-wide exporter; it holds configuration only, no per-export state."""
    global _exporter
    if _exporter is None:
        _exporter = CVExporter(settings)
    return _exporter


# ============================================================================
# Startup Event - Validate Playwright
# ============================================================================

@app.on_event("startup")
async def validate_playwright_on_startup():
    """
    Validate Playwright/Chromium can measure a block on startup.

    This ensures the service won't report as healthy if PDF exports
    cannot actually rasterize anything.
    """
    global _playwright_ready, _playwright_error

    validate_config_on_startup()
    logger.info("Export Service starting - validating Playwright installation...")

    try:
        exporter = get_exporter()
        geometry = exporter.geometry_for(ExportOptions())
        sample = BlockDescriptor(BlockKind.PARAGRAPH, 0, exporter.html.paragraph("Test"), "startup check")

        async with exporter.adapter_factory(geometry) as adapter:
            logger.info("Measuring a sample block for validation...")
            measurement = await adapter.measure(sample)

        if measurement is not None and not measurement.is_empty:
            _playwright_ready = True
            _playwright_error = None
            logger.info(
                f"✅ Playwright validation successful - sample block "
                f"{measurement.width_px}x{measurement.height_px}px"
            )
        else:
            _playwright_error = "Sample block measurement returned an empty region"
            logger.error(f"❌ Playwright validation failed: {_playwright_error}")

    except Exception as e:
        _playwright_error = str(e)
        logger.error(f"❌ Playwright validation failed: {_playwright_error}")
        logger.error("PDF export will not work until this is resolved.")


# ============================================================================
# Request/Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime
    version: str = __version__
    active_exports: int
    max_concurrent: int
    playwright_ready: bool = True
    playwright_error: Optional[str] = None


class CVExportRequest(BaseModel):
    """CV record export request (PDF, Word or JSON)."""
    cv: Dict[str, Any] = Field(..., description="CV record in camelCase wire format")
    anonymize: bool = Field(False, description="Mask name, email and phone; drop location and links")
    logoUrl: Optional[str] = Field(None, description="Logo image URL (PDF and Word only)")
    pageSize: Optional[str] = Field(None, description="Page size: 'a4' or 'letter' (PDF only)")
    marginMm: Optional[float] = Field(None, ge=0, le=50, description="Uniform page margin in mm (PDF only)")


class ProfileExportRequest(BaseModel):
    """Profile description export request."""
    description: str = Field(..., description="Profile description text; one paragraph per line")
    candidateName: str = Field("", description="Candidate name shown under the title")
    logoUrl: Optional[str] = Field(None, description="Logo image URL")


class ParseCVRequest(BaseModel):
    """Raw AI extraction output to normalize."""
    content: str = Field(..., description="Extractor output: JSON, possibly fenced or malformed")


# ============================================================================
# Shared helpers
# ============================================================================

def _active_exports() -> int:
    return MAX_CONCURRENT_EXPORTS - _export_semaphore._value


def _check_capacity(kind: str) -> None:
    if _export_semaphore._value <= 0:
        logger.warning(f"Export service overloaded, rejecting {kind} request")
        raise HTTPException(
            status_code=503,
            detail="Service overloaded. Too many concurrent export operations."
        )


def _attachment(result: ExportResult) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(result.content),
        media_type=result.media_type,
        headers=download_headers(result),
    )


def _cv_options(request: CVExportRequest) -> ExportOptions:
    return build_export_options(
        anonymize=request.anonymize,
        logo_url=request.logoUrl,
        page_size=request.pageSize,
        margin_mm=request.marginMm,
    )


def _export_failed(kind: str, error: Exception) -> HTTPException:
    """Map an export failure to the HTTP error the client sees."""
    if isinstance(error, InvalidRecordError):
        logger.warning(f"{kind} export rejected: {error}")
        return HTTPException(status_code=400, detail=error.issue.to_dict())
    if isinstance(error, ExportError):
        logger.error(f"{kind} export failed: {error}")
        return HTTPException(status_code=500, detail=error.issue.to_dict())
    logger.error(f"{kind} export failed: {str(error)}")
    return HTTPException(status_code=500, detail=f"{kind} export failed: {str(error)}")


# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns service status, capacity information, and Playwright readiness.
    Returns HTTP 503 if Playwright validation failed on startup.
    """
    if not _playwright_ready:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "timestamp": datetime.utcnow().isoformat(),
                "active_exports": _active_exports(),
                "max_concurrent": MAX_CONCURRENT_EXPORTS,
                "playwright_ready": False,
                "playwright_error": _playwright_error,
                "message": "Export service is unhealthy - Playwright/Chromium not available"
            }
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        active_exports=_active_exports(),
        max_concurrent=MAX_CONCURRENT_EXPORTS,
        playwright_ready=True,
        playwright_error=None
    )


# ============================================================================
# CV Export Endpoints
# ============================================================================

@app.post("/cv-to-pdf")
async def cv_to_pdf(request: CVExportRequest):
    """
    Export a CV record to a paginated PDF.

    Raises:
        HTTPException: 400 for invalid options, 500 for export failures, 503 for overload
    """
    _check_capacity("PDF")

    async with _export_semaphore:
        try:
            logger.info(f"Starting CV PDF export (anonymize={request.anonymize}, pageSize={request.pageSize})")
            result = await get_exporter().export_pdf(request.cv, _cv_options(request))
        except asyncio.TimeoutError:
            logger.error("CV PDF export timed out")
            raise HTTPException(status_code=500, detail="PDF export timed out")
        except Exception as e:
            raise _export_failed("PDF", e)

    logger.info(f"CV PDF export completed: {result.filename} ({result.page_count} page(s))")
    return _attachment(result)


@app.post("/cv-to-docx")
async def cv_to_docx(request: CVExportRequest):
    """
    Export a CV record to a Word document.

    Raises:
        HTTPException: 400 for invalid input, 500 for export failures, 503 for overload
    """
    _check_capacity("Word")

    async with _export_semaphore:
        try:
            result = await asyncio.to_thread(get_exporter().export_word, request.cv, _cv_options(request))
        except Exception as e:
            raise _export_failed("Word", e)

    logger.info(f"CV Word export completed: {result.filename}")
    return _attachment(result)


@app.post("/cv-to-json")
async def cv_to_json(request: CVExportRequest):
    """Export a CV record as camelCase JSON (anonymized when requested)."""
    try:
        result = get_exporter().export_json(request.cv, _cv_options(request))
    except Exception as e:
        raise _export_failed("JSON", e)

    return _attachment(result)


# ============================================================================
# Profile Description Endpoints
# ============================================================================

@app.post("/profile-to-pdf")
async def profile_to_pdf(request: ProfileExportRequest):
    """
    Export a profile description to PDF.

    Raises:
        HTTPException: 400 for empty description, 500 for export failures, 503 for overload
    """
    if not request.description.strip():
        raise HTTPException(status_code=400, detail="Profile description is required")

    _check_capacity("profile PDF")

    async with _export_semaphore:
        try:
            result = await get_exporter().export_profile_pdf(
                request.description,
                request.candidateName,
                build_export_options(logo_url=request.logoUrl),
            )
        except Exception as e:
            raise _export_failed("Profile PDF", e)

    logger.info(f"Profile PDF export completed: {result.filename}")
    return _attachment(result)


@app.post("/profile-to-docx")
async def profile_to_docx(request: ProfileExportRequest):
    """Export a profile description to a Word document."""
    if not request.description.strip():
        raise HTTPException(status_code=400, detail="Profile description is required")

    _check_capacity("profile Word")

    async with _export_semaphore:
        try:
            result = await asyncio.to_thread(
                get_exporter().export_profile_word,
                request.description,
                request.candidateName,
                build_export_options(logo_url=request.logoUrl),
            )
        except Exception as e:
            raise _export_failed("Profile Word", e)

    return _attachment(result)


# ============================================================================
# Parsing Endpoint
# ============================================================================

@app.post("/parse-cv")
async def parse_cv(request: ParseCVRequest) -> Dict[str, Any]:
    """
    Normalize raw AI extraction output into a CV record.

    Returns:
        {"cvData": <record in camelCase wire format>}

    Raises:
        HTTPException: 400 if no JSON object can be recovered from the content
    """
    try:
        record = parse_cv_payload(request.content)
    except ValueError as e:
        logger.warning(f"Could not parse CV content: {e}")
        raise HTTPException(status_code=400, detail=f"Could not parse CV content: {e}")

    return {"cvData": record.to_payload()}
