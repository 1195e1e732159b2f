"""
Centralized error handling for CV export.

Provides the structured issue record, the per-export collector for
recoverable problems, the exception raised for fatal failures, and helpers
for recoverable steps that may fail.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import wraps
from typing import Any, Callable, List, Optional, Type, TypeVar

T = TypeVar("T")


@dataclass
class ExportIssue:
    """
    Structured information about one problem seen during an export.

    Recoverable issues (a skipped block, a missing logo) are collected and
    reported alongside the output; a non-recoverable issue aborts the export.
    """

    stage: str  # e.g., "measure", "render", "logo"
    operation: str  # e.g., "block_measurement", "pdf_render"
    severity: str  # "critical", "high", "medium", "low"
    message: str
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    recoverable: bool = True
    exception_type: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "stage": self.stage,
            "operation": self.operation,
            "severity": self.severity,
            "message": self.message,
            "timestamp": self.timestamp,
            "recoverable": self.recoverable,
            "exception_type": self.exception_type,
        }


class ExportError(Exception):
    """
    Fatal export failure.

    Carries a single ExportIssue so callers get one structured reason
    instead of partial output.
    """

    def __init__(self, issue: ExportIssue):
        super().__init__(issue.message)
        self.issue = issue

    @classmethod
    def from_exception(
        cls,
        stage: str,
        operation: str,
        exception: Exception,
        message: Optional[str] = None,
    ) -> "ExportError":
        issue = ExportIssue(
            stage=stage,
            operation=operation,
            severity="critical",
            message=message or f"{operation} failed: {exception}",
            recoverable=False,
            exception_type=type(exception).__name__,
        )
        return cls(issue)


class RenderError(ExportError):
    """Renderer could not open or write the output document."""


class InvalidRecordError(ExportError):
    """Input could not be turned into a CV record."""


class ErrorCollector:
    """
    Collects recoverable issues during one export.

    The exporter hands one collector to every stage and copies its issues
    into the ExportResult.
    """

    def __init__(self):
        self.issues: List[ExportIssue] = []

    def add_issue(
        self,
        stage: str,
        operation: str,
        message: str,
        severity: str = "medium",
        recoverable: bool = True,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Convenience method to add an issue with parameters."""
        self.issues.append(
            ExportIssue(
                stage=stage,
                operation=operation,
                message=message,
                severity=severity,
                recoverable=recoverable,
                exception_type=type(exception).__name__ if exception else None,
            )
        )


def fatal_operation(
    operation_name: str,
    stage: str,
    error_cls: Type[ExportError] = ExportError,
):
    """
    Decorator for operations whose failure must abort the export.

    Logs at ERROR level with stack trace and re-raises any exception as
    ``error_cls``. ExportError subclasses raised inside pass through as-is.

    Usage:
        @fatal_operation("PDF render", stage="render", error_cls=RenderError)
        def render(self, plan, geometry):
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            logger = logging.getLogger(func.__module__)
            try:
                return func(*args, **kwargs)
            except ExportError:
                raise
            except Exception as e:
                logger.error(
                    f"[{stage}] [{operation_name}] ✗ Failed: {e}",
                    exc_info=True,
                )
                raise error_cls.from_exception(stage, operation_name, e) from e

        return wrapper

    return decorator


def safe_execute(
    func: Callable[..., T],
    *args,
    operation_name: str = "operation",
    logger: Optional[logging.Logger] = None,
    fallback: Any = None,
    critical: bool = False,
    collector: Optional[ErrorCollector] = None,
    stage: str = "unknown",
    **kwargs,
) -> T:
    """
    Execute a function, returning ``fallback`` instead of raising.

    Used for recoverable steps such as fetching the logo. When a collector
    is given the failure is also recorded as a recoverable issue.

    Usage:
        logo = safe_execute(
            fetch_logo, url,
            operation_name="logo fetch",
            logger=logger,
            collector=collector,
            stage="logo",
        )
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        return func(*args, **kwargs)
    except Exception as e:
        log_level = logging.ERROR if critical else logging.WARNING
        logger.log(
            log_level,
            f"[{operation_name}] Failed: {e}",
            exc_info=critical,
        )
        if collector is not None:
            collector.add_issue(
                stage=stage,
                operation=operation_name,
                message=f"{operation_name} failed: {e}",
                severity="high" if critical else "low",
                exception=e,
            )
        return fallback
