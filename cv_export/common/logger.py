"""
Logging for CV export.

setup_logging() installs one stdout handler on the root logger, either in a
readable single-line format or as one JSON object per line. get_logger()
returns an ExportLogger that tags every message with the export id and the
pipeline stage, so lines from concurrent exports can be told apart.

Debug mode (CV_EXPORT_DEBUG_MODE=true) drops export loggers to DEBUG so
per-block measurement and placement lines become visible.
"""

import json
import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple


_debug_mode = False


def set_global_debug_mode(enabled: bool) -> None:
    """Make every ExportLogger created afterwards log at DEBUG."""
    global _debug_mode
    _debug_mode = enabled


def is_debug_mode() -> bool:
    return _debug_mode


class JsonLineFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ExportLogger(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with ``[export:<id8>] [<stage>]``.

    The id is shortened to eight characters; either tag is omitted when unset.
    """

    def __init__(
        self,
        name: str,
        export_id: Optional[str] = None,
        stage: Optional[str] = None,
        debug_mode: Optional[bool] = None,
    ):
        super().__init__(logging.getLogger(name), {})
        self.export_id = export_id
        self.stage = stage
        self.debug_mode = is_debug_mode() if debug_mode is None else debug_mode
        if self.debug_mode:
            self.logger.setLevel(logging.DEBUG)

    @property
    def level(self) -> int:
        return self.logger.level

    def with_stage(self, stage: str) -> "ExportLogger":
        """Same export, different stage tag."""
        return ExportLogger(self.logger.name, self.export_id, stage, self.debug_mode)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        tags = []
        if self.export_id:
            tags.append(f"[export:{self.export_id[:8]}]")
        if self.stage:
            tags.append(f"[{self.stage}]")
        if not tags:
            return msg, kwargs
        return f"{' '.join(tags)} {msg}", kwargs


def setup_logging(level: str = "INFO", format: str = "simple", debug: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        format: "simple" or "json"
        debug: Turn on debug mode; forces the root level to DEBUG
    """
    set_global_debug_mode(debug)
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format == "json":
        handler.setFormatter(JsonLineFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(
    name: str,
    export_id: Optional[str] = None,
    stage: Optional[str] = None,
    debug_mode: Optional[bool] = None,
) -> ExportLogger:
    return ExportLogger(name, export_id, stage, debug_mode)
