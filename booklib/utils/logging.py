"""
Logging Setup

Configures the stdlib logging tree once at startup. Modules keep using
`logger = logging.getLogger(__name__)`.

Formats (LOG_FORMAT):
- text: "2024-01-15 10:30:00,123 - booklib.services.books - INFO - ..."
- json: one JSON object per line, rendered by structlog, for log shippers
"""

import logging
import sys

import structlog

from booklib.config import Settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """
    Formatter turning stdlib records into JSON lines.

    Values passed with `extra=` become top-level keys.
    """
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.stdlib.ExtraAdder(),
            structlog.processors.format_exc_info,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
    )


def configure_logging(settings: Settings) -> None:
    """
    Install a single stdout handler on the root logger.

    Safe to call more than once; existing root handlers are replaced.
    """
    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(build_json_formatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, settings.log_level))

    # Uvicorn's access log duplicates the request middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
