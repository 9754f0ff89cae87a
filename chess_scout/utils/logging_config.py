# chess_scout/utils/logging_config.py
"""
Configures structured logging for Chess Scout using structlog.

The library modules only ever call `structlog.get_logger(__name__)`; whoever
embeds the pipeline (the CLI, a request handler, a test) decides once how
those events are rendered by calling `setup_logging`.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.types import Processor


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(
    log_level: str = "INFO",
    json_console: bool = False,
    log_file: Optional[Path] = None,
    stream=None,
) -> None:
    """
    Routes structlog and stdlib logging through one set of handlers.

    Args:
        log_level: Minimum level name, e.g. "DEBUG" or "INFO".
        json_console: Render console output as JSON lines instead of the
                      coloured development renderer.
        log_file: Optional path that receives JSON lines as well.
        stream: Console stream; defaults to stderr so stdout stays free for
                the CLI's JSON output.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor
    if json_console:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(foreign_pre_chain=shared, processor=renderer)
    )
    handlers: List[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processor=structlog.processors.JSONRenderer(),
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(handlers=handlers, level=log_level.upper(), force=True)
