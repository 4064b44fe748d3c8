"""structlog setup for the Portainer MCP server.

stdout belongs to the MCP stdio transport, so console output always goes to
stderr. File output is optional and split per logger name.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory, ProcessorFormatter

SERVER_LOGGER = "server"
MIDDLEWARE_LOGGER = "middleware"

# logger name -> file written under LOG_DIR
LOG_FILES = {
    SERVER_LOGGER: "mcp_server.log",
    MIDDLEWARE_LOGGER: "middleware.log",
}

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.TimeStamper(fmt="iso"),
]


def _console_handler(level: int) -> logging.Handler:
    if sys.stderr.isatty():
        renderer: Any = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ProcessorFormatter(processor=renderer))
    return handler


def _file_handler(path: Path, level: int, max_bytes: int) -> logging.Handler:
    # backupCount=0: the file is truncated when full, no rotated copies kept
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=0, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(ProcessorFormatter(processor=structlog.processors.JSONRenderer()))
    return handler


def setup_logging(
    log_dir: Path | str | None = None,
    log_level: str | None = None,
    max_file_size_mb: int = 10,
) -> None:
    """Route structlog through stdlib logging.

    Args:
        log_dir: Directory for per-logger JSON files; console only when None
        log_level: Level name, falling back to LOG_LEVEL and then INFO
        max_file_size_mb: Size at which a log file is truncated
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(_console_handler(level))

    log_path = Path(log_dir) if log_dir is not None else None
    if log_path is not None:
        log_path.mkdir(parents=True, exist_ok=True)
        max_bytes = max_file_size_mb * 1024 * 1024
        for name, file_name in LOG_FILES.items():
            named = logging.getLogger(name)
            named.handlers.clear()
            named.addHandler(_file_handler(log_path / file_name, level, max_bytes))
            named.propagate = True

    structlog.configure(
        processors=[*SHARED_PROCESSORS, ProcessorFormatter.wrap_for_formatter],
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    get_server_logger().info(
        "Logging configured",
        level=level_name,
        log_dir=str(log_path.absolute()) if log_path is not None else None,
    )


def get_server_logger() -> Any:
    return structlog.get_logger(SERVER_LOGGER)


def get_middleware_logger() -> Any:
    return structlog.get_logger(MIDDLEWARE_LOGGER)
