"""Logging setup for the filecat CLI."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from filecat.config.models import LoggingSettings

LOG_FILENAME = "filecat.log"
_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_FLAG = "_filecat_handler"


def configure_logging(
    settings: LoggingSettings,
    log_dir: Optional[Path] = None,
    *,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Install console and rotating-file handlers on the ``filecat`` logger.

    Calling this again replaces the handlers it installed before.

    Args:
        settings: Level and rotation settings.
        log_dir: Directory for ``filecat.log``; no file handler when ``None``
            or when file logging is disabled.
        console: Rich console for stderr output.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = logging.getLogger("filecat")
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_FLAG, False)]:
        logger.removeHandler(handler)
        handler.close()

    stream = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    setattr(stream, _HANDLER_FLAG, True)
    logger.addHandler(stream)

    if settings.file_enabled and log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / LOG_FILENAME,
                maxBytes=settings.max_size_mb * 1024 * 1024,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("File logging disabled: %s", exc)
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            setattr(file_handler, _HANDLER_FLAG, True)
            logger.addHandler(file_handler)

    return logger


__all__ = ["LOG_FILENAME", "configure_logging"]
