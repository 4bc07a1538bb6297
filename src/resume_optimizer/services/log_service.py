"""Logging setup for the wizard server and CLI."""

import logging
import os
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class WizardLogFileHandler(TimedRotatingFileHandler):
    """Daily wizard log that also rolls over early once it reaches ``max_bytes``."""

    def __init__(self, filename: str, max_bytes: int, backup_count: int = 0, **kwargs):
        super().__init__(filename, backupCount=backup_count, **kwargs)
        self.max_bytes = max_bytes

    def shouldRollover(self, record: logging.LogRecord) -> int:
        return int(bool(super().shouldRollover(record)) or self._would_overflow(record))

    def _would_overflow(self, record: logging.LogRecord) -> bool:
        if self.max_bytes <= 0 or not os.path.exists(self.baseFilename):
            return False
        pending = len(self.format(record)) + len(self.terminator)
        return os.path.getsize(self.baseFilename) + pending > self.max_bytes


def resolve_level(level: int | str) -> int:
    """Accept a logging level as int or name ("debug", "INFO", ...)."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(
    log_dir: str | None = "logs",
    log_file: str = "wizard.log",
    level: int | str = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 7,
    console: bool = True,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        log_dir: Directory for the rotating log file, or None for no file.
        log_file: Log file name inside ``log_dir``.
        level: Logging level, as int or name.
        max_bytes: File size that triggers an early rollover.
        backup_count: Rotated files to keep.
        console: Whether to also log to stderr.

    Returns:
        The root logger.
    """
    level = resolve_level(level)
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = WizardLogFileHandler(
            filename=os.path.join(log_dir, log_file),
            max_bytes=max_bytes,
            backup_count=backup_count,
            when="midnight",
            interval=1,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # httpx logs every request at INFO; keep it out of the wizard log.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return root
