from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from .errors import ConfigurationError
from .settings import log_path, settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_configured = False


def configure_logging(level: str | None = None, *, to_file: bool = True) -> None:
    """Install the stderr and rotating file handlers once per process.

    Raises:
        ConfigurationError: If the level is not a standard logging level name.
    """
    global _configured
    name = (level or settings.log_level).upper()
    if name not in _LEVELS:
        raise ConfigurationError(
            f"Unknown log level: {name}",
            setting="DOCBLOCKS_LOG_LEVEL",
            expected=", ".join(_LEVELS),
        )

    root = logging.getLogger()
    root.setLevel(name)
    if _configured:
        return

    formatter = logging.Formatter(_FORMAT)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    stream.setLevel(logging.WARNING)
    root.addHandler(stream)

    if to_file:
        path = log_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                path,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            root.warning("File logging disabled (%s): %s", path, e)
        else:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    _configured = True
