"""Unified logging for feedmee.

All modules log through the ``feedmee`` logger hierarchy. The server
initializes it once with a stderr handler (stdout carries the MCP stdio
transport) and a file handler in the data directory.
"""

import logging
import sys
from typing import List, Optional

from feedmee.config import ServerConfig


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "feedmee"


class UnifiedLogger:
    """Process-wide owner of the feedmee log handlers."""

    _handlers: List[logging.Handler] = []
    _initialized: bool = False

    @classmethod
    def initialize_default(cls, config: ServerConfig) -> None:
        """Attach stream and file handlers to the feedmee logger.

        Calling this again replaces the handlers installed by a previous call.

        Args:
            config: Server configuration supplying log level and log file
        """
        cls.close()

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(getattr(logging, config.log_level, logging.INFO))
        root.propagate = False

        formatter = logging.Formatter(LOG_FORMAT)

        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        cls._add_handler(root, stream_handler)

        if config.log_file is not None:
            try:
                config.log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
            except OSError as e:
                root.warning(f"File logging disabled, cannot open {config.log_file}: {e}")
            else:
                file_handler.setFormatter(formatter)
                cls._add_handler(root, file_handler)

        cls._initialized = True

    @classmethod
    def _add_handler(cls, root: logging.Logger, handler: logging.Handler) -> None:
        root.addHandler(handler)
        cls._handlers.append(handler)

    @classmethod
    def get_logger(cls, name: Optional[str] = None) -> logging.Logger:
        """Return a logger inside the feedmee hierarchy.

        Module names already under ``feedmee`` are used as-is; anything else
        is nested beneath it so it shares the configured handlers.
        """
        if not name or name == ROOT_LOGGER_NAME:
            return logging.getLogger(ROOT_LOGGER_NAME)
        if name.startswith(ROOT_LOGGER_NAME + "."):
            return logging.getLogger(name)
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    @classmethod
    def close(cls) -> None:
        """Flush and detach every handler installed by initialize_default."""
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in cls._handlers:
            root.removeHandler(handler)
            handler.close()
        cls._handlers = []
        root.propagate = True
        cls._initialized = False
