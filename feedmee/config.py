"""Configuration for feedmee.

Settings come from FEEDMEE_* environment variables with defaults suitable
for a single desktop user. Data lives under ~/.feedmee unless overridden.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_DATA_DIR = Path.home() / ".feedmee"


@dataclass
class ServerConfig:
    """Runtime settings for the server and the ingestion pipeline."""

    name: str = "feedmee"
    log_level: str = "INFO"
    data_dir: Path = DEFAULT_DATA_DIR
    db_path: Optional[Path] = None
    log_file: Optional[Path] = None
    fetch_timeout: float = 10.0
    min_content_length: int = 25

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        if self.db_path is None:
            self.db_path = self.data_dir / "feedmee.sqlite"
        if self.log_file is None:
            self.log_file = self.data_dir / "feedmee.log"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_path(name: str) -> Optional[Path]:
    raw = os.environ.get(name)
    return Path(raw).expanduser() if raw else None


def load_config() -> ServerConfig:
    """Build a ServerConfig from the environment.

    Returns:
        A fresh ServerConfig

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    return ServerConfig(
        name=os.environ.get("FEEDMEE_SERVER_NAME", "feedmee"),
        log_level=os.environ.get("FEEDMEE_LOG_LEVEL", "INFO").upper(),
        data_dir=_env_path("FEEDMEE_DATA_DIR") or DEFAULT_DATA_DIR,
        db_path=_env_path("FEEDMEE_DB_PATH"),
        log_file=_env_path("FEEDMEE_LOG_FILE"),
        fetch_timeout=_env_float("FEEDMEE_FETCH_TIMEOUT", 10.0),
        min_content_length=_env_int("FEEDMEE_MIN_CONTENT_LENGTH", 25),
    )


_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reset_config() -> None:
    """Forget the cached configuration (used by tests)."""
    global _config
    _config = None
