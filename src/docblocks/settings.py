from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Static settings for the local editor.

    Keep defaults local and auditable; the only network endpoint is the
    local Ollama server used for content generation.
    """

    data_dir: Path = Path(os.environ.get("DOCBLOCKS_DATA_DIR", str(Path.home() / ".docblocks")))
    log_level: str = os.environ.get("DOCBLOCKS_LOG_LEVEL", "INFO")
    log_max_bytes: int = int(os.environ.get("DOCBLOCKS_LOG_MAX_BYTES", str(1_000_000)))
    log_backup_count: int = int(os.environ.get("DOCBLOCKS_LOG_BACKUP_COUNT", "3"))
    ollama_url: str = os.environ.get("DOCBLOCKS_OLLAMA_URL", "http://127.0.0.1:11434")
    ollama_model: str | None = os.environ.get("DOCBLOCKS_OLLAMA_MODEL")

    # Public prefix for uploaded images. When unset, images are addressed
    # with file:// URLs pointing into the local image directory.
    image_base_url: str | None = os.environ.get("DOCBLOCKS_IMAGE_BASE_URL")

    llm_timeout_seconds: float = _env_float("DOCBLOCKS_LLM_TIMEOUT", 60.0)


settings = Settings()


def data_dir() -> Path:
    """Resolve the data directory at call time.

    The environment wins over the import-time snapshot so tests can redirect
    storage with ``monkeypatch.setenv("DOCBLOCKS_DATA_DIR", ...)``.
    """
    return Path(os.environ.get("DOCBLOCKS_DATA_DIR", str(settings.data_dir)))


def db_path() -> Path:
    return data_dir() / "docblocks.db"


def images_dir() -> Path:
    return data_dir() / "images"


def log_path() -> Path:
    return data_dir() / "docblocks.log"
