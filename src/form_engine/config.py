from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool = False) -> bool:
    v = (os.getenv(name) or "").strip().lower()
    if not v:
        return default
    return v in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineSettings:
    debug: bool = False
    log_level: str = "INFO"
    schema_cache_size: int = 128
    phone_min_length: int = 10
    default_option_count: int = 3


def load_settings() -> EngineSettings:
    """
    Read engine settings from the environment.

    - `FORM_ENGINE_DEBUG=1` turns on debug logging
    - `FORM_ENGINE_LOG_LEVEL=INFO` root level when debug is off
    - `FORM_ENGINE_SCHEMA_CACHE_SIZE=128` memoized validators (0 disables)
    - `FORM_ENGINE_PHONE_MIN_LENGTH=10`
    - `FORM_ENGINE_DEFAULT_OPTION_COUNT=3` options seeded into new choice fields
    """
    debug = _env_bool("FORM_ENGINE_DEBUG", default=False)
    level = (os.getenv("FORM_ENGINE_LOG_LEVEL") or "").strip().upper() or "INFO"
    return EngineSettings(
        debug=debug,
        log_level="DEBUG" if debug else level,
        schema_cache_size=max(0, _env_int("FORM_ENGINE_SCHEMA_CACHE_SIZE", 128)),
        phone_min_length=max(1, _env_int("FORM_ENGINE_PHONE_MIN_LENGTH", 10)),
        default_option_count=max(1, _env_int("FORM_ENGINE_DEFAULT_OPTION_COUNT", 3)),
    )


def load_env_files(root: Optional[Path] = None) -> None:
    # `.env` + `.env.local` when present (local dev convenience).
    base = root or Path.cwd()
    load_dotenv(base / ".env", override=False)
    load_dotenv(base / ".env.local", override=False)


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    s = settings or load_settings()
    level = getattr(logging, s.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("form_engine").setLevel(level)


__all__ = ["EngineSettings", "configure_logging", "load_env_files", "load_settings"]
