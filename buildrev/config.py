from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

_TRUTHY = ("1", "true", "yes")

log = logging.getLogger("buildrev.config")


def _env(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip()


def _env_flag(name: str, default: str) -> bool:
    return _env(name, default).lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        log.warning("ignoring %s=%r: not an integer", name, raw)
        return default


@dataclass(frozen=True)
class Settings:
    git: str = "git"
    directive_prefix: str = "cargo:"
    metadata_file: str = "revision_metadata.json"
    metadata_fallback: bool = True
    repo_dir: Path = Path(".")
    log_level: str = "WARNING"
    host: str = "127.0.0.1"
    port: int = 8001


def load_settings() -> Settings:
    """
    Read settings from the environment. Called per operation so that
    tests and build scripts can change variables between calls.
    """
    return Settings(
        git=_env("BUILDREV_GIT", "git"),
        # Prefix may legitimately be empty, so it is not stripped to a default.
        directive_prefix=os.getenv("BUILDREV_DIRECTIVE_PREFIX", "cargo:"),
        metadata_file=_env("BUILDREV_METADATA_FILE", "revision_metadata.json"),
        metadata_fallback=_env_flag("BUILDREV_METADATA_FALLBACK", "1"),
        repo_dir=Path(_env("BUILDREV_REPO_DIR", ".")),
        log_level=_env("BUILDREV_LOG_LEVEL", "WARNING").upper(),
        host=_env("BUILDREV_HOST", "127.0.0.1"),
        port=_env_int("BUILDREV_PORT", 8001),
    )
