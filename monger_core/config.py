"""Runtime settings for monger, read from the environment and ``<root>/config.toml``."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .catalog import DEFAULT_INDEX_URL, DEFAULT_TAGS_URL
from .errors import HomeDirectoryUnavailable
from .urls import DEFAULT_DOWNLOAD_BASE

logger = logging.getLogger(__name__)

HOME_ENV = "MONGER_HOME"
DEFAULT_HOME_DIR = ".monger"
CONFIG_FILENAME = "config.toml"
CATALOG_BACKENDS = ("html", "tags")


@dataclass(frozen=True)
class MongerSettings:
    home: Path
    catalog_backend: str = "html"
    catalog_url: str = DEFAULT_INDEX_URL
    tags_url: str = DEFAULT_TAGS_URL
    download_base_url: str = DEFAULT_DOWNLOAD_BASE
    http_timeout_seconds: float | None = None
    lock_timeout_seconds: float = -1.0


def default_home(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    override = (env.get(HOME_ENV) or "").strip()
    if override:
        return Path(override).expanduser()
    try:
        return Path.home() / DEFAULT_HOME_DIR
    except RuntimeError as exc:
        raise HomeDirectoryUnavailable() from exc


def _load_config_section(home: Path) -> dict[str, Any]:
    config_path = home / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable %s: %s", config_path, exc)
        return {}
    section = payload.get("monger")
    return section if isinstance(section, dict) else {}


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def load_settings(home: Path | None = None, env: Mapping[str, str] | None = None) -> MongerSettings:
    root = home if home is not None else default_home(env)
    config = _load_config_section(root)

    backend = str(config.get("catalog_backend") or "html").strip().lower()
    if backend not in CATALOG_BACKENDS:
        raise ValueError(f"catalog_backend must be one of: {', '.join(CATALOG_BACKENDS)}")

    lock_timeout = _optional_float(config.get("lock_timeout_seconds"))
    return MongerSettings(
        home=root,
        catalog_backend=backend,
        catalog_url=str(config.get("catalog_url") or DEFAULT_INDEX_URL),
        tags_url=str(config.get("tags_url") or DEFAULT_TAGS_URL),
        download_base_url=str(config.get("download_base_url") or DEFAULT_DOWNLOAD_BASE),
        http_timeout_seconds=_optional_float(config.get("http_timeout_seconds")),
        lock_timeout_seconds=lock_timeout if lock_timeout is not None else -1.0,
    )
