"""Shared logging helpers for the launcher, the CLI tools and the ASGI server."""

from __future__ import annotations

import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Final

from uvicorn.config import LOGGING_CONFIG

LOG_HANDLER_NAME: Final = "kpi-tracker-file"
LOG_LEVEL_ENV_VAR: Final = "TRACKER_LOG_LEVEL"
LOG_FILE_ENV_VAR: Final = "TRACKER_LOG_FILE"
FILE_FORMAT: Final = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_FILE_HANDLER_SETTINGS: dict[str, Any] | None = None


def resolve_log_level(default: int = logging.INFO) -> int:
    """Resolve the desired log level ("DEBUG" or "10") from the environment."""

    value = (os.getenv(LOG_LEVEL_ENV_VAR) or "").strip()
    if not value:
        return default
    if value.isdigit():
        return int(value)
    resolved = logging.getLevelName(value.upper())
    return resolved if isinstance(resolved, int) else default


def default_log_path() -> Path:
    override = os.getenv(LOG_FILE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / "kpi-tracker.log"


def _existing_handler() -> logging.Handler | None:
    for handler in logging.getLogger().handlers:
        if getattr(handler, "name", "") == LOG_HANDLER_NAME:
            return handler
    return None


def configure_file_logging(default_level: int = logging.INFO) -> dict[str, Any] | None:
    """Attach the named file handler to the root logger once."""

    global _FILE_HANDLER_SETTINGS

    existing = _existing_handler()
    if existing is not None:
        if isinstance(existing, logging.FileHandler):
            _FILE_HANDLER_SETTINGS = {
                "path": Path(existing.baseFilename),
                "level": existing.level,
            }
        return _FILE_HANDLER_SETTINGS

    log_path = default_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - afhankelijk van IO
        logging.getLogger(__name__).warning("Kon logbestand niet initialiseren: %s", exc)
        _FILE_HANDLER_SETTINGS = None
        return None

    log_level = resolve_log_level(default_level)
    file_handler.set_name(LOG_HANDLER_NAME)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(file_handler)
    if root_logger.level > log_level:
        root_logger.setLevel(log_level)

    _FILE_HANDLER_SETTINGS = {"path": log_path, "level": log_level}
    logging.getLogger(__name__).info("Logbestand: %s", log_path)
    return _FILE_HANDLER_SETTINGS


def get_uvicorn_log_config() -> dict[str, Any]:
    """Uvicorn's default config without ANSI colours, plus the file handler if active."""

    log_config: dict[str, Any] = deepcopy(LOGGING_CONFIG)
    formatters = log_config.setdefault("formatters", {})
    for name in ("default", "access"):
        if isinstance(formatters.get(name), dict):
            formatters[name] = {**formatters[name], "use_colors": False}

    settings = _FILE_HANDLER_SETTINGS
    if settings is None:
        return log_config

    formatters[LOG_HANDLER_NAME] = {"()": "logging.Formatter", "fmt": FILE_FORMAT}
    log_config.setdefault("handlers", {})[LOG_HANDLER_NAME] = {
        "class": "logging.FileHandler",
        "formatter": LOG_HANDLER_NAME,
        "filename": str(settings["path"]),
        "encoding": "utf-8",
        "level": logging.getLevelName(settings["level"]),
    }
    loggers = log_config.setdefault("loggers", {})
    for logger_name in ("uvicorn", "uvicorn.access"):
        handlers = loggers.setdefault(logger_name, {}).setdefault("handlers", [])
        if LOG_HANDLER_NAME not in handlers:
            handlers.append(LOG_HANDLER_NAME)
    return log_config


def announce_log_destination() -> None:
    settings = _FILE_HANDLER_SETTINGS
    if not settings:
        print("[logging] Console logging actief (geen logbestand geconfigureerd).")
        return

    level = logging.getLevelName(settings["level"])
    print(
        f"[logging] Logs worden naar {settings['path']} geschreven (niveau {level}).",
        f"Zet {LOG_LEVEL_ENV_VAR}=DEBUG voor anker- en kopregeldetails.",
    )


def get_file_handler_settings() -> dict[str, Any] | None:
    return _FILE_HANDLER_SETTINGS
