"""Logging helpers (formatter + dictConfig builder) for hosts embedding containers."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from logging.config import dictConfig
from typing import Any

from layered_state.config import LayeredStateSettings


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


class ExtrasFormatter(logging.Formatter):
    """Append structured `data` payloads when present."""

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        record_data = record.__dict__.get("data")
        if record_data:
            try:
                encoded = json.dumps(record_data, sort_keys=True, separators=(",", ":"))
            except TypeError:
                encoded = str(record_data)
            return f"{formatted} | data={encoded}"
        return formatted


def build_log_config(
    *,
    root_level_env: str,
    root_default: str,
    package_level: str | None = None,
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""

    loggers: dict[str, dict[str, Any]] = {
        "layered_state": {
            "level": package_level or _level("LAYERED_STATE_LOG_LEVEL", "INFO"),
            "handlers": ["console"],
            "propagate": False,
        },
    }
    if extra_loggers:
        loggers.update(extra_loggers)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": _level(root_level_env, root_default), "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(settings: LayeredStateSettings | None = None) -> None:
    """Install the console configuration; settings override the env-derived level."""

    dictConfig(
        build_log_config(
            root_level_env="LOG_LEVEL",
            root_default="WARNING",
            package_level=settings.log_level if settings is not None else None,
        )
    )


__all__ = ["ExtrasFormatter", "build_log_config", "configure_logging"]
