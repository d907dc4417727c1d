# infrastructure/logger.py
from __future__ import annotations

import logging
import logging.config
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path


@dataclass(frozen=True)
class LoggingConfig:
    app_name: str = "call_auction"
    level: str = "INFO"
    log_file: Optional[str] = None
    propagate_root: bool = False
    # per-package overrides, e.g. {"auction": "DEBUG"} to see every submission and fill
    package_levels: Dict[str, str] = field(default_factory=dict)


def build_dict_config(cfg: LoggingConfig) -> Dict[str, Any]:
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": cfg.level,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        }
    }

    app_handlers = ["console"]

    if cfg.log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filename": cfg.log_file,
            "maxBytes": 5_000_000,
            "backupCount": 3,
            "encoding": "utf-8",
        }
        app_handlers.append("file")

    loggers: Dict[str, Any] = {
        pkg: {"level": cfg.package_levels.get(pkg, cfg.level), "handlers": app_handlers, "propagate": cfg.propagate_root}
        for pkg in ("auction", "application", cfg.app_name)
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": handlers,
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
        "loggers": loggers,
    }


def configure_logging(cfg: LoggingConfig) -> None:
    """
    Configure logging once from the entrypoint (main.py).
    Library modules only call logging.getLogger(__name__).
    """
    if cfg.log_file:
        Path(cfg.log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_dict_config(cfg))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
