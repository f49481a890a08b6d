"""Central logging setup for nt_leaderboard entrypoints."""

from __future__ import annotations

import logging
import logging.config
import os

from nt_leaderboard.paths import repo_file

NOISY_LIBRARY_LOGGERS = ("urllib3", "charset_normalizer")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _resolve_level(default: str = "INFO") -> int:
    level_name = os.getenv("LOG_LEVEL", default).upper()
    return getattr(logging, level_name, logging.INFO)


def _configure_library_log_levels() -> None:
    for logger_name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.INFO)


def configure_logging() -> logging.Logger:
    config_path = repo_file("logging.ini")
    logger = logging.getLogger()
    if config_path.is_file():
        logging.config.fileConfig(str(config_path), disable_existing_loggers=False)
    elif not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logging.captureWarnings(True)
    logger.setLevel(_resolve_level())
    _configure_library_log_levels()
    return logger
