# deal_analyzer/core/debug.py
"""
Logging helpers.

Modules call get_logger(__name__). When DEAL_ANALYZER_DEBUG is truthy, the
package logger also writes to a rotating file under logs/. Logging problems
never break a computation.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

PACKAGE_LOGGER = "deal_analyzer"
DEBUG_ENV = "DEAL_ANALYZER_DEBUG"
DEBUG_LOG_PATH = os.path.join("logs", "deal_analyzer_debug.log")

_CONFIGURED = False


def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, "").strip().lower() in {"1", "true", "yes", "on"}


def _configure_package_logger() -> None:
    """Attach the rotating debug handler once, if enabled."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger(PACKAGE_LOGGER)
    root.addHandler(logging.NullHandler())
    if not debug_enabled():
        return

    root.setLevel(logging.DEBUG)
    try:
        os.makedirs(os.path.dirname(DEBUG_LOG_PATH), exist_ok=True)
        handler = RotatingFileHandler(DEBUG_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    except OSError as exc:
        # Keep logging to whatever handlers the host application configured.
        root.warning("debug log file unavailable: %s", exc)
        return
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="(%Y-%m-%d %H:%M:%S)",
        )
    )
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    _configure_package_logger()
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
