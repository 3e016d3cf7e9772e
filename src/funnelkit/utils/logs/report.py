"""Logger factory used across funnelkit.

Usage::

    from funnelkit.utils.logs import report
    logger = report.settings(__file__)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "funnelkit"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_configured = False


def _configure_root(level: Optional[str] = None) -> logging.Logger:
    global _configured
    root = logging.getLogger(ROOT_LOGGER)
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        _configured = True
    lvl = (level or os.getenv("FUNNELKIT_LOG_LEVEL", "WARNING")).upper()
    root.setLevel(getattr(logging, lvl, logging.WARNING))
    return root


def settings(source: str, level: Optional[str] = None) -> logging.Logger:
    """Return the module logger for *source* (a ``__file__`` path or a dotted name)."""
    _configure_root(level)
    name = Path(source).stem if source.endswith(".py") else source
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_level(level: str) -> None:
    """Change the level of every funnelkit logger at once (used by the CLI)."""
    _configure_root(level)
