"""Logging setup shared by the API process and scripts."""

import logging
from typing import Optional

from app.core.config import settings

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=_DEFAULT_FORMAT,
    )
    _CONFIGURED = True
