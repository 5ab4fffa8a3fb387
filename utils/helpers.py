"""Utility helpers: logging, binary file I/O, media types."""

from __future__ import annotations

import logging
import mimetypes
import sys
from pathlib import Path
from typing import BinaryIO

from config.settings import settings


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(settings.log_level)
    return logger


def guess_media_type(file_name: str, default: str = "application/octet-stream") -> str:
    """Guess a MIME type from a file name, falling back to ``default``."""
    media_type, _ = mimetypes.guess_type(file_name)
    return media_type or default


def read_upload(source: bytes | bytearray | BinaryIO | Path | str) -> tuple[bytes, str]:
    """Load an upload source into memory.

    Returns ``(content, name)`` where ``name`` is the base name of the source
    file, or an empty string when the source carries no name (raw bytes,
    anonymous streams).
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), ""
    if isinstance(source, (str, Path)):
        p = Path(source)
        return p.read_bytes(), p.name
    content = source.read()
    name = getattr(source, "name", "")
    return content, Path(name).name if isinstance(name, str) else ""


def write_bytes(path: Path | str, content: bytes) -> Path:
    """Write bytes to a file, creating parent dirs."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(content)
    return p
