"""Output filename sanitization."""

import re

from loguru import logger

from .models import OUTPUT_EXTENSION

log = logger.bind(stage="sanitize")

# Leave room for the extension within the common 255-byte name limit
_MAX_STEM_BYTES = 255 - len(OUTPUT_EXTENSION)


def sanitize_filename(name: str) -> str:
    """Make a book title safe to use as a file name stem.

    Replaces path separators and reserved characters with underscores, strips
    leading/trailing dots, collapses repeated underscores, and truncates to
    fit the name limit (UTF-8 bytes).
    """
    sanitized = re.sub(r'[/\\:"*?<>|\x00-\x1f]+', "_", name).strip()
    sanitized = re.sub(r"^[.]+", "", sanitized)
    sanitized = re.sub(r"[.\s]+$", "", sanitized)
    sanitized = re.sub(r"__+", "_", sanitized)

    encoded = sanitized.encode("utf-8")
    if len(encoded) > _MAX_STEM_BYTES:
        sanitized = encoded[:_MAX_STEM_BYTES].decode("utf-8", errors="ignore")
        log.debug(f"Truncated file name to {len(sanitized.encode('utf-8'))} bytes")

    return sanitized


def book_filename(title: str, fallback: str) -> str:
    """<title>.m4b, using fallback when the title sanitizes to nothing."""
    stem = sanitize_filename(title) or sanitize_filename(fallback) or "audiobook"
    return f"{stem}{OUTPUT_EXTENSION}"
