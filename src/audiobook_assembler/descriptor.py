"""Book descriptor loading.

A descriptor is either read in full from <input>/metadata/metadata.json or
synthesized in full from the input folder. The two are never merged.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from loguru import logger
from pydantic import ValidationError

from .errors import MetadataParseError
from .models import (
    DEFAULT_CHAPTER_TITLE,
    METADATA_RELPATH,
    BookDescriptor,
    Chapter,
    SpineEntry,
)

log = logger.bind(stage="descriptor")


def _normalize_keys(value: Any) -> Any:
    """Lowercase dict keys recursively and drop null entries."""
    if isinstance(value, dict):
        return {
            str(k).lower(): _normalize_keys(v)
            for k, v in value.items()
            if v is not None
        }
    if isinstance(value, list):
        return [_normalize_keys(v) for v in value]
    return value


def load_external(path: Path) -> BookDescriptor:
    """Parse a metadata.json file. Field names match case-insensitively.

    Raises MetadataParseError on unreadable JSON, a non-object document, or
    values that fail validation (a missing title included).
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MetadataParseError(path, str(e)) from e

    if not isinstance(raw, dict):
        raise MetadataParseError(path, "top-level value is not an object")

    try:
        return BookDescriptor.model_validate(_normalize_keys(raw))
    except ValidationError as e:
        raise MetadataParseError(path, f"{e.error_count()} validation error(s)") from e


def synthesize_default(
    input_dir: Path,
    spine: Sequence[SpineEntry] = (),
) -> BookDescriptor:
    """Default descriptor: folder name as title, one Introduction chapter."""
    return BookDescriptor(
        title=input_dir.name,
        spine=tuple(spine),
        chapters=(Chapter(title=DEFAULT_CHAPTER_TITLE, spine=0, offset=0),),
    )


def load_descriptor(
    input_dir: Path,
    spine: Sequence[SpineEntry] = (),
) -> BookDescriptor:
    """Load the external descriptor, or synthesize one if it is absent or broken.

    spine is only used for the synthesized default.
    """
    metadata_file = input_dir / METADATA_RELPATH
    if metadata_file.is_file():
        try:
            book = load_external(metadata_file)
        except MetadataParseError as e:
            log.warning(f"{e} -- using default book description")
        else:
            log.info(
                f"Loaded {metadata_file}: {len(book.chapters)} chapters, "
                f"{len(book.spine)} spine entries"
            )
            return book
    else:
        log.debug(f"No description at {metadata_file}")

    return synthesize_default(input_dir, spine)
