"""Metadata assembly -- builds the tag/chapter block and its FFMETADATA1 rendering.

The rendered file is passed to ffmpeg as a second input and mapped with
-map_metadata 1 / -map_chapters 1.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Iterable

from loguru import logger

from .models import (
    GENRE,
    UNKNOWN_AUTHOR,
    UNKNOWN_NARRATOR,
    BookDescriptor,
    Contributor,
    MetadataBlock,
)
from .timeline import resolve_chapters

log = logger.bind(stage="metadata")

_FFMETA_SPECIAL = re.compile(r"([=;#\\\n])")


def first_contributor(creators: Iterable[Contributor], role: str, default: str) -> str:
    """Name of the first contributor whose role matches exactly."""
    for creator in creators:
        if creator.role == role:
            return creator.name
    return default


def assemble_metadata(book: BookDescriptor) -> MetadataBlock:
    """Build the metadata block for one book.

    Chapter marks keep the descriptor's order even when their times are not
    increasing.
    """
    block = MetadataBlock(
        title=book.title,
        album=book.title,
        artist=first_contributor(book.creators, "author", UNKNOWN_AUTHOR),
        composer=first_contributor(book.creators, "narrator", UNKNOWN_NARRATOR),
        description=book.description.full,
        genre=GENRE,
        chapters=resolve_chapters(book.chapters, book.spine),
    )
    log.debug(
        f"Metadata: title={block.title!r} artist={block.artist!r} "
        f"composer={block.composer!r} chapters={len(block.chapters)}"
    )
    return block


def escape_ffmetadata(value: str) -> str:
    """Backslash-escape '=', ';', '#', '\\' and newlines."""
    return _FFMETA_SPECIAL.sub(r"\\\1", value)


def _ms(td: timedelta) -> int:
    return round(td.total_seconds() * 1000)


def render_ffmetadata(block: MetadataBlock, total_duration: float) -> str:
    """Render a metadata block as an FFMETADATA1 document.

    Each chapter ends where the next one starts. The last chapter, and any
    chapter followed by an earlier mark, ends at the total duration.
    """
    tags = {
        "title": block.title,
        "album": block.album,
        "artist": block.artist,
        "album_artist": block.artist,
        "composer": block.composer,
        "genre": block.genre,
    }
    if block.description:
        tags["description"] = block.description
        tags["comment"] = block.description

    lines = [";FFMETADATA1"]
    lines.extend(f"{key}={escape_ffmetadata(value)}" for key, value in tags.items())
    lines.append("")

    total_ms = round(total_duration * 1000)
    marks = block.chapters
    for i, mark in enumerate(marks):
        start = _ms(mark.time)
        end = total_ms
        if i + 1 < len(marks):
            next_start = _ms(marks[i + 1].time)
            if next_start > start:
                end = next_start
        end = max(end, start)

        lines.extend(
            [
                "[CHAPTER]",
                "TIMEBASE=1/1000",
                f"START={start}",
                f"END={end}",
                f"title={escape_ffmetadata(mark.title)}",
                "",
            ]
        )

    return "\n".join(lines)
