"""Chapter timeline mapping.

A chapter points at a spine entry plus an offset into it. Its absolute
position is the summed duration of every earlier spine entry plus the offset.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Sequence

from loguru import logger

from .models import Chapter, ResolvedChapterMark, SpineEntry

log = logger.bind(stage="timeline")


def resolve_chapter(chapter: Chapter, spine: Sequence[SpineEntry]) -> ResolvedChapterMark:
    """Convert a (spine, offset) chapter into an absolute mark.

    An out-of-range spine index resolves to zero elapsed time with the title
    kept, so the number of marks always equals the number of chapters.
    """
    if chapter.spine < 0 or chapter.spine >= len(spine):
        log.warning(
            f"Chapter {chapter.title!r} references spine {chapter.spine} "
            f"(have {len(spine)}); placing it at 00:00:00"
        )
        return ResolvedChapterMark(time=timedelta(0), title=chapter.title)

    elapsed = sum(entry.duration for entry in spine[: chapter.spine]) + chapter.offset
    return ResolvedChapterMark(time=timedelta(seconds=elapsed), title=chapter.title)


def resolve_chapters(
    chapters: Iterable[Chapter],
    spine: Sequence[SpineEntry],
) -> tuple[ResolvedChapterMark, ...]:
    """Resolve every chapter in declared order. Never sorts by time."""
    return tuple(resolve_chapter(c, spine) for c in chapters)
