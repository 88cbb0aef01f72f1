"""Segment discovery -- finds input audio files and probes each one once.

The output bitrate comes from the first segment only; all segments are
assumed to share it.
"""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

from .errors import InputNotFoundError, NoInputError
from .ffprobe import probe
from .models import DEFAULT_AUDIO_EXTENSION, Segment, SpineEntry

log = logger.bind(stage="catalog")


def _natural_sort_key(p: Path) -> list:
    """Extract numeric/text parts for natural sorting of filenames."""
    return [int(c) if c.isdigit() else c.lower() for c in re.split(r"(\d+)", p.name)]


def discover_segment_files(
    input_dir: Path,
    extension: str = DEFAULT_AUDIO_EXTENSION,
    natural_sort: bool = False,
) -> list[Path]:
    """List audio files directly inside input_dir, ordered by file name.

    Raises InputNotFoundError if input_dir is missing and NoInputError if
    nothing matches the extension.
    """
    if not input_dir.is_dir():
        raise InputNotFoundError(input_dir)

    ext = extension.lower()
    files = [f for f in input_dir.iterdir() if f.is_file() and f.suffix.lower() == ext]
    if not files:
        raise NoInputError(input_dir, extension)

    if natural_sort:
        files.sort(key=_natural_sort_key)
    else:
        files.sort(key=lambda p: p.name)

    log.debug(f"Found {len(files)} {ext} files in {input_dir}")
    return files


class SegmentCatalog:
    """Ordered input segments with cached probe results."""

    def __init__(
        self,
        input_dir: Path,
        extension: str = DEFAULT_AUDIO_EXTENSION,
        natural_sort: bool = False,
    ) -> None:
        self.input_dir = input_dir
        self.files = discover_segment_files(input_dir, extension, natural_sort)
        self._segments: tuple[Segment, ...] | None = None

    def __len__(self) -> int:
        return len(self.files)

    @property
    def segments(self) -> tuple[Segment, ...]:
        """Probe every file on first access; later calls reuse the results."""
        if self._segments is None:
            segments = []
            for f in self.files:
                result = probe(f)
                segments.append(
                    Segment(
                        path=f,
                        duration=result.duration,
                        bitrate=result.bit_rate // 1000,
                        format_name=result.format_name,
                    )
                )
            self._segments = tuple(segments)
        return self._segments

    @property
    def target_bitrate(self) -> int:
        """Bitrate of the first segment in kbps."""
        return self.segments[0].bitrate

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.segments)

    def spine(self) -> tuple[SpineEntry, ...]:
        """Spine entries matching the probed segments."""
        return tuple(
            SpineEntry(duration=s.duration, type=s.format_name, bitrate=s.bitrate)
            for s in self.segments
        )
