"""Core enums, constants, and value types for the audiobook assembler.

Enums:
    AssemblyState  -- Orchestrator state (init through done).

Values:
    Segment, ProbeResult -- discovered input audio and its probed properties.
    SpineEntry, Chapter, Contributor, Description, BookDescriptor --
        book description, parsed from metadata.json or synthesized.
    ResolvedChapterMark, MetadataBlock -- what the encode stage consumes.
    EncodeOptions, ConversionOutcome -- encode settings and terminal result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_AUDIO_EXTENSION = ".mp3"
OUTPUT_EXTENSION = ".m4b"
METADATA_RELPATH = Path("metadata") / "metadata.json"

GENRE = "Audiobook"
UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_NARRATOR = "Unknown Narrator"
DEFAULT_CHAPTER_TITLE = "Introduction"

PROGRESS_BAR_WIDTH = 30


class AssemblyState(StrEnum):
    INIT = "init"
    OUTPUT_PREPARED = "output_prepared"
    INPUT_VALIDATED = "input_validated"
    SEGMENTS_DISCOVERED = "segments_discovered"
    DESCRIPTOR_READY = "descriptor_ready"
    METADATA_ASSEMBLED = "metadata_assembled"
    ENCODING = "encoding"
    DONE = "done"


@dataclass(frozen=True)
class ProbeResult:
    """Format-level properties reported by ffprobe."""

    duration: float
    bit_rate: int  # bits/sec
    format_name: str = ""


@dataclass(frozen=True)
class Segment:
    """One input audio file, in concatenation order."""

    path: Path
    duration: float
    bitrate: int  # kbps
    format_name: str = ""


# -- Book description (metadata/metadata.json) --
#
# Field aliases are lowercase: keys are lowercased before validation so that
# "Title", "TITLE" and "title" all match.


class _DescriptorModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Description(_DescriptorModel):
    full: str = ""
    short: str = ""


class Contributor(_DescriptorModel):
    name: str = ""
    role: str = ""
    bio: str = ""


class SpineEntry(_DescriptorModel):
    duration: float = 0.0
    type: str = ""
    bitrate: int = 0


class Chapter(_DescriptorModel):
    title: str = ""
    spine: int = 0
    offset: int = 0


class BookDescriptor(_DescriptorModel):
    title: str
    description: Description = Field(default_factory=Description)
    cover_url: str = Field(default="", alias="coverurl")
    creators: tuple[Contributor, ...] = Field(default=(), alias="creator")
    spine: tuple[SpineEntry, ...] = ()
    chapters: tuple[Chapter, ...] = ()


# -- Assembled output --


@dataclass(frozen=True)
class ResolvedChapterMark:
    time: timedelta
    title: str


@dataclass(frozen=True)
class MetadataBlock:
    """Tags and chapter marks handed to the encoder."""

    title: str
    album: str
    artist: str
    composer: str
    description: str = ""
    genre: str = GENRE
    chapters: tuple[ResolvedChapterMark, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EncodeOptions:
    codec: str
    bitrate_kbps: int
    faststart: bool = True


@dataclass(frozen=True)
class ConversionOutcome:
    """Terminal result of one conversion. Carries the first error only."""

    success: bool
    message: str | None = None
    output_file: Path | None = None

    @classmethod
    def ok(cls, output_file: Path | None = None) -> ConversionOutcome:
        return cls(success=True, output_file=output_file)

    @classmethod
    def fail(cls, message: str) -> ConversionOutcome:
        return cls(success=False, message=message)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1
