"""Assembler configuration via pydantic-settings (.env + ASSEMBLER_* env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_AUDIO_EXTENSION, PROGRESS_BAR_WIDTH


def default_output_dir() -> Path:
    """The "output" folder inside the user's music library."""
    return Path.home() / "Music" / "output"


class AssemblerConfig(BaseSettings):
    """All assembler configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSEMBLER_",
        env_file=".env",
        extra="ignore",
    )

    # -- Directories --
    output_dir: Path | None = None
    log_dir: Path | None = None

    # -- Input --
    audio_extension: str = DEFAULT_AUDIO_EXTENSION
    natural_sort: bool = False

    # -- Encoding --
    codec: str = ""  # empty = auto-detect (aac_at, then aac)

    # -- Behavior --
    progress_bar_width: int = PROGRESS_BAR_WIDTH
    dry_run: bool = False
    log_level: str = "WARNING"

    def resolve_output_dir(self, override: Path | None = None) -> Path:
        """CLI flag > configured output_dir > ~/Music/output."""
        if override is not None:
            return Path(override).expanduser().resolve()
        if self.output_dir is not None:
            return self.output_dir.expanduser().resolve()
        return default_output_dir()

    def setup_logging(self) -> None:
        """Configure loguru for the assembler."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<12} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level=self.log_level.upper(),
            filter=_default_extra,
        )

        if self.log_dir is None:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_dir / "assembler.log"),
            format=log_format,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            filter=_default_extra,
        )
