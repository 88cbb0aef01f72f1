"""Assembly orchestrator -- runs one input folder through to a chaptered M4B.

States advance init -> output_prepared -> input_validated ->
segments_discovered -> descriptor_ready -> metadata_assembled -> encoding ->
done. Any step may fail; the first error ends the run and becomes the
outcome's message. Nothing is retried.
"""

from __future__ import annotations

import time
from pathlib import Path

import click
from loguru import logger

from .catalog import SegmentCatalog
from .config import AssemblerConfig
from .descriptor import load_descriptor
from .encoder import ProgressCallback, build_command, detect_encoder, encode, verify_tools
from .errors import AssemblyError, InputNotFoundError, OperationFailure
from .ffprobe import count_chapters, duration_to_timestamp
from .metadata import assemble_metadata, render_ffmetadata
from .models import AssemblyState, ConversionOutcome, EncodeOptions
from .progress import ProgressBar
from .sanitize import book_filename

log = logger.bind(stage="orchestrator")


class AssemblyOrchestrator:
    """Coordinates discovery, descriptor loading, metadata assembly and encoding.

    Attributes:
        config: Assembler configuration
        on_progress: Optional percent callback; a console ProgressBar is used
            when none is given
        state: Last state reached by the current or most recent run
    """

    def __init__(
        self,
        config: AssemblerConfig,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.on_progress = on_progress
        self.state = AssemblyState.INIT

    def _enter(self, state: AssemblyState) -> None:
        log.debug(f"{self.state} -> {state}")
        self.state = state

    def run(self, input_dir: Path | str, output_dir: Path | str | None = None) -> ConversionOutcome:
        """Convert one input folder.

        Args:
            input_dir: Folder holding the audio segments
            output_dir: Destination folder; falls back to config, then ~/Music/output

        Returns:
            ConversionOutcome with the output path on success or the first
            error message on failure
        """
        self.state = AssemblyState.INIT
        try:
            output_file = self._run(
                Path(input_dir),
                Path(output_dir) if output_dir is not None else None,
            )
        except AssemblyError as e:
            log.debug(f"Failed in state {self.state}: {e}")
            outcome = ConversionOutcome.fail(str(e))
        except Exception as e:
            log.opt(exception=e).debug(f"Unexpected error in state {self.state}")
            outcome = ConversionOutcome.fail(str(OperationFailure(str(e) or type(e).__name__)))
        else:
            outcome = ConversionOutcome.ok(output_file)
        self._enter(AssemblyState.DONE)
        return outcome

    def _run(self, input_dir: Path, output_dir: Path | None) -> Path:
        verify_tools()

        out_dir = self.config.resolve_output_dir(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        self._enter(AssemblyState.OUTPUT_PREPARED)
        click.echo("Output folder:")
        click.echo(str(out_dir))

        input_path = input_dir.expanduser().resolve()
        if not input_path.is_dir():
            raise InputNotFoundError(input_dir)
        self._enter(AssemblyState.INPUT_VALIDATED)
        click.echo("Input folder:")
        click.echo(str(input_path))

        catalog = SegmentCatalog(
            input_path,
            extension=self.config.audio_extension,
            natural_sort=self.config.natural_sort,
        )
        click.echo(f"Found {len(catalog)} audio files in the input folder.")
        total_duration = catalog.total_duration
        click.echo(f"Bitrate detected: {catalog.target_bitrate} kbps")
        log.info(f"Total duration: {duration_to_timestamp(total_duration)}")
        self._enter(AssemblyState.SEGMENTS_DISCOVERED)

        book = load_descriptor(input_path, catalog.spine())
        if len(book.spine) != len(catalog):
            log.warning(
                f"Spine has {len(book.spine)} entries but {len(catalog)} "
                f"audio files were found"
            )
        self._enter(AssemblyState.DESCRIPTOR_READY)

        block = assemble_metadata(book)
        metadata_text = render_ffmetadata(block, total_duration)
        self._enter(AssemblyState.METADATA_ASSEMBLED)

        output_file = out_dir / book_filename(book.title, input_path.name)
        options = EncodeOptions(
            codec=self.config.codec or detect_encoder(),
            bitrate_kbps=catalog.target_bitrate,
        )
        self._enter(AssemblyState.ENCODING)

        if self.config.dry_run:
            cmd = build_command(Path("files.txt"), Path("metadata.txt"), output_file, options)
            click.echo(f"[DRY-RUN] Would write {output_file}")
            click.echo(f"[DRY-RUN] {len(block.chapters)} chapters, {options.codec} {options.bitrate_kbps}k")
            click.echo(f"[DRY-RUN] Command: {' '.join(cmd)}")
            return output_file

        click.echo(f"Converting to {output_file.name}")
        bar = None
        on_progress = self.on_progress
        if on_progress is None:
            bar = ProgressBar(self.config.progress_bar_width)
            on_progress = bar

        started = time.perf_counter()
        try:
            encode(
                catalog.files,
                metadata_text,
                output_file,
                options,
                total_duration=total_duration,
                on_progress=on_progress,
            )
        except BaseException:
            if output_file.exists():
                log.debug(f"Removing partial output {output_file}")
                output_file.unlink(missing_ok=True)
            raise
        finally:
            if bar is not None:
                bar.finish()
        elapsed = time.perf_counter() - started
        click.echo(f"Conversion took {elapsed:.1f} seconds.")

        self._check_output(output_file, len(block.chapters))
        return output_file

    def _check_output(self, output_file: Path, expected_chapters: int) -> None:
        if not output_file.is_file() or output_file.stat().st_size == 0:
            raise OperationFailure(f"Output file was not created: {output_file}")

        chapters = count_chapters(output_file)
        if chapters != expected_chapters:
            log.warning(
                f"Chapter count mismatch in {output_file.name}: "
                f"expected {expected_chapters}, got {chapters}"
            )
