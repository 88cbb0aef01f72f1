"""FFmpeg encode wrapper -- concatenates segments into a chaptered M4B.

ffmpeg reports progress as key=value lines on stdout (-progress pipe:1).
They are read on the calling thread while stderr is drained on a helper
thread, so progress callbacks fire while the encode is still running.
"""

from __future__ import annotations

import functools
import shutil
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import IO, Callable, Sequence

from loguru import logger

from .errors import EncoderUnavailableError, ExternalToolError
from .models import EncodeOptions

log = logger.bind(stage="encoder")

ProgressCallback = Callable[[float], None]

_PROGRESS_KEYS = ("out_time_us=", "out_time_ms=")


def verify_tools() -> None:
    """Fail fast if ffmpeg or ffprobe is missing."""
    for tool in ("ffmpeg", "ffprobe"):
        if shutil.which(tool) is None:
            raise EncoderUnavailableError(tool)


# Preferred AAC-family encoders, best first
_AAC_ENCODERS = ("aac_at", "aac")


def _audio_encoder_names(listing: str) -> set[str]:
    """Encoder names from the audio rows ("A....." flags) of ffmpeg -encoders."""
    names = set()
    for row in listing.splitlines():
        parts = row.split()
        if len(parts) >= 2 and len(parts[0]) == 6 and parts[0].startswith("A"):
            names.add(parts[1])
    return names


@functools.cache
def detect_encoder() -> str:
    """Pick aac_at (Apple AudioToolbox) when ffmpeg ships it, else the native aac."""
    result = subprocess.run(
        ["ffmpeg", "-hide_banner", "-encoders"],
        capture_output=True,
        text=True,
    )
    available = _audio_encoder_names(result.stdout)
    for name in _AAC_ENCODERS:
        if name in available:
            log.info(f"Using {name} encoder")
            return name
    log.warning("No AAC encoder listed by ffmpeg, trying aac anyway")
    return "aac"


def write_concat_list(files: Sequence[Path], path: Path) -> None:
    """Write an ffmpeg concat demuxer list with escaped paths."""
    lines = []
    for audio_file in files:
        escaped = str(Path(audio_file).resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def build_command(
    files_txt: Path,
    metadata_txt: Path,
    output: Path,
    options: EncodeOptions,
) -> list[str]:
    cmd = [
        "ffmpeg",
        "-y",
        "-hide_banner",
        "-v",
        "error",
        "-f",
        "concat",
        "-safe",
        "0",
        "-i",
        str(files_txt),
        "-i",
        str(metadata_txt),
        "-map_metadata",
        "1",
        "-map_chapters",
        "1",
        "-map",
        "0:a",
        "-c:a",
        options.codec,
    ]
    if options.bitrate_kbps > 0:
        cmd.extend(["-b:a", f"{options.bitrate_kbps}k"])
    if options.faststart:
        cmd.extend(["-movflags", "+faststart"])
    cmd.extend(["-progress", "pipe:1", "-nostats", str(output)])
    return cmd


def parse_progress_line(line: str) -> float | None:
    """Return elapsed output seconds from an ffmpeg -progress line.

    Both out_time_us and out_time_ms carry microseconds.
    """
    line = line.strip()
    for key in _PROGRESS_KEYS:
        if line.startswith(key):
            value = line[len(key):]
            try:
                return int(value) / 1_000_000
            except ValueError:
                return None  # N/A before the first frame
    return None


def _drain(stream: IO[str], sink: list[str]) -> None:
    for line in stream:
        sink.append(line)


def run_with_progress(
    cmd: list[str],
    total_duration: float,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Run ffmpeg, reporting percent complete in [0, 100].

    If reading progress or the callback raises, ffmpeg is killed before the
    exception propagates. Raises ExternalToolError with the tail of stderr on
    a non-zero exit.
    """
    stderr_lines: list[str] = []
    with subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
    ) as process:
        drain = threading.Thread(target=_drain, args=(process.stderr, stderr_lines), daemon=True)
        drain.start()
        try:
            for line in process.stdout:
                seconds = parse_progress_line(line)
                if seconds is None or on_progress is None or total_duration <= 0:
                    continue
                on_progress(min(100.0, max(0.0, seconds / total_duration * 100)))
        except BaseException:
            log.warning("Stopping ffmpeg after an error while reading progress")
            process.kill()
            process.wait()
            drain.join()
            raise
        returncode = process.wait()
        drain.join()

    if returncode != 0:
        stderr = "".join(stderr_lines).strip()
        log.error(f"ffmpeg failed: {stderr[-500:]}")
        raise ExternalToolError("ffmpeg", returncode, stderr[-500:])

    if on_progress is not None:
        on_progress(100.0)


def encode(
    files: Sequence[Path],
    metadata_text: str,
    output: Path,
    options: EncodeOptions,
    total_duration: float,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Concatenate files into output using the FFMETADATA1 text for tags/chapters."""
    with tempfile.TemporaryDirectory(prefix="audiobook-assembler-") as tmp:
        work = Path(tmp)
        files_txt = work / "files.txt"
        metadata_txt = work / "metadata.txt"
        write_concat_list(files, files_txt)
        metadata_txt.write_text(metadata_text, encoding="utf-8")

        cmd = build_command(files_txt, metadata_txt, output, options)
        log.debug(f"ffmpeg command: {' '.join(cmd)}")
        run_with_progress(cmd, total_duration, on_progress)
