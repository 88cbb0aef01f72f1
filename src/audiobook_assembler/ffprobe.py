"""FFprobe subprocess wrappers for audio segment inspection."""

import json
import subprocess
from pathlib import Path

from loguru import logger

from .errors import ExternalToolError
from .models import ProbeResult

log = logger.bind(stage="ffprobe")


def _run_ffprobe(args: list[str]) -> subprocess.CompletedProcess:
    """Run ffprobe with common flags."""
    return subprocess.run(
        ["ffprobe", "-v", "error"] + args,
        capture_output=True,
        text=True,
    )


def probe(file: Path) -> ProbeResult:
    """Read format-level duration, bitrate and format name in one call.

    Raises ExternalToolError when ffprobe fails or reports no duration.
    """
    log.debug(f"probe(file={file})")
    result = _run_ffprobe([
        "-show_entries", "format=duration,bit_rate,format_name",
        "-of", "json",
        str(file),
    ])
    if result.returncode != 0:
        raise ExternalToolError("ffprobe", result.returncode, result.stderr.strip())

    try:
        fmt = json.loads(result.stdout).get("format", {})
    except json.JSONDecodeError as e:
        raise ExternalToolError("ffprobe", result.returncode, f"invalid JSON: {e}") from e

    duration = fmt.get("duration")
    if duration in (None, "", "N/A"):
        raise ExternalToolError("ffprobe", result.returncode, f"no duration for {file}")

    # VBR files sometimes omit the container bitrate
    bit_rate = fmt.get("bit_rate")
    try:
        bit_rate = int(bit_rate)
    except (TypeError, ValueError):
        log.warning(f"No bitrate reported for {file.name}")
        bit_rate = 0

    return ProbeResult(
        duration=float(duration),
        bit_rate=bit_rate,
        format_name=fmt.get("format_name", ""),
    )


def duration_to_timestamp(seconds: float) -> str:
    """Convert seconds to HH:MM:SS."""
    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def count_chapters(file: Path) -> int:
    """Count embedded chapters in an audio file."""
    result = _run_ffprobe(["-show_chapters", "-of", "json", str(file)])
    if result.returncode != 0:
        return 0
    try:
        data = json.loads(result.stdout)
        return len(data.get("chapters", []))
    except (json.JSONDecodeError, KeyError):
        return 0
