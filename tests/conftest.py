"""Shared fixtures: a book folder of fake segments and a stubbed ffprobe."""

import json
from pathlib import Path

import pytest

from audiobook_assembler.models import ProbeResult

_ENV_VARS = [
    "ASSEMBLER_OUTPUT_DIR", "ASSEMBLER_LOG_DIR", "ASSEMBLER_AUDIO_EXTENSION",
    "ASSEMBLER_NATURAL_SORT", "ASSEMBLER_CODEC", "ASSEMBLER_PROGRESS_BAR_WIDTH",
    "ASSEMBLER_DRY_RUN", "ASSEMBLER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Remove assembler env vars and point HOME at a scratch dir."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def book_dir(tmp_path) -> Path:
    """Input folder with three fake MP3 segments (names out of creation order)."""
    d = tmp_path / "My Book"
    d.mkdir()
    for name in ("02.mp3", "01.mp3", "03.mp3"):
        (d / name).write_bytes(b"fake")
    (d / "notes.txt").write_text("not audio")
    return d


def write_metadata(book_dir: Path, data: dict) -> Path:
    path = book_dir / "metadata" / "metadata.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def fake_probe_factory(durations: dict[str, float], bit_rate: int = 128000):
    """Build a probe() stand-in that returns durations keyed by file name."""

    def _probe(path: Path) -> ProbeResult:
        return ProbeResult(
            duration=durations.get(path.name, 60.0),
            bit_rate=bit_rate,
            format_name="mp3",
        )

    return _probe
