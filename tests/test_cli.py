"""Tests for cli.py -- Click CLI interface."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from audiobook_assembler.cli import main
from audiobook_assembler.models import ConversionOutcome


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    """Keep loguru sinks away from CliRunner's temporary streams."""
    monkeypatch.setattr(
        "audiobook_assembler.config.AssemblerConfig.setup_logging", lambda self: None
    )


class TestHelpOutput:
    def test_group_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "convert" in result.output

    def test_convert_help(self):
        result = CliRunner().invoke(main, ["convert", "--help"])
        assert result.exit_code == 0
        assert "INPUT_FOLDER" in result.output
        assert "-o, --output" in result.output
        assert "--dry-run" in result.output

    def test_input_folder_required(self):
        result = CliRunner().invoke(main, ["convert"])
        assert result.exit_code != 0
        assert "INPUT_FOLDER" in result.output


class TestConvert:
    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_success_exit_zero(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok(tmp_path / "b.m4b")
        result = CliRunner().invoke(main, ["convert", str(tmp_path), "-o", str(tmp_path / "out")])
        assert result.exit_code == 0, result.output
        mock_orch_cls.return_value.run.assert_called_once_with(tmp_path, tmp_path / "out")

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_long_output_flag(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        result = CliRunner().invoke(main, ["convert", str(tmp_path), "--output", "elsewhere"])
        assert result.exit_code == 0, result.output
        assert mock_orch_cls.return_value.run.call_args.args[1] == Path("elsewhere")

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_output_optional(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        CliRunner().invoke(main, ["convert", str(tmp_path)])
        assert mock_orch_cls.return_value.run.call_args.args[1] is None

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_failure_message_and_exit_one(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.fail(
            "No audio files found in the input folder."
        )
        result = CliRunner().invoke(main, ["convert", str(tmp_path)])
        assert result.exit_code == 1
        assert "No audio files found in the input folder." in result.output

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_dry_run_sets_config(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        CliRunner().invoke(main, ["convert", str(tmp_path), "--dry-run"])
        config = mock_orch_cls.call_args.args[0]
        assert config.dry_run is True

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_verbose_sets_debug(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        CliRunner().invoke(main, ["convert", str(tmp_path), "-v"])
        config = mock_orch_cls.call_args.args[0]
        assert config.log_level == "DEBUG"

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_config_file(self, mock_orch_cls, tmp_path):
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        env_file = tmp_path / "assembler.env"
        env_file.write_text("ASSEMBLER_AUDIO_EXTENSION=.m4a\n")
        CliRunner().invoke(main, ["convert", str(tmp_path), "-c", str(env_file)])
        config = mock_orch_cls.call_args.args[0]
        assert config.audio_extension == ".m4a"

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_env_log_level_kept_without_flag(self, mock_orch_cls, tmp_path, monkeypatch):
        monkeypatch.setenv("ASSEMBLER_LOG_LEVEL", "INFO")
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        CliRunner().invoke(main, ["convert", str(tmp_path)])
        config = mock_orch_cls.call_args.args[0]
        assert config.log_level == "INFO"

    @patch("audiobook_assembler.cli.AssemblyOrchestrator")
    def test_env_dry_run_kept_without_flag(self, mock_orch_cls, tmp_path, monkeypatch):
        monkeypatch.setenv("ASSEMBLER_DRY_RUN", "true")
        mock_orch_cls.return_value.run.return_value = ConversionOutcome.ok()
        CliRunner().invoke(main, ["convert", str(tmp_path)])
        config = mock_orch_cls.call_args.args[0]
        assert config.dry_run is True


class TestEndToEnd:
    def test_missing_input_exits_one(self, tmp_path):
        with patch("audiobook_assembler.orchestrator.verify_tools"):
            result = CliRunner().invoke(
                main, ["convert", str(tmp_path / "nope"), "-o", str(tmp_path / "out")]
            )
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_no_audio_files_exits_one(self, tmp_path):
        src = tmp_path / "book"
        src.mkdir()
        with patch("audiobook_assembler.orchestrator.verify_tools"):
            result = CliRunner().invoke(main, ["convert", str(src), "-o", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "No audio files found" in result.output
        assert not list((tmp_path / "out").glob("*.m4b"))
