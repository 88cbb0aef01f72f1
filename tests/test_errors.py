"""Tests for errors.py -- exception hierarchy and messages."""

from pathlib import Path

from audiobook_assembler.errors import (
    AssemblyError,
    EncoderUnavailableError,
    ExternalToolError,
    InputNotFoundError,
    MetadataParseError,
    NoInputError,
    OperationFailure,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_assembly_error(self):
        for cls in (
            InputNotFoundError,
            NoInputError,
            EncoderUnavailableError,
            MetadataParseError,
            OperationFailure,
            ExternalToolError,
        ):
            assert issubclass(cls, AssemblyError)

    def test_external_tool_error_is_operation_failure(self):
        assert issubclass(ExternalToolError, OperationFailure)

    def test_assembly_error_is_exception(self):
        assert issubclass(AssemblyError, Exception)


class TestMessages:
    def test_input_not_found(self):
        err = InputNotFoundError(Path("/nope"))
        assert str(err) == "Input folder /nope does not exist."
        assert err.path == Path("/nope")

    def test_no_input(self):
        err = NoInputError(Path("/book"), ".mp3")
        assert "No audio files found" in str(err)
        assert err.extension == ".mp3"

    def test_encoder_unavailable(self):
        err = EncoderUnavailableError("ffmpeg")
        assert err.tool == "ffmpeg"
        assert "ffmpeg not found" in str(err)

    def test_metadata_parse(self):
        err = MetadataParseError(Path("m.json"), "bad json")
        assert err.reason == "bad json"
        assert "m.json" in str(err)


class TestExternalToolError:
    def test_attributes(self):
        err = ExternalToolError(tool="ffmpeg", exit_code=1, stderr="codec error")
        assert err.tool == "ffmpeg"
        assert err.exit_code == 1
        assert err.stderr == "codec error"
        assert "ffmpeg" in str(err)
        assert "codec error" in str(err)
