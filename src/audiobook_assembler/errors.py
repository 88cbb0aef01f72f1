"""Exception hierarchy for the audiobook assembler."""


class AssemblyError(Exception):
    """Base exception for all assembler errors."""


class InputNotFoundError(AssemblyError):
    """The input directory does not exist."""

    def __init__(self, path) -> None:
        super().__init__(f"Input folder {path} does not exist.")
        self.path = path


class NoInputError(AssemblyError):
    """The input directory holds no matching audio files."""

    def __init__(self, path, extension: str = ".mp3") -> None:
        super().__init__("No audio files found in the input folder.")
        self.path = path
        self.extension = extension


class EncoderUnavailableError(AssemblyError):
    """ffmpeg or ffprobe is not installed or not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"{tool} not found. Install ffmpeg and make sure it is on PATH.")
        self.tool = tool


class MetadataParseError(AssemblyError):
    """The book description file is malformed.

    Never surfaced to the user: the descriptor loader treats it as a missing file.
    """

    def __init__(self, path, reason: str) -> None:
        super().__init__(f"Cannot parse {path}: {reason}")
        self.path = path
        self.reason = reason


class OperationFailure(AssemblyError):
    """An unexpected failure during probing or encoding."""


class ExternalToolError(OperationFailure):
    """An external subprocess (ffmpeg, ffprobe) failed."""

    def __init__(self, tool: str, exit_code: int, stderr: str) -> None:
        super().__init__(f"{tool} exited with code {exit_code}: {stderr}")
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr
