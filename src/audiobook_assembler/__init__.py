"""Audiobook Assembler -- join audio segments into one chaptered M4B audiobook.

Core modules:
    config       -- Configuration via pydantic-settings (ASSEMBLER_* env vars, .env)
    cli          -- Click CLI entry point (``convert`` subcommand)
    orchestrator -- Runs one conversion through its states to a terminal outcome
    catalog      -- Segment discovery and one-shot probing per file
    descriptor   -- Book description: metadata/metadata.json or synthesized default
    timeline     -- Chapter (spine, offset) -> absolute time
    metadata     -- Tag/chapter block and its FFMETADATA1 rendering
    encoder      -- ffmpeg concat + AAC encode with streamed progress
    ffprobe      -- Audio file inspection via ffprobe subprocess
    progress     -- Console progress bar
    sanitize     -- Output filename sanitization
"""

__version__ = "0.1.0"
