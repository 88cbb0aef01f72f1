"""CLI entry point for the audiobook assembler."""

import sys
from pathlib import Path

import click
from loguru import logger

from .config import AssemblerConfig
from .orchestrator import AssemblyOrchestrator

log = logger.bind(stage="cli")


@click.group()
def main() -> None:
    """Assemble audio segment files into chaptered M4B audiobooks."""


@main.command()
@click.argument("input_folder", type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="The output folder. Defaults to ~/Music/output.",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would happen without encoding."
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to .env file.",
)
def convert(
    input_folder: Path,
    output: Path | None,
    dry_run: bool,
    verbose: bool,
    config_file: Path | None,
) -> None:
    """Convert a folder of MP3 segments to a single M4B file."""
    # Pass CLI flags as kwargs to avoid env pollution
    config_kwargs: dict[str, bool | str] = {}
    if dry_run:
        config_kwargs["dry_run"] = True
    if verbose:
        config_kwargs["log_level"] = "DEBUG"
    if config_file is not None:
        config_kwargs["_env_file"] = str(config_file)

    config = AssemblerConfig(**config_kwargs)  # type: ignore[arg-type]
    config.setup_logging()

    log.debug(f"Starting conversion: input={input_folder} output={output} dry_run={config.dry_run}")
    outcome = AssemblyOrchestrator(config).run(input_folder, output)
    if not outcome.success:
        click.echo(outcome.message, err=True)
        sys.exit(outcome.exit_code)
