"""
Command line interface for lvs.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from lvs import __version__
from lvs.core import aggregator, renderer
from lvs.core.orchestrator import run_scan
from lvs.utils import config_file, http_client, logging_config, schema
from lvs.utils.errors import ConfigError

# Set up logger
logger = logging.getLogger(__name__)

# Rich consoles: results on stdout, diagnostics on stderr
console = Console()
err_console = Console(stderr=True)

CONFIG_FILE_NAME = ".lvs.yml"

app = typer.Typer(
    name="lvs",
    help="Scan npm and Python projects for vulnerable dependencies",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"lvs version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """lvs: local vulnerability scanner for npm and PyPI dependencies"""
    pass


def build_config(
    path: Path,
    config_path: Optional[Path],
    cli_overrides: dict,
) -> schema.ScanConfig:
    """
    Merge the config file (explicit or auto-detected) with CLI overrides.

    Raises:
        ConfigError: If the file or the merged values are invalid.
    """
    file_config = {}
    if not config_path:
        config_path = config_file.find_config_file(path)

    if config_path:
        err_console.print(f"Loading config from: [cyan]{escape(str(config_path))}[/cyan]")
        raw_config = config_file.load_config_file(config_path)
        file_config = config_file.validate_config(raw_config, base_dir=config_path.parent)

    merged = config_file.merge_config(file_config, cli_overrides)

    try:
        return schema.ScanConfig(root_path=path, **merged)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


async def _scan(config: schema.ScanConfig) -> schema.AggregateResult:
    try:
        return await run_scan(config)
    finally:
        await http_client.close_async_client()


@app.command("scan")
def scan_command(
    path: Path = typer.Argument(
        ".",
        help="Project directory to scan (default: current directory)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON instead of pretty text",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Save results to a file (JSON or pretty text)",
    ),
    ecosystems: Optional[List[schema.Ecosystem]] = typer.Option(
        None,
        "--ecosystem",
        "-e",
        help="Ecosystem to scan; repeat for several (default: all)",
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        help="Parallel OSV queries for requirements.txt packages (1 = sequential)",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before an OSV request is abandoned",
    ),
    audit_timeout: Optional[float] = typer.Option(
        None,
        "--audit-timeout",
        help="Seconds before `npm audit` is killed",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (auto-detected if not specified)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable detailed logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
    ),
):
    """
    Scan a project tree for vulnerable npm and PyPI dependencies.

    Examples:
      lvs scan /path/to/project
      lvs scan . --json -o results.json
      lvs scan . -o results.txt
      lvs scan . -e pypi --concurrency 1
    """
    logging_config.setup_logging(level="DEBUG" if verbose else "INFO", log_file=log_file)

    cli_overrides = {
        "output_format": schema.OutputFormat.JSON if json_output else None,
        "output_file": output,
        "ecosystems": ecosystems or None,
        "concurrency": concurrency,
        "request_timeout": timeout,
        "audit_timeout": audit_timeout,
    }

    try:
        scan_config = build_config(path, config, cli_overrides)
    except ConfigError as e:
        err_console.print(f"[bold red]❌ Invalid configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    try:
        result = asyncio.run(_scan(scan_config))

        summary = aggregator.summarize(result)
        logger.info(
            f"Scan finished: {len(result.reports)} report(s), "
            f"{result.total_records} record(s), "
            f"records per ecosystem {summary['ecosystems']}, "
            f"per severity {summary['severities']}"
        )

        renderer.emit_result(
            result,
            output_format=scan_config.output_format,
            output_file=scan_config.output_file,
            console=console,
        )
    except Exception as e:
        logger.debug("Scan aborted", exc_info=True)
        err_console.print(f"[bold red]❌ Error running scan:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


@app.command("init")
def init_command(
    path: Path = typer.Argument(
        ".",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        help="Directory to write the config file to",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing config file",
    ),
):
    """
    Write a sample .lvs.yml configuration file.
    """
    config_path = path / CONFIG_FILE_NAME
    if config_path.exists() and not force:
        err_console.print(
            f"[yellow]{escape(str(config_path))} already exists (use --force to overwrite)[/yellow]"
        )
        raise typer.Exit(code=1)

    config_file.save_sample_config(config_path)
    console.print(f"[green]Created {escape(str(config_path))}[/green]")
    console.print("[dim]pyproject.toml users can add this section instead:[/dim]")
    console.print(escape(config_file.PYPROJECT_TOML_EXAMPLE), highlight=False)


if __name__ == "__main__":
    app()
