"""
p4-mcp CLI - stdio server entry point and one-shot helpers.

Run `p4-mcp` to serve MCP requests on stdin/stdout.
Stdout carries protocol traffic only; logs go to stderr.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from p4_mcp import __version__
from p4_mcp.server.transport import StdioServer
from p4_mcp.tools.catalog import CommandCatalog
from p4_mcp.tools.dispatcher import Dispatcher
from p4_mcp.tools.schema import CommandSpec
from p4_mcp.validation.config import Config, ConfigError

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("p4_mcp")


def setup_logging(level: str) -> None:
    """Send all logging to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def build_dispatcher(config: Config) -> Dispatcher:
    """Create the dispatcher for the configured execution mode."""
    settings = config.merged
    return Dispatcher(
        CommandCatalog.default(),
        config.execution_mode,
        binary=settings.p4.binary,
        timeout=settings.p4.timeout,
    )


def _describe_params(spec: CommandSpec) -> str:
    if not spec.params:
        return "[dim](none)[/dim]"
    parts = []
    for p in spec.params:
        text = f"{p.name}: {p.kind.value}"
        if p.required:
            text += " (required)"
        elif p.default is not None:
            text += f" = {p.default}"
        parts.append(text)
    return "\n".join(parts)


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@click.option("--mock", is_flag=True, help="Answer with canned p4 output instead of running p4")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of .p4mcp/config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, debug: bool, mock: bool, config_path: Optional[Path]) -> None:
    """
    p4-mcp - Perforce tools over MCP.

    Run without a subcommand to serve requests on stdin/stdout.

    \b
    Examples:
        p4-mcp                          # Serve (live p4)
        p4-mcp --mock                   # Serve canned responses
        p4-mcp tools                    # List available tools
        p4-mcp call p4_opened '{}'      # Run one tool call
    """
    if version:
        console.print(f"p4-mcp v{__version__}")
        ctx.exit()

    try:
        config = Config.load(config_path)
        if mock:
            config.set_mock_mode(True)
        level = "DEBUG" if debug else config.merged.server.log_level
    except ConfigError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    setup_logging(level)
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.pass_obj
def serve(config: Config) -> None:
    """Serve MCP requests on stdin/stdout until EOF."""
    server = StdioServer(build_dispatcher(config))
    try:
        server.serve()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


@cli.command()
def tools() -> None:
    """List the available p4 tools."""
    table = Table(title="p4-mcp tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("p4")
    table.add_column("Parameters")
    table.add_column("Description", style="dim")

    for spec in CommandCatalog.default().list_specs():
        table.add_row(spec.name, spec.subcommand, _describe_params(spec), spec.description)

    console.print(table)


@cli.command()
@click.argument("name")
@click.argument("arguments", required=False, default="{}")
@click.pass_obj
def call(config: Config, name: str, arguments: str) -> None:
    """
    Run a single tool call and print the result as JSON.

    ARGUMENTS is a JSON object, e.g. '{"files": ["a.txt"]}'.
    """
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON ({e.msg})", param_hint="ARGUMENTS")
    if not isinstance(parsed, dict):
        raise click.BadParameter("must be a JSON object", param_hint="ARGUMENTS")

    result = build_dispatcher(config).call(name, parsed)
    click.echo(result.model_dump_json(indent=2))
    if not result.success:
        sys.exit(1)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
