#!/usr/bin/env python3
"""
Main CLI entry point for mqdepth.

Polls redis list lengths across the configured server groups and prints
them as a table, JSON, or InfluxDB line protocol.
"""

import asyncio
import sys

import click
from rich.console import Console

from ..core.config import SAMPLE_CONFIG_JSON, SAMPLE_CONFIG_TOML
from ..core.defaults import DESCRIPTION
from ..core.errors import ConfigurationError
from ..core.logging import LOG_SCOPES, configure_logging, effective_level
from .poll_cli import OUTPUT_FORMATS, PollCLI

console = Console()

EXIT_POLL_FAILURES = 1
EXIT_CONFIGURATION = 2


def setup_logging(
    verbose: bool = False,
    debug_scopes: tuple[str, ...] = (),
    configured_level: str | None = None,
) -> None:
    """Setup logging configuration."""
    configure_logging(
        effective_level(configured_level, verbose=verbose),
        debug_scopes=debug_scopes,
    )


@click.group(help=f"mqdepth: {DESCRIPTION}.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--debug-scope",
    multiple=True,
    help=(
        "Show DEBUG logs for a scope "
        f"({', '.join(LOG_SCOPES)}) or module, e.g. core.session (repeatable)"
    ),
)
@click.pass_context
def cli(ctx, verbose: bool, debug_scope: tuple[str, ...]):
    setup_logging(verbose, debug_scope)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug_scopes"] = debug_scope


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path (.json or .toml)",
)
@click.option("--server", "-s", help="Ad-hoc server address to poll")
@click.option(
    "--db",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Ad-hoc database index",
)
@click.option(
    "--key", "-k", "keys", multiple=True, help="Ad-hoc queue key (repeatable)"
)
@click.option("--timeout", type=float, help="Session timeout in seconds")
@click.option(
    "--output",
    "-o",
    type=click.Choice(OUTPUT_FORMATS),
    default="table",
    help="Output format",
)
@click.option(
    "--interval",
    type=float,
    default=10.0,
    show_default=True,
    help="Seconds between cycles",
)
@click.option(
    "--count",
    type=int,
    default=1,
    show_default=True,
    help="Number of cycles to run (0 runs until interrupted)",
)
@click.pass_context
def poll(
    ctx,
    config: str | None,
    server: str | None,
    db: int,
    keys: tuple[str, ...],
    timeout: float | None,
    output: str,
    interval: float,
    count: int,
):
    """Poll queue lengths once or repeatedly."""
    poll_cli = PollCLI(console)
    try:
        settings = poll_cli.build_settings(config, server, db, keys, timeout)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(EXIT_CONFIGURATION)

    if settings.log_level and not ctx.obj["verbose"]:
        setup_logging(False, ctx.obj["debug_scopes"], settings.log_level)

    try:
        summary = asyncio.run(
            poll_cli.run_cycles(
                settings, output=output, interval=interval, count=count
            )
        )
    except KeyboardInterrupt:
        return

    if not summary.succeeded:
        sys.exit(EXIT_POLL_FAILURES)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Configuration file to validate",
)
def validate(config: str):
    """Validate a configuration file."""
    if not PollCLI(console).validate_config(config):
        sys.exit(EXIT_POLL_FAILURES)


@cli.command("sample-config")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["toml", "json"]),
    default="toml",
    help="Configuration format",
)
def sample_config(fmt: str):
    """Print a sample configuration file."""
    click.echo(SAMPLE_CONFIG_TOML if fmt == "toml" else SAMPLE_CONFIG_JSON)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
