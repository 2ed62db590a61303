"""
Queue polling CLI helpers for mqdepth.

Turns command-line options into settings, runs polling cycles, and renders
their results as a table, JSON, or InfluxDB line protocol.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..core.accumulator import MemoryAccumulator
from ..core.address import redact_address, resolve_address
from ..core.config import PollerSettings, load_settings
from ..core.errors import ConfigurationError, MQDepthError
from ..core.model import PollSummary, ServerGroup
from ..core.poller import QueuePoller
from ..core.session import Connector, open_stream
from ..datastructures.type_aliases import DurationSeconds

OUTPUT_FORMATS = ("table", "json", "line")


class PollCLI:
    """Command-line front end for the queue poller."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def build_settings(
        self,
        config_path: str | None,
        server: str | None,
        db: int,
        keys: tuple[str, ...],
        timeout: DurationSeconds | None,
    ) -> PollerSettings:
        """Combine a config file with an optional ad-hoc server group.

        Raises:
            ConfigurationError: If neither source yields a group, or the file
                is invalid.
        """
        settings = load_settings(config_path) if config_path else PollerSettings()

        groups = list(settings.groups)
        if server:
            groups.append(ServerGroup(server=server, db=db, keys=keys))
        elif keys:
            raise ConfigurationError("--key requires --server")
        if not groups:
            raise ConfigurationError("Nothing to poll: pass --config or --server")

        return PollerSettings(
            groups=tuple(groups),
            timeout=timeout if timeout is not None else settings.timeout,
            log_level=settings.log_level,
        )

    async def run_cycles(
        self,
        settings: PollerSettings,
        *,
        output: str,
        interval: DurationSeconds,
        count: int,
        connector: Connector | None = None,
    ) -> PollSummary:
        """Run ``count`` cycles (0 = until interrupted), rendering each one."""
        poller = QueuePoller.from_settings(
            settings, connector=connector or open_stream
        )
        cycle = 0
        while True:
            accumulator = MemoryAccumulator()
            summary = await poller.poll_all(accumulator)
            self.render(accumulator, summary, output)
            cycle += 1
            if count and cycle >= count:
                return summary
            await asyncio.sleep(interval)

    def render(
        self, accumulator: MemoryAccumulator, summary: PollSummary, output: str
    ) -> None:
        if output == "json":
            document = {
                "measurements": [m.to_dict() for m in accumulator.measurements],
                "failures": [f.to_dict() for f in accumulator.failures],
                "summary": asdict(summary),
            }
            click.echo(json.dumps(document))
        elif output == "line":
            for measurement in accumulator.measurements:
                line = measurement.to_line_protocol()
                if line is not None:
                    click.echo(line)
            for failure in accumulator.failures:
                click.echo(
                    f"E! {redact_address(failure.group.server)} db={failure.group.db}: "
                    f"{failure.error_type}: {failure.error}",
                    err=True,
                )
        else:
            self.display_measurements(accumulator)
            self.display_failures(accumulator)
            self.console.print(
                f"[bold]{summary.measurements}[/bold] measurement(s), "
                f"[bold]{summary.failures}[/bold] failure(s) across "
                f"{summary.groups} group(s) in {summary.elapsed_seconds:.3f}s"
            )

    def display_measurements(self, accumulator: MemoryAccumulator) -> None:
        table = Table(title="Queue Lengths")
        table.add_column("Address", style="cyan")
        table.add_column("DB", justify="right")
        table.add_column("Key", style="green")
        table.add_column("Real Key")
        table.add_column("Length", justify="right", style="bold")

        for measurement in accumulator.measurements:
            tags = measurement.tags
            length = measurement.length
            table.add_row(
                tags.redis_addr,
                tags.db,
                tags.key,
                tags.real_key,
                str(length) if length is not None else "-",
            )
        self.console.print(table)

    def display_failures(self, accumulator: MemoryAccumulator) -> None:
        failures = accumulator.failures
        if not failures:
            return
        table = Table(title="Poll Failures", style="red")
        table.add_column("Server", style="cyan")
        table.add_column("DB", justify="right")
        table.add_column("Error", style="red")
        table.add_column("Message")

        for failure in failures:
            table.add_row(
                redact_address(failure.group.server),
                str(failure.group.db),
                failure.error_type,
                str(failure.error),
            )
        self.console.print(table)

    def validate_config(self, config_path: str | Path) -> bool:
        """Load a config file and resolve every address in it."""
        self.console.print(
            f"[bold blue]Validating configuration: {config_path}[/bold blue]"
        )
        try:
            settings = load_settings(config_path)
        except ConfigurationError as e:
            self.console.print(f"[red]❌ {e}[/red]")
            return False

        table = Table(title="Configuration Validation Results")
        table.add_column("Status", width=6)
        table.add_column("Server")
        table.add_column("DB", justify="right")
        table.add_column("Check")

        all_passed = True
        if not settings.groups:
            all_passed = False
            table.add_row("❌", "-", "-", "No server groups configured")
        for group in settings.groups:
            server = redact_address(group.server)
            try:
                address = resolve_address(group.server)
            except MQDepthError as e:
                all_passed = False
                table.add_row("❌", server, str(group.db), str(e))
                continue
            if not group.keys:
                all_passed = False
                table.add_row("❌", server, str(group.db), "No queue keys configured")
                continue
            table.add_row(
                "✅",
                server,
                str(group.db),
                f"{len(group.keys)} key(s) on {address.redis_addr}",
            )

        self.console.print(table)
        if all_passed:
            self.console.print("[green]✅ Configuration validation passed![/green]")
        else:
            self.console.print("[red]❌ Configuration validation failed![/red]")
        return all_passed
