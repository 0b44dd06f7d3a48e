"""logsync maintenance CLI.

Runs a standalone primary runtime against the configured logs directory,
for operators who need to inspect, prune or bundle logs outside the app.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import click

from logsync import __version__

logger = logging.getLogger(__name__)


def _runtime(ctx: click.Context):
    from logsync.config.loader import load_config
    from logsync.runtime import LoggingRuntime

    config = load_config(ctx.obj["config_path"])
    return LoggingRuntime(config)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(), default=None, help="Config file path")
@click.option("--log-level", default="WARNING", help="Log level")
@click.option("--json-logs", is_flag=True, help="JSON log output")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    log_level: str,
    json_logs: bool,
) -> None:
    """logsync - session-partitioned application logs."""
    from logsync.config.loader import default_config_path
    from logsync.logging_config import setup_logging

    setup_logging(level=log_level, json_output=json_logs)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else default_config_path()


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the logs directory, settings, partitions and archives."""
    from logsync.retention.partitions import iter_partitions

    with _runtime(ctx) as runtime:
        settings = runtime.store.get()
        click.echo(f"logsync v{__version__}")
        click.echo(f"Logs: {runtime.logs_dir}")
        click.echo(f"File logging: {'enabled' if settings.file_logging else 'disabled'}")
        click.echo(f"Expiry: {settings.logs_expiry} day(s)")
        click.echo(f"Session: {settings.session.folder if settings.session else '-'}")

        now = runtime.clock()
        partitions = list(iter_partitions(runtime.logs_dir))
        click.echo(f"\nPartitions ({len(partitions)}):")
        for p in partitions:
            expired = " (expired)" if p.is_expired(now, settings.logs_expiry) else ""
            created = datetime.fromtimestamp(p.created_at).strftime("%Y-%m-%d %H:%M")
            click.echo(f"  {p.name}: {created}{expired}")

        archives = sorted(runtime.logs_dir.glob("logs-*.zip")) if runtime.logs_dir.is_dir() else []
        if archives:
            click.echo(f"\nArchives ({len(archives)}):")
            for a in archives:
                click.echo(f"  {a.name}")


@main.command()
@click.pass_context
def prune(ctx: click.Context) -> None:
    """Delete partitions older than the retention window."""
    with _runtime(ctx) as runtime:
        click.echo(runtime.prune().result())


@main.command()
@click.option("--password", default=None, help="Encrypt the bundle with AES-256")
@click.pass_context
def archive(ctx: click.Context, password: str | None) -> None:
    """Bundle recent partitions into a zip archive."""
    with _runtime(ctx) as runtime:
        if password:
            runtime.archiver.password = password
        try:
            path = runtime.archive().result()
        except OSError as e:
            raise click.ClickException(f"Archive failed: {e}") from e
        click.echo(str(path))


@main.command()
@click.argument("path", type=click.Path())
@click.pass_context
def clear(ctx: click.Context, path: str) -> None:
    """Delete an archive or partition."""
    with _runtime(ctx) as runtime:
        if runtime.clear(path).result():
            click.echo(f"Removed {path}")
        else:
            raise click.ClickException(f"Could not remove {path}")


@main.command("open")
@click.pass_context
def open_dir(ctx: click.Context) -> None:
    """Open the logs directory in the file browser."""
    with _runtime(ctx) as runtime:
        runtime.open_logs_directory()
