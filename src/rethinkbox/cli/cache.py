# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Operator commands against the cache table: bootstrap, sweep, info."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import click

from rethinkbox.cache.adapters.rethinkdb import RethinkDBCacheAdapter
from rethinkbox.cli.console import console, print_settings_table
from rethinkbox.config.properties.rethinkdb import RethinkDBCacheProperties
from rethinkbox.core.config import Config
from rethinkbox.kernel.exceptions import RethinkBoxException
from rethinkbox.logging.structlog_adapter import configure_logging


def connection_options(func: Any) -> Any:
    """Attach the shared connection options to a command."""
    options = [
        click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
                     help="YAML or TOML configuration file."),
        click.option("--url", help="Connection URL, rethinkdb://[user:auth@]host[:port][/db]."),
        click.option("--host", help="Server host."),
        click.option("--port", type=int, help="Server driver port."),
        click.option("--db", help="Database name."),
        click.option("--table", help="Cache table name."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_settings(config_path: Path | None, **overrides: Any) -> RethinkDBCacheProperties:
    """Merge packaged defaults, the config file and command-line overrides."""
    config = Config.from_file(config_path)
    configure_logging(config)
    section = config.get_section("rethinkbox.cache.rethinkdb", keys=RethinkDBCacheProperties.model_fields)
    given = {k: v for k, v in overrides.items() if v is not None}
    try:
        return RethinkDBCacheProperties.from_options(**{**section, **given})
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _run(coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except RethinkBoxException as exc:
        console.print(f"[error]✗[/error] {exc}")
        raise SystemExit(1) from None


@click.command("bootstrap")
@connection_options
def bootstrap_command(config_path: Path | None, **overrides: Any) -> None:
    """Create the cache database, table and expiry index if missing."""
    settings = resolve_settings(config_path, **overrides)

    async def _bootstrap() -> None:
        adapter = RethinkDBCacheAdapter(settings)
        await adapter.start()
        await adapter.stop()

    _run(_bootstrap())
    console.print(f"[success]✓[/success] Schema ready: {settings.db}.{settings.table}")


@click.command("sweep")
@connection_options
def sweep_command(config_path: Path | None, **overrides: Any) -> None:
    """Delete expired cache rows once and report how many were removed."""
    settings = resolve_settings(config_path, **overrides)

    async def _sweep() -> int:
        adapter = RethinkDBCacheAdapter(settings)
        await adapter.start()
        try:
            return await adapter.sweep_once()
        finally:
            await adapter.stop()

    deleted = _run(_sweep())
    console.print(f"[success]✓[/success] Removed {deleted} expired rows from {settings.db}.{settings.table}")


@click.command("info")
@connection_options
def info_command(config_path: Path | None, **overrides: Any) -> None:
    """Show the resolved adapter settings."""
    settings = resolve_settings(config_path, **overrides)
    print_settings_table(settings.describe())
