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
"""Shared Rich console for CLI output."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

RETHINKBOX_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "dim": "dim",
})

console = Console(theme=RETHINKBOX_THEME)


def print_settings_table(settings: dict[str, Any]) -> None:
    """Print resolved adapter settings as a two-column table."""
    table = Table(title="RethinkDB cache settings", border_style="dim")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for name, value in settings.items():
        table.add_row(name, "[dim]-[/dim]" if value is None else str(value))
    console.print(table)
