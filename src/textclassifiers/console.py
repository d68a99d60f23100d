# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table


def configure_logging(level: int | str = logging.INFO, *, console: Console | None = None) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@dataclass
class MLConsole:
    """Human readable run summary. Informational only, not a machine contract."""

    enabled: bool = True
    console: Console | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.console is None:
            self.console = Console(color_system="auto", soft_wrap=True, quiet=not self.enabled)

    def banner(self, title: str) -> None:
        self.console.print(Panel.fit(title, border_style="cyan"))

    def info(self, text: str) -> None:
        self.console.print(f"[bold cyan]INFO[/bold cyan] {text}")

    def error(self, text: str) -> None:
        self.console.print(f"[bold red]ERROR[/bold red] {text}")

    def success(self, text: str) -> None:
        self.console.print(f"[bold green]OK[/bold green] {text}")

    def metrics_table(self, metrics: Mapping[str, Any], *, title: str) -> None:
        """Print metrics in insertion order; values may be pre-formatted strings."""
        table = Table(title=title, show_lines=True)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        for key, value in metrics.items():
            table.add_row(key, value if isinstance(value, str) else f"{float(value):.4f}")
        self.console.print(table)

    def predictions_table(self, rows: Sequence[Mapping[str, Any]], *, title: str) -> None:
        table = Table(title=title, show_lines=True)
        if not rows:
            self.console.print(table)
            return
        for key in rows[0]:
            table.add_column(str(key))
        for row in rows:
            table.add_row(*(_cell(value) for value in row.values()))
        self.console.print(table)


def _cell(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.4f}"
    return str(value)
