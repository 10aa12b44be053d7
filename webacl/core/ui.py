"""Rich-based terminal output for the command line."""

from __future__ import annotations

from typing import List

from rich.console import Console
from rich.table import Table
from rich.text import Text


class RichUI:
    """Wrap the Rich console to keep CLI output consistent."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def info(self, message: str) -> None:
        self.console.print(Text(message, style="green"))

    def warn(self, message: str) -> None:
        self.console.print(Text(message, style="yellow"))

    def error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))

    def table(self, title: str, columns: List[str], rows: List[List[str]]) -> None:
        table = Table(title=title)
        for column in columns:
            table.add_column(column, overflow="fold")
        for row in rows:
            table.add_row(*row)
        self.console.print(table)


__all__ = ["RichUI"]
