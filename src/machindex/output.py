"""Output formatting for the machindex CLI."""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import Record

RECORD_COLUMNS = ("id", "name", "provider", "state", "vagrantfile_path", "updated_at")


def record_to_dict(record: Record) -> dict[str, Any]:
    """Flatten a record, id included, for display."""
    return {"id": record.id, **record.to_struct()}


@dataclass
class OutputContext:
    """Context for output formatting."""

    console: Console
    json_mode: bool = False

    def print(self, message: str) -> None:
        """Print rich markup unless in json mode."""
        if not self.json_mode:
            self.console.print(message)

    def print_json(self, data: Any) -> None:
        """Print JSON data."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print error in appropriate format."""
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {escape(message)}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print success message in appropriate format."""
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{escape(message)}[/green]")

    def records(self, records: list[Record]) -> None:
        """Print machines as a table, or as a JSON list in json mode."""
        rows = [record_to_dict(r) for r in records]
        if self.json_mode:
            self.print_json(rows)
            return

        if not rows:
            self.console.print("No machines in the index")
            return

        table = Table(show_header=True, header_style="bold")
        for column in RECORD_COLUMNS:
            table.add_column(column)
        for row in rows:
            table.add_row(*(escape(str(row.get(c) or "")) for c in RECORD_COLUMNS))
        self.console.print(table)


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a default OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
