"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from relatable.exceptions import RelatableError
from relatable.schema.models import Schema

console = Console()


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        self.json_mode = json_mode

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str] | None = None,
    ) -> None:
        """Print rows as a Rich table or a JSON array.

        Args:
            title: Table title
            data: List of row dictionaries
            columns: Column names to display (default: keys of the first row)
        """
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
            return

        if columns is None:
            columns = list(data[0].keys()) if data else []
        table = Table(title=title, show_header=True, header_style="bold magenta")
        for col in columns:
            table.add_column(col)
        for row in data:
            table.add_row(*[_cell(row.get(col, "")) for col in columns])
        console.print(table)

    def print_schema(self, schema: Schema) -> None:
        """Print a schema with its field designations and relations."""
        if self.json_mode:
            print(json.dumps(schema.to_dict(), default=str, indent=2))
            return

        console.print(f"\n[bold]Schema:[/bold] {schema.name}")
        console.print(f"Primary: {schema.primary}")
        for label, value in (
            ("Created", schema.created),
            ("Updated", schema.updated),
            ("Active", schema.active),
        ):
            if value:
                console.print(f"{label}: {value}")
        for label, values in (
            ("UUID fields", schema.uuid_fields),
            ("JSON fields", schema.json_fields),
            ("Searchable", schema.searchable_fields),
        ):
            if values:
                console.print(f"{label}: {', '.join(values)}")

        for title, relations in (
            ("Relations", schema.relations),
            ("Reverse relations", schema.reverse_relations),
        ):
            if not relations:
                continue
            console.print(f"\n[bold]{title} ({len(relations)}):[/bold]")
            rel_table = Table(show_header=True, header_style="bold cyan")
            rel_table.add_column("Table")
            rel_table.add_column("Entity")
            rel_table.add_column("Cardinality")
            rel_table.add_column("Keys")
            rel_table.add_column("Self")
            for rel in relations:
                rel_table.add_row(
                    rel.table,
                    rel.name if rel.source == schema.name else rel.source,
                    rel.cardinality.value,
                    f"{rel.local_key} → {rel.foreign_key}",
                    "✓" if rel.self_referential else "",
                )
            console.print(rel_table)

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message with optional details."""
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message."""
        if self.json_mode:
            if isinstance(error, RelatableError):
                print(json.dumps(error.to_dict(), default=str, indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            if isinstance(error, RelatableError) and error.context:
                context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)

    def print_data(self, data: Any) -> None:
        """Print generic data (dict, list, etc.)."""
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            console.print_json(json.dumps(data, default=str))


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return "" if value is None else str(value)
