"""Schema inspection commands."""

from typing import Annotated

import typer

from relatable.cli.context import CLIContext
from relatable.cli.output import OutputFormatter

app = typer.Typer(help="Inspect schema definitions")


@app.command("list")
def schema_list(ctx: typer.Context) -> None:
    """List all schemas in the schema directory.

    Examples:

        relatable schema list
        relatable -s ./schemas --json schema list
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        registry = cli_ctx.get_registry()
        names = registry.list_schemas()

        if cli_ctx.json_output:
            formatter.print_data(names)
        else:
            rows = []
            for name in names:
                schema = registry.get(name)
                rows.append(
                    {
                        "name": name,
                        "primary": schema.primary,
                        "relations": len(schema.relations),
                        "reverse": len(schema.reverse_relations),
                    }
                )
            formatter.print_table("Schemas", rows, ["name", "primary", "relations", "reverse"])
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


@app.command("describe")
def schema_describe(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Schema name")],
) -> None:
    """Show a schema's fields and relations.

    Examples:

        relatable schema describe post
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        schema = cli_ctx.get_registry().get(name)
        formatter.print_schema(schema)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
