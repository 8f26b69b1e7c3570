"""relatable CLI - Main entry point."""

import logging
from typing import Annotated

import typer

import relatable
from relatable.cli.context import CLIContext, get_database_url, get_schema_dir

app = typer.Typer(
    name="relatable",
    help="relatable CLI - schema-driven relational access",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="RELATABLE_URL",
            help="Database URL (PostgreSQL or SQLite)",
        ),
    ] = None,
    schemas: Annotated[
        str | None,
        typer.Option(
            "--schemas",
            "-s",
            envvar="RELATABLE_SCHEMAS",
            help="Directory of schema definition JSON files",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Log generated SQL statements",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    logging.basicConfig(level=logging.DEBUG if echo else logging.WARNING)

    ctx.obj = CLIContext(
        database_url=get_database_url(database),
        schema_dir=get_schema_dir(schemas),
        echo=echo,
        json_output=json_output,
    )


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"relatable v{relatable.__version__}")


# Register command groups
from relatable.cli.commands import data, schema  # noqa: E402

app.add_typer(schema.app, name="schema")
app.add_typer(data.app, name="data")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
