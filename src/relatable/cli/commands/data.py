"""Record commands: create, get, search, update, remove, exists, link, unlink."""

import json
from typing import Annotated

import typer

from relatable.cli.context import CLIContext
from relatable.cli.output import OutputFormatter
from relatable.cli.parsing import (
    parse_order,
    parse_pairs,
    parse_spans,
    parse_value,
    read_json_file,
)

app = typer.Typer(help="Manage records (CRUD and relation links)")


@app.command("create")
def data_create(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    data_json: Annotated[
        str | None,
        typer.Argument(help="Record data as JSON string"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", "-f", help="Load data from a JSON file"),
    ] = None,
) -> None:
    """Create a record.

    Examples:

        relatable data create post '{"post_title": "Hello"}'

        relatable data create post --from-file post.json
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        if from_file:
            data = read_json_file(from_file)
        elif data_json:
            data = json.loads(data_json)
        else:
            raise typer.BadParameter("Either provide data as JSON string or use --from-file")

        service = cli_ctx.get_service(schema_name)
        record = service.create(data)
        formatter.print_success("Created record", {"record": record})

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("get")
def data_get(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    value: Annotated[str, typer.Argument(help="Value to look up")],
    key: Annotated[
        str | None,
        typer.Option("--key", "-k", help="Column to match (default: primary key)"),
    ] = None,
) -> None:
    """Get a record with its relations.

    Examples:

        relatable data get post 5

        relatable data get post my-slug --key post_slug
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        service = cli_ctx.get_service(schema_name)
        column = key or service.schema.primary  # type: ignore[union-attr]
        record = service.get(column, parse_value(value))

        if record is None:
            formatter.print_error(Exception(f"Record not found: {column}={value}"))
            raise typer.Exit(code=1)

        formatter.print_data(record)

    except typer.Exit:
        raise
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("search")
def data_search(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    filters: Annotated[
        list[str] | None,
        typer.Option("--filter", "-f", help="Equality filter column=value (repeatable)"),
    ] = None,
    spans: Annotated[
        list[str] | None,
        typer.Option("--span", help="Range filter column=min:max (repeatable)"),
    ] = None,
    keywords: Annotated[
        list[str] | None,
        typer.Option("--q", "-q", help="Keyword over searchable fields (repeatable)"),
    ] = None,
    orders: Annotated[
        list[str] | None,
        typer.Option("--order", "-o", help="Sort column[=ASC|DESC] (repeatable)"),
    ] = None,
    range_: Annotated[
        int | None,
        typer.Option("--range", "-r", help="Page size (default: 50)"),
    ] = None,
    start: Annotated[
        int | None,
        typer.Option("--start", help="Row offset (default: 0)"),
    ] = None,
) -> None:
    """Search records.

    Examples:

        relatable data search post --q demo --range 10

        relatable data search post -f tag_id=9 --span post_created=2024-01-01: -o post_created=DESC
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        options: dict = {
            "filter": parse_pairs(filters),
            "span": parse_spans(spans),
            "order": parse_order(orders),
            "q": keywords or [],
        }
        if range_ is not None:
            options["range"] = range_
        if start is not None:
            options["start"] = start

        service = cli_ctx.get_service(schema_name)
        result = service.search(options)

        if cli_ctx.json_output:
            formatter.print_data(result.model_dump())
        else:
            formatter.print_table(
                f"{schema_name} ({len(result.rows)} of {result.total})", result.rows
            )

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("update")
def data_update(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    data_json: Annotated[str, typer.Argument(help="Update data as JSON, including the primary key")],
) -> None:
    """Update a record.

    Examples:

        relatable data update post '{"post_id": 5, "post_title": "Renamed"}'
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        service = cli_ctx.get_service(schema_name)
        record = service.update(json.loads(data_json))
        formatter.print_success("Record updated", {"record": record})

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("remove")
def data_remove(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    record_id: Annotated[str, typer.Argument(help="Primary key value")],
) -> None:
    """Remove a record by primary key.

    Dependent rows are handled by the database's ON DELETE rules.

    Examples:

        relatable data remove post 5
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        service = cli_ctx.get_service(schema_name)
        service.remove(parse_value(record_id))
        formatter.print_success(f"Record removed: {record_id}")

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("exists")
def data_exists(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    key: Annotated[str, typer.Argument(help="Column to match")],
    value: Annotated[str, typer.Argument(help="Value to look for")],
) -> None:
    """Check whether a record with key=value exists.

    Examples:

        relatable data exists post post_slug my-slug
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        service = cli_ctx.get_service(schema_name)
        found = service.exists(key, parse_value(value))
        formatter.print_data({"exists": found})

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("link")
def data_link(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    relation: Annotated[str, typer.Argument(help="Relation name (e.g., 'tag' for post_tag)")],
    primary1: Annotated[str, typer.Argument(help="This schema's record key")],
    primary2: Annotated[str, typer.Argument(help="Related record key")],
) -> None:
    """Link two records through a junction table.

    Examples:

        relatable data link post tag 5 9
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        service = cli_ctx.get_service(schema_name)
        row = service.link(relation, parse_value(primary1), parse_value(primary2))
        formatter.print_success(f"Linked {schema_name} to {relation}", {"row": row})

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("unlink")
def data_unlink(
    ctx: typer.Context,
    schema_name: Annotated[str, typer.Argument(help="Schema name")],
    relation: Annotated[str, typer.Argument(help="Relation name (e.g., 'tag' for post_tag)")],
    primary1: Annotated[str, typer.Argument(help="This schema's record key")],
    primary2: Annotated[str, typer.Argument(help="Related record key")],
) -> None:
    """Remove a link between two records.

    Examples:

        relatable data unlink post tag 5 9
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        service = cli_ctx.get_service(schema_name)
        row = service.unlink(relation, parse_value(primary1), parse_value(primary2))
        formatter.print_success(f"Unlinked {schema_name} from {relation}", {"row": row})

    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
