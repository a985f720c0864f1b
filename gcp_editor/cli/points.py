"""GCP point CLI commands."""

from pathlib import Path

import typer

from gcp_editor.cli.main import CliState, points_app
from gcp_editor.config import EditorConfig
from gcp_editor.crs import describe_crs
from gcp_editor.errors import EmptyInputError, SerializationError
from gcp_editor.exporter import export_filename, export_points
from gcp_editor.formats import GcpFormat
from gcp_editor.importer import ImportResult, ImportStatus, import_points, read_gcp_file
from gcp_editor.points import GroupedIndex
from gcp_editor.store import Session, load_session, save_session


def _resolve_format(value: str | None, default: GcpFormat, path: Path | None = None) -> GcpFormat:
    """Pick the explicit format, else guess from the file name, else the default."""
    if value is not None:
        try:
            return GcpFormat.parse(value)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    if path is not None:
        try:
            return GcpFormat.from_filename(path)
        except ValueError:
            pass
    return default


def _read_and_import(path: Path, fmt: GcpFormat) -> ImportResult:
    try:
        content = read_gcp_file(path)
    except EmptyInputError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    result = import_points(content, fmt)
    if result.status is ImportStatus.NO_VALID_ROWS:
        typer.echo(
            f"Warning: no valid GCP rows in {path} "
            f"({result.skipped} malformed rows, format {fmt.value})",
            err=True,
        )
        raise typer.Exit(1)
    return result


def _load(state: CliState) -> Session:
    try:
        return load_session(state.store)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@points_app.command("import")
def import_command(
    ctx: typer.Context,
    gcp_file: Path = typer.Argument(..., help="CSV or text GCP file to import"),
    fmt: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Input format (csv-7field, text-whitespace-7field, csv-3field, text-3field)",
    ),
) -> None:
    """
    Import a GCP file and replace the current session with its points.

    Without --format, .csv files are read as csv-7field and .txt files as
    text-whitespace-7field; anything else falls back to the configured format.

    Example:
        gcpedit points import gcps.csv
        gcpedit points import gcp_list.txt --format text-whitespace-7field
    """
    state: CliState = ctx.obj
    config: EditorConfig = state.config
    gcp_format = _resolve_format(fmt, config.import_format, gcp_file)

    result = _read_and_import(gcp_file, gcp_format)
    save_session(state.store, result.points, result.groups, result.crs)

    typer.echo(
        f"Imported {len(result.points)} points in {len(result.groups)} groups "
        f"from {gcp_file.name}"
    )
    if result.skipped:
        typer.echo(f"Skipped {result.skipped} malformed rows")
        for row in result.malformed_rows:
            typer.echo(f"  line {row.line_number}: {row.reason}")
    if result.crs:
        try:
            info = describe_crs(result.crs)
            typer.echo(f"CRS: {info.name} ({result.crs})")
        except ValueError:
            typer.echo(f"CRS: {result.crs} (not recognized by PROJ)")


@points_app.command("export")
def export_command(
    ctx: typer.Context,
    fmt: str | None = typer.Option(None, "--format", "-f", help="Output format"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (default: gcp_points_<timestamp>.txt)"
    ),
) -> None:
    """
    Export the session's points to a GCP text file.

    Example:
        gcpedit points export
        gcpedit points export --format text-3field --output gcps.txt
    """
    state: CliState = ctx.obj
    gcp_format = _resolve_format(fmt, state.config.export_format)
    session = _load(state)

    try:
        content = export_points(session.points, gcp_format)
    except SerializationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output is None:
        output = Path(export_filename(prefix=state.config.filename_prefix))
    output.write_bytes(content)
    typer.echo(f"Exported {len(session.points)} points to {output}")


@points_app.command("convert")
def convert_command(
    source: Path = typer.Argument(..., help="GCP file to read"),
    target: Path = typer.Argument(..., help="GCP file to write"),
    from_fmt: str | None = typer.Option(None, "--from", help="Input format"),
    to_fmt: str = typer.Option(
        GcpFormat.TEXT_WHITESPACE_7FIELD.value, "--to", help="Output format"
    ),
) -> None:
    """
    Convert a GCP file between formats without touching the session.

    Example:
        gcpedit points convert gcps.csv gcp_list.txt --to text-whitespace-7field
    """
    in_format = _resolve_format(from_fmt, GcpFormat.CSV_7FIELD, source)
    out_format = _resolve_format(to_fmt, GcpFormat.TEXT_WHITESPACE_7FIELD)

    result = _read_and_import(source, in_format)
    content = export_points(result.points, out_format)
    if result.crs and out_format is GcpFormat.TEXT_WHITESPACE_7FIELD:
        content = result.crs.encode("utf-8") + b"\n" + content
    target.write_bytes(content)
    typer.echo(
        f"Converted {len(result.points)} points from {in_format.value} "
        f"to {out_format.value}: {target}"
    )


@points_app.command("groups")
def groups_command(ctx: typer.Context) -> None:
    """
    List GCP names in the session with their point count and images.

    Example:
        gcpedit points groups
    """
    session = _load(ctx.obj)
    if not session.groups:
        typer.echo("No GCP points imported yet")
        return
    if session.crs:
        typer.echo(f"CRS: {session.crs}")
    for name in session.groups:
        images = session.groups.image_names(name)
        label = name or "(unnamed)"
        typer.echo(f"{label}: {len(session.groups[name])} points")
        for image in images:
            typer.echo(f"  {image}")


def _save_edited(state: CliState, session: Session) -> None:
    groups = GroupedIndex.build(session.points)
    save_session(state.store, session.points, groups, session.crs)


@points_app.command("move")
def move_command(
    ctx: typer.Context,
    point_id: str = typer.Argument(..., help="Id of the point to move"),
    lat: float = typer.Option(..., help="New latitude (y)"),
    lng: float = typer.Option(..., help="New longitude (x)"),
) -> None:
    """
    Move a point to a new position.

    Example:
        gcpedit points move 3f2a... --lat 39.64 --lng -0.23
    """
    state: CliState = ctx.obj
    session = _load(state)
    try:
        point = session.find(point_id)
        point.move_to(lat, lng)
    except (KeyError, ValueError) as e:
        typer.echo(f"Error: {e.args[0] if e.args else e}", err=True)
        raise typer.Exit(1)
    _save_edited(state, session)
    typer.echo(f"Moved {point.name or point.id} to ({point.lat:.6f}, {point.lng:.6f})")


@points_app.command("rename")
def rename_command(
    ctx: typer.Context,
    point_id: str = typer.Argument(..., help="Id of the point to rename"),
    new_name: str = typer.Argument(..., help="New GCP name"),
) -> None:
    """
    Rename a point; groups are rebuilt from the renamed list.

    Example:
        gcpedit points rename 3f2a... PointB
    """
    state: CliState = ctx.obj
    session = _load(state)
    try:
        point = session.find(point_id)
    except KeyError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(1)
    old_name = point.name
    point.rename(new_name)
    _save_edited(state, session)
    typer.echo(f"Renamed '{old_name}' to '{point.name}'")
