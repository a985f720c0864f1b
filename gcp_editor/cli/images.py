"""Image tagging CLI commands."""

import logging

import typer

from gcp_editor.cli.main import CliState, images_app
from gcp_editor.matcher import (
    DefaultCoordinatePolicy,
    match_images,
    merge_group_points,
    save_selection,
)
from gcp_editor.store import load_session, save_session

logger = logging.getLogger(__name__)


@images_app.command("tag")
def tag_command(
    ctx: typer.Context,
    gcp_name: str = typer.Argument(..., help="GCP name to tag images with"),
    images: list[str] = typer.Argument(..., help="Uploaded image file names"),
    toggle: list[str] = typer.Option(
        [], "--toggle", "-t", help="Image to flip in or out (repeatable)"
    ),
    policy: str | None = typer.Option(
        None,
        "--policy",
        help="Coordinates for newly tagged images: inherit (from the first record) or manual",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the selection without saving"),
) -> None:
    """
    Tag uploaded images with a GCP and save the selection.

    Images already recorded for the GCP start selected; others start
    unselected until toggled.

    Example:
        gcpedit images tag PointA img1.jpg img2.jpg img3.jpg --toggle img3.jpg
        gcpedit images tag PointA img1.jpg --toggle img1.jpg --dry-run
    """
    state: CliState = ctx.obj
    try:
        session = load_session(state.store)
        coordinate_policy = (
            DefaultCoordinatePolicy.parse(policy)
            if policy is not None
            else state.config.default_policy
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if gcp_name.strip() not in session.groups:
        logger.warning(f"GCP '{gcp_name}' has no records yet; new records get no coordinates")

    selection = match_images(images, session.groups, gcp_name)
    for name in toggle:
        try:
            selection = selection.toggle(name)
        except KeyError as e:
            typer.echo(f"Error: {e.args[0]}", err=True)
            raise typer.Exit(1)

    for tag in selection.tags:
        marker = "x" if tag.selected else " "
        typer.echo(f"[{marker}] {tag.name}")

    if dry_run:
        return

    groups = save_selection(session.groups, selection, coordinate_policy)
    points = merge_group_points(session.points, groups, selection.gcp_name)
    save_session(state.store, points, groups, session.crs)
    typer.echo(f"Saved {len(selection.selected_names)} images for GCP '{selection.gcp_name}'")
