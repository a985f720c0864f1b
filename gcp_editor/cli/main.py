"""Main Typer CLI application for the GCP editor."""

import logging
from dataclasses import dataclass
from pathlib import Path

import typer

from gcp_editor.config import CONFIG_ENV_VAR, EditorConfig, get_default_config
from gcp_editor.store import DirectoryStore

app = typer.Typer(
    help="Import, edit and export Ground Control Point files",
    no_args_is_help=True,
)

points_app = typer.Typer(help="GCP point import, export and editing commands")
images_app = typer.Typer(help="Image tagging commands")

app.add_typer(points_app, name="points")
app.add_typer(images_app, name="images")


@dataclass
class CliState:
    """Settings resolved once per invocation and shared with subcommands."""

    config: EditorConfig
    store: DirectoryStore


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help="Path to a YAML configuration file",
    ),
    store_dir: Path | None = typer.Option(
        None, "--store", help="Session directory (overrides the configuration)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Load configuration and set up logging before any command runs."""
    if config is not None:
        try:
            editor_config = EditorConfig.from_yaml(config)
        except (FileNotFoundError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    else:
        editor_config = get_default_config()

    level = logging.DEBUG if verbose else getattr(logging, editor_config.log_level)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    ctx.obj = CliState(
        config=editor_config,
        store=DirectoryStore(store_dir if store_dir is not None else editor_config.store_dir),
    )


def _register_commands() -> None:
    """
    Import command modules to register commands with their respective apps.

    Commands use decorators like @points_app.command() which register
    themselves when the module is imported.
    """
    from gcp_editor.cli import images, points

    _ = images
    _ = points


_register_commands()


if __name__ == "__main__":
    app()
