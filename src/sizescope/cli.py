"""CLI interface for sizescope."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from sizescope import __version__
from sizescope.cancel import CancelToken
from sizescope.config import AppConfig, load_config, load_settings
from sizescope.display import confirm_action, console, show_delete_result, show_items
from sizescope.logger import setup_logging
from sizescope.scanner import FolderScanner

app = typer.Typer(
    name="sizescope",
    help="Rank folders by size, with a signature-validated size cache",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"sizescope version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Properties file (default: ./application.properties)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
) -> None:
    """sizescope - find what is using your disk."""
    app_config = load_config(config)
    level = "DEBUG" if verbose else app_config.log_level
    setup_logging(level=level, file=app_config.log_file)
    ctx.obj = app_config


def _run_scan(app_config: AppConfig, message: str, scan):
    cancel = CancelToken()
    with FolderScanner(app_config) as scanner:
        try:
            with console.status(message):
                return scan(scanner, cancel)
        except KeyboardInterrupt:
            cancel.cancel()
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(130)
        except OSError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(1)


@app.command(name="list")
def list_contents(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Folder to list"),
    folders_only: bool = typer.Option(
        False, "--folders-only", "-f", help="Only list subfolders (skips symlinks)"
    ),
) -> None:
    """List a folder's contents ranked by size."""
    if folders_only:
        items = _run_scan(
            ctx.obj,
            f"Sizing folders in {directory}...",
            lambda scanner, cancel: scanner.list_folders_and_sizes(directory, cancel),
        )
    else:
        items = _run_scan(
            ctx.obj,
            f"Sizing {directory}...",
            lambda scanner, cancel: scanner.list_folder_contents(directory, cancel),
        )
    show_items(items, title=str(directory))


@app.command()
def top(
    ctx: typer.Context,
    root: Path = typer.Argument(..., help="Folder to search below"),
    k: int = typer.Option(5, "-k", "--count", min=1, help="How many folders to return"),
) -> None:
    """Find the K largest non-nested folders under ROOT."""
    items = _run_scan(
        ctx.obj,
        f"Walking {root}...",
        lambda scanner, cancel: scanner.find_top_k(root, k, cancel),
    )
    show_items(items, title=f"Top {k} folders under {root}")


@app.command()
def delete(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="File or folder to delete"),
    permanent: bool = typer.Option(
        False, "--permanent", help="Delete permanently if the trash is unavailable"
    ),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    settings_file: Optional[Path] = typer.Option(
        None, "--settings", help="Delete settings JSON (default: ./settings.json)"
    ),
) -> None:
    """Move a file or folder to the trash (or delete it permanently)."""
    if not path.exists() and not path.is_symlink():
        console.print(f"[red]Not found: {escape(str(path))}[/red]")
        raise typer.Exit(1)

    settings = load_settings(settings_file)
    allow_permanent = permanent or settings.always_permanent_delete

    if allow_permanent and settings.confirm_permanent_delete and not yes:
        if not confirm_action(f"Permanently delete {path} if the trash is unavailable?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    with FolderScanner(ctx.obj) as scanner:
        result = scanner.delete_detailed(path, allow_permanent=allow_permanent)

    show_delete_result(result)
    if not result.success:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
