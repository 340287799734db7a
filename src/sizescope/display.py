"""Rich terminal display for sizescope."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sizescope.models import DeleteOutcome, DeleteResult, Item

console = Console()


def show_items(items: list[Item], title: str) -> None:
    """Display a size-ranked listing."""
    if not items:
        console.print(f"[yellow]{escape(title)}: nothing to show[/yellow]")
        return

    table = Table(title=escape(title), show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Bytes", justify="right")
    table.add_column("Source")
    table.add_column("Path", style="dim")

    for item in items:
        table.add_row(
            escape(item.name),
            "Folder" if item.is_directory else "File",
            str(item.size_bytes),
            item.source,
            escape(str(item.path)),
        )

    console.print(table)
    total = sum(i.size_bytes for i in items)
    console.print(f"[dim]{len(items)} entries, {total} bytes[/dim]")


def show_delete_result(result: DeleteResult) -> None:
    """Display result of a delete."""
    if result.outcome == DeleteOutcome.TRASHED:
        console.print(f"  [green]✓[/green] Moved to trash: {escape(result.path)}")
    elif result.outcome == DeleteOutcome.DELETED:
        console.print(f"  [green]✓[/green] Permanently deleted: {escape(result.path)}")
    elif result.outcome == DeleteOutcome.REFUSED:
        console.print(f"  [yellow]![/yellow] Not deleted: {escape(result.path)} ({escape(str(result.error))})")
        console.print("  [dim]Use --permanent to delete without the trash[/dim]")
    else:
        console.print(f"  [red]✗[/red] {escape(result.path)}: {escape(str(result.error))}")


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
