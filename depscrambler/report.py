"""Rich rendering of scramble results."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from .types import ScrambleResult

console = Console()


def build_changes_table(result: ScrambleResult) -> Table:
    """Before/after table of every scrambled entry."""
    table = Table(title="Scrambled Dependencies")
    table.add_column("Type", style="dim")
    table.add_column("Package", style="cyan")
    table.add_column("Before")
    table.add_column("After", style="red")

    for dep_type, name, before, after in result.changes():
        table.add_row(dep_type.value, name, str(before), str(after))

    return table


def render_result(
    result: ScrambleResult,
    out: Optional[Console] = None,
    show_issues: bool = False,
) -> None:
    """Print a summary of a scramble run."""
    out = out or console

    if result.backup_path:
        out.print(f"Backup created at: {result.backup_path}", style="blue")

    for dep_type, names in result.scrambled_deps.items():
        if names:
            out.print(f"{dep_type.value}: {len(names)} dependencies scrambled", style="yellow")

    if result.total_scrambled == 0:
        out.print("No dependencies were changed this time", style="yellow")
        return

    out.print(build_changes_table(result))

    if show_issues:
        out.print("\nIssues:")
        for i, issue in enumerate(result.issues, 1):
            out.print(f"  {i}. {issue}")
