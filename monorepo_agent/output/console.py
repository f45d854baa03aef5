# Monorepo Agent Console Output
# Rich-based console output for registry and sync commands

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from monorepo_agent.config.schema import Submodule
from monorepo_agent.sync.orchestrator import BatchSyncResult, SubmoduleSyncResult, SyncStatus


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for registry and sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=False)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_submodule_list(self, submodules: list[Submodule]) -> None:
        """
        Print registered submodules as a table.

        Args:
            submodules: Submodules in registry order.
        """
        if not submodules:
            self._console.print("[dim]No submodules registered[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Submodule")
        table.add_column("Rules")
        table.add_column("Sibling", style="dim")
        table.add_column("Description", style="dim")

        for submodule in submodules:
            if submodule.rules:
                if self.verbose:
                    rules = escape("\n".join(str(rule) for rule in submodule.rules))
                else:
                    rules = str(len(submodule.rules))
            else:
                rules = "[yellow]none[/yellow]"
            table.add_row(
                escape(submodule.name),
                rules,
                escape(submodule.sibling_path or ""),
                escape(submodule.description),
            )

        self._console.print(table)

    def print_submodule(
        self,
        submodule: Submodule,
        *,
        compiled: Optional[list[str]] = None,
        problem: Optional[str] = None,
    ) -> None:
        """
        Print one submodule with its configured and compiled rules.

        Args:
            submodule: Submodule to show.
            compiled: Compiled rule lines, if compilation succeeded.
            problem: Reason compilation failed, if it did.
        """
        lines = [
            f"Path: {escape(submodule.path)}",
            f"Sibling: {escape(submodule.sibling_path or '-')}",
            f"Kind: {submodule.kind.value}",
        ]
        if submodule.description:
            lines.append(f"Description: {escape(submodule.description)}")

        lines.append("")
        lines.append("[bold]Rules:[/bold]")
        if submodule.rules:
            lines.extend(f"  {escape(str(rule))}" for rule in submodule.rules)
        else:
            lines.append("  [dim]none[/dim]")

        lines.append("")
        lines.append("[bold]Compiled:[/bold]")
        if compiled is not None:
            lines.extend(f"  {escape(line)}" for line in compiled)
        else:
            lines.append(f"  [yellow]{escape(problem or 'unavailable')}[/yellow]")

        self._console.print(Panel("\n".join(lines), title=escape(submodule.name), border_style="blue"))

    def print_sync_outcome(self, result: SubmoduleSyncResult, *, dry_run: bool = False) -> None:
        """Print one line for a submodule's sync outcome."""
        name = escape(result.name)
        if result.status == SyncStatus.SUCCEEDED:
            verb = "would sync" if dry_run else "synced"
            self._console.print(f"[green]✓[/green] [bold]{name}[/bold] - {verb} to {escape(str(result.target))}")
        elif result.status == SyncStatus.SKIPPED:
            self._console.print(f"[yellow]○[/yellow] [bold]{name}[/bold] - skipped: {escape(result.reason)}")
        else:
            self._console.print(f"[red]✗[/red] [bold]{name}[/bold] - failed: {escape(result.reason)}")

        if self.verbose and result.rules:
            self._console.print(f"    [dim]rules: {escape(', '.join(result.rules))}[/dim]")
        if self.verbose and result.command:
            self._console.print(f"    [dim]$ {escape(' '.join(result.command))}[/dim]")
        if dry_run and result.changes:
            for change in result.changes:
                self._console.print(f"    [dim]{escape(change)}[/dim]")

    def print_sync_result(self, result: BatchSyncResult, *, show_outcomes: bool = True) -> None:
        """
        Print sync result summary.

        Args:
            result: Sync result to display.
            show_outcomes: Also print the per-submodule lines.
        """
        if show_outcomes:
            for outcome in result.results:
                self.print_sync_outcome(outcome, dry_run=result.dry_run)

        self._console.print()

        status_text = "Dry run completed" if result.dry_run else "Sync completed"
        counts = f"Succeeded: {result.succeeded}, failed: {result.failed}, skipped: {result.skipped}"

        if result.total == 0:
            body = "[yellow]No submodules to sync[/yellow]"
            border = "yellow"
        elif result.success:
            body = f"[green]{status_text}[/green]\n{counts}"
            border = "green" if result.failed == 0 and result.skipped == 0 else "yellow"
        else:
            body = f"[red]{status_text} with errors[/red]\n{counts}"
            border = "red"

        self._console.print(Panel(body, title="Summary", border_style=border))

