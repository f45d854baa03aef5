# Tests for monorepo_agent.output.console
# Rich-based console output

from io import StringIO
from pathlib import Path

from rich.console import Console as RichConsole

from monorepo_agent.config.schema import Submodule, SyncRule
from monorepo_agent.output.console import Console
from monorepo_agent.sync.orchestrator import BatchSyncResult, SubmoduleSyncResult, SyncStatus


def _make_console(verbose: bool = False) -> Console:
    """Create a console with captured output."""
    console = Console(verbose=verbose, colored=False)
    console._console = RichConsole(file=StringIO(), no_color=True, width=200)
    return console


def _get_output(console: Console) -> str:
    """Get captured output from console."""
    console._console.file.seek(0)
    return console._console.file.read()


class TestConsoleBasic:
    """Tests for basic console methods."""

    def test_print_error(self):
        c = _make_console()
        c.print_error("something failed")
        output = _get_output(c)
        assert "Error:" in output
        assert "something failed" in output

    def test_print_warning(self):
        c = _make_console()
        c.print_warning("be careful")
        assert "Warning: be careful" in _get_output(c)

    def test_markup_escaped(self):
        c = _make_console()
        c.print_error("rsync error [sender=3.2.7]")
        assert "[sender=3.2.7]" in _get_output(c)

    def test_verbose_flag(self):
        c = Console(verbose=True, colored=False)
        assert c.verbose is True


class TestSubmoduleOutput:
    def test_empty_list(self):
        c = _make_console()
        c.print_submodule_list([])
        assert "No submodules registered" in _get_output(c)

    def test_list(self):
        c = _make_console(verbose=True)
        c.print_submodule_list(
            [
                Submodule(name="user_app", rules=[SyncRule.include("lib/***")], sibling_path="/w/user_app"),
                Submodule(name="admin_app"),
            ]
        )
        output = _get_output(c)
        assert "user_app" in output
        assert "+ lib/***" in output
        assert "none" in output

    def test_show_compiled(self):
        c = _make_console()
        submodule = Submodule(name="user_app", rules=[SyncRule.include("lib/***")])
        c.print_submodule(submodule, compiled=["+ lib/***", "- *"])
        output = _get_output(c)
        assert "Compiled" in output
        assert "- *" in output

    def test_show_problem(self):
        c = _make_console()
        c.print_submodule(Submodule(name="user_app"), problem="nothing would be mirrored")
        assert "nothing would be mirrored" in _get_output(c)


class TestSyncOutput:
    def _batch(self) -> BatchSyncResult:
        return BatchSyncResult(
            results=[
                SubmoduleSyncResult(
                    name="user_app",
                    status=SyncStatus.SUCCEEDED,
                    target=Path("/w/user_app"),
                    rules=["+ lib/***", "- *"],
                    command=["rsync", "--archive"],
                ),
                SubmoduleSyncResult(name="admin_app", status=SyncStatus.FAILED, reason="rsync exploded"),
                SubmoduleSyncResult(name="shared", status=SyncStatus.SKIPPED, reason="Sibling directory not found"),
            ]
        )

    def test_outcome_lines_and_counts(self):
        c = _make_console()
        c.print_sync_result(self._batch())
        output = _get_output(c)
        assert "user_app - synced to /w/user_app" in output
        assert "admin_app - failed: rsync exploded" in output
        assert "shared - skipped: Sibling directory not found" in output
        assert "Succeeded: 1, failed: 1, skipped: 1" in output

    def test_verbose_shows_command(self):
        c = _make_console(verbose=True)
        c.print_sync_outcome(self._batch().results[0])
        assert "$ rsync --archive" in _get_output(c)

    def test_dry_run_wording(self):
        c = _make_console()
        batch = self._batch()
        batch.dry_run = True
        c.print_sync_result(batch)
        output = _get_output(c)
        assert "would sync" in output
        assert "Dry run completed" in output

    def test_empty_batch(self):
        c = _make_console()
        c.print_sync_result(BatchSyncResult())
        assert "No submodules to sync" in _get_output(c)
