# Monorepo Agent Mirroring
# rsync command construction and execution

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from monorepo_agent.sync.rules import RuleSet, to_rsync_filters

DEFAULT_RSYNC = "rsync"

# Content only: destination permissions, ownership and timestamps are left alone,
# so change detection has to compare checksums.
BASE_FLAGS = (
    "--archive",
    "--checksum",
    "--no-perms",
    "--no-owner",
    "--no-group",
    "--no-times",
)


class MirrorError(Exception):
    """Exception raised when the mirroring tool could not be run to completion."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


@dataclass
class MirrorResult:
    """Outcome of one mirroring invocation."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    dry_run: bool = False
    changes: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.returncode == 0


def build_mirror_command(
    source: Path,
    target: Path,
    rule_set: RuleSet,
    *,
    delete: bool = True,
    dry_run: bool = False,
    executable: str = DEFAULT_RSYNC,
) -> list[str]:
    """
    Build the rsync argument vector for one submodule.

    Args:
        source: Submodule directory inside the monorepo.
        target: Sibling directory receiving the mirror.
        rule_set: Compiled rules, passed in order.
        delete: Delete destination entries no longer present in the source.
        dry_run: Ask rsync to report without writing.
        executable: rsync binary to run.

    Returns:
        Argument list ready for subprocess.
    """
    cmd = [executable, *BASE_FLAGS]
    if delete:
        cmd.append("--delete")
    if dry_run:
        cmd.extend(["--dry-run", "--itemize-changes"])
    cmd.extend(to_rsync_filters(rule_set))
    # Trailing slash: copy the contents of source, not the directory itself
    cmd.append(f"{str(source).rstrip('/')}/")
    cmd.append(str(target))
    return cmd


def run_mirror(
    source: Path,
    target: Path,
    rule_set: RuleSet,
    *,
    delete: bool = True,
    dry_run: bool = False,
    executable: str = DEFAULT_RSYNC,
    timeout: Optional[float] = None,
) -> MirrorResult:
    """
    Run rsync for one submodule.

    A non-zero exit status is returned in the result, not raised.

    Raises:
        MirrorError: If rsync is missing, can't be started or the wait timed out.
    """
    cmd = build_mirror_command(
        source,
        target,
        rule_set,
        delete=delete,
        dry_run=dry_run,
        executable=executable,
    )
    try:
        result = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise MirrorError(f"{executable} command not found. Is rsync installed?")
    except OSError as e:
        raise MirrorError(f"{executable} could not be started: {e.strerror or e}")
    except subprocess.TimeoutExpired as e:
        stderr = e.stderr.decode() if isinstance(e.stderr, bytes) else (e.stderr or "")
        raise MirrorError(f"{executable} timed out after {timeout} seconds", stderr=stderr.strip())

    changes = []
    if dry_run and result.stdout:
        changes = [line for line in result.stdout.splitlines() if line.strip()]

    return MirrorResult(
        command=cmd,
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr.strip() if result.stderr else "",
        dry_run=dry_run,
        changes=changes,
    )
