# Monorepo Agent Sync Orchestrator
# Turns registered submodules into mirroring runs and collects their outcomes

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from monorepo_agent.config.schema import MonorepoConfig, Submodule, SubmoduleKind
from monorepo_agent.config.store import ConfigStore
from monorepo_agent.errors import (
    InvalidName,
    MonorepoError,
    SyncFailed,
    SyncSkipped,
    UnknownSubmodule,
)
from monorepo_agent.sync.mirror import DEFAULT_RSYNC, MirrorError, MirrorResult, run_mirror
from monorepo_agent.sync.resolver import resolve_binding
from monorepo_agent.sync.rules import compile_rules

ALL = "all"

MirrorRunner = Callable[..., MirrorResult]
SyncTarget = Union[str, Sequence[str], None]


class SyncStatus(str, Enum):
    """Outcome of syncing one submodule."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SubmoduleSyncResult:
    """Result of syncing a single submodule."""

    name: str
    status: SyncStatus
    reason: str = ""
    source: Optional[Path] = None
    target: Optional[Path] = None
    rules: list[str] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    changes: list[str] = field(default_factory=list)
    error: Optional[MonorepoError] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SyncStatus.SUCCEEDED


@dataclass
class BatchSyncResult:
    """Result of a sync run over one or more submodules."""

    results: list[SubmoduleSyncResult] = field(default_factory=list)
    dry_run: bool = False

    def _count(self, status: SyncStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(SyncStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(SyncStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(SyncStatus.SKIPPED)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success(self) -> bool:
        """A run succeeds when at least one submodule was mirrored."""
        return self.succeeded > 0

    def get(self, name: str) -> Optional[SubmoduleSyncResult]:
        for result in self.results:
            if result.name == name:
                return result
        return None


def parse_target_names(target: SyncTarget) -> Optional[list[str]]:
    """
    Normalize a sync target into an ordered list of names.

    Returns:
        None for every submodule, otherwise the requested names without
        duplicates. Comma-separated entries are split.

    Raises:
        InvalidName: If an entry is empty.
    """
    if target is None:
        return None
    items = [target] if isinstance(target, str) else list(target)
    if not items:
        return None

    names: list[str] = []
    for item in items:
        for name in item.split(","):
            name = name.strip()
            if not name:
                raise InvalidName(name, "empty name in submodule list")
            if name not in names:
                names.append(name)

    if names == [ALL]:
        return None
    return names


class SyncOrchestrator:
    """
    Drives mirroring for registered submodules.

    Sibling paths and rules are resolved fresh for each run and the
    configuration is only read, never written. One submodule's skip or
    failure does not stop the others.
    """

    def __init__(
        self,
        store: ConfigStore,
        *,
        mirror: MirrorRunner = run_mirror,
        rsync: str = DEFAULT_RSYNC,
        max_workers: int = 1,
        timeout: Optional[float] = None,
        delete: bool = True,
    ):
        """
        Initialize orchestrator.

        Args:
            store: Configuration store to read the registry from.
            mirror: Callable running the mirroring tool (run_mirror signature).
            rsync: rsync executable name or path.
            max_workers: Parallel workers; 1 runs submodules one after another.
            timeout: Optional limit in seconds on each rsync wait.
            delete: Remove destination entries no longer present in the source.
        """
        self.store = store
        self.mirror = mirror
        self.rsync = rsync
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self.delete = delete
        self._target_locks: dict[Path, threading.Lock] = {}
        self._target_locks_guard = threading.Lock()

    @contextmanager
    def _target_lock(self, target: Path) -> Iterator[None]:
        """Exclusive access to one sibling directory."""
        with self._target_locks_guard:
            lock = self._target_locks.setdefault(target, threading.Lock())
        with lock:
            yield

    def select(self, config: MonorepoConfig, target: SyncTarget = ALL) -> list[Submodule]:
        """
        Pick the submodules a target refers to, in registry order for ``all``.

        Raises:
            InvalidName: If the target contains an empty name.
            UnknownSubmodule: If a requested name isn't registered.
        """
        names = parse_target_names(target)
        if names is None:
            return list(config.submodules.values())

        selected = []
        for name in names:
            submodule = config.get_submodule(name)
            if submodule is None:
                raise UnknownSubmodule(name)
            selected.append(submodule)
        return selected

    def sync(
        self,
        target: SyncTarget = ALL,
        *,
        dry_run: bool = False,
        on_result: Optional[Callable[[SubmoduleSyncResult], None]] = None,
    ) -> BatchSyncResult:
        """
        Synchronize one, several or all submodules.

        Args:
            target: ``"all"``/None, a name, comma-separated names or a list of names.
            dry_run: Ask the mirroring tool not to write anything.
            on_result: Optional callback invoked as each submodule finishes.

        Returns:
            BatchSyncResult with one entry per submodule, in selection order.

        Raises:
            NotInitialized: If the monorepo has no configuration.
            ConfigCorrupt: If the configuration can't be read.
            UnknownSubmodule: If a requested name isn't registered.
        """
        config = self.store.load()
        submodules = self.select(config, target)
        batch = BatchSyncResult(dry_run=dry_run)

        if self.max_workers == 1 or len(submodules) <= 1:
            for submodule in submodules:
                result = self.sync_submodule(config.root, submodule, dry_run=dry_run)
                batch.results.append(result)
                if on_result:
                    on_result(result)
            return batch

        slots: list[Optional[SubmoduleSyncResult]] = [None] * len(submodules)
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = {
                executor.submit(self.sync_submodule, config.root, submodule, dry_run=dry_run): index
                for index, submodule in enumerate(submodules)
            }
            for future in as_completed(futures):
                result = future.result()
                slots[futures[future]] = result
                if on_result:
                    on_result(result)
        except BaseException:
            # Interrupted: finished submodules stay finished, queued ones never start
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        batch.results = [result for result in slots if result is not None]
        return batch

    def sync_submodule(self, root: Path, submodule: Submodule, *, dry_run: bool = False) -> SubmoduleSyncResult:
        """
        Synchronize a single submodule and report its outcome.

        Skips and failures are returned as results, not raised.
        """
        try:
            if submodule.kind == SubmoduleKind.MIRROR:
                return self._mirror_submodule(root, submodule, dry_run=dry_run)
            raise SyncSkipped(submodule.name, MonorepoError(f"unsupported submodule kind '{submodule.kind}'"))
        except SyncSkipped as e:
            return SubmoduleSyncResult(
                name=submodule.name,
                status=SyncStatus.SKIPPED,
                reason=e.cause.reason,
                error=e,
            )

    def _mirror_submodule(self, root: Path, submodule: Submodule, *, dry_run: bool) -> SubmoduleSyncResult:
        name = submodule.name
        try:
            binding = resolve_binding(root, name, submodule.path)
            rule_set = compile_rules(submodule.rules, submodule=name)
        except MonorepoError as e:
            raise SyncSkipped(name, e) from e

        result = SubmoduleSyncResult(
            name=name,
            status=SyncStatus.SUCCEEDED,
            source=binding.source,
            target=binding.target,
            rules=rule_set.lines(),
        )

        with self._target_lock(binding.target):
            try:
                outcome = self.mirror(
                    binding.source,
                    binding.target,
                    rule_set,
                    delete=self.delete,
                    dry_run=dry_run,
                    executable=self.rsync,
                    timeout=self.timeout,
                )
            except MirrorError as e:
                result.error = SyncFailed(name, e.stderr or e.message, e.returncode)
                outcome = None
            except OSError as e:
                result.error = SyncFailed(name, str(e))
                outcome = None

        if outcome is not None:
            result.command = outcome.command
            result.changes = outcome.changes
            if not outcome.success:
                result.error = SyncFailed(name, outcome.stderr, outcome.returncode)

        if result.error is not None:
            result.status = SyncStatus.FAILED
            result.reason = result.error.reason
        return result
