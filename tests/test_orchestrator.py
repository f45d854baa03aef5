# Monorepo Agent Orchestrator Tests
# Batch sync semantics with a fake mirroring tool

import shutil
import threading
import time
from pathlib import Path

import pytest

from monorepo_agent.config.schema import Submodule, SyncRule
from monorepo_agent.config.store import ConfigStore
from monorepo_agent.errors import (
    InvalidName,
    NotInitialized,
    SiblingNotFound,
    SyncFailed,
    SyncSkipped,
    UnknownSubmodule,
    VacuousRuleSet,
)
from monorepo_agent.registry import SubmoduleRegistry
from monorepo_agent.sync.mirror import MirrorError, MirrorResult
from monorepo_agent.sync.orchestrator import SyncOrchestrator, SyncStatus, parse_target_names

LIB_RULES = [SyncRule.include("lib/***"), SyncRule.include("pubspec.yaml")]


class FakeMirror:
    """Records invocations and answers with configurable exit codes."""

    def __init__(self, failures=None, delay: float = 0.0):
        self.failures = failures or {}
        self.delay = delay
        self.calls = []
        self.active: dict[Path, int] = {}
        self.max_active: dict[Path, int] = {}
        self._lock = threading.Lock()

    def __call__(self, source, target, rule_set, *, delete, dry_run, executable, timeout):
        with self._lock:
            self.calls.append(
                {"source": source, "target": target, "rules": rule_set.lines(), "delete": delete, "dry_run": dry_run}
            )
            self.active[target] = self.active.get(target, 0) + 1
            self.max_active[target] = max(self.max_active.get(target, 0), self.active[target])
        try:
            if self.delay:
                time.sleep(self.delay)
            failure = self.failures.get(source.name)
            if isinstance(failure, Exception):
                raise failure
            if failure:
                return MirrorResult(command=[executable], returncode=failure, stderr=f"{source.name} exploded")
            return MirrorResult(command=[executable, str(source), str(target)], returncode=0)
        finally:
            with self._lock:
                self.active[target] -= 1


@pytest.fixture
def populated(registry: SubmoduleRegistry) -> SubmoduleRegistry:
    """user_app and admin_app have siblings, shared does not."""
    for name in ("user_app", "admin_app", "shared"):
        registry.add(name, LIB_RULES)
    return registry


class TestParseTargetNames:
    def test_all(self):
        assert parse_target_names("all") is None
        assert parse_target_names(None) is None
        assert parse_target_names([]) is None
        assert parse_target_names(["all"]) is None

    def test_names(self):
        assert parse_target_names("user_app") == ["user_app"]
        assert parse_target_names("user_app, admin_app") == ["user_app", "admin_app"]
        assert parse_target_names(["user_app", "shared,user_app"]) == ["user_app", "shared"]

    def test_empty_entry(self):
        with pytest.raises(InvalidName):
            parse_target_names("user_app,,admin_app")


class TestSyncAll:
    def test_one_missing_sibling(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror()
        result = SyncOrchestrator(store, mirror=mirror).sync("all")

        assert [r.name for r in result.results] == ["user_app", "admin_app", "shared"]
        assert result.skipped == 1
        assert result.succeeded == 2
        assert result.success is True

        skipped = result.get("shared")
        assert skipped.status == SyncStatus.SKIPPED
        assert isinstance(skipped.error, SyncSkipped)
        assert isinstance(skipped.error.cause, SiblingNotFound)
        assert "shared" not in [call["source"].name for call in mirror.calls]

    def test_invocation_arguments(self, populated: SubmoduleRegistry, store: ConfigStore, workspace: Path):
        mirror = FakeMirror()
        SyncOrchestrator(store, mirror=mirror).sync("user_app")

        assert len(mirror.calls) == 1
        call = mirror.calls[0]
        assert call["source"] == store.root / "user_app"
        assert call["target"] == workspace / "user_app"
        assert call["rules"] == ["+ lib/***", "+ pubspec.yaml", "- *"]
        assert call["delete"] is True
        assert call["dry_run"] is False

    def test_failure_is_isolated(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror(failures={"user_app": 23})
        result = SyncOrchestrator(store, mirror=mirror).sync()

        failed = result.get("user_app")
        assert failed.status == SyncStatus.FAILED
        assert failed.reason == "user_app exploded"
        assert isinstance(failed.error, SyncFailed)
        assert failed.error.returncode == 23
        assert result.get("admin_app").succeeded
        assert result.success is True

    def test_all_failed(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror(failures={"user_app": 1, "admin_app": 12})
        result = SyncOrchestrator(store, mirror=mirror).sync()
        assert result.succeeded == 0
        assert result.failed == 2
        assert result.skipped == 1
        assert result.success is False

    def test_mirror_error_is_failure(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror(failures={"admin_app": MirrorError("rsync command not found")})
        result = SyncOrchestrator(store, mirror=mirror).sync()
        assert result.get("admin_app").status == SyncStatus.FAILED
        assert "not found" in result.get("admin_app").reason

    def test_os_error_is_failure(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror(failures={"user_app": PermissionError(13, "Permission denied")})
        result = SyncOrchestrator(store, mirror=mirror).sync()

        failed = result.get("user_app")
        assert failed.status == SyncStatus.FAILED
        assert "Permission denied" in failed.reason
        assert isinstance(failed.error, SyncFailed)
        assert result.get("admin_app").succeeded
        assert result.total == 3

    def test_unstartable_rsync_fails_each_submodule(
        self, populated: SubmoduleRegistry, store: ConfigStore, temp_dir: Path
    ):
        fake_rsync = temp_dir / "not-executable-rsync"
        fake_rsync.write_text("#!/bin/sh\n", encoding="utf-8")
        fake_rsync.chmod(0o644)

        result = SyncOrchestrator(store, rsync=str(fake_rsync)).sync()

        assert result.get("user_app").status == SyncStatus.FAILED
        assert result.get("admin_app").status == SyncStatus.FAILED
        assert "could not be started" in result.get("user_app").reason
        assert result.get("shared").status == SyncStatus.SKIPPED
        assert result.success is False

    def test_no_submodules(self, store: ConfigStore):
        result = SyncOrchestrator(store, mirror=FakeMirror()).sync()
        assert result.total == 0
        assert result.success is False

    def test_requires_init(self, monorepo_root: Path):
        with pytest.raises(NotInitialized):
            SyncOrchestrator(ConfigStore(monorepo_root), mirror=FakeMirror()).sync()

    def test_config_untouched(self, populated: SubmoduleRegistry, store: ConfigStore):
        before = store.config_path.read_bytes()
        SyncOrchestrator(store, mirror=FakeMirror(failures={"user_app": 1})).sync()
        assert store.config_path.read_bytes() == before

    def test_dry_run_forwarded(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror()
        result = SyncOrchestrator(store, mirror=mirror).sync("admin_app", dry_run=True)
        assert result.dry_run
        assert mirror.calls[0]["dry_run"] is True

    def test_on_result_callback(self, populated: SubmoduleRegistry, store: ConfigStore):
        seen = []
        SyncOrchestrator(store, mirror=FakeMirror()).sync(on_result=lambda r: seen.append(r.name))
        assert seen == ["user_app", "admin_app", "shared"]


class TestSelection:
    def test_unknown_name(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror()
        with pytest.raises(UnknownSubmodule):
            SyncOrchestrator(store, mirror=mirror).sync(["user_app", "nope"])
        assert mirror.calls == []

    def test_requested_order(self, populated: SubmoduleRegistry, store: ConfigStore):
        result = SyncOrchestrator(store, mirror=FakeMirror()).sync("admin_app,user_app")
        assert [r.name for r in result.results] == ["admin_app", "user_app"]


class TestSkips:
    def test_vacuous_rules_skipped(self, registry: SubmoduleRegistry, store: ConfigStore):
        registry.add("user_app", [SyncRule.exclude("*")])
        registry.add("admin_app")
        mirror = FakeMirror()
        result = SyncOrchestrator(store, mirror=mirror).sync()

        assert result.skipped == 2
        assert isinstance(result.get("user_app").error.cause, VacuousRuleSet)
        assert mirror.calls == []

    def test_invalid_rule_from_hand_edited_config(self, registry: SubmoduleRegistry, store: ConfigStore):
        registry.add("user_app", LIB_RULES)
        with store.transaction() as config:
            config.submodules["user_app"].rules.append(SyncRule.include(""))
        result = SyncOrchestrator(store, mirror=FakeMirror()).sync()
        assert result.get("user_app").status == SyncStatus.SKIPPED
        assert "empty pattern" in result.get("user_app").reason

    def test_source_removed(self, populated: SubmoduleRegistry, store: ConfigStore):
        shutil.rmtree(store.root / "admin_app")
        result = SyncOrchestrator(store, mirror=FakeMirror()).sync("admin_app")
        assert result.get("admin_app").status == SyncStatus.SKIPPED

    def test_sibling_resolved_each_run(self, populated: SubmoduleRegistry, store: ConfigStore, workspace: Path):
        orchestrator = SyncOrchestrator(store, mirror=FakeMirror())
        assert orchestrator.sync("shared").get("shared").status == SyncStatus.SKIPPED

        (workspace / "shared").mkdir()
        assert orchestrator.sync("shared").get("shared").succeeded

        shutil.rmtree(workspace / "user_app")
        assert orchestrator.sync("user_app").get("user_app").status == SyncStatus.SKIPPED

    def test_unsupported_kind_skipped(self, store: ConfigStore):
        submodule = Submodule.model_construct(name="x", kind="future", path="x", rules=LIB_RULES)
        result = SyncOrchestrator(store, mirror=FakeMirror()).sync_submodule(store.root, submodule)
        assert result.status == SyncStatus.SKIPPED


class TestParallel:
    def test_results_in_selection_order(self, registry: SubmoduleRegistry, store: ConfigStore, workspace: Path):
        names = [f"pkg{i}" for i in range(6)]
        for name in names:
            (store.root / name).mkdir()
            (workspace / name).mkdir()
            registry.add(name, LIB_RULES)

        mirror = FakeMirror(delay=0.01)
        result = SyncOrchestrator(store, mirror=mirror, max_workers=4).sync()

        assert [r.name for r in result.results] == names
        assert result.succeeded == 6

    def test_same_target_never_concurrent(self, populated: SubmoduleRegistry, store: ConfigStore):
        mirror = FakeMirror(delay=0.02)
        orchestrator = SyncOrchestrator(store, mirror=mirror)
        submodule = store.load().submodules["user_app"]

        threads = [
            threading.Thread(target=orchestrator.sync_submodule, args=(store.root, submodule)) for _ in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(mirror.calls) == 4
        assert set(mirror.max_active.values()) == {1}
