# Monorepo Agent Sync Module
# Sibling resolution, rule compilation, mirroring and orchestration

from monorepo_agent.sync.mirror import MirrorError, MirrorResult, build_mirror_command, run_mirror
from monorepo_agent.sync.orchestrator import (
    ALL,
    BatchSyncResult,
    SubmoduleSyncResult,
    SyncOrchestrator,
    SyncStatus,
)
from monorepo_agent.sync.resolver import (
    SiblingBinding,
    expected_sibling_path,
    resolve_binding,
    resolve_sibling,
    resolve_source,
    validate_name,
)
from monorepo_agent.sync.rules import RuleSet, compile_rules, rule_matches, to_rsync_filters

__all__ = [
    # Resolver
    "SiblingBinding",
    "validate_name",
    "expected_sibling_path",
    "resolve_sibling",
    "resolve_source",
    "resolve_binding",
    # Rules
    "RuleSet",
    "compile_rules",
    "rule_matches",
    "to_rsync_filters",
    # Mirror
    "MirrorError",
    "MirrorResult",
    "build_mirror_command",
    "run_mirror",
    # Orchestrator
    "ALL",
    "BatchSyncResult",
    "SubmoduleSyncResult",
    "SyncOrchestrator",
    "SyncStatus",
]
