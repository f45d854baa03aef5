# Monorepo Agent Configuration Defaults
# Rule template applied to submodules registered through `init`

from monorepo_agent.config.schema import SyncRule

CONFIG_DIR_NAME = ".monorepo"
CONFIG_FILE_NAME = "config.yaml"
LOCK_FILE_NAME = "config.lock"

ROOT_ENV_VAR = "MONOREPO_AGENT_ROOT"
RSYNC_ENV_VAR = "MONOREPO_AGENT_RSYNC"

# Typical Dart/Flutter package layout
DEFAULT_INCLUDE_PATTERNS = ["lib/***", "pubspec.yaml", "test/***"]


def default_rules() -> list[SyncRule]:
    """Fresh copy of the default rule template."""
    return [SyncRule.include(pattern) for pattern in DEFAULT_INCLUDE_PATTERNS]
