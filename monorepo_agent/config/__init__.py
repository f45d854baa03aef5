# Monorepo Agent Configuration Module
# Handles the persisted monorepo model and its storage

from monorepo_agent.config.defaults import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_INCLUDE_PATTERNS,
    default_rules,
)
from monorepo_agent.config.schema import (
    CONFIG_VERSION,
    MonorepoConfig,
    RuleKind,
    Submodule,
    SubmoduleKind,
    SyncRule,
)
from monorepo_agent.config.store import ConfigStore, get_config_path

__all__ = [
    # Schema
    "CONFIG_VERSION",
    "MonorepoConfig",
    "Submodule",
    "SubmoduleKind",
    "SyncRule",
    "RuleKind",
    # Store
    "ConfigStore",
    "get_config_path",
    # Defaults
    "CONFIG_DIR_NAME",
    "CONFIG_FILE_NAME",
    "DEFAULT_INCLUDE_PATTERNS",
    "default_rules",
]
