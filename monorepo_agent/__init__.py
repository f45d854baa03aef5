"""Monorepo Agent - mirror monorepo submodules to sibling checkouts.

Keeps a registry of submodules inside a monorepo together with their
include/exclude rules, and mirrors each one with rsync to the directory
of the same name next to the monorepo.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "ConfigStore",
    "MonorepoConfig",
    "Submodule",
    "SyncRule",
    "RuleKind",
    "SubmoduleRegistry",
    "SyncOrchestrator",
    "compile_rules",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("ConfigStore", "MonorepoConfig", "Submodule", "SyncRule", "RuleKind"):
        from monorepo_agent import config

        return getattr(config, name)
    if name == "SubmoduleRegistry":
        from monorepo_agent.registry import SubmoduleRegistry

        return SubmoduleRegistry
    if name in ("SyncOrchestrator", "compile_rules"):
        from monorepo_agent import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
