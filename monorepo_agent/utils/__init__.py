# Monorepo Agent Utilities Module
# Helper functions for path handling

from monorepo_agent.utils.paths import atomic_write, ensure_dir, expand_path

__all__ = [
    "atomic_write",
    "ensure_dir",
    "expand_path",
]
