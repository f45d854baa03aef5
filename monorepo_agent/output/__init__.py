# Monorepo Agent Output Module
# Rich console output

from monorepo_agent.output.console import Console

__all__ = ["Console"]
