# Monorepo Agent Errors
# Exception taxonomy shared by the registry, resolver, rule engine and orchestrator

from pathlib import Path
from typing import Optional


class MonorepoError(Exception):
    """Base user-facing error."""

    def __init__(self, reason: str, *, submodule: Optional[str] = None):
        self.reason = reason
        self.submodule = submodule
        message = f"{submodule}: {reason}" if submodule else reason
        super().__init__(message)


class NotInitialized(MonorepoError):
    def __init__(self, config_path: Path):
        self.config_path = config_path
        super().__init__(f"Monorepo not initialized (no {config_path}). Run 'monorepo-agent init' first.")


class ConfigCorrupt(MonorepoError):
    def __init__(self, config_path: Path, detail: str):
        self.config_path = config_path
        self.detail = detail
        super().__init__(f"Configuration file {config_path} is invalid ({detail}); left untouched")


class DuplicateSubmodule(MonorepoError):
    def __init__(self, name: str):
        super().__init__("Submodule already registered", submodule=name)


class UnknownSubmodule(MonorepoError):
    def __init__(self, name: str):
        super().__init__("Submodule is not registered", submodule=name)


class NotASubdirectory(MonorepoError):
    def __init__(self, name: str, root: Path):
        self.root = root
        super().__init__(f"Not an existing directory directly under {root}", submodule=name)


class InvalidName(MonorepoError):
    def __init__(self, name: str, detail: str):
        self.detail = detail
        super().__init__(f"Invalid submodule name ({detail})", submodule=name or None)


class SiblingNotFound(MonorepoError):
    def __init__(self, name: str, path: Path):
        self.path = path
        super().__init__(f"Sibling directory not found: {path}", submodule=name)


class InvalidRule(MonorepoError):
    def __init__(self, detail: str, *, submodule: Optional[str] = None):
        super().__init__(f"Invalid rule ({detail})", submodule=submodule)


class VacuousRuleSet(MonorepoError):
    def __init__(self, *, submodule: Optional[str] = None):
        super().__init__("Rule set has no include rules, nothing would be mirrored", submodule=submodule)


class SyncSkipped(MonorepoError):
    """Pre-invocation validation failed; the submodule was not mirrored."""

    def __init__(self, name: str, cause: MonorepoError):
        self.cause = cause
        super().__init__(f"Skipped: {cause.reason}", submodule=name)


class SyncFailed(MonorepoError):
    """The mirroring tool ran and reported failure."""

    def __init__(self, name: str, diagnostic: str, returncode: Optional[int] = None):
        self.diagnostic = diagnostic
        self.returncode = returncode
        super().__init__(diagnostic or f"Mirroring failed with exit status {returncode}", submodule=name)
