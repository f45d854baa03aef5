# Monorepo Agent Configuration Schema
# Pydantic models for the persisted monorepo configuration

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CONFIG_VERSION = 1


class RuleKind(str, Enum):
    """Disposition of paths matched by a rule."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


class SubmoduleKind(str, Enum):
    """How a submodule is synchronized to its sibling."""

    MIRROR = "mirror"


class SyncRule(BaseModel):
    """One ordered include/exclude entry of a submodule's mirroring policy."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(description="Glob pattern relative to the submodule root")
    kind: RuleKind = Field(description="include or exclude")

    @classmethod
    def include(cls, pattern: str) -> "SyncRule":
        return cls(pattern=pattern, kind=RuleKind.INCLUDE)

    @classmethod
    def exclude(cls, pattern: str) -> "SyncRule":
        return cls(pattern=pattern, kind=RuleKind.EXCLUDE)

    @property
    def is_include(self) -> bool:
        return self.kind == RuleKind.INCLUDE

    def __str__(self) -> str:
        sign = "+" if self.is_include else "-"
        return f"{sign} {self.pattern}"


class Submodule(BaseModel):
    """A tracked subdirectory of the monorepo."""

    name: str = Field(min_length=1, description="Unique name, an immediate child directory of the root")
    kind: SubmoduleKind = Field(default=SubmoduleKind.MIRROR, description="Synchronization strategy")
    path: str = Field(default="", description="Path inside the monorepo (defaults to name)")
    sibling_path: str | None = Field(
        default=None,
        description="Sibling target computed at registration; informational, re-resolved on every sync",
    )
    description: str = Field(default="", description="Human-readable description")
    rules: list[SyncRule] = Field(default_factory=list, description="Ordered mirroring rules")

    @model_validator(mode="after")
    def default_path(self) -> "Submodule":
        if not self.path:
            self.path = self.name
        return self

    @property
    def include_patterns(self) -> list[str]:
        return [r.pattern for r in self.rules if r.kind == RuleKind.INCLUDE]

    @property
    def exclude_patterns(self) -> list[str]:
        return [r.pattern for r in self.rules if r.kind == RuleKind.EXCLUDE]


class MonorepoConfig(BaseModel):
    """Root configuration model, one per initialized monorepo."""

    version: int = Field(default=CONFIG_VERSION, description="Document format version")
    root_path: str = Field(frozen=True, description="Absolute path of the monorepo working directory")
    submodules: dict[str, Submodule] = Field(default_factory=dict, description="Submodules keyed by name")

    @field_validator("root_path")
    @classmethod
    def absolute_root(cls, v: str) -> str:
        """Store the root as an absolute path."""
        return str(Path(v).expanduser().absolute())

    @field_validator("version")
    @classmethod
    def supported_version(cls, v: int) -> int:
        if v > CONFIG_VERSION:
            raise ValueError(f"unsupported config version {v} (newest supported is {CONFIG_VERSION})")
        return v

    @model_validator(mode="after")
    def keys_match_names(self) -> "MonorepoConfig":
        for key, submodule in self.submodules.items():
            if key != submodule.name:
                raise ValueError(f"submodule key '{key}' does not match its name '{submodule.name}'")
        return self

    @property
    def root(self) -> Path:
        return Path(self.root_path)

    def get_submodule(self, name: str) -> Submodule | None:
        """Get a submodule by name."""
        return self.submodules.get(name)

    def submodule_names(self) -> list[str]:
        """Names in insertion order."""
        return list(self.submodules.keys())
