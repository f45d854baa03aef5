# Monorepo Agent Path Resolver
# Derives and validates the sibling target of a submodule

import os
from dataclasses import dataclass
from pathlib import Path

from monorepo_agent.errors import InvalidName, NotASubdirectory, SiblingNotFound

_SEPARATORS = {"/", "\\", os.sep} | ({os.altsep} if os.altsep else set())


@dataclass(frozen=True)
class SiblingBinding:
    """Resolved source and target of one submodule for a single sync run."""

    name: str
    source: Path
    target: Path


def validate_name(name: str) -> str:
    """
    Check that a submodule name is a single plain path component.

    Args:
        name: Submodule name.

    Returns:
        The name, unchanged.

    Raises:
        InvalidName: If the name is empty, a dot entry, or contains separators.
    """
    if not name or not name.strip():
        raise InvalidName(name, "name is empty")
    if name != name.strip():
        raise InvalidName(name, "leading or trailing whitespace")
    if name in (".", ".."):
        raise InvalidName(name, "refers to a directory entry, not a child")
    if any(sep in name for sep in _SEPARATORS):
        raise InvalidName(name, "contains a path separator")
    if "\0" in name:
        raise InvalidName(name, "contains a NUL byte")
    return name


def expected_sibling_path(root: Path, name: str) -> Path:
    """
    Compute where the sibling of a submodule lives, without touching the disk.

    The target is ``<parent of root>/<name>``.

    Raises:
        InvalidName: If the name is invalid or escapes the parent directory.
        SiblingNotFound: If the root has no parent directory.
    """
    validate_name(name)
    root = Path(os.path.normpath(Path(root).absolute()))
    parent = root.parent
    candidate = Path(os.path.normpath(parent / name))
    if parent == root:
        raise SiblingNotFound(name, candidate)
    if candidate.parent != parent:
        raise InvalidName(name, f"resolves outside {parent}")
    if candidate == root:
        raise InvalidName(name, "sibling would be the monorepo itself")
    return candidate


def resolve_sibling(root: Path, name: str) -> Path:
    """
    Resolve and validate the sibling target directory of a submodule.

    Always consults the filesystem; results must not be reused across runs.

    Raises:
        InvalidName: If the name is invalid.
        SiblingNotFound: If the sibling doesn't exist or is not a directory.
    """
    sibling = expected_sibling_path(root, name)
    if not sibling.is_dir():
        raise SiblingNotFound(name, sibling)
    return sibling


def resolve_source(root: Path, name: str, path: str | None = None) -> Path:
    """
    Resolve the submodule directory inside the monorepo.

    Args:
        root: Monorepo root.
        name: Submodule name.
        path: Optional path relative to root (defaults to name).

    Raises:
        InvalidName: If the name is invalid.
        NotASubdirectory: If the directory is missing or not an immediate child.
    """
    validate_name(name)
    root = Path(os.path.normpath(Path(root).absolute()))
    source = Path(os.path.normpath(root / (path or name)))
    if source.parent != root or not source.is_dir():
        raise NotASubdirectory(name, root)
    return source


def resolve_binding(root: Path, name: str, path: str | None = None) -> SiblingBinding:
    """Resolve both ends of a submodule's mirroring for one run."""
    source = resolve_source(root, name, path)
    target = resolve_sibling(root, name)
    return SiblingBinding(name=name, source=source, target=target)
