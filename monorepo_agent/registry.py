# Monorepo Agent Submodule Registry
# CRUD lifecycle over submodule entries, persisted through ConfigStore

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

from monorepo_agent.config.schema import MonorepoConfig, Submodule, SyncRule
from monorepo_agent.config.store import ConfigStore
from monorepo_agent.errors import DuplicateSubmodule, MonorepoError, UnknownSubmodule
from monorepo_agent.sync.resolver import expected_sibling_path, resolve_source, validate_name
from monorepo_agent.sync.rules import validate_rules


def _expected_sibling(root: Path, name: str) -> Optional[str]:
    try:
        return str(expected_sibling_path(root, name))
    except MonorepoError:
        return None


class SubmoduleRegistry:
    """
    Registry of submodules for one monorepo.

    Each mutation is a single serialized load-modify-save cycle on the
    store; a failed check leaves the persisted configuration untouched.
    Removing a submodule never touches files already mirrored to its
    sibling directory.
    """

    def __init__(self, store: ConfigStore):
        self.store = store

    def _new_submodule(
        self,
        config: MonorepoConfig,
        name: str,
        rules: Sequence[SyncRule],
        description: str,
    ) -> Submodule:
        validate_name(name)
        validate_rules(rules, submodule=name)
        if name in config.submodules:
            raise DuplicateSubmodule(name)
        resolve_source(config.root, name)
        return Submodule(
            name=name,
            sibling_path=_expected_sibling(config.root, name),
            description=description,
            rules=list(rules),
        )

    def add(self, name: str, rules: Sequence[SyncRule] = (), *, description: str = "") -> Submodule:
        """
        Register a new submodule.

        Args:
            name: Name of an existing immediate child directory of the root.
            rules: Ordered mirroring rules. No rules means nothing is mirrored.
            description: Optional description.

        Returns:
            The registered submodule.

        Raises:
            InvalidName: If the name is not a plain directory name.
            InvalidRule: If a rule has an empty pattern.
            DuplicateSubmodule: If the name is already registered.
            NotASubdirectory: If the directory doesn't exist under the root.
        """
        with self.store.transaction() as config:
            submodule = self._new_submodule(config, name, rules, description)
            config.submodules[name] = submodule
        return submodule

    def add_missing(self, names: Iterable[str], rules: Sequence[SyncRule]) -> tuple[list[str], list[str]]:
        """
        Register every name not yet present, all with the same rules.

        All names are validated before anything is written.

        Returns:
            Tuple of (added, already_present) names.
        """
        added: list[str] = []
        existing: list[str] = []
        with self.store.transaction() as config:
            for name in names:
                if name in config.submodules:
                    if name not in existing:
                        existing.append(name)
                    continue
                config.submodules[name] = self._new_submodule(config, name, rules, "")
                added.append(name)
        return added, existing

    def remove(self, name: str) -> Submodule:
        """
        Deregister a submodule.

        Raises:
            UnknownSubmodule: If the name isn't registered.
        """
        with self.store.transaction() as config:
            if name not in config.submodules:
                raise UnknownSubmodule(name)
            return config.submodules.pop(name)

    def update(
        self,
        name: str,
        rules: Optional[Sequence[SyncRule]] = None,
        *,
        description: Optional[str] = None,
    ) -> Submodule:
        """
        Update a submodule's rules and/or description.

        New rules replace the old list entirely; nothing is merged.

        Raises:
            UnknownSubmodule: If the name isn't registered.
            InvalidRule: If a new rule has an empty pattern.
        """
        with self.store.transaction() as config:
            submodule = config.submodules.get(name)
            if submodule is None:
                raise UnknownSubmodule(name)
            if rules is not None:
                validate_rules(rules, submodule=name)
                submodule.rules = list(rules)
            if description is not None:
                submodule.description = description
        return submodule

    def get(self, name: str) -> Submodule:
        """
        Get a registered submodule.

        Raises:
            UnknownSubmodule: If the name isn't registered.
        """
        submodule = self.store.load().get_submodule(name)
        if submodule is None:
            raise UnknownSubmodule(name)
        return submodule

    def list(self) -> list[Submodule]:
        """All submodules in registration order."""
        return list(self.store.load().submodules.values())

    def names(self) -> list[str]:
        return self.store.load().submodule_names()
