# Monorepo Agent Configuration Store
# Load and save the monorepo configuration with atomic replace semantics

import fcntl
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from monorepo_agent.config.defaults import CONFIG_DIR_NAME, CONFIG_FILE_NAME, LOCK_FILE_NAME
from monorepo_agent.config.schema import MonorepoConfig
from monorepo_agent.errors import ConfigCorrupt, NotInitialized
from monorepo_agent.utils.paths import atomic_write, ensure_dir, expand_path


def get_config_path(root: Path) -> Path:
    """Get the path of the configuration artifact for a monorepo root."""
    return root / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = " -> ".join(str(part) for part in item["loc"])
        parts.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return "; ".join(parts)


class ConfigStore:
    """
    Durable storage for one monorepo's configuration.

    Every mutation goes through load-modify-save. Writers are serialized
    by a re-entrant lock inside the process and an exclusive ``flock`` on
    ``config.lock`` across processes. Each save replaces the artifact with
    a single atomic rename.
    """

    def __init__(self, root: Path, config_path: Optional[Path] = None):
        """
        Initialize store.

        Args:
            root: Monorepo root directory.
            config_path: Optional override of the artifact location.
        """
        self.root = expand_path(root)
        self.config_path = config_path or get_config_path(self.root)
        self.lock_path = self.config_path.parent / LOCK_FILE_NAME
        self._lock = threading.RLock()
        self._lock_fd: Optional[int] = None
        self._lock_depth = 0

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the writer lock, re-entrant within one thread."""
        with self._lock:
            if self._lock_depth == 0:
                ensure_dir(self.lock_path.parent)
                fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
                try:
                    fcntl.flock(fd, fcntl.LOCK_EX)
                except BaseException:
                    os.close(fd)
                    raise
                self._lock_fd = fd
            self._lock_depth += 1
            try:
                yield
            finally:
                self._lock_depth -= 1
                if self._lock_depth == 0 and self._lock_fd is not None:
                    fcntl.flock(self._lock_fd, fcntl.LOCK_UN)
                    os.close(self._lock_fd)
                    self._lock_fd = None

    def exists(self) -> bool:
        """Check whether the configuration artifact exists."""
        return self.config_path.exists()

    def load(self) -> MonorepoConfig:
        """
        Load configuration from the artifact.

        Returns:
            MonorepoConfig: Validated configuration object.

        Raises:
            NotInitialized: If the artifact doesn't exist.
            ConfigCorrupt: If the artifact can't be parsed or validated.
        """
        if not self.config_path.exists():
            raise NotInitialized(self.config_path)

        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigCorrupt(self.config_path, f"invalid YAML syntax: {e}") from e

        if not isinstance(data, dict):
            raise ConfigCorrupt(self.config_path, "expected a mapping at the top level")

        try:
            config = MonorepoConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigCorrupt(self.config_path, _format_validation_error(e)) from e

        if Path(config.root_path).resolve() != self.root:
            raise ConfigCorrupt(
                self.config_path,
                f"root_path {config.root_path} does not match monorepo location {self.root}",
            )

        return config

    def save(self, config: MonorepoConfig) -> Path:
        """
        Save configuration, fully replacing the previous artifact.

        Args:
            config: Configuration object to save.

        Returns:
            Path: Path where config was saved.
        """
        # Use mode='json' to serialize Enums as their string values
        data = config.model_dump(mode="json", exclude_none=True)
        content = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

        with self._locked():
            atomic_write(self.config_path, content)

        return self.config_path

    def initialize(self) -> tuple[MonorepoConfig, bool]:
        """
        Load the existing configuration or create an empty one.

        Returns:
            Tuple of (config, was_created).
        """
        with self._locked():
            if self.exists():
                return self.load(), False

            config = MonorepoConfig(root_path=str(self.root))
            self.save(config)
            return config, True

    @contextmanager
    def transaction(self) -> Iterator[MonorepoConfig]:
        """
        Serialized read-modify-write cycle.

        The yielded configuration is saved when the block exits normally.
        If the block raises, nothing is written.

        Raises:
            NotInitialized: If the artifact doesn't exist.
        """
        if not self.exists():
            raise NotInitialized(self.config_path)
        with self._locked():
            config = self.load()
            yield config
            self.save(config)

    def delete(self) -> bool:
        """
        Remove the configuration artifact and with it all submodule state.

        Returns:
            True if an artifact was removed.
        """
        if not self.config_path.exists():
            return False
        with self._locked():
            if not self.config_path.exists():
                return False
            self.config_path.unlink()
            return True
