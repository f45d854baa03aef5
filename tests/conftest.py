# Monorepo Agent Test Fixtures
# Pytest fixtures for Monorepo Agent tests

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from monorepo_agent.config.store import ConfigStore
from monorepo_agent.registry import SubmoduleRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """
    Create a parent directory holding a monorepo and sibling checkouts.

    Layout:
        vendroo-monorepo/{user_app,admin_app,shared}/
        user_app/, admin_app/   (siblings; shared has none)
    """
    monorepo = temp_dir / "vendroo-monorepo"
    monorepo.mkdir()

    for name in ("user_app", "admin_app", "shared"):
        submodule = monorepo / name
        (submodule / "lib" / "secret").mkdir(parents=True)
        (submodule / "test").mkdir()
        (submodule / "lib" / "main.dart").write_text(f"// {name}\n", encoding="utf-8")
        (submodule / "lib" / "secret" / "key").write_text("s3cr3t\n", encoding="utf-8")
        (submodule / "test" / "main_test.dart").write_text("// test\n", encoding="utf-8")
        (submodule / "pubspec.yaml").write_text(f"name: {name}\n", encoding="utf-8")
        (submodule / "README.md").write_text("# readme\n", encoding="utf-8")

    (monorepo / "notes.txt").write_text("not a directory\n", encoding="utf-8")

    for name in ("user_app", "admin_app"):
        (temp_dir / name).mkdir()

    return temp_dir


@pytest.fixture
def monorepo_root(workspace: Path) -> Path:
    """The monorepo root inside the workspace."""
    return workspace / "vendroo-monorepo"


@pytest.fixture
def store(monorepo_root: Path) -> ConfigStore:
    """An initialized configuration store."""
    config_store = ConfigStore(monorepo_root)
    config_store.initialize()
    return config_store


@pytest.fixture
def registry(store: ConfigStore) -> SubmoduleRegistry:
    """A registry over the initialized store."""
    return SubmoduleRegistry(store)
