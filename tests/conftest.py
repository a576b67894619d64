# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for vendorcrawl tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import pytest
from click.testing import CliRunner

from vendorcrawl.errors import FetchError
from vendorcrawl.manifest import Dependency


def go_source(*imports: str, package: str = "main") -> str:
    """Render a Go source file importing the given paths."""
    if not imports:
        return f"package {package}\n\nfunc main() {{}}\n"
    specs = "".join(f'\t"{path}"\n' for path in imports)
    return f"package {package}\n\nimport (\n{specs})\n\nfunc main() {{}}\n"


def write_go(path: Path, *imports: str, package: str = "main") -> Path:
    """Write a Go source file importing the given paths."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(go_source(*imports, package=package), encoding="utf-8")
    return path


class FakeFetcher:
    """Fetcher serving packages from an in-memory upstream.

    Attributes:
        upstream: Maps import path to the imports of that package's single file
        calls: Import paths passed to fetch, in order
        fail_on: Import paths whose fetch raises FetchError
    """

    def __init__(self, upstream: dict[str, Iterable[str]], fail_on: Iterable[str] = ()) -> None:
        self.upstream = {path: list(imports) for path, imports in upstream.items()}
        self.calls: list[str] = []
        self.fail_on = set(fail_on)

    def fetch(self, import_path: str, storage_dir: Path) -> Dependency:
        self.calls.append(import_path)
        if import_path in self.fail_on or import_path not in self.upstream:
            raise FetchError(import_path, "repository not found")

        name = import_path.rsplit("/", 1)[-1].replace(".", "_").replace("-", "_")
        write_go(storage_dir / import_path / f"{name}.go", *self.upstream[import_path], package=name)
        return Dependency(
            importpath=import_path,
            repository=f"https://{import_path}",
            revision=f"rev-{name}",
            branch="master",
        )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_fetcher() -> Callable[..., FakeFetcher]:
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """Create a small Go project importing std, local, and remote packages."""
    project_dir = tmp_path / "project"
    write_go(project_dir / "main.go", "fmt", "os", "github.com/user/alpha", "./internal/util")
    write_go(
        project_dir / "internal" / "util" / "util.go",
        "strings",
        "example.org/beta",
        package="util",
    )
    (project_dir / "README.md").write_text("# project\n", encoding="utf-8")
    return project_dir
