# SPDX-License-Identifier: MIT
"""Vendor manifest recording which remote packages are vendored.

The manifest is a JSON document stored inside the vendor directory, laid out
the way gvt writes it so existing tooling can read it:

    {
        "version": 0,
        "dependencies": [
            {
                "importpath": "github.com/pkg/errors",
                "repository": "https://github.com/pkg/errors",
                "vcs": "git",
                "revision": "645ef00459ed84a119197bfb8d8205042c6df63d",
                "branch": "master",
                "path": ""
            }
        ]
    }
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterator

from .errors import ManifestError

MANIFEST_VERSION = 0


@dataclass
class Dependency:
    """A vendored package record.

    Attributes:
        importpath: Import path the package is vendored under
        repository: URL of the repository it was fetched from
        vcs: Version control system used to fetch it
        revision: Revision that was vendored
        branch: Branch the revision was taken from
        path: Sub-directory of the repository that was copied, "" for the root
    """

    importpath: str
    repository: str
    vcs: str = "git"
    revision: str = ""
    branch: str = ""
    path: str = ""

    def provides(self, import_path: str) -> bool:
        """Check if this package provides an import path (itself or a subpackage)."""
        return import_path == self.importpath or import_path.startswith(self.importpath + "/")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dependency":
        """Create a Dependency from a manifest entry.

        Raises:
            ManifestError: If the entry has no import path
        """
        if not isinstance(data, dict) or not data.get("importpath"):
            raise ManifestError(None, f"dependency entry without importpath: {data!r}")
        return cls(
            importpath=str(data["importpath"]),
            repository=str(data.get("repository", "")),
            vcs=str(data.get("vcs", "git")),
            revision=str(data.get("revision", "")),
            branch=str(data.get("branch", "")),
            path=str(data.get("path", "")),
        )


@dataclass
class Manifest:
    """Collection of vendored packages, at most one record per import path."""

    dependencies: list[Dependency] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.dependencies)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.dependencies)

    def get(self, import_path: str) -> Dependency | None:
        """Get the record providing an import path, if any."""
        for dep in self.dependencies:
            if dep.provides(import_path):
                return dep
        return None

    def contains(self, import_path: str) -> bool:
        """Check if an import path is already vendored."""
        return self.get(import_path) is not None

    def add_dependency(self, dependency: Dependency) -> None:
        """Register a vendored package.

        Raises:
            ManifestError: If a record for the same import path already exists
        """
        for dep in self.dependencies:
            if dep.importpath == dependency.importpath:
                raise ManifestError(
                    None, f"dependency {dependency.importpath!r} is already in the manifest"
                )
        self.dependencies.append(dependency)

    def import_paths(self) -> list[str]:
        """Get the recorded import paths, sorted."""
        return sorted(dep.importpath for dep in self.dependencies)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk layout, dependencies sorted by import path."""
        ordered = sorted(self.dependencies, key=lambda d: d.importpath)
        return {
            "version": MANIFEST_VERSION,
            "dependencies": [asdict(dep) for dep in ordered],
        }


def read_manifest(path: str | Path) -> Manifest:
    """Load a manifest, returning an empty one if the file does not exist.

    Raises:
        ManifestError: If the file cannot be read or is not a valid manifest
    """
    path = Path(path)
    if not path.exists():
        return Manifest()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestError(path, f"invalid JSON: {e}") from e
    except OSError as e:
        raise ManifestError(path, f"could not read manifest: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(path, "manifest must be a JSON object")

    manifest = Manifest()
    try:
        for entry in data.get("dependencies") or []:
            manifest.add_dependency(Dependency.from_dict(entry))
    except ManifestError as e:
        raise ManifestError(path, e.reason) from e

    return manifest


def write_manifest(path: str | Path, manifest: Manifest) -> None:
    """Persist a manifest, creating parent directories as needed.

    Raises:
        ManifestError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(manifest.to_dict(), indent="\t") + "\n", encoding="utf-8")
    except OSError as e:
        raise ManifestError(path, f"could not write manifest: {e}") from e
