# SPDX-License-Identifier: MIT
"""Vendoring configuration.

This module provides the configuration dataclass controlling where vendored
packages are stored, which files are crawled, and how fetches against
rate-limited hosts are paced.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import VendorCrawlError
from .manifest import Dependency

CONFIG_FILENAME = "vendorcrawl.toml"

# Hosts known to throttle bursts of anonymous clones
DEFAULT_PACED_HOSTS = ("github.com",)


class VendorConfigError(VendorCrawlError):
    """Raised when vendor configuration is invalid."""

    pass


@dataclass
class VendorConfig:
    """Configuration for dependency vendoring.

    Attributes:
        vendor_dir: Name of the vendor storage directory, relative to the project root
        manifest_file: Name of the manifest file inside the vendor directory
        source_suffix: Suffix of source files whose imports are crawled
        paced_hosts: Hosts that get a fixed delay before every fetch
        pacing_delay: Seconds to wait before fetching from a paced host
        allow_insecure: Permit plaintext transports (http, git) when fetching
    """

    vendor_dir: str = "vendor"
    manifest_file: str = "manifest"
    source_suffix: str = ".go"
    paced_hosts: tuple[str, ...] = field(default_factory=lambda: DEFAULT_PACED_HOSTS)
    pacing_delay: float = 5.0
    allow_insecure: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.vendor_dir:
            raise VendorConfigError("vendor_dir is required")
        # The vendor directory is deleted on every rebuild, so it must never be the project root
        vendor_path = Path(self.vendor_dir)
        if vendor_path.is_absolute() or not vendor_path.parts or ".." in vendor_path.parts:
            raise VendorConfigError(
                f"Invalid vendor_dir: {self.vendor_dir!r}. "
                "Must be a relative path to a subdirectory of the project."
            )
        if not self.manifest_file or "/" in self.manifest_file:
            raise VendorConfigError(f"Invalid manifest_file: {self.manifest_file!r}")
        if not self.source_suffix:
            raise VendorConfigError("source_suffix is required")
        if self.pacing_delay < 0:
            raise VendorConfigError(f"pacing_delay must not be negative, got {self.pacing_delay}")
        self.paced_hosts = tuple(self.paced_hosts)

    def storage_dir(self, project_dir: str | Path) -> Path:
        """Get the vendor storage directory for a project root."""
        return Path(project_dir) / self.vendor_dir

    def manifest_path(self, project_dir: str | Path) -> Path:
        """Get the manifest file path for a project root."""
        return self.storage_dir(project_dir) / self.manifest_file

    def is_paced(self, host: str | None) -> bool:
        """Check if fetches from a host must be delayed."""
        return host is not None and host in self.paced_hosts

    @classmethod
    def from_toml(cls, project_dir: str | Path, **overrides: Any) -> "VendorConfig":
        """Load configuration from vendorcrawl.toml in a project directory.

        A missing file yields the defaults. Keyword overrides that are not
        None take precedence over values read from the file.

        Args:
            project_dir: Directory containing vendorcrawl.toml
            **overrides: Field values that replace file values

        Returns:
            VendorConfig instance

        Raises:
            VendorConfigError: If the file is invalid or contains unknown keys
        """
        path = Path(project_dir) / CONFIG_FILENAME
        data: dict[str, Any] = {}

        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise VendorConfigError(f"Invalid TOML syntax in {path}: {e}") from e
            except OSError as e:
                raise VendorConfigError(f"Could not read {path}: {e}") from e

        return cls.from_dict(data, **overrides)

    @classmethod
    def from_dict(cls, data: dict[str, Any], **overrides: Any) -> "VendorConfig":
        """Create VendorConfig from a parsed vendorcrawl.toml dictionary.

        Args:
            data: Parsed TOML document; settings live in the [vendor] table
            **overrides: Field values that replace file values

        Returns:
            VendorConfig instance

        Raises:
            VendorConfigError: If the [vendor] table has unknown keys or bad types
        """
        vendor = data.get("vendor", {})
        if not isinstance(vendor, dict):
            raise VendorConfigError("[vendor] must be a table")

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(vendor) - known)
        if unknown:
            raise VendorConfigError(f"Unknown [vendor] keys: {', '.join(unknown)}")

        values = dict(vendor)
        values.update({k: v for k, v in overrides.items() if v is not None})

        if "paced_hosts" in values:
            hosts = values["paced_hosts"]
            if isinstance(hosts, str) or not all(isinstance(h, str) for h in hosts):
                raise VendorConfigError("paced_hosts must be a list of host names")
            values["paced_hosts"] = tuple(hosts)

        if "pacing_delay" in values:
            delay = values["pacing_delay"]
            if isinstance(delay, bool) or not isinstance(delay, (int, float)):
                raise VendorConfigError("pacing_delay must be a number of seconds")
            values["pacing_delay"] = float(delay)

        return cls(**values)


@dataclass
class VendorResult:
    """Result of a vendoring run.

    Attributes:
        project_dir: Root of the project that was vendored
        fetched: Packages fetched during the run, in fetch order
        skipped: Import paths found already vendored when their turn came
    """

    project_dir: Path | None = None
    fetched: list[Dependency] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def get_fetched_import_paths(self) -> list[str]:
        """Get the import paths fetched during the run, in fetch order."""
        return [dep.importpath for dep in self.fetched]
