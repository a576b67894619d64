# SPDX-License-Identifier: MIT
"""Recursive vendoring of remote Go dependencies.

This package reads the imports declared by every source file in a project,
picks out the ones hosted remotely, fetches those not already in the vendor
manifest, and repeats inside each fetched package so that transitive
dependencies are vendored too.

Example:
    >>> from vendorcrawl import GitFetcher, VendorConfig, VendorOrchestrator
    >>>
    >>> config = VendorConfig.from_toml(".")
    >>> orchestrator = VendorOrchestrator(".", GitFetcher(), config)
    >>>
    >>> # Remove ./vendor, vendor everything again, write ./vendor/manifest
    >>> result = orchestrator.rebuild()
    >>> result.get_fetched_import_paths()
    ['github.com/pkg/errors', 'golang.org/x/sys/unix']
"""

__version__ = "0.1.0"

from .classifier import (
    Classifier,
    import_host,
    is_local_import,
    is_remote_dependency,
)
from .config import (
    VendorConfig,
    VendorConfigError,
    VendorResult,
)
from .crawler import (
    collect_imports,
    iter_source_files,
)
from .errors import (
    FetchError,
    ManifestError,
    ParseError,
    VendorCrawlError,
    WalkError,
)
from .fetcher import (
    Fetcher,
    GitFetcher,
    RemoteRepo,
    parse_go_import_meta,
)
from .manifest import (
    Dependency,
    Manifest,
    read_manifest,
    write_manifest,
)
from .orchestrator import VendorOrchestrator
from .parser import (
    parse_imports,
    source_file_imports,
)

__all__ = [
    # Config
    "VendorConfig",
    "VendorConfigError",
    "VendorResult",
    # Errors
    "VendorCrawlError",
    "ParseError",
    "WalkError",
    "FetchError",
    "ManifestError",
    # Parser
    "parse_imports",
    "source_file_imports",
    # Crawler
    "collect_imports",
    "iter_source_files",
    # Classifier
    "Classifier",
    "import_host",
    "is_local_import",
    "is_remote_dependency",
    # Manifest
    "Dependency",
    "Manifest",
    "read_manifest",
    "write_manifest",
    # Fetcher
    "Fetcher",
    "GitFetcher",
    "RemoteRepo",
    "parse_go_import_meta",
    # Orchestrator
    "VendorOrchestrator",
]
