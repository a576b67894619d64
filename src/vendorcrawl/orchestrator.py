# SPDX-License-Identifier: MIT
"""Recursive crawl, classify, fetch and recurse vendoring.

The orchestrator reads every import in a project, fetches the remote ones
that are not yet in the manifest, and then repeats the process inside each
freshly fetched package so its dependencies are vendored too. All packages,
however deep, are stored in the root project's vendor directory and recorded
in its single manifest.

Directories are passed explicitly; the process working directory is never
changed.
"""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from typing import Callable

from .classifier import Classifier, import_host, is_remote_dependency
from .config import VendorConfig, VendorResult
from .crawler import Extractor, collect_imports
from .errors import VendorCrawlError
from .fetcher import Fetcher
from .manifest import Manifest, read_manifest, write_manifest
from .parser import source_file_imports

logger = logging.getLogger(__name__)

# Directory name the go tool reads vendored packages from
PACKAGE_VENDOR_DIR = "vendor"


class VendorOrchestrator:
    """Vendors the transitive closure of a project's remote imports."""

    def __init__(
        self,
        project_dir: str | Path,
        fetcher: Fetcher,
        config: VendorConfig | None = None,
        classifier: Classifier = is_remote_dependency,
        extractor: Extractor = source_file_imports,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            project_dir: Root of the project whose vendor directory is managed
            fetcher: Fetches remote packages into vendor storage
            config: Vendor configuration (default: VendorConfig())
            classifier: Decides whether an import path is remote
            extractor: Returns the imports of a single source file
            sleep: Called with the pacing delay before fetches from paced hosts
        """
        self.project_dir = Path(project_dir)
        self.fetcher = fetcher
        self.config = config or VendorConfig()
        self.classifier = classifier
        self.extractor = extractor
        self.sleep = sleep

    @property
    def storage_dir(self) -> Path:
        """Directory every package is vendored into."""
        return self.config.storage_dir(self.project_dir)

    @property
    def manifest_path(self) -> Path:
        return self.config.manifest_path(self.project_dir)

    def reset(self) -> None:
        """Remove the vendor directory and everything in it.

        Raises:
            VendorCrawlError: If the directory cannot be removed
        """
        storage = self.storage_dir
        try:
            if storage.is_symlink() or storage.is_file():
                storage.unlink()
            elif storage.exists():
                logger.info("Removing %s", storage)
                shutil.rmtree(storage)
        except OSError as e:
            raise VendorCrawlError(f"Could not remove {storage}: {e}") from e

    def rebuild(self) -> VendorResult:
        """Rebuild the vendor directory and manifest from scratch.

        Deletes any existing vendor directory, vendors every remote import of
        the project recursively, and writes the resulting manifest. Nothing
        is written if the run fails.

        Returns:
            VendorResult describing the fetched packages

        Raises:
            VendorCrawlError: If crawling, fetching, or manifest handling fails
        """
        self.reset()
        manifest = read_manifest(self.manifest_path)

        result = self.vendor(self.project_dir, True, manifest)

        write_manifest(self.manifest_path, manifest)
        logger.info("Wrote %s with %d dependencies", self.manifest_path, len(manifest))
        return result

    def remote_imports(self, directory: Path, is_root: bool) -> set[str]:
        """Get the remote imports of a directory that may need vendoring.

        The root is always crawled. A fetched package that ships its own
        vendor directory is trusted as-is and not crawled. Go packages always
        name theirs "vendor", whatever the project's vendor_dir is.
        """
        if not is_root and (directory / PACKAGE_VENDOR_DIR).exists():
            logger.debug("%s has its own vendor directory, not crawling", directory)
            return set()

        imports = collect_imports(directory, self.config.source_suffix, self.extractor)
        return {path for path in imports if self.classifier(path)}

    def vendor(
        self,
        directory: str | Path,
        is_root: bool,
        manifest: Manifest,
        result: VendorResult | None = None,
    ) -> VendorResult:
        """Vendor the remote imports of directory, then of each fetched package.

        Args:
            directory: Directory to crawl
            is_root: True for the project root, False for a fetched package
            manifest: Manifest to consult and register fetched packages in
            result: Result to accumulate into (created if None)

        Returns:
            VendorResult accumulated over this call and all nested calls

        Raises:
            VendorCrawlError: On the first crawl, fetch, or manifest failure;
                packages later in the worklist are not fetched
        """
        directory = Path(directory)
        if result is None:
            result = VendorResult(project_dir=self.project_dir)

        logger.debug("Vendoring imports of %s", directory)
        worklist = sorted(
            path for path in self.remote_imports(directory, is_root) if not manifest.contains(path)
        )

        for import_path in worklist:
            # A nested call may have vendored it since the worklist was built
            if manifest.contains(import_path):
                logger.info("%s already vendored", import_path)
                result.skipped.append(import_path)
                continue

            if self.config.is_paced(import_host(import_path)):
                logger.debug("Waiting %.1fs before fetching %s", self.config.pacing_delay, import_path)
                self.sleep(self.config.pacing_delay)

            dependency = self.fetcher.fetch(import_path, self.storage_dir)
            manifest.add_dependency(dependency)
            result.fetched.append(dependency)
            logger.info("Vendored %s at %s", import_path, dependency.revision or "unknown revision")

            self.vendor(self.storage_dir / import_path, False, manifest, result)

        return result
