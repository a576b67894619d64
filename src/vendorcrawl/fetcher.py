# SPDX-License-Identifier: MIT
"""Fetching remote packages into vendor storage.

Repositories are located from import paths the way the go tool does it:
well-known hosts map directly to a repository URL, paths with a ``.git``
element name their repository explicitly, and anything else is resolved with
go-get discovery, reading the ``go-import`` meta tag served at
``https://<import path>?go-get=1``. Only git repositories are supported.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from html.parser import HTMLParser
from pathlib import Path
from typing import Protocol
from urllib.parse import urlsplit

import httpx

from .errors import FetchError
from .manifest import Dependency

logger = logging.getLogger(__name__)

# Hosts whose repositories always live at host/owner/repo
KNOWN_HOSTS = frozenset({"github.com", "bitbucket.org", "gitlab.com"})

INSECURE_SCHEMES = frozenset({"http", "git"})


class Fetcher(Protocol):
    """Materializes a remote package into vendor storage."""

    def fetch(self, import_path: str, storage_dir: Path) -> Dependency:
        """Vendor import_path under storage_dir / import_path and describe it."""
        ...


@dataclass
class RemoteRepo:
    """A repository located for an import path.

    Attributes:
        root: Import path prefix corresponding to the repository root
        url: Clone URL
        vcs: Version control system serving the repository
    """

    root: str
    url: str
    vcs: str = "git"


class _GoImportParser(HTMLParser):
    """Collects go-import meta tags from a discovery page."""

    def __init__(self) -> None:
        super().__init__()
        self.imports: list[tuple[str, str, str]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "meta":
            return
        values = dict(attrs)
        if values.get("name") != "go-import":
            return
        fields = (values.get("content") or "").split()
        if len(fields) == 3:
            self.imports.append((fields[0], fields[1], fields[2]))


def parse_go_import_meta(html: str) -> list[tuple[str, str, str]]:
    """Extract (prefix, vcs, repo url) triples from go-import meta tags."""
    parser = _GoImportParser()
    parser.feed(html)
    parser.close()
    return parser.imports


class GitFetcher:
    """Fetches git repositories and copies the imported package into storage."""

    def __init__(
        self,
        allow_insecure: bool = False,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        git: str = "git",
    ) -> None:
        """Initialize the fetcher.

        Args:
            allow_insecure: Permit plaintext transports for discovery and cloning
            client: HTTP client used for go-get discovery (default: one per lookup)
            timeout: Discovery request timeout in seconds
            git: git executable
        """
        self.allow_insecure = allow_insecure
        self.timeout = timeout
        self.git = git
        self._client = client

    def deduce_repository(self, import_path: str) -> RemoteRepo:
        """Locate the repository serving an import path.

        Raises:
            FetchError: If no git repository can be found for the path
        """
        parts = import_path.split("/")

        if parts[0] in KNOWN_HOSTS:
            if len(parts) < 3 or not parts[1] or not parts[2]:
                raise FetchError(import_path, f"invalid {parts[0]} import path")
            root = "/".join(parts[:3])
            return RemoteRepo(root=root, url=f"https://{root}")

        for i, part in enumerate(parts[1:], start=1):
            if part.endswith(".git"):
                root = "/".join(parts[: i + 1])
                return RemoteRepo(root=root, url=f"https://{root}")

        return self._discover(import_path)

    def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url)
        with httpx.Client(follow_redirects=True, timeout=self.timeout) as client:
            return client.get(url)

    def _discover(self, import_path: str) -> RemoteRepo:
        schemes = ["https", "http"] if self.allow_insecure else ["https"]
        last_error = ""

        for scheme in schemes:
            url = f"{scheme}://{import_path}?go-get=1"
            logger.debug("Discovering repository for %s via %s", import_path, url)
            try:
                response = self._get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                last_error = f"{url}: HTTP {e.response.status_code}"
                continue
            except httpx.HTTPError as e:
                last_error = f"{url}: {e}"
                continue

            matches = [
                (prefix, vcs, repo)
                for prefix, vcs, repo in parse_go_import_meta(response.text)
                if import_path == prefix or import_path.startswith(prefix + "/")
            ]
            if not matches:
                last_error = f"{url}: no go-import meta tag for {import_path}"
                continue

            prefix, vcs, repo = max(matches, key=lambda m: len(m[0]))
            if vcs != "git":
                raise FetchError(import_path, f"unsupported version control system {vcs!r}")
            return RemoteRepo(root=prefix, url=repo, vcs=vcs)

        raise FetchError(import_path, f"could not discover repository ({last_error})")

    def _run_git(self, import_path: str, *args: str, cwd: Path | None = None) -> str:
        # Never let git fall back to an interactive credential prompt
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        try:
            result = subprocess.run(
                [self.git, *args],
                cwd=str(cwd) if cwd else None,
                env=env,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            raise FetchError(import_path, f"git executable not found: {self.git}") from None

        if result.returncode != 0:
            raise FetchError(
                import_path, f"git {args[0]} failed (rc={result.returncode}): {result.stderr.strip()}"
            )
        return result.stdout.strip()

    def fetch(self, import_path: str, storage_dir: Path) -> Dependency:
        """Clone the repository for import_path and vendor the imported package.

        The package directory is copied to storage_dir / import_path, without
        the repository's .git metadata.

        Raises:
            FetchError: If the repository cannot be located, cloned, or copied
        """
        repo = self.deduce_repository(import_path)

        scheme = urlsplit(repo.url).scheme
        if scheme in INSECURE_SCHEMES and not self.allow_insecure:
            raise FetchError(
                import_path,
                f"refusing insecure {scheme} transport for {repo.url} (use --precaire to allow)",
            )

        subpath = import_path[len(repo.root) :].strip("/")
        destination = Path(storage_dir) / import_path
        logger.info("Fetching %s from %s", import_path, repo.url)

        with tempfile.TemporaryDirectory() as temp_dir:
            checkout = Path(temp_dir) / "repo"
            self._run_git(import_path, "clone", "--quiet", "--depth", "1", repo.url, str(checkout))
            revision = self._run_git(import_path, "rev-parse", "HEAD", cwd=checkout)
            branch = self._run_git(import_path, "rev-parse", "--abbrev-ref", "HEAD", cwd=checkout)

            source = checkout / subpath if subpath else checkout
            if not source.is_dir():
                raise FetchError(import_path, f"package directory {subpath!r} not found in {repo.url}")

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copytree(
                    source,
                    destination,
                    ignore=shutil.ignore_patterns(".git"),
                    dirs_exist_ok=True,
                )
            except OSError as e:
                raise FetchError(import_path, f"could not copy into {destination}: {e}") from e

        return Dependency(
            importpath=import_path,
            repository=repo.url,
            vcs=repo.vcs,
            revision=revision,
            branch=branch,
            path=subpath,
        )
