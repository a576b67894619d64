# SPDX-License-Identifier: MIT
"""Exception hierarchy for vendorcrawl."""

from __future__ import annotations

from pathlib import Path


class VendorCrawlError(Exception):
    """Base class for every error that aborts a vendoring run."""

    pass


class ParseError(VendorCrawlError):
    """Raised when a source file's import header cannot be parsed.

    Attributes:
        filename: File being parsed
        line: 1-based line number of the offending token, if known
    """

    def __init__(self, filename: str, message: str, line: int | None = None) -> None:
        self.filename = filename
        self.line = line
        self.message = message
        location = f"{filename}:{line}" if line is not None else filename
        super().__init__(f"{location}: {message}")


class WalkError(VendorCrawlError):
    """Raised when a directory tree cannot be traversed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Could not walk in dir {path}: {reason}")


class FetchError(VendorCrawlError):
    """Raised when a remote package cannot be fetched into vendor storage."""

    def __init__(self, import_path: str, reason: str) -> None:
        self.import_path = import_path
        self.reason = reason
        super().__init__(f"Failed to fetch '{import_path}': {reason}")


class ManifestError(VendorCrawlError):
    """Raised when the vendor manifest cannot be read, written or updated."""

    def __init__(self, path: str | Path | None, reason: str) -> None:
        self.path = Path(path) if path is not None else None
        self.reason = reason
        if path is None:
            super().__init__(reason)
        else:
            super().__init__(f"{path}: {reason}")
