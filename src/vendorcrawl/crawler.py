# SPDX-License-Identifier: MIT
"""Recursive import collection over a source tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from .errors import WalkError
from .parser import source_file_imports

logger = logging.getLogger(__name__)

Extractor = Callable[[Path], Iterable[str]]


def _raise_walk_error(error: OSError) -> None:
    raise WalkError(error.filename or "", error.strerror or str(error)) from error


def iter_source_files(root: str | Path, suffix: str = ".go") -> Iterable[Path]:
    """Yield every regular file under root whose name ends with suffix.

    Directories are visited in sorted order and symlinked directories are
    not followed.

    Raises:
        WalkError: If root or any directory beneath it cannot be listed
    """
    root = Path(root)
    if not root.is_dir():
        raise WalkError(root, "not a directory" if root.exists() else "no such directory")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            if not name.endswith(suffix):
                continue
            path = Path(dirpath) / name
            if path.is_file():
                yield path


def collect_imports(
    root: str | Path,
    suffix: str = ".go",
    extractor: Extractor = source_file_imports,
) -> set[str]:
    """Collect the import paths declared by every source file under root.

    Args:
        root: Directory to crawl
        suffix: File name suffix of source files
        extractor: Callable returning the imports of a single file

    Returns:
        Set of all import paths seen, duplicates merged

    Raises:
        WalkError: If the directory tree cannot be traversed
        ParseError: If a source file's import header is malformed
    """
    imports: set[str] = set()
    files = 0

    for path in iter_source_files(root, suffix):
        # Classification happens later, once per unique path
        imports.update(extractor(path))
        files += 1

    logger.debug("Collected %d imports from %d files under %s", len(imports), files, root)
    return imports
