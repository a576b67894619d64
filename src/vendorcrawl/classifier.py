# SPDX-License-Identifier: MIT
"""Remote dependency classification for import paths.

An import path is treated as remote when, read as the host and path of an
``http://`` URL, its host contains a dot. This is an offline, syntactic
heuristic: no DNS lookups or repository probes are made, so classifying an
import can never trigger a network round-trip or a credential prompt. Paths
such as ``mycompany.internal/pkg`` are classified remote even if they are not
hosted anywhere, and dotless hosts like ``localhost/pkg`` are never remote.
"""

from __future__ import annotations

from typing import Callable
from urllib.parse import urlsplit

Classifier = Callable[[str], bool]


def is_local_import(import_path: str) -> bool:
    """Check if an import path is a relative reference such as ./pkg or ../pkg."""
    return import_path in (".", "..") or import_path.startswith(("./", "../"))


def import_host(import_path: str) -> str | None:
    """Get the host component of an import path read as an http URL.

    Returns:
        Host (including any port, excluding userinfo), or None if the
        synthesized URL does not parse
    """
    try:
        netloc = urlsplit("http://" + import_path).netloc
    except ValueError:
        return None

    host = netloc.rpartition("@")[2]
    if any(ch.isspace() or not ch.isprintable() for ch in host):
        return None

    # A port, if present, must be all digits; its range is not checked
    port = host.rpartition("]")[2].partition(":")[2]
    if port and not (port.isascii() and port.isdigit()):
        return None
    return host


def is_remote_dependency(import_path: str) -> bool:
    """Check if an import path names a remotely hosted package.

    Examples:
        >>> is_remote_dependency("fmt")
        False
        >>> is_remote_dependency("github.com/user/repo")
        True
        >>> is_remote_dependency("./local/pkg")
        False
    """
    if is_local_import(import_path):
        return False

    host = import_host(import_path)
    if host is None:
        return False
    return "." in host
