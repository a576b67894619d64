# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import imports

__all__ = ["imports"]
