"""Paths relative to the directory of the running program."""

from __future__ import annotations

import functools
import os
import sys


@functools.lru_cache(maxsize=None)
def _program_dir() -> str:
    main = sys.argv[0] if sys.argv else ""
    if main and main != "-c":
        return os.path.dirname(os.path.abspath(main))
    if sys.executable:
        return os.path.dirname(os.path.abspath(sys.executable))
    return ""


def data_path(suffix: str) -> str:
    """Return ``suffix`` joined onto the directory of the running program."""
    return _program_dir() + "/" + suffix