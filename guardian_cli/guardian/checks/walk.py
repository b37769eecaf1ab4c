"""Directory walking and file loading shared by the checks."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from guardian.checks.models import CheckResult, Severity

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({"target", ".git", "node_modules", ".cargo"})
SOURCE_SUFFIX = ".rs"


def is_ignored_dir(path: Path) -> bool:
    return path.name in IGNORED_DIRS


def iter_files(root: Path, suffix: str = SOURCE_SUFFIX) -> Iterator[Path]:
    """Yield files under ``root`` with ``suffix``, depth-first in name order.

    Ignored directories are pruned. Directories that cannot be listed are
    skipped.
    """
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", root, e)
        return

    for entry in entries:
        path = Path(entry.path)
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            if not is_ignored_dir(path):
                yield from iter_files(path, suffix)
        elif entry.name.endswith(suffix):
            yield path


def read_text(path: Path) -> str:
    """Read a file as UTF-8; raises OSError or UnicodeDecodeError."""
    return path.read_text(encoding="utf-8")


def read_error(check_name: str, path: Path, error: Exception) -> CheckResult:
    """Warning-level result for a file that could not be read."""
    return CheckResult.fail(
        check_name,
        Severity.warning,
        f"Read error: {error}",
        file=str(path),
    )
