"""Cargo manifest discovery and parsing."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from guardian.checks.walk import is_ignored_dir

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"


def load_manifest(path: Path) -> dict[str, Any]:
    """Parse a manifest; raises OSError or tomllib.TOMLDecodeError."""
    with path.open("rb") as f:
        return tomllib.load(f)


def try_load_manifest(path: Path) -> dict[str, Any] | None:
    """Parse a manifest, returning None when missing or unparsable."""
    if not path.is_file():
        return None
    try:
        return load_manifest(path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Could not parse %s: %s", path, e)
        return None


def find_manifests(project_root: Path) -> list[Path]:
    """Root manifest plus one in each immediate, non-ignored subdirectory."""
    manifests: list[Path] = []
    root_manifest = project_root / MANIFEST_NAME
    if root_manifest.is_file():
        manifests.append(root_manifest)

    for child in _subdirs(project_root):
        candidate = child / MANIFEST_NAME
        if candidate.is_file():
            manifests.append(candidate)
    return manifests


def is_workspace(manifest: dict[str, Any]) -> bool:
    return "workspace" in manifest


def get_path(data: dict[str, Any], dotted: str) -> Any:
    """Look up a nested key like ``package.edition``; None if any part is missing."""
    node: Any = data
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def workspace_members(project_root: Path, manifest: dict[str, Any]) -> list[Path]:
    """Member crate directories, from ``workspace.members`` globs when declared."""
    patterns = get_path(manifest, "workspace.members")
    if isinstance(patterns, list) and patterns:
        members: set[Path] = set()
        for pattern in patterns:
            if not isinstance(pattern, str) or not pattern.strip():
                continue
            if Path(pattern).is_absolute():
                logger.warning("Ignoring absolute workspace member %r", pattern)
                continue
            try:
                matches = list(project_root.glob(pattern))
            except (ValueError, NotImplementedError) as e:
                logger.warning("Ignoring workspace member pattern %r: %s", pattern, e)
                continue
            for match in matches:
                if match.is_dir() and not is_ignored_dir(match) and match != project_root:
                    members.add(match)
        return sorted(members)
    return _subdirs(project_root)


def _subdirs(directory: Path) -> list[Path]:
    try:
        children = sorted(p for p in directory.iterdir() if p.is_dir())
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", directory, e)
        return []
    return [p for p in children if not is_ignored_dir(p)]
