"""Check that local image links in markdown carry a cache-busting query."""

from __future__ import annotations

import re
from pathlib import Path

from guardian.checks.models import CheckResult, Severity
from guardian.checks.scanner import split_lines
from guardian.checks.walk import iter_files, read_error, read_text

CHECK_NAME = "cache-busting"

README_NAMES = ("README.md", "readme.md", "Readme.md")
DOCS_DIR = "docs"
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")
CACHE_BUSTING_KEYS = frozenset({"v", "ts", "t", "version", "hash"})
EXTERNAL_PREFIXES = ("http://", "https://")

_MARKDOWN_IMAGE = re.compile(r"!\[[^\]]*\]\(\s*<?([^)\s>]*)")
_SRC_DOUBLE = re.compile(r'src="([^"]*)"')
_SRC_SINGLE = re.compile(r"src='([^']*)'")


def check_cache_busting(project_root: Path) -> list[CheckResult]:
    results: list[CheckResult] = []
    for path in find_markdown_files(project_root):
        results.extend(check_markdown_file(path))

    if not results:
        results.append(CheckResult.ok(CHECK_NAME, "No markdown files with images found"))
    return results


def find_markdown_files(project_root: Path) -> list[Path]:
    """README variants and docs/ markdown, de-duplicated by file identity."""
    candidates = [project_root / name for name in README_NAMES]
    docs_dir = project_root / DOCS_DIR
    if docs_dir.is_dir():
        candidates.extend(iter_files(docs_dir, ".md"))

    seen: set[tuple[int, int]] = set()
    files: list[Path] = []
    for path in candidates:
        try:
            if not path.is_file():
                continue
            stat = path.stat()
        except OSError:
            continue
        identity = (stat.st_dev, stat.st_ino)
        if identity in seen:
            continue
        seen.add(identity)
        files.append(path)
    return files


def check_markdown_file(path: Path) -> list[CheckResult]:
    try:
        content = read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        return [read_error(CHECK_NAME, path, e)]

    results: list[CheckResult] = []
    name = path.name
    for number, line in enumerate(split_lines(content), start=1):
        for link in extract_image_links(line):
            if not needs_cache_busting(link):
                continue
            sep = "&" if "?" in link else "?"
            results.append(
                CheckResult.fail(
                    CHECK_NAME,
                    Severity.warning,
                    f"{name}: Image link without cache-busting: {link}",
                    file=str(path),
                    line=number,
                    fix=(
                        f"Add cache-busting parameter: {link}{sep}v=<version> "
                        f"or {link}{sep}ts=<timestamp>"
                    ),
                )
            )

    if not results:
        results.append(
            CheckResult.ok(CHECK_NAME, f"{name}: All image links have cache-busting", file=str(path))
        )
    return results


def extract_image_links(line: str) -> list[str]:
    """Markdown ``![alt](path)`` targets, then ``src="..."`` and ``src='...'`` values."""
    links = [m.group(1) for m in _MARKDOWN_IMAGE.finditer(line)]
    links.extend(m.group(1) for m in _SRC_DOUBLE.finditer(line))
    links.extend(m.group(1) for m in _SRC_SINGLE.finditer(line))
    return [link for link in links if link]


def needs_cache_busting(link: str) -> bool:
    """True for a local image link whose query lacks a cache-busting key."""
    if link.startswith(EXTERNAL_PREFIXES):
        return False
    lowered = link.lower()
    if not any(ext in lowered for ext in IMAGE_EXTENSIONS):
        return False
    return not has_cache_busting(link)


def has_cache_busting(link: str) -> bool:
    query = link.partition("?")[2].partition("#")[0]
    for param in query.split("&"):
        key, sep, _ = param.partition("=")
        if sep and key in CACHE_BUSTING_KEYS:
            return True
    return False
