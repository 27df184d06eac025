"""
Insert a header comment at the top of source files that lack one.

Usage::

    python -m devtools.header_comments [ROOT] [--dry]

A file already has a header when the first non-empty line among its first
eight is a comment.  Shebangs, ``"use strict"`` / ``"use client"``
directives and HTML doctypes stay above the inserted header.
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

logger = logging.getLogger(__name__)

SKIP_DIRS = {
    "node_modules", ".git", "venv", ".venv", "__pycache__", "dist", "build",
    ".pytest_cache", ".mypy_cache", ".tox", ".eggs",
}

HEADER_SCAN_LINES = 8

# extension -> (comment prefixes that count as a header, header template)
_STYLES = {
    ".js": (("/*", "//"), "/*\n  {label}\n*/"),
    ".jsx": (("/*", "//"), "/*\n  {label}\n*/"),
    ".ts": (("/*", "//"), "/*\n  {label}\n*/"),
    ".tsx": (("/*", "//"), "/*\n  {label}\n*/"),
    ".css": (("/*",), "/*\n  {label}\n*/"),
    ".html": (("<!--",), "<!--\n  {label}\n-->"),
    ".py": (("#",), "# {label}"),
}

_DIRECTIVE = re.compile(r"""^(["'])use (client|strict)\1""")


@dataclass
class FileResult:
    path: str
    changed: bool
    error: Optional[str] = None


def is_code_file(path: Path) -> bool:
    return path.suffix.lower() in _STYLES


def walk(root: Path) -> Iterator[Path]:
    """Yield code files under ``root`` in a stable order, skipping vendored dirs."""
    for current, dirs, filenames in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
        for name in sorted(filenames):
            path = Path(current) / name
            if is_code_file(path):
                yield path


def generate_header(relative_path: str, ext: str) -> str:
    _, template = _STYLES[ext]
    return template.format(label=f"File: {relative_path}")


def has_header(content: str, ext: str) -> bool:
    prefixes, _ = _STYLES[ext]
    for index, line in enumerate(content.splitlines()[:HEADER_SCAN_LINES]):
        stripped = line.strip()
        if not stripped or (index == 0 and stripped.startswith("#!")):
            continue
        return stripped.startswith(prefixes)
    return False


def insert_position(lines: Sequence[str], ext: str) -> int:
    """Index at which the header goes, below any line that must stay first."""
    insert_at = 0
    if lines and lines[0].startswith("#!"):
        insert_at = 1

    first = next((i for i, line in enumerate(lines) if line.strip()), None)
    if first is not None and _DIRECTIVE.match(lines[first].strip()):
        insert_at = max(insert_at, first + 1)

    if ext == ".html" and lines and lines[0].lower().startswith("<!doctype"):
        insert_at = max(insert_at, 1)
    return insert_at


def add_header(content: str, relative_path: str, ext: str) -> Optional[str]:
    """Return ``content`` with a header inserted, or ``None`` if it has one."""
    if has_header(content, ext):
        return None
    lines = re.split(r"\r?\n", content)
    at = insert_position(lines, ext)
    lines[at:at] = generate_header(relative_path, ext).split("\n") + [""]
    return "\n".join(lines)


def process_file(path: Path, root: Path, dry_run: bool = False) -> FileResult:
    rel = path.relative_to(root).as_posix()
    try:
        raw = path.read_text(encoding="utf-8")
        updated = add_header(raw, rel, path.suffix.lower())
        if updated is None:
            return FileResult(rel, changed=False)
        if not dry_run:
            path.write_text(updated, encoding="utf-8")
        return FileResult(rel, changed=True)
    except (OSError, UnicodeDecodeError) as exc:
        return FileResult(rel, changed=False, error=str(exc))


def run(root: Path, dry_run: bool = False) -> List[FileResult]:
    return [process_file(path, root, dry_run) for path in walk(root)]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("root", nargs="?", default=".", help="project root (default: cwd)")
    parser.add_argument("--dry", action="store_true", help="report changes without writing")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)
    root = Path(args.root).resolve()
    if args.dry:
        logger.info("Dry run mode: no files will be modified")

    results = run(root, dry_run=args.dry)
    changed = [r for r in results if r.changed]
    logger.info("Scanned %d files, updated %d files.", len(results), len(changed))
    for r in changed:
        logger.info(" + %s", r.path)

    errors = [r for r in results if r.error]
    if errors:
        logger.error("Errors:")
        for r in errors:
            logger.error("- %s %s", r.path, r.error)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
