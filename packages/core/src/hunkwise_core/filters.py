"""Exclude files from review by glob pattern."""

from __future__ import annotations

import fnmatch
import logging
from typing import Iterable

from hunkwise_core.errors import ConfigError
from hunkwise_core.models import FileDiff

logger = logging.getLogger(__name__)


def parse_patterns(raw: str | Iterable[str] | None) -> list[str]:
    """Normalise exclusion patterns.

    Accepts the comma-separated string used by action inputs and env vars
    ("*.md, dist/**") or a list from the YAML config. Blank entries are dropped.
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    patterns = []
    for item in items:
        if item is None:
            continue
        if not isinstance(item, str):
            raise ConfigError(f"exclude patterns must be strings, got {item!r}.")
        if item.strip():
            patterns.append(item.strip())
    return patterns


def matches_glob(path: str, pattern: str) -> bool:
    """Return True if the full relative path matches a shell-style glob.

    Matching is case-sensitive and segment-aware:
    - "*", "?" and "[...]" never cross a "/": "*.md" matches "README.md"
      but not "docs/guide.md"
    - "**" as a whole segment matches zero or more segments: "**/*.md"
      matches both of the above
    - a segment starting with "." is only matched by a pattern segment that
      starts with ".", and "**" never consumes one: "*.md" skips ".notes.md"
    """
    return _match_segments(path.split("/"), pattern.split("/"))


def _match_segments(parts: list[str], pats: list[str]) -> bool:
    if not pats:
        return not parts
    head, rest = pats[0], pats[1:]
    if head == "**":
        for i in range(len(parts) + 1):
            if _match_segments(parts[i:], rest):
                return True
            if i < len(parts) and parts[i].startswith("."):
                return False
        return False
    if not parts:
        return False
    if parts[0].startswith(".") and not head.startswith("."):
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def is_excluded(path: str, patterns: list[str]) -> bool:
    return any(matches_glob(path, pattern) for pattern in patterns)


def filter_files(files: list[FileDiff], patterns: list[str]) -> list[FileDiff]:
    """Drop deleted files and files whose target path matches any pattern."""
    kept = []
    for file in files:
        if file.is_deleted:
            logger.debug("Skipping deleted file")
            continue
        if is_excluded(file.target_path, patterns):
            logger.info("Excluded by pattern: %s", file.target_path)
            continue
        kept.append(file)
    return kept
