"""Unified diff → FileDiff / ChunkDiff / LineChange.

The raw text is split into per-file sections on ``diff --git`` boundaries and
each section is handed to unidiff on its own. A section unidiff rejects
(truncated hunk, garbage) is logged and dropped so one bad file never costs
the rest of the review.
"""

from __future__ import annotations

import logging

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from hunkwise_core.models import ChunkDiff, FileDiff, LineChange

logger = logging.getLogger(__name__)

_FILE_HEADER = "diff --git "
_DEV_NULL = "/dev/null"
_CHANGE_TYPES = ("+", "-", " ")


def parse_diff(diff_text: str | None) -> list[FileDiff]:
    """Parse a unified diff into FileDiff entries in order of appearance.

    Never raises: empty or unparseable input yields an empty list.
    """
    if not diff_text or not diff_text.strip():
        return []

    files: list[FileDiff] = []
    for section in _split_sections(diff_text):
        try:
            patch_set = PatchSet(section)
        except UnidiffParseError as e:
            logger.warning("Skipping unparseable diff section (%s): %s", e, section.splitlines()[0][:120])
            continue
        for patched_file in patch_set:
            files.append(_to_file_diff(patched_file))
    return files


def _split_sections(diff_text: str) -> list[str]:
    sections: list[str] = []
    current: list[str] = []
    for line in diff_text.splitlines(keepends=True):
        if line.startswith(_FILE_HEADER) and current:
            sections.append("".join(current))
            current = []
        current.append(line)
    if current:
        sections.append("".join(current))
    return sections


def _target_path(patched_file) -> str | None:
    target = patched_file.target_file
    if patched_file.is_removed_file or target is None or target == _DEV_NULL:
        return None
    if target.startswith("b/"):
        target = target[2:]
    return target


def _to_file_diff(patched_file) -> FileDiff:
    return FileDiff(
        target_path=_target_path(patched_file),
        chunks=tuple(_to_chunk(hunk) for hunk in patched_file),
    )


def _to_chunk(hunk) -> ChunkDiff:
    header = f"@@ -{hunk.source_start},{hunk.source_length} +{hunk.target_start},{hunk.target_length} @@"
    section = (hunk.section_header or "").strip()
    if section:
        header = f"{header} {section}"

    changes = []
    for line in hunk:
        # "\ No newline at end of file" markers are not line changes.
        if line.line_type not in _CHANGE_TYPES:
            continue
        changes.append(
            LineChange(
                content=line.line_type + line.value.rstrip("\r\n"),
                new_line_number=line.target_line_no,
                old_line_number=line.source_line_no,
            )
        )
    return ChunkDiff(header=header, raw_content=str(hunk), changes=tuple(changes))
