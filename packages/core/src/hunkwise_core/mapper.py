"""Map validated model findings onto file/line review comments."""

from __future__ import annotations

import logging
import re

from hunkwise_core.models import ChunkDiff, ReviewCommentRecord, ReviewFinding

logger = logging.getLogger(__name__)

_DECIMAL_RE = re.compile(r"^\s*\+?\d+\s*$")


def parse_line_number(text: str) -> int | None:
    """Base-10 parse of a model-reported line number; None if it is not one."""
    if not _DECIMAL_RE.match(text or ""):
        return None
    return int(text.strip(), 10)


def map_findings(
    target_path: str | None,
    findings: list[ReviewFinding] | None,
    chunk: ChunkDiff | None = None,
    restrict_to_chunk: bool = False,
) -> list[ReviewCommentRecord]:
    """Anchor each finding to ``target_path``.

    Findings whose line number is not a non-negative decimal integer are
    dropped and logged. The line is otherwise taken as the model reported it;
    only with ``restrict_to_chunk`` is it checked against the chunk's lines.
    """
    if target_path is None or not findings:
        return []

    allowed = chunk.line_numbers() if (restrict_to_chunk and chunk is not None) else None

    records = []
    for finding in findings:
        line = parse_line_number(finding.lineNumber)
        if line is None:
            logger.warning("Dropping finding on %s: line number %r is not an integer", target_path, finding.lineNumber)
            continue
        if allowed is not None and line not in allowed:
            logger.warning("Dropping finding on %s: line %d is outside the reviewed chunk", target_path, line)
            continue
        records.append(ReviewCommentRecord(path=target_path, line=line, body=finding.reviewComment))
    return records
