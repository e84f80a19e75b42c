"""Data types flowing through the review pipeline.

Parsed diff entities and comment records are frozen dataclasses: once the
diff is parsed nothing downstream may rewrite it. The model's response shape
is a pydantic model because it is untrusted input that must be validated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class EventKind(str, Enum):
    CREATED = "created"  # PR opened: review the full PR range
    UPDATED = "updated"  # new commits pushed: review before..after


@dataclass(frozen=True)
class ChangeEvent:
    kind: EventKind
    owner: str
    repo: str
    pull_number: int
    before: str | None = None
    after: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class PRContext:
    owner: str
    repo: str
    pull_number: int
    title: str
    description: str


@dataclass(frozen=True)
class LineChange:
    """One line of a hunk.

    Added lines carry only a new-file number, removed lines only an old-file
    number, context lines carry both.
    """

    content: str
    new_line_number: int | None = None
    old_line_number: int | None = None

    @property
    def line_number(self) -> int | None:
        # Prefer the new-file number; removed lines fall back to the old one.
        if self.new_line_number is not None:
            return self.new_line_number
        return self.old_line_number


@dataclass(frozen=True)
class ChunkDiff:
    header: str
    raw_content: str
    changes: tuple[LineChange, ...] = ()

    def line_numbers(self) -> set[int]:
        return {c.line_number for c in self.changes if c.line_number is not None}


@dataclass(frozen=True)
class FileDiff:
    target_path: str | None  # None for a deleted file
    chunks: tuple[ChunkDiff, ...] = ()

    @property
    def is_deleted(self) -> bool:
        return self.target_path is None


class ReviewFinding(BaseModel):
    """A single model-proposed comment, keyed by a line number as text."""

    model_config = ConfigDict(extra="forbid")

    lineNumber: str
    reviewComment: str


class ReviewResponse(BaseModel):
    """The only response shape the model is allowed to return."""

    model_config = ConfigDict(extra="forbid")

    reviews: list[ReviewFinding]


@dataclass(frozen=True)
class ReviewCommentRecord:
    path: str
    line: int
    body: str

    def as_dict(self) -> dict:
        return {"path": self.path, "line": self.line, "body": self.body}
