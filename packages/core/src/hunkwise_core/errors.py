"""Closed set of failure kinds a review run can hit.

Every pipeline stage raises exactly one of these, so the caller can tell a
bad config from a rejected submission without inspecting message text.
Only ModelError is recovered locally (the chunk is skipped); every other
kind ends the run.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIG = "config"
    EVENT_SHAPE = "event_shape"
    FETCH = "fetch"
    MODEL = "model"
    SUBMISSION = "submission"


class ReviewError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(ReviewError):
    """Missing credential, unknown provider or invalid setting."""

    kind = ErrorKind.CONFIG


class EventShapeError(ReviewError):
    """The triggering event payload lacks a required field."""

    kind = ErrorKind.EVENT_SHAPE


class FetchError(ReviewError):
    """PR metadata or diff text could not be fetched."""

    kind = ErrorKind.FETCH


class ModelError(ReviewError):
    """The model call failed or returned a non-conforming result."""

    kind = ErrorKind.MODEL


class SubmissionError(ReviewError):
    """The platform rejected the batched review."""

    kind = ErrorKind.SUBMISSION
