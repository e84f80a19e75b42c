"""Turn a GitHub ``pull_request`` event payload into a ChangeEvent and its diff."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from hunkwise_core.errors import EventShapeError
from hunkwise_core.models import ChangeEvent, EventKind

logger = logging.getLogger(__name__)

EVENT_PATH_ENV = "GITHUB_EVENT_PATH"

# PR opened → review the whole PR; new commits pushed → review before..after.
SUPPORTED_ACTIONS = {
    "opened": EventKind.CREATED,
    "synchronize": EventKind.UPDATED,
}


def read_event(event_path: str | None = None) -> dict:
    """Load the event payload from ``event_path`` or $GITHUB_EVENT_PATH."""
    path = event_path or os.environ.get(EVENT_PATH_ENV)
    if not path:
        raise EventShapeError(f"No event payload: pass --event-path or set {EVENT_PATH_ENV}.")
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise EventShapeError(f"Could not read event payload {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise EventShapeError(f"Event payload {path} is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise EventShapeError(f"Event payload {path} is not a JSON object.")
    return payload


def _require(payload: dict, *keys: str):
    value = payload
    for key in keys:
        if not isinstance(value, dict) or value.get(key) in (None, ""):
            raise EventShapeError(f"Event payload is missing '{'.'.join(keys)}'.")
        value = value[key]
    return value


def parse_event(payload: dict) -> ChangeEvent | None:
    """Build the ChangeEvent for a payload, or None for an unsupported action."""
    action = _require(payload, "action")
    kind = SUPPORTED_ACTIONS.get(action)
    if kind is None:
        logger.info("Unsupported event action: %s", action)
        return None

    number = payload.get("number")
    if number is None:
        number = _require(payload, "pull_request", "number")
    try:
        pull_number = int(number)
    except (TypeError, ValueError):
        raise EventShapeError(f"Event payload has a non-numeric PR number: {number!r}.")

    owner = _require(payload, "repository", "owner", "login")
    repo = _require(payload, "repository", "name")

    if kind is EventKind.UPDATED:
        return ChangeEvent(
            kind=kind,
            owner=owner,
            repo=repo,
            pull_number=pull_number,
            before=_require(payload, "before"),
            after=_require(payload, "after"),
        )
    return ChangeEvent(kind=kind, owner=owner, repo=repo, pull_number=pull_number)


def resolve_diff(platform, event: ChangeEvent) -> str:
    """Fetch the diff text this event should be reviewed against."""
    if event.kind is EventKind.CREATED:
        logger.info("Processing opened PR %s#%d", event.full_name, event.pull_number)
        return platform.get_pull_diff(event.owner, event.repo, event.pull_number)

    logger.info("Processing synchronized PR %s#%d: %s → %s", event.full_name, event.pull_number, event.before, event.after)
    return platform.get_compare_diff(event.owner, event.repo, event.before, event.after)
