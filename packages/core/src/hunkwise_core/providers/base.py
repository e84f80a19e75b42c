"""Base reviewer implementing the Template Method pattern.

All providers share the same request algorithm:
    review() → _call_api()   ← only this differs per provider
             → _parse()      ← pydantic validation against ReviewResponse

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one constrained API call and return the raw JSON text

Each prompt gets exactly one attempt. A failed chunk costs one chunk's
findings, so there is no retry loop here and the SDK clients are built with
their own retries disabled.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError

from hunkwise_core.errors import ModelError
from hunkwise_core.models import ReviewFinding, ReviewResponse

logger = logging.getLogger(__name__)

# Shared defaults — subclasses may override as class attributes if needed.
_MAX_TOKENS = 8000
_TEMPERATURE = 0.2
_TIMEOUT_SECONDS = 120.0


def response_schema() -> dict:
    """JSON schema of the only accepted response shape."""
    return ReviewResponse.model_json_schema()


class BaseReviewer(ABC):
    MODEL: str = ""
    MAX_TOKENS: int = _MAX_TOKENS
    TEMPERATURE: float = _TEMPERATURE
    TIMEOUT: float = _TIMEOUT_SECONDS

    def __init__(self, model: str | None = None):
        self.model = model or self.MODEL

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(self, prompt: str) -> list[ReviewFinding] | None:
        """Ask the model for findings on one rendered prompt.

        Returns the validated findings ([] when the model flagged nothing),
        or None when the call or the validation failed. Never raises.
        """
        logger.debug("%s request (model=%s):\n%s", self.__class__.__name__, self.model, prompt)
        try:
            raw = self._request(prompt)
            parsed = self._parse(raw)
        except ModelError as e:
            logger.warning("%s: %s", self.__class__.__name__, e.message)
            return None
        logger.debug("%s returned %d finding(s)", self.__class__.__name__, len(parsed.reviews))
        return list(parsed.reviews)

    # ------------------------------------------------------------------ #
    # Abstract — implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single schema-constrained API call and return the raw JSON text.

        This is the only method subclasses must implement. It may raise on
        failure; review() turns any error into a None result.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _request(self, prompt: str) -> str:
        try:
            return self._call_api(prompt)
        except ModelError:
            raise
        except Exception as e:
            raise ModelError(f"API call failed ({type(e).__name__}): {e}") from e

    def _parse(self, raw: str | None) -> ReviewResponse:
        """Validate the raw response text against ReviewResponse.

        Strips an outer ```json fence in case a provider wraps the payload,
        but leaves backticks inside comment strings alone.
        """
        if not raw or not raw.strip():
            raise ModelError("empty response")
        cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        try:
            return ReviewResponse.model_validate_json(cleaned)
        except ValidationError as e:
            logger.debug("Rejected response: %s", raw[:500])
            raise ModelError(f"response does not match the review schema: {e.error_count()} error(s)") from e
