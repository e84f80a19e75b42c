from __future__ import annotations

import json

from hunkwise_core.errors import ModelError
from hunkwise_core.providers.base import BaseReviewer, response_schema

_TOOL_NAME = "submit_reviews"


class AnthropicReviewer(BaseReviewer):
    MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str, model: str | None = None):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'hunkwise[anthropic]'"
            )
        super().__init__(model)
        self.client = Anthropic(api_key=api_key, timeout=self.TIMEOUT, max_retries=0)

    def _call_api(self, prompt: str) -> str:
        # Imported inside the method because the anthropic package is optional;
        # __init__ already validated it is installed before we reach here.
        from anthropic.types import ToolUseBlock

        # Forcing a single tool call whose input_schema is the review schema
        # is Anthropic's way of constraining the output shape.
        response = self.client.messages.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            tools=[
                {
                    "name": _TOOL_NAME,
                    "description": "Submit the review comments for the diff.",
                    "input_schema": response_schema(),
                }
            ],
            tool_choice={"type": "tool", "name": _TOOL_NAME},
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        for block in response.content:
            if isinstance(block, ToolUseBlock) and block.name == _TOOL_NAME:
                return json.dumps(block.input)
        raise ModelError(f"response contained no {_TOOL_NAME} tool call")
