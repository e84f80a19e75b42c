from __future__ import annotations

from openai import OpenAI

from hunkwise_core.errors import ModelError
from hunkwise_core.models import ReviewResponse
from hunkwise_core.providers.base import BaseReviewer


class OpenAIReviewer(BaseReviewer):
    MODEL = "gpt-4o"

    def __init__(self, api_key: str, model: str | None = None):
        super().__init__(model)
        self.client = OpenAI(api_key=api_key, timeout=self.TIMEOUT, max_retries=0)

    def _call_api(self, prompt: str) -> str:
        # Structured outputs: the SDK turns the pydantic model into a strict
        # json_schema response_format, so decoding is constrained server-side.
        response = self.client.chat.completions.parse(
            model=self.model,
            messages=[{"role": "system", "content": prompt}],
            response_format=ReviewResponse,
            temperature=self.TEMPERATURE,
            top_p=1,
            frequency_penalty=0,
            presence_penalty=0,
            max_completion_tokens=self.MAX_TOKENS,
        )
        message = response.choices[0].message
        if message.refusal:
            raise ModelError(f"model refused the request: {message.refusal}")
        return message.content or ""
