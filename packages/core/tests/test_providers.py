"""Tests for AI provider implementations.

Shared behaviour (review, _parse, error handling) lives in BaseReviewer and is
tested once via a lightweight stub — not duplicated per provider.
Provider-specific tests cover only what differs: the SDK call in _call_api.
"""

import json
from unittest.mock import MagicMock, patch

from hunkwise_core.errors import ModelError
from hunkwise_core.models import ReviewFinding
from hunkwise_core.providers.anthropic import AnthropicReviewer
from hunkwise_core.providers.base import BaseReviewer, response_schema
from hunkwise_core.providers.openai import OpenAIReviewer

VALID_JSON = json.dumps({"reviews": [{"lineNumber": "2", "reviewComment": "avoid mutable state"}]})


class _StubReviewer(BaseReviewer):
    """Returns a canned payload, or raises it if it is an exception."""

    MODEL = "stub-model"

    def __init__(self, payload=VALID_JSON):
        super().__init__()
        self.payload = payload
        self.prompts = []

    def _call_api(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


# ---------------------------------------------------------------------------
# Shared behaviour — tested once through the stub, not per provider
# ---------------------------------------------------------------------------


class TestBaseReviewerReview:
    def test_returns_validated_findings(self):
        result = _StubReviewer().review("prompt")
        assert result == [ReviewFinding(lineNumber="2", reviewComment="avoid mutable state")]

    def test_empty_reviews_is_empty_list_not_none(self):
        result = _StubReviewer(json.dumps({"reviews": []})).review("prompt")
        assert result == []
        assert result is not None

    def test_wrong_shape_returns_none(self):
        assert _StubReviewer(json.dumps([{"line": 2, "comment": "x"}])).review("prompt") is None

    def test_missing_reviews_key_returns_none(self):
        assert _StubReviewer(json.dumps({"comments": []})).review("prompt") is None

    def test_wrong_field_type_returns_none(self):
        payload = json.dumps({"reviews": [{"lineNumber": 2, "reviewComment": "x"}]})
        assert _StubReviewer(payload).review("prompt") is None

    def test_extra_field_returns_none(self):
        payload = json.dumps({"reviews": [{"lineNumber": "2", "reviewComment": "x", "severity": "major"}]})
        assert _StubReviewer(payload).review("prompt") is None

    def test_malformed_json_returns_none(self):
        assert _StubReviewer("{not json").review("prompt") is None

    def test_empty_response_returns_none(self):
        assert _StubReviewer("").review("prompt") is None

    def test_transport_error_returns_none(self):
        assert _StubReviewer(TimeoutError("read timed out")).review("prompt") is None

    def test_model_error_from_provider_returns_none(self):
        assert _StubReviewer(ModelError("refused")).review("prompt") is None

    def test_called_exactly_once_on_failure(self):
        reviewer = _StubReviewer(RuntimeError("503 Service Unavailable"))
        reviewer.review("prompt")
        assert reviewer.prompts == ["prompt"]

    def test_strips_markdown_code_fences(self):
        assert len(_StubReviewer(f"```json\n{VALID_JSON}\n```").review("prompt")) == 1

    def test_preserves_code_blocks_inside_comments(self):
        """Backticks inside comment values must not be stripped."""
        payload = json.dumps({"reviews": [{"lineNumber": "5", "reviewComment": "Use:\n```python\nfoo()\n```"}]})
        result = _StubReviewer(f"```json\n{payload}\n```").review("prompt")
        assert "```python" in result[0].reviewComment
        assert "foo()" in result[0].reviewComment


class TestBaseReviewerParse:
    def test_parse_raises_model_error_on_mismatch(self):
        try:
            _StubReviewer()._parse('{"reviews": "nope"}')
            assert False, "Expected ModelError"
        except ModelError as e:
            assert "schema" in e.message

    def test_model_defaults_to_class_model(self):
        assert _StubReviewer().model == "stub-model"


def test_response_schema_requires_reviews_array():
    schema = response_schema()
    assert schema["required"] == ["reviews"]
    assert schema["properties"]["reviews"]["type"] == "array"


# ---------------------------------------------------------------------------
# Provider-specific — only what differs between OpenAI and Anthropic
# ---------------------------------------------------------------------------


def _openai_response(content, refusal=None):
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content, refusal=refusal))]
    return response


class TestOpenAIReviewer:
    def test_model_is_gpt(self):
        assert "gpt" in OpenAIReviewer.MODEL

    def test_model_override(self):
        assert OpenAIReviewer(api_key="key", model="gpt-4o-mini").model == "gpt-4o-mini"

    def test_temperature_is_low(self):
        assert OpenAIReviewer.TEMPERATURE == 0.2

    def test_sdk_retries_disabled(self):
        assert OpenAIReviewer(api_key="key").client.max_retries == 0

    def test_requests_structured_output(self):
        reviewer = OpenAIReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.parse.return_value = _openai_response(VALID_JSON)

        result = reviewer.review("the prompt")

        assert result[0].lineNumber == "2"
        kwargs = reviewer.client.chat.completions.parse.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
        assert kwargs["messages"] == [{"role": "system", "content": "the prompt"}]
        assert kwargs["response_format"].__name__ == "ReviewResponse"

    def test_refusal_returns_none(self):
        reviewer = OpenAIReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.parse.return_value = _openai_response(None, refusal="I can't help")
        assert reviewer.review("p") is None

    def test_api_exception_returns_none(self):
        reviewer = OpenAIReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.parse.side_effect = ConnectionError("reset")
        assert reviewer.review("p") is None
        assert reviewer.client.chat.completions.parse.call_count == 1


class TestAnthropicReviewer:
    def test_raises_import_error_without_sdk(self):
        """AnthropicReviewer.__init__ must raise if the anthropic package is absent."""
        with patch.dict("sys.modules", {"anthropic": None}):
            try:
                AnthropicReviewer(api_key="key")
                assert False, "Expected ImportError"
            except ImportError:
                pass

    def test_model_is_claude(self):
        assert "claude" in AnthropicReviewer.MODEL

    def test_forced_tool_call_is_validated(self):
        from anthropic.types import ToolUseBlock

        reviewer = AnthropicReviewer(api_key="key")
        reviewer.client = MagicMock()
        block = ToolUseBlock.model_construct(
            id="toolu_1", type="tool_use", name="submit_reviews", input=json.loads(VALID_JSON)
        )
        reviewer.client.messages.create.return_value = MagicMock(content=[block])

        result = reviewer.review("the prompt")

        assert result == [ReviewFinding(lineNumber="2", reviewComment="avoid mutable state")]
        kwargs = reviewer.client.messages.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "submit_reviews"}
        assert kwargs["tools"][0]["input_schema"] == response_schema()

    def test_no_tool_call_returns_none(self):
        reviewer = AnthropicReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.messages.create.return_value = MagicMock(content=[])
        assert reviewer.review("p") is None
