"""Anthropic messages API with structured output via JSON parse."""

from typing import Any, TypeVar

from anthropic import Anthropic, RateLimitError
from pydantic import BaseModel

from vca.errors import QuotaExhaustedError
from vca.llm.base import JSON_ONLY_INSTRUCTION, parse_structured

T = TypeVar("T", bound=BaseModel)


class AnthropicProvider:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-3-5-sonnet-20241022",
    ):
        self._client = Anthropic(api_key=api_key)
        self._model = model

    def complete(self, prompt: str, **kwargs: Any) -> str:
        try:
            response = self._client.messages.create(
                model=kwargs.get("model") or self._model,
                max_tokens=kwargs.get("max_tokens", 4096),
                messages=[{"role": "user", "content": prompt}],
            )
        except RateLimitError as e:
            raise QuotaExhaustedError(f"Anthropic rate limit: {str(e)[:200]}") from e
        return response.content[0].text if response.content else ""

    def complete_structured(self, prompt: str, schema: type[T], **kwargs: Any) -> T:
        raw = self.complete(f"{prompt}\n\n{JSON_ONLY_INSTRUCTION}", **kwargs)
        return parse_structured(raw, schema)
