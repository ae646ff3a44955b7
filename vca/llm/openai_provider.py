"""OpenAI chat completions with structured output via JSON in prompt."""

from typing import Any, TypeVar

from openai import OpenAI, RateLimitError
from pydantic import BaseModel

from vca.errors import QuotaExhaustedError
from vca.llm.base import JSON_ONLY_INSTRUCTION, parse_structured

T = TypeVar("T", bound=BaseModel)


class OpenAIProvider:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-5.2",
    ):
        self._client = OpenAI(api_key=api_key)
        self._model = model

    def complete(self, prompt: str, **kwargs: Any) -> str:
        try:
            response = self._client.chat.completions.create(
                model=kwargs.get("model") or self._model,
                messages=[{"role": "user", "content": prompt}],
                **{k: v for k, v in kwargs.items() if k not in ("model",)},
            )
        except RateLimitError as e:
            raise QuotaExhaustedError(f"OpenAI quota/rate limit: {str(e)[:200]}") from e
        return response.choices[0].message.content or ""

    def complete_structured(self, prompt: str, schema: type[T], **kwargs: Any) -> T:
        raw = self.complete(f"{prompt}\n\n{JSON_ONLY_INSTRUCTION}", **kwargs)
        return parse_structured(raw, schema)
