"""LLM provider protocol and shared structured-output parsing."""

import json
import re
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

JSON_ONLY_INSTRUCTION = (
    "Respond with a single JSON object that conforms to the schema. "
    "No markdown, no code fence, only raw JSON."
)


class LLMProvider(Protocol):
    """Protocol for generative content backends (OpenAI, Anthropic)."""

    def complete(self, prompt: str, **kwargs: Any) -> str:
        """Return raw text completion."""
        ...

    def complete_structured(self, prompt: str, schema: type[T], **kwargs: Any) -> T:
        """Return completion parsed into the given Pydantic model (JSON)."""
        ...


def parse_structured(raw: str, schema: type[T]) -> T:
    """Strip an optional markdown fence and validate the JSON against ``schema``."""
    text = raw.strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```\s*$", "", text)
    return schema.model_validate(json.loads(text))
